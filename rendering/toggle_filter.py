"""
Toggle Filter

Walks the document once, in order, feeding every toggle marker found in leaf
text to a small open/close state machine. A span opened by
``{{toggle:name}}`` stays open across leaves and blocks until its matching
``{{/toggle:name}}``. Content seen while any open toggle is disabled is
removed; marker text itself is always removed. GhostToggleMarker runs the
same state machine but keeps hidden content and tags the nodes holding it.

Unmatched markers never raise:
- an open marker that is never closed extends to the end of the document
- a close marker with no open span of that name is ignored
"""
import copy as copy_module
import logging
from typing import Any, Dict, List, Optional, Union

from config import Config
from document_model import DocumentNode, coerce_document, export_document
from document_model.errors import InvalidConfigurationError
from document_model.markers import parse_toggle_marker, split_on_toggle_markers

logger = logging.getLogger(__name__)

DISABLED_TOGGLE_ATTR = "data-disabled-toggle"
TOGGLE_NAME_ATTR = "data-toggle-name"


def _validate_states(toggle_states: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if toggle_states is None:
        return {}
    if not isinstance(toggle_states, dict):
        raise InvalidConfigurationError("Toggle states must be a mapping of name to boolean",
                                        stage="toggle_filter")
    return toggle_states


class ToggleState:
    """Open-toggle stack plus the enabled map; names missing from the map are enabled."""

    def __init__(self, toggle_states: Dict[str, Any]):
        self.states = {str(name).strip(): bool(state) for name, state in toggle_states.items()}
        self.open: List[str] = []
        self.stray_closes: List[str] = []

    def is_enabled(self, name: str) -> bool:
        return self.states.get(name, True)

    def visible(self) -> bool:
        return all(self.is_enabled(name) for name in self.open)

    def disabled_toggle(self) -> Optional[str]:
        """Innermost open toggle that is disabled, if any."""
        for name in reversed(self.open):
            if not self.is_enabled(name):
                return name
        return None

    def open_toggle(self, name: str) -> None:
        self.open.append(name)

    def close_toggle(self, name: str) -> None:
        if name not in self.open:
            self.stray_closes.append(name)
            logger.warning(f"Ignoring close marker for toggle '{name}' with no open span")
            return
        # Innermost span with that name
        index = len(self.open) - 1 - self.open[::-1].index(name)
        del self.open[index]


class ToggleFilter:
    """Rebuilds a document tree, dropping content inside disabled toggles."""

    def __init__(self, toggle_states: Optional[Dict[str, Any]] = None,
                 max_depth: Optional[int] = None):
        self.state = ToggleState(_validate_states(toggle_states))
        self.max_depth = Config.MAX_TRAVERSAL_DEPTH if max_depth is None else max_depth
        self.removed = 0

    def apply(self, root: DocumentNode) -> DocumentNode:
        root.content = self._filter_children(root, 1)
        if self.state.open:
            logger.warning(f"Unclosed toggle markers extend to end of document: {self.state.open}")
        return root

    def _filter_children(self, node: DocumentNode, depth: int) -> List[DocumentNode]:
        result: List[DocumentNode] = []
        for child in node.content or []:
            result.extend(self._filter_node(child, depth))
        return result

    def _filter_node(self, node: DocumentNode, depth: int) -> List[DocumentNode]:
        if depth > self.max_depth:
            logger.warning(f"Toggle filter stopped at maximum depth {self.max_depth}")
            return [node] if self.state.visible() else []

        if node.is_text():
            return self._filter_text(node)

        if node.content is None:
            if self.state.visible():
                return [node]
            self.removed += 1
            return []

        had_content = bool(node.content)
        node.content = self._filter_children(node, depth + 1)
        if had_content and not node.content:
            # Everything inside was hidden or was marker text
            self.removed += 1
            return []
        if not had_content and not self.state.visible():
            self.removed += 1
            return []
        return [node]

    def _filter_text(self, leaf: DocumentNode) -> List[DocumentNode]:
        kept: List[str] = []
        for part in split_on_toggle_markers(leaf.text or ""):
            marker = parse_toggle_marker(part)
            if marker is None:
                if self.state.visible():
                    kept.append(part)
                else:
                    self.removed += 1
                continue
            kind, name = marker
            if kind == 'open':
                self.state.open_toggle(name)
            else:
                self.state.close_toggle(name)

        text = "".join(kept)
        if not text:
            return []
        if text == leaf.text:
            return [leaf]
        return [DocumentNode(
            type=leaf.type,
            text=text,
            marks=copy_module.deepcopy(leaf.marks),
            attrs=copy_module.deepcopy(leaf.attrs),
            extra=copy_module.deepcopy(leaf.extra)
        )]


def filter_toggles(document: Union[DocumentNode, Dict[str, Any]],
                   toggle_states: Optional[Dict[str, Any]] = None,
                   copy: bool = True) -> Union[DocumentNode, Dict[str, Any]]:
    """
    Remove content inside disabled toggles and strip all toggle marker text.

    Args:
        document: Document tree (never modified when ``copy`` is True)
        toggle_states: Toggle name -> enabled; absent names count as enabled
        copy: Work on a validated copy (the pipeline passes False for its own copy)

    Returns:
        The filtered document, in the same form as ``document``
    """
    root = coerce_document(document, stage="toggle_filter") if copy else document
    toggle_filter = ToggleFilter(toggle_states)
    toggle_filter.apply(root)
    logger.debug(f"Toggle filter removed {toggle_filter.removed} nodes or text runs")
    return export_document(root, document) if copy else root


class GhostToggleMarker:
    """
    Keeps content inside disabled toggles and tags the nodes that hold it.

    A block whose own text falls inside a disabled span, and any node entered
    while a disabled span is open, gets ``data-disabled-toggle`` plus the name
    of the innermost disabled toggle. Marker text is still stripped.
    """

    def __init__(self, toggle_states: Optional[Dict[str, Any]] = None,
                 max_depth: Optional[int] = None):
        self.state = ToggleState(_validate_states(toggle_states))
        self.max_depth = Config.MAX_TRAVERSAL_DEPTH if max_depth is None else max_depth
        self.marked = 0

    def apply(self, root: DocumentNode) -> DocumentNode:
        root.content, _ = self._mark_children(root, 1)
        if self.state.open:
            logger.warning(f"Unclosed toggle markers extend to end of document: {self.state.open}")
        return root

    def _tag(self, node: DocumentNode, name: str) -> None:
        attrs = dict(node.attrs or {})
        attrs[DISABLED_TOGGLE_ATTR] = True
        attrs[TOGGLE_NAME_ATTR] = name
        node.attrs = attrs
        self.marked += 1

    def _mark_children(self, node: DocumentNode, depth: int):
        """Return the kept children and the disabled toggle covering direct text, if any."""
        result: List[DocumentNode] = []
        text_hidden_in: Optional[str] = None
        for child in node.content or []:
            if child.is_text():
                text, hidden_in = self._strip_text(child)
                text_hidden_in = text_hidden_in or hidden_in
                if text:
                    child.text = text
                    result.append(child)
                continue

            disabled = self.state.disabled_toggle()
            if depth > self.max_depth:
                logger.warning(f"Ghost toggle marking stopped at maximum depth {self.max_depth}")
            elif child.content is not None:
                had_content = bool(child.content)
                child.content, hidden_in = self._mark_children(child, depth + 1)
                if had_content and not child.content:
                    # Held nothing but marker text
                    continue
                disabled = disabled or hidden_in
            if disabled:
                self._tag(child, disabled)
            result.append(child)
        return result, text_hidden_in

    def _strip_text(self, leaf: DocumentNode):
        kept: List[str] = []
        hidden_in: Optional[str] = None
        for part in split_on_toggle_markers(leaf.text or ""):
            marker = parse_toggle_marker(part)
            if marker is None:
                if part and not self.state.visible():
                    hidden_in = hidden_in or self.state.disabled_toggle()
                kept.append(part)
                continue
            kind, name = marker
            if kind == 'open':
                self.state.open_toggle(name)
            else:
                self.state.close_toggle(name)
        return "".join(kept), hidden_in


def mark_disabled_toggles(document: Union[DocumentNode, Dict[str, Any]],
                          toggle_states: Optional[Dict[str, Any]] = None,
                          copy: bool = True) -> Union[DocumentNode, Dict[str, Any]]:
    """
    Strip toggle markers but keep disabled content, tagged for ghost display.

    Returns:
        The tagged document, in the same form as ``document``
    """
    root = coerce_document(document, stage="toggle_filter") if copy else document
    marker = GhostToggleMarker(toggle_states)
    marker.apply(root)
    logger.debug(f"Tagged {marker.marked} nodes inside disabled toggles")
    return export_document(root, document) if copy else root
