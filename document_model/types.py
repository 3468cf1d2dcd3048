"""
Document Tree Types
Core data structures for the rich-text document trees that sources and
rendered embeds are stored as. Trees arrive as JSON-like dictionaries
(``{"type": "doc", "content": [...]}``) and are converted to these
dataclasses for every transformation.
"""
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Any, Optional, Union

from config import Config
from .errors import MalformedDocumentError


class NodeType(Enum):
    DOCUMENT = "doc"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    TEXT = "text"
    HARD_BREAK = "hardBreak"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "codeBlock"
    PANEL = "panel"
    EXPAND = "expand"
    TABLE = "table"
    TABLE_ROW = "tableRow"
    TABLE_CELL = "tableCell"
    TABLE_HEADER = "tableHeader"
    RULE = "rule"
    EXTENSION = "extension"
    BODIED_EXTENSION = "bodiedExtension"


# Keys that map onto dataclass fields; anything else is carried in ``extra``.
_KNOWN_KEYS = {'type', 'content', 'text', 'marks', 'attrs'}


@dataclass
class Mark:
    """A style or annotation tag on a text leaf (emphasis, code, text color...)."""
    type: str
    attrs: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type}
        if self.attrs:
            data["attrs"] = copy.deepcopy(self.attrs)
        return data


@dataclass
class DocumentNode:
    """A single node of a document tree.

    ``content`` is ``None`` for nodes that carry no content array (text
    leaves, hard breaks, rules) and a list for containers, even when empty.
    """
    type: str
    content: Optional[List['DocumentNode']] = None
    text: Optional[str] = None
    marks: List[Mark] = field(default_factory=list)
    attrs: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def is_text(self) -> bool:
        return self.type == NodeType.TEXT.value

    def is_paragraph(self) -> bool:
        return self.type == NodeType.PARAGRAPH.value

    def is_heading(self) -> bool:
        return self.type == NodeType.HEADING.value

    def is_container(self) -> bool:
        return self.content is not None

    def has_mark(self, mark_type: str, **attrs: Any) -> bool:
        """Check whether this leaf carries a mark of ``mark_type`` with matching attributes."""
        for mark in self.marks:
            if mark.type != mark_type:
                continue
            if all(mark.attrs.get(key) == value for key, value in attrs.items()):
                return True
        return False

    def copy(self) -> 'DocumentNode':
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Converts the node to a JSON-compatible dictionary."""
        data: Dict[str, Any] = {"type": self.type}
        if self.attrs:
            data["attrs"] = copy.deepcopy(self.attrs)
        if self.text is not None:
            data["text"] = self.text
        if self.marks:
            data["marks"] = [mark.to_dict() for mark in self.marks]
        if self.content is not None:
            data["content"] = [child.to_dict() for child in self.content]
        for key, value in self.extra.items():
            data[key] = copy.deepcopy(value)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "$", depth: int = 0,
                  max_depth: Optional[int] = None) -> 'DocumentNode':
        """Build a node tree from a JSON-like dictionary, validating as it goes."""
        if max_depth is None:
            max_depth = Config.MAX_TRAVERSAL_DEPTH
        if depth > max_depth:
            raise MalformedDocumentError(
                f"Document nesting exceeds maximum depth of {max_depth}", path=path
            )
        if not isinstance(data, dict):
            raise MalformedDocumentError(
                f"Expected a node object, got {type(data).__name__}", path=path
            )

        node_type = data.get('type')
        if not isinstance(node_type, str) or not node_type:
            raise MalformedDocumentError("Node is missing a string 'type'", path=path)

        text = data.get('text')
        if node_type == NodeType.TEXT.value and not isinstance(text, str):
            raise MalformedDocumentError("Text node is missing a string 'text'", path=path)
        if text is not None and not isinstance(text, str):
            raise MalformedDocumentError("Node 'text' must be a string", path=path)

        attrs = data.get('attrs') or {}
        if not isinstance(attrs, dict):
            raise MalformedDocumentError("Node 'attrs' must be an object", path=path)

        marks = []
        raw_marks = data.get('marks') or []
        if not isinstance(raw_marks, list):
            raise MalformedDocumentError("Node 'marks' must be an array", path=path)
        for index, raw_mark in enumerate(raw_marks):
            if not isinstance(raw_mark, dict) or not isinstance(raw_mark.get('type'), str):
                raise MalformedDocumentError(
                    "Mark is missing a string 'type'", path=f"{path}.marks[{index}]"
                )
            mark_attrs = raw_mark.get('attrs') or {}
            if not isinstance(mark_attrs, dict):
                raise MalformedDocumentError(
                    "Mark 'attrs' must be an object", path=f"{path}.marks[{index}]"
                )
            marks.append(Mark(type=raw_mark['type'], attrs=copy.deepcopy(mark_attrs)))

        content = None
        if 'content' in data:
            raw_content = data['content']
            if not isinstance(raw_content, list):
                raise MalformedDocumentError("Node 'content' must be an array", path=path)
            content = [
                cls.from_dict(child, path=f"{path}.content[{index}]", depth=depth + 1,
                              max_depth=max_depth)
                for index, child in enumerate(raw_content)
            ]

        extra = {key: copy.deepcopy(value) for key, value in data.items() if key not in _KNOWN_KEYS}

        return cls(
            type=node_type,
            content=content,
            text=text,
            marks=marks,
            attrs=copy.deepcopy(attrs),
            extra=extra
        )


def text_node(text: str, marks: Optional[List[Mark]] = None) -> DocumentNode:
    return DocumentNode(type=NodeType.TEXT.value, text=text, marks=list(marks or []))


def paragraph_node(text: str, marks: Optional[List[Mark]] = None) -> DocumentNode:
    """Create a paragraph holding a single text leaf."""
    return DocumentNode(type=NodeType.PARAGRAPH.value, content=[text_node(text, marks)])


def coerce_document(document: Union[DocumentNode, Dict[str, Any]],
                    stage: Optional[str] = None) -> DocumentNode:
    """
    Return a private deep copy of ``document`` as a validated DocumentNode root.

    Callers keep their input untouched: both dictionaries and DocumentNode
    trees are rebuilt node by node, which validates them on the way.
    """
    if isinstance(document, DocumentNode):
        try:
            document = document.to_dict()
        except (AttributeError, TypeError) as e:
            raise MalformedDocumentError(f"Document tree is not serializable: {e}", stage=stage)

    if isinstance(document, dict):
        try:
            root = DocumentNode.from_dict(document)
        except MalformedDocumentError as e:
            e.stage = stage
            raise
    else:
        raise MalformedDocumentError(
            f"Expected a document tree, got {type(document).__name__}", stage=stage
        )

    if root.type != NodeType.DOCUMENT.value:
        raise MalformedDocumentError(
            f"Document root must have type 'doc', got '{root.type}'", path="$", stage=stage
        )
    if root.content is None:
        raise MalformedDocumentError("Document root is missing its content array",
                                     path="$", stage=stage)
    return root


def export_document(root: DocumentNode,
                    like: Union[DocumentNode, Dict[str, Any]]) -> Union[DocumentNode, Dict[str, Any]]:
    """Hand a result back in the same form the caller passed in."""
    if isinstance(like, DocumentNode):
        return root
    return root.to_dict()
