"""
Marker scanning for placeholders and toggle markers.

Placeholders (``{{name}}``) and toggle markers (``{{toggle:name}}`` /
``{{/toggle:name}}``) are typed straight into prose, so they are found by
scanning leaf text rather than by node type.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .traversal import iter_text_blocks, text_leaves
from .types import DocumentNode

PLACEHOLDER_PATTERN = re.compile(r'\{\{([^}]+)\}\}')
TOGGLE_OPEN_PATTERN = re.compile(r'\{\{toggle:([^}]+)\}\}')
TOGGLE_CLOSE_PATTERN = re.compile(r'\{\{/toggle:([^}]+)\}\}')
TOGGLE_MARKER_PATTERN = re.compile(r'(\{\{toggle:[^}]+\}\}|\{\{/toggle:[^}]+\}\})')

TOGGLE_PREFIXES = ('toggle:', '/toggle:')


def is_toggle_marker_name(name: str) -> bool:
    return name.startswith(TOGGLE_PREFIXES)


@dataclass(frozen=True)
class PlaceholderMatch:
    name: str
    start: int
    end: int
    token: str


def iter_placeholders(text: str) -> Iterator[PlaceholderMatch]:
    """Yield variable placeholders in ``text`` left to right, skipping toggle markers."""
    for match in PLACEHOLDER_PATTERN.finditer(text or ""):
        name = match.group(1).strip()
        if not name or is_toggle_marker_name(name):
            continue
        yield PlaceholderMatch(name=name, start=match.start(), end=match.end(), token=match.group(0))


def strip_toggle_markers(text: str) -> str:
    return TOGGLE_MARKER_PATTERN.sub('', text)


def split_on_toggle_markers(text: str) -> List[str]:
    """Split text so every toggle marker becomes its own non-empty part."""
    return [part for part in TOGGLE_MARKER_PATTERN.split(text) if part]


def parse_toggle_marker(text: str) -> Optional[Tuple[str, str]]:
    """Return ``('open'|'close', name)`` when ``text`` is exactly one toggle marker."""
    open_match = TOGGLE_OPEN_PATTERN.fullmatch(text)
    if open_match:
        return 'open', open_match.group(1).strip()
    close_match = TOGGLE_CLOSE_PATTERN.fullmatch(text)
    if close_match:
        return 'close', close_match.group(1).strip()
    return None


def mask_markers(text: str) -> str:
    """
    Replace markers with same-length stand-ins so character offsets survive.

    Toggle markers become spaces (they are invisible in rendered prose);
    placeholders become a run of ``X`` so they read as a single word.
    """
    masked = TOGGLE_MARKER_PATTERN.sub(lambda m: ' ' * len(m.group(0)), text)
    return PLACEHOLDER_PATTERN.sub(lambda m: 'X' * len(m.group(0)), masked)


class OccurrenceTracker:
    """
    Per-name running occurrence counter for a whole document.

    The same tracker type numbers occurrences at detection time and at
    substitution time; both passes feed it placeholders from
    ``iter_block_placeholders`` so index N always refers to the same token.
    """

    def __init__(self):
        self._counters: Dict[str, int] = {}

    def next_index(self, name: str) -> int:
        index = self._counters.get(name, 0)
        self._counters[name] = index + 1
        return index

    def counts(self) -> Dict[str, int]:
        return dict(self._counters)


@dataclass
class IndexedPlaceholder:
    match: PlaceholderMatch
    occurrence_index: int


@dataclass
class BlockScan:
    """Placeholders found in one text block, with the block's flattened text."""
    block: DocumentNode
    text: str
    placeholders: List[IndexedPlaceholder] = field(default_factory=list)


def scan_block(block: DocumentNode, tracker: OccurrenceTracker) -> BlockScan:
    text = "".join(leaf.text or "" for leaf in text_leaves(block))
    scan = BlockScan(block=block, text=text)
    for match in iter_placeholders(text):
        scan.placeholders.append(
            IndexedPlaceholder(match=match, occurrence_index=tracker.next_index(match.name))
        )
    return scan


def iter_block_placeholders(document: DocumentNode,
                            tracker: Optional[OccurrenceTracker] = None) -> Iterator[BlockScan]:
    """
    Scan every text block in document order, numbering placeholders per name.

    Each block is scanned when it is reached, so a consumer may rewrite the
    block it was handed before asking for the next one.
    """
    tracker = tracker or OccurrenceTracker()
    for block in list(iter_text_blocks(document)):
        yield scan_block(block, tracker)
