"""Heuristic inference of headings, emphasis and list structure for word2md."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple

from bs4 import Tag

from .document import (
    LIST_ITEM_TAGS,
    TABLE_CELL_TAGS,
    Document,
    font_size,
    get_text,
    has_ancestor,
    indent_distance,
    is_bold,
    is_italic,
    set_text,
)

LOG = logging.getLogger("word2md")

HEADING_DEPTH = 6
MAX_HEADING_DEPTH = 7
MIN_HEADING_SIZE = 20.0
UNICODE_BULLETS = frozenset({"○", "●", "\uf0b7", "o"})
INLINE_TAGS = frozenset({"span", "strong", "em", "b", "i", "u", "a", "font", "sub", "sup"})

_NUMBERING_RE = re.compile(r"^[A-Za-z0-9]+\.", re.MULTILINE)


def round_to_ten(size: float) -> float:
    # Halves round up; built-in round() would send 25 to 20.
    return math.floor(size / 10.0 + 0.5) * 10.0


def percentile(values: Sequence[float], percent: float) -> Optional[float]:
    """Nearest-rank percentile of an ascending sequence.

    Returns an observed value, never an interpolated one, and ``None`` when the
    sequence is empty. ``percent`` 0 yields the minimum and 100 the maximum.
    """
    count = len(values)
    if count == 0:
        return None
    index = math.ceil(percent * count / 100) - 1
    index = max(0, min(index, count - 1))
    return values[index]


@dataclass(frozen=True)
class FontSizeModel:
    sizes: Tuple[float, ...]
    heading_depth: int = HEADING_DEPTH

    def __post_init__(self) -> None:
        if not 2 <= self.heading_depth <= MAX_HEADING_DEPTH:
            raise ValueError(
                f"heading_depth must be between 2 and {MAX_HEADING_DEPTH}, got {self.heading_depth}"
            )
        object.__setattr__(self, "sizes", tuple(sorted(set(self.sizes))))

    @classmethod
    def from_document(cls, document: Document, heading_depth: int = HEADING_DEPTH) -> "FontSizeModel":
        sizes = set()
        for element in document.styled_elements():
            size = font_size(element)
            if size is not None:
                sizes.add(round_to_ten(size))
        return cls(sizes=tuple(sizes), heading_depth=heading_depth)

    @property
    def step(self) -> int:
        return 100 // self.heading_depth

    @property
    def levels(self) -> range:
        return range(1, self.heading_depth)

    def threshold(self, level: int) -> Optional[float]:
        """Minimum font size for an implicit heading of the given level."""
        if level not in self.levels:
            raise ValueError(f"Heading level must be within 1..{self.heading_depth - 1}, got {level}")
        return percentile(self.sizes, ((self.heading_depth - 1) - level) * self.step)

    def guess_heading(self, size: Optional[float], min_size: float = MIN_HEADING_SIZE) -> Optional[int]:
        if size is None or size < min_size:
            return None
        for level in self.levels:
            threshold = self.threshold(level)
            if threshold is None:
                return None
            if threshold <= size:
                return level
        return None


@dataclass(frozen=True)
class IndentLevels:
    distances: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "distances", tuple(sorted(set(self.distances))))

    @classmethod
    def from_document(cls, document: Document) -> "IndentLevels":
        distances = (indent_distance(item) for item in document.list_items())
        return cls(distances=tuple(d for d in distances if d is not None))

    def rank(self, distance: Optional[float]) -> Optional[int]:
        if distance is None:
            return None
        try:
            return self.distances.index(distance)
        except ValueError:
            return None

    def __len__(self) -> int:
        return len(self.distances)


def semanticize_font_styles(document: Document) -> int:
    changed = 0
    for span in document.spans():
        if is_bold(span):
            span.name = "strong"
        elif is_italic(span):
            span.name = "em"
        else:
            continue
        changed += 1
    LOG.debug("Semanticized %d styled span(s)", changed)
    return changed


def implicit_headings(document: Document, min_size: float = MIN_HEADING_SIZE) -> List[Tag]:
    candidates = []
    for element in document.styled_elements():
        if element.name in INLINE_TAGS:
            continue
        size = font_size(element)
        if size is None or size < min_size:
            continue
        candidates.append(element)
    return candidates


def semanticize_headings(
    document: Document,
    model: FontSizeModel,
    min_size: float = MIN_HEADING_SIZE,
) -> int:
    promoted = 0
    for element in implicit_headings(document, min_size):
        level = model.guess_heading(font_size(element), min_size)
        if level is None:
            continue
        element.name = f"h{level}"
        promoted += 1
    LOG.debug("Promoted %d element(s) to headings (sizes=%s)", promoted, list(model.sizes))
    return promoted


def _demote_paragraphs_within(document: Document, container_tags: FrozenSet[str]) -> int:
    demoted = 0
    for paragraph in document.paragraphs():
        if has_ancestor(paragraph, container_tags):
            paragraph.name = "span"
            demoted += 1
    return demoted


def remove_paragraphs_from_tables(document: Document) -> int:
    demoted = _demote_paragraphs_within(document, TABLE_CELL_TAGS)
    LOG.debug("Demoted %d paragraph(s) inside table cells", demoted)
    return demoted


def remove_paragraphs_from_list_items(document: Document) -> int:
    demoted = _demote_paragraphs_within(document, LIST_ITEM_TAGS)
    LOG.debug("Demoted %d paragraph(s) inside list items", demoted)
    return demoted


def strip_unicode_bullet(text: str) -> str:
    # Drops the last character too, whatever it is: exports repeat the glyph at
    # both ends of the run.
    if text and text[0] in UNICODE_BULLETS:
        return text[1:-1]
    return text


def strip_numbering(text: str) -> str:
    return _NUMBERING_RE.sub("", text)


def _rewrite_list_item_spans(document: Document, rewrite: Callable[[str], str]) -> int:
    changed = 0
    for span in document.list_item_spans():
        # Spans inside an already rewritten span were detached by set_text.
        if not any(parent is document.tree for parent in span.parents):
            continue
        content = get_text(span)
        updated = rewrite(content)
        if updated != content:
            set_text(span, updated)
            changed += 1
    return changed


def remove_unicode_bullets_from_list_items(document: Document) -> int:
    changed = _rewrite_list_item_spans(document, strip_unicode_bullet)
    LOG.debug("Stripped bullet glyphs from %d list span(s)", changed)
    return changed


def remove_numbering_from_list_items(document: Document) -> int:
    changed = _rewrite_list_item_spans(document, strip_numbering)
    LOG.debug("Stripped numbering from %d list span(s)", changed)
    return changed


def convert(
    document: Document,
    *,
    heading_depth: int = HEADING_DEPTH,
    min_heading_size: float = MIN_HEADING_SIZE,
) -> None:
    """Rewrite presentational markup into semantic markup, in place.

    The passes depend on each other and run in a fixed order: spans are turned
    into emphasis before heading inference, headings are promoted before
    paragraphs in tables and list items are demoted, and list text is only
    normalized once those paragraphs have become spans. The font-size model is
    taken from the tree before any heading is promoted.
    """
    model = FontSizeModel.from_document(document, heading_depth=heading_depth)
    semanticize_font_styles(document)
    semanticize_headings(document, model, min_heading_size)
    remove_paragraphs_from_tables(document)
    remove_paragraphs_from_list_items(document)
    remove_unicode_bullets_from_list_items(document)
    remove_numbering_from_list_items(document)
