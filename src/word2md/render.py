"""Markdown rendering of a semanticized document via markdownify."""

from __future__ import annotations

from typing import Optional

from bs4 import Tag
from markdownify import MarkdownConverter

from .converter import IndentLevels
from .document import LIST_ITEM_TAGS, Document, has_ancestor, indent_distance

LIST_INDENT = "    "


class WordMarkdownConverter(MarkdownConverter):
    """markdownify converter that nests flat list items by their indent rank.

    Word exports every list item at the top level and encodes nesting as a
    left margin only, so the rank of that margin among all list margins in
    the document becomes the Markdown nesting depth.
    """

    def __init__(self, indent_levels: Optional[IndentLevels] = None, **options) -> None:
        super().__init__(**options)
        self.indent_levels = indent_levels

    def _list_item_level(self, el: Tag) -> int:
        if self.indent_levels is None or has_ancestor(el, LIST_ITEM_TAGS):
            return 0
        return self.indent_levels.rank(indent_distance(el)) or 0

    def convert_li(self, el, text, *args, **kwargs):
        md = super().convert_li(el, text, *args, **kwargs)
        level = self._list_item_level(el)
        if not level:
            return md
        prefix = LIST_INDENT * level
        return "\n".join(prefix + line if line.strip() else line for line in md.split("\n"))


def render_markdown(document: Document, indent_levels: Optional[IndentLevels] = None) -> str:
    if indent_levels is None:
        indent_levels = IndentLevels.from_document(document)
    converter = WordMarkdownConverter(indent_levels=indent_levels, heading_style="ATX")
    return converter.convert(str(document.body))
