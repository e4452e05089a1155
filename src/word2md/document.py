"""Document tree wrapper and presentational attribute accessors for word2md."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Comment, Tag

LOG = logging.getLogger("word2md")

PX_TO_PT = 0.75
BOLD_KEYWORDS = {"bold", "bolder"}
ITALIC_KEYWORDS = {"italic", "oblique"}
TABLE_CELL_TAGS = frozenset({"td", "th"})
LIST_ITEM_TAGS = frozenset({"li"})

_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))\s*([a-z%]*)\s*$", re.IGNORECASE)
_MSO_LIST_LEVEL_RE = re.compile(r"\blevel(\d+)\b", re.IGNORECASE)


class MalformedTreeError(RuntimeError):
    """Raised when the tree violates the parent/child contract (e.g. cyclic ancestry)."""


def parse_style(element: Tag) -> Dict[str, str]:
    raw = element.get("style")
    if not raw:
        return {}
    if isinstance(raw, list):
        raw = " ".join(raw)
    styles: Dict[str, str] = {}
    for declaration in str(raw).split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        prop = prop.strip().lower()
        value = value.strip().strip("'\"").strip()
        if prop and value:
            styles[prop] = value
    return styles


def _parse_length(value: Optional[str]) -> Optional[Tuple[float, str]]:
    if value is None:
        return None
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    return float(match.group(1)), match.group(2).lower()


def font_size(element: Tag) -> Optional[float]:
    """Return the element's own ``font-size`` in points, or ``None``.

    Only absolute sizes can be compared across the document, so relative units
    (``em``, ``%``) are treated as an absent signal.
    """
    parsed = _parse_length(parse_style(element).get("font-size"))
    if parsed is None:
        return None
    number, unit = parsed
    if unit in ("", "pt"):
        return number
    if unit == "px":
        return number * PX_TO_PT
    return None


def is_bold(element: Tag) -> bool:
    weight = parse_style(element).get("font-weight", "").lower()
    if weight in BOLD_KEYWORDS:
        return True
    return weight.isdigit() and int(weight) >= 700


def is_italic(element: Tag) -> bool:
    return parse_style(element).get("font-style", "").lower() in ITALIC_KEYWORDS


def indent_distance(element: Tag) -> Optional[float]:
    styles = parse_style(element)
    parsed = _parse_length(styles.get("margin-left"))
    if parsed is not None:
        return parsed[0]
    mso_list = styles.get("mso-list")
    if mso_list:
        match = _MSO_LIST_LEVEL_RE.search(mso_list)
        if match:
            return float(match.group(1))
    return None


def has_ancestor(element: Tag, names: Iterable[str]) -> bool:
    wanted = frozenset(names)
    seen = {id(element)}
    parent = element.parent
    while parent is not None:
        if id(parent) in seen:
            raise MalformedTreeError(f"Cyclic ancestry detected above <{element.name}>")
        seen.add(id(parent))
        if parent.name in wanted:
            return True
        parent = parent.parent
    return False


def get_text(element: Tag) -> str:
    return element.get_text()


def set_text(element: Tag, text: str) -> None:
    element.string = text


class Document:
    """Mutable HTML tree exported by a word processor.

    The converter only renames tags and rewrites text; it never adds or
    removes elements, so selections can be taken as plain lists.
    """

    def __init__(self, soup: BeautifulSoup) -> None:
        self.tree = soup

    @classmethod
    def from_html(cls, markup: Union[str, bytes]) -> "Document":
        soup = BeautifulSoup(markup, "html.parser")
        for tag in soup.find_all(["script", "style"]):
            tag.decompose()
        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()
        # Office namespace wrappers like <o:p> carry no content of their own.
        for tag in soup.find_all(lambda t: t.name is not None and ":" in t.name):
            tag.unwrap()
        return cls(soup)

    @classmethod
    def from_path(cls, path: Path) -> "Document":
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise RuntimeError(f"Unable to read source document {path}: {exc}") from exc
        LOG.debug("Parsing %s (%d bytes)", path, len(raw))
        return cls.from_html(raw)

    @property
    def body(self) -> Tag:
        return self.tree.body if self.tree.body is not None else self.tree

    def styled_elements(self) -> List[Tag]:
        return self.tree.find_all(style=True)

    def list_items(self) -> List[Tag]:
        return self.tree.find_all("li")

    def paragraphs(self) -> List[Tag]:
        return self.tree.find_all("p")

    def spans(self) -> List[Tag]:
        return self.tree.find_all("span")

    def list_item_spans(self) -> List[Tag]:
        return [span for span in self.spans() if has_ancestor(span, LIST_ITEM_TAGS)]

    def __str__(self) -> str:
        return str(self.tree)
