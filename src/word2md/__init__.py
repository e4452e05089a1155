"""Infer headings, emphasis and list nesting from word-processor HTML exports."""

from .converter import FontSizeModel, IndentLevels, convert
from .document import Document, MalformedTreeError
from .version import __version__

__all__ = ["Document", "FontSizeModel", "IndentLevels", "MalformedTreeError", "convert", "__version__"]
