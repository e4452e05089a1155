"""Core pipeline for word2md."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from .converter import HEADING_DEPTH, MAX_HEADING_DEPTH, MIN_HEADING_SIZE, convert
from .document import Document
from .render import render_markdown

LOG = logging.getLogger("word2md")

EXIT_INVALID_ARGS = 6
EXIT_OUTPUT_PATH = 7
EXIT_CONVERSION = 8

HEADING_DEPTH_ENV = "WORD2MD_HEADING_DEPTH"
MIN_HEADING_SIZE_ENV = "WORD2MD_MIN_HEADING_SIZE"


class OutputWriteError(RuntimeError):
    """Raised when the Markdown output cannot be written."""


@dataclass
class ConversionConfig:
    heading_depth: int = HEADING_DEPTH
    min_heading_size: float = MIN_HEADING_SIZE
    verbose: bool = False
    debug: bool = False

    def validate(self) -> None:
        if not 2 <= self.heading_depth <= MAX_HEADING_DEPTH:
            raise ValueError(
                f"Invalid heading depth {self.heading_depth}: must be between 2 and {MAX_HEADING_DEPTH}"
            )
        if self.min_heading_size < 0:
            raise ValueError(f"Invalid minimum heading size {self.min_heading_size}: must be >= 0")


def _env_number(name: str, default: float, cast: Callable[[str], float] = float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc


def default_heading_depth() -> int:
    return _env_number(HEADING_DEPTH_ENV, HEADING_DEPTH, int)


def default_min_heading_size() -> float:
    return _env_number(MIN_HEADING_SIZE_ENV, MIN_HEADING_SIZE, float)


def _resolve_log_level(verbose: bool, debug: bool) -> int:
    return logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)


def _configure_word2md_logger(level: int) -> None:
    LOG.setLevel(level)
    LOG.propagate = False
    if not LOG.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        handler.setLevel(level)
        LOG.addHandler(handler)
    else:
        for handler in LOG.handlers:
            handler.setLevel(level)
            if handler.formatter is None:
                handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))


def setup_logging(verbose: bool, debug: bool) -> None:
    level = _resolve_log_level(verbose, debug)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    _configure_word2md_logger(level)


def safe_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="\n")


def default_output_path(source_path: Path) -> Path:
    return source_path.with_suffix(".md")


def cleanup_markdown(md_text: str) -> str:
    if not md_text:
        return md_text
    text = md_text.replace("\u00a0", " ")
    text = "\n".join(line.rstrip() for line in text.splitlines())
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip("\n") + "\n"


def convert_document(document: Document, config: Optional[ConversionConfig] = None) -> str:
    config = config or ConversionConfig()
    config.validate()
    convert(document, heading_depth=config.heading_depth, min_heading_size=config.min_heading_size)
    return cleanup_markdown(render_markdown(document))


def convert_html_to_markdown(html: Union[str, bytes], config: Optional[ConversionConfig] = None) -> str:
    return convert_document(Document.from_html(html), config)


def run_conversion_pipeline(
    *,
    source_path: Path,
    out_path: Path,
    config: ConversionConfig,
) -> Tuple[str, Path]:
    config.validate()
    if not source_path.exists():
        raise RuntimeError(f"Source document not found: {source_path}")

    document = Document.from_path(source_path)
    if config.verbose:
        LOG.info("Converting %s via markdownify", source_path)

    md_text = convert_document(document, config)

    try:
        safe_write_text(out_path, md_text)
    except OSError as exc:
        raise OutputWriteError(f"Unable to write Markdown to {out_path}: {exc}") from exc
    if config.verbose:
        LOG.info("Markdown written: %s", out_path)

    return md_text, out_path
