import logging
import re
from pathlib import Path

import pytest

import word2md.core as core

SAMPLE_HTML = (
    "<html><body>"
    '<p style="font-size:11pt">Shopping list for the week.</p>'
    '<p style="font-size:36pt">Groceries</p>'
    "<ul>"
    '<li style="margin-left:1em"><p>○Buy milk○</p></li>'
    '<li style="margin-left:2em"><p>1. Eggs</p></li>'
    "</ul>"
    "<table><tr><td><p>Aisle</p></td><td><p>4</p></td></tr></table>"
    "</body></html>"
)


def test_cleanup_markdown_normalizes_spacing():
    assert core.cleanup_markdown("a\u00a0b  \n\n\n\nc") == "a b\n\nc\n"
    assert core.cleanup_markdown("\n\n# Title\n\n") == "# Title\n"
    assert core.cleanup_markdown("") == ""


def test_convert_html_to_markdown_end_to_end():
    md = core.convert_html_to_markdown(SAMPLE_HTML)

    assert "## Groceries" in md
    assert "Shopping list for the week." in md
    assert re.search(r"^[*+-] Buy milk$", md, flags=re.MULTILINE)
    assert re.search(r"^\s+[*+-] Eggs$", md, flags=re.MULTILINE)
    assert "○" not in md
    assert "1." not in md
    assert md.endswith("\n") and not md.endswith("\n\n")


def test_heading_depth_changes_inferred_levels():
    md = core.convert_html_to_markdown(SAMPLE_HTML, core.ConversionConfig(heading_depth=2))

    assert "# Groceries" in md
    assert "## Groceries" not in md


def test_min_heading_size_can_disable_headings():
    md = core.convert_html_to_markdown(SAMPLE_HTML, core.ConversionConfig(min_heading_size=72))

    assert "#" not in md
    assert "Groceries" in md


@pytest.mark.parametrize(
    "config",
    [
        core.ConversionConfig(heading_depth=1),
        core.ConversionConfig(heading_depth=8),
        core.ConversionConfig(min_heading_size=-1),
    ],
)
def test_config_validation_rejects_out_of_range_values(config):
    with pytest.raises(ValueError):
        config.validate()


def test_defaults_read_from_environment(monkeypatch):
    monkeypatch.delenv(core.HEADING_DEPTH_ENV, raising=False)
    monkeypatch.delenv(core.MIN_HEADING_SIZE_ENV, raising=False)
    assert core.default_heading_depth() == 6
    assert core.default_min_heading_size() == 20

    monkeypatch.setenv(core.HEADING_DEPTH_ENV, "4")
    monkeypatch.setenv(core.MIN_HEADING_SIZE_ENV, "16.5")
    assert core.default_heading_depth() == 4
    assert core.default_min_heading_size() == 16.5


def test_invalid_environment_value_raises(monkeypatch):
    monkeypatch.setenv(core.HEADING_DEPTH_ENV, "six")

    with pytest.raises(ValueError, match=core.HEADING_DEPTH_ENV):
        core.default_heading_depth()


def test_run_conversion_pipeline_writes_markdown(tmp_path: Path):
    source = tmp_path / "list.htm"
    source.write_text(SAMPLE_HTML, encoding="utf-8")
    target = tmp_path / "out" / "list.md"

    md_text, out_path = core.run_conversion_pipeline(
        source_path=source, out_path=target, config=core.ConversionConfig()
    )

    assert out_path == target
    assert target.read_text(encoding="utf-8") == md_text
    assert "## Groceries" in md_text


def test_run_conversion_pipeline_missing_source(tmp_path: Path):
    with pytest.raises(RuntimeError, match="Source document not found"):
        core.run_conversion_pipeline(
            source_path=tmp_path / "missing.htm",
            out_path=tmp_path / "missing.md",
            config=core.ConversionConfig(),
        )


def test_default_output_path_swaps_suffix(tmp_path: Path):
    assert core.default_output_path(tmp_path / "report.htm") == tmp_path / "report.md"


def test_resolve_log_level():
    assert core._resolve_log_level(False, False) == logging.WARNING
    assert core._resolve_log_level(True, False) == logging.INFO
    assert core._resolve_log_level(True, True) == logging.DEBUG


def test_setup_logging_configures_package_logger():
    core.setup_logging(verbose=True, debug=False)

    assert core.LOG.level == logging.INFO
    assert core.LOG.propagate is False
    assert core.LOG.handlers
    assert all(handler.level == logging.INFO for handler in core.LOG.handlers)
