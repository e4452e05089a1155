"""Command-line interface for word2md."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .version import __version__


def _get_usage() -> str:
    return (
        f"word2md {__version__}\n"
        "Usage:\n"
        "  word2md [--help] [--version|--ver]\n"
        "  word2md --from-file SOURCE [--to-file TARGET] [options]\n\n"
        "Options:\n"
        "  --to-file TARGET             Markdown output path (default: SOURCE with .md suffix)\n"
        "  --heading-depth N            Number of heading levels to infer, plus one (default: 6)\n"
        "  --min-heading-size PT        Smallest font size ever treated as a heading (default: 20)\n"
        "  --verbose                    Verbose progress logs\n"
        "  --debug                      Debug logs for every conversion pass"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--help", action="store_true")
    parser.add_argument("--version", action="store_true")
    parser.add_argument("--ver", action="store_true")
    parser.add_argument("--from-file", help="Word-processor HTML export to convert")
    parser.add_argument("--to-file", help="Markdown output path")
    parser.add_argument("--verbose", action="store_true", help="Verbose progress logs")
    parser.add_argument("--debug", action="store_true", help="Debug logs for every conversion pass")
    parser.add_argument(
        "--heading-depth",
        type=int,
        default=None,
        help="Number of heading levels to infer, plus one (default: 6 or WORD2MD_HEADING_DEPTH)",
    )
    parser.add_argument(
        "--min-heading-size",
        type=float,
        default=None,
        help="Font size in points below which text is never a heading (default: 20 or WORD2MD_MIN_HEADING_SIZE)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    try:
        args, unknown = parser.parse_known_args(argv)
    except SystemExit:
        print(_get_usage())
        return 6
    if unknown:
        print(_get_usage())
        return 2

    if not argv or args.help:
        print(_get_usage())
        return 0

    if args.version or args.ver:
        print(__version__)
        return 0

    if not args.from_file:
        print(_get_usage())
        print("Option --from-file is required unless --help or --version/--ver is used", file=sys.stderr)
        return 6

    try:
        from word2md import core
    except Exception as exc:
        print(f"Unable to import word2md core: {exc}", file=sys.stderr)
        return 6

    source_path = Path(args.from_file).expanduser().resolve()
    if not source_path.exists() or not source_path.is_file():
        print(f"Source document not found: {source_path}", file=sys.stderr)
        return core.EXIT_INVALID_ARGS

    if args.to_file:
        out_path = Path(args.to_file).expanduser().resolve()
    else:
        out_path = core.default_output_path(source_path)
    if out_path.exists() and out_path.is_dir():
        print(f"Output path is a directory: {out_path}", file=sys.stderr)
        return core.EXIT_OUTPUT_PATH
    if out_path == source_path:
        print(f"Output path would overwrite the source document: {out_path}", file=sys.stderr)
        return core.EXIT_OUTPUT_PATH

    try:
        config = core.ConversionConfig(
            heading_depth=args.heading_depth if args.heading_depth is not None else core.default_heading_depth(),
            min_heading_size=(
                args.min_heading_size if args.min_heading_size is not None else core.default_min_heading_size()
            ),
            verbose=bool(args.verbose),
            debug=bool(args.debug),
        )
        config.validate()
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return core.EXIT_INVALID_ARGS

    core.setup_logging(args.verbose, args.debug)

    try:
        core.run_conversion_pipeline(source_path=source_path, out_path=out_path, config=config)
    except RuntimeError as exc:
        print(f"Conversion failed: {exc}", file=sys.stderr)
        return core.EXIT_OUTPUT_PATH if isinstance(exc, core.OutputWriteError) else core.EXIT_CONVERSION

    if args.verbose:
        print(f"Markdown written to {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
