"""Command-line entry point.

Usage:
    authzgraph --model-path model.fga
    authzgraph --model-path model.json --output-path graph.dot --report-cycles
    authzgraph --model-path model.fga --fail-on-definitive | dot -Tsvg > graph.svg
    authzgraph --model-path model.json --error-format json

Exit Codes:
    0   Success
    1   Model or graph error (details logged)
    2   File read or write error
    3   --fail-on-definitive was given and a definitive cycle was found

Python 3.13+.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from authzgraph.config import WriterConfig
from authzgraph.constants import DEFAULT_RANKDIR, VALID_RANKDIRS
from authzgraph.diagnostics import AuthzGraphError, OutputFormat
from authzgraph.enums import ModelFormat
from authzgraph.writer import load_source, resolve_format, write

__all__ = ["EXIT_DEFINITIVE_CYCLE", "EXIT_IO_ERROR", "EXIT_MODEL_ERROR", "EXIT_OK", "main"]

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MODEL_ERROR = 1
EXIT_IO_ERROR = 2
EXIT_DEFINITIVE_CYCLE = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="authzgraph",
        description="Render an authorization model as a DOT graph and report its cycles.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render to stdout and view with Graphviz:
  authzgraph --model-path model.fga | dot -Tsvg > model.svg

  # Check a JSON model in CI, failing on relations that can never resolve:
  authzgraph --model-path model.json --output-path model.dot --fail-on-definitive
""",
    )
    parser.add_argument(
        "--model-path",
        type=Path,
        required=True,
        help="Authorization model file (DSL or JSON)",
    )
    parser.add_argument(
        "--output-path",
        default="-",
        help="Where to write the DOT graph (default: '-' for stdout)",
    )
    parser.add_argument(
        "--format",
        type=ModelFormat,
        choices=list(ModelFormat),
        default=ModelFormat.AUTO,
        help="Model source format (default: auto, by file extension)",
    )
    parser.add_argument(
        "--rankdir",
        choices=sorted(VALID_RANKDIRS),
        default=DEFAULT_RANKDIR,
        help=f"Graph layout direction (default: {DEFAULT_RANKDIR})",
    )
    parser.add_argument(
        "--no-prune",
        action="store_true",
        help="Keep nodes without edges in the output",
    )
    parser.add_argument(
        "--report-cycles",
        action="store_true",
        help="Print the cycle report to stderr",
    )
    parser.add_argument(
        "--fail-on-definitive",
        action="store_true",
        help="Exit with status 3 if any cycle consists of computed edges only",
    )
    parser.add_argument(
        "--error-format",
        type=OutputFormat,
        choices=list(OutputFormat),
        default=OutputFormat.RUST,
        help="Style of model error messages (default: rust)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log pipeline details",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    model_path: Path = args.model_path
    try:
        source = model_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Cannot read model %s: %s", model_path, e)
        return EXIT_IO_ERROR

    config = WriterConfig(rankdir=args.rankdir, prune=not args.no_prune)
    model_format = resolve_format(args.format, path=model_path)
    try:
        result = write(load_source(source, model_format, config), config)
    except AuthzGraphError as e:
        logger.error("%s: %s", model_path, e.format(args.error_format))
        return EXIT_MODEL_ERROR

    if args.output_path == "-":
        sys.stdout.write(result.dot + "\n")
    else:
        try:
            Path(args.output_path).write_text(result.dot + "\n", encoding="utf-8")
        except OSError as e:
            logger.error("Cannot write %s: %s", args.output_path, e)
            return EXIT_IO_ERROR

    if args.report_cycles:
        print(result.cycles.format(), file=sys.stderr)

    if args.fail_on_definitive and result.cycles.has_definitive_cycles:
        logger.error(
            "%s: %d definitive cycle(s) found", model_path, result.cycles.definitive_count
        )
        return EXIT_DEFINITIVE_CYCLE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
