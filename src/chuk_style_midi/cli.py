#!/usr/bin/env python3
"""
Command-line entry point for the style MIDI exporter.

    chuk-style-midi --style blues.yaml --out out/blues.mid [--tempo 140]
                    [--bars 12] [--exportable] [--debug]

Prints the absolute path of the written file on success. Pipeline
failures are reported on stderr with a non-zero exit status.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import pydantic

from chuk_style_midi.constants import DEFAULT_BARS
from chuk_style_midi.errors import ConfigError, ExportPipelineError
from chuk_style_midi.models.request import ExportRequest
from chuk_style_midi.pipeline import ExportPipeline

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ConfigError instead of exiting."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise ConfigError(message, usage=self.format_usage().strip())


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = _ArgumentParser(
        prog="chuk-style-midi",
        description="Export a style and a generated 12-bar blues progression as a MIDI file",
    )
    parser.add_argument("--style", type=Path, required=True, help="Style file (YAML)")
    parser.add_argument("--out", type=Path, required=True, help="Destination MIDI file")
    parser.add_argument("--tempo", type=int, help="Tempo in BPM (default: the style's tempo)")
    parser.add_argument(
        "--bars",
        type=int,
        default=DEFAULT_BARS,
        help=f"Length in bars, at least 12 (default: {DEFAULT_BARS})",
    )
    parser.add_argument(
        "--exportable",
        action="store_true",
        help="Normalize the sequence for use outside the rendering context",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def parse_request(argv: Sequence[str] | None = None) -> tuple[ExportRequest, bool]:
    """
    Parse command-line arguments into an ExportRequest.

    Returns:
        (request, debug flag)

    Raises:
        ConfigError: On missing or malformed arguments
    """
    args = build_parser().parse_args(argv)
    try:
        request = ExportRequest(
            style_path=args.style,
            output_path=args.out,
            tempo=args.tempo,
            bars=args.bars,
            exportable=args.exportable,
        )
    except pydantic.ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else "request"
        raise ConfigError(f"Invalid {field}: {error['msg']}", field=field) from e
    return request, args.debug


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point. Returns the process exit status."""
    logging.basicConfig(level=logging.INFO)

    try:
        request, debug = parse_request(argv)
        if debug:
            logging.getLogger().setLevel(logging.DEBUG)
        output = ExportPipeline().run(request)
    except ExportPipelineError as e:
        logger.debug("Export failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return e.exit_code

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
