from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import BinaryIO, Iterator, Sequence, TextIO

from api.stream import DifferenceAssembler, assemble
from documents.loaders import flatten_paths
from documents.types import Diagnostic
from engine.errors import DifferenceError, SourceUnreadableError
from engine.types import DifferenceOptions
from logging_config import setup_logging

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="geojson-difference",
        description="Subtract polygons/multipolygons in <files> from stdin.",
        epilog=(
            "Input is read from stdin, output is written to stdout. "
            "Example: cat world.geojson | geojson-difference water.geojson > land.geojson"
        ),
    )
    ap.add_argument(
        "files",
        nargs="*",
        help="GeoJSON files (or directories of them) to subtract, in order.",
    )
    ap.add_argument(
        "-s", "--silent", action="store_true", help="Do not write warnings to stderr."
    )
    ap.add_argument(
        "--respect-bbox-filenames",
        action="store_true",
        help="Skip files whose name declares a [minLon,minLat,maxLon,maxLat] bbox "
        "that does not overlap the input.",
    )
    ap.add_argument("--verbose", action="store_true", help="Log progress to stderr.")
    ap.add_argument("--log-file", default=None, help="Also write logs to this file.")
    ap.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def main(
    argv: Sequence[str] | None = None,
    *,
    stdin: BinaryIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.INFO if args.verbose else logging.WARNING, args.log_file)

    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout

    try:
        files = _readable_files(args.files)
        options = DifferenceOptions(
            subtrahend_sources=files,
            respect_bbox_filenames=args.respect_bbox_filenames,
            diagnostic_sink=_ignore if args.silent else None,
        )
        out = assemble(_read_chunks(stdin), DifferenceAssembler(options))
    except DifferenceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    stdout.write(out)
    stdout.flush()
    return 0


def _readable_files(paths: Sequence[str]) -> list[str]:
    files = flatten_paths(paths)
    for f in files:
        if not os.access(f, os.R_OK):
            raise SourceUnreadableError(f, "permission denied")
    logger.info("Subtracting %d file(s)", len(files))
    return files


def _read_chunks(stream: BinaryIO) -> Iterator[bytes]:
    while True:
        chunk = stream.read(_CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


def _ignore(_diagnostic: Diagnostic) -> None:
    pass


if __name__ == "__main__":
    sys.exit(main())
