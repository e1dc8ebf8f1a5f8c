"""Convert a binary file into a self-loading Commodore BASIC listing."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .conversion_config import ConversionOptions, load_conversion_config, parse_address
from .converter import ConversionResult, convert
from .errors import ConversionConfigError, ConversionError
from .loader_check import ListingFormatError, inspect_listing
from .prg import split_prg

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VERIFY_FAILED = 1
EXIT_CONVERSION_FAILED = 2


def _address(text: str) -> int:
    try:
        return parse_address(text)
    except ConversionConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed command-line arguments for the converter."""

    parser = argparse.ArgumentParser(prog="pokeloader", description=__doc__)
    parser.add_argument("binary", type=Path, help="Binary file to embed")
    parser.add_argument(
        "-a",
        "--address",
        type=_address,
        help="Load address (49152, $C000 or 0xC000); defaults to the PRG header with --prg",
    )
    parser.add_argument(
        "-e",
        "--entry",
        type=_address,
        help="Address to SYS after loading (defaults to the load address)",
    )
    parser.add_argument(
        "--prg",
        action="store_true",
        help="Treat the input as a PRG and strip its two byte load address",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Destination for the listing (defaults to stdout)",
    )
    parser.add_argument("--config", type=Path, help="TOML file with a [loader] table")
    parser.add_argument("--max-line-width", type=int, help="Characters per listing line")
    parser.add_argument("--start-line", type=int, help="First generated line number")
    parser.add_argument("--line-step", type=int, help="Increment between line numbers")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Report conversion details as JSON on stderr",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Replay the generated loader and confirm it pokes the payload",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> ConversionOptions:
    """Merge the optional TOML configuration with command-line overrides."""

    options = ConversionOptions()
    if args.config is not None:
        if not args.config.is_file():
            raise SystemExit(f"configuration file not found: {args.config}")
        options = load_conversion_config(args.config)

    overrides: Dict[str, Any] = {}
    if args.max_line_width is not None:
        overrides["max_line_width"] = args.max_line_width
    if args.start_line is not None:
        overrides["start_line"] = args.start_line
    if args.line_step is not None:
        overrides["line_step"] = args.line_step
    if overrides:
        options = replace(options, **overrides)
    return options


def describe_result(result: ConversionResult) -> List[str]:
    return [
        f"load address: {result.load_address} (${result.load_address:04X})",
        f"entry point:  {result.entry_point} (${result.entry_point:04X})",
        f"payload:      {result.payload_length} bytes",
        f"data lines:   {result.data_line_count}",
        f"last line:    {result.last_line_number}",
    ]


def verify_result(result: ConversionResult, payload: bytes) -> None:
    """Raise :class:`ListingFormatError` unless the listing reproduces ``payload``."""

    image = inspect_listing(result.listing)
    if image.load_address != result.load_address:
        raise ListingFormatError(
            f"listing loads at {image.load_address}, expected {result.load_address}"
        )
    if image.entry_point != result.entry_point:
        raise ListingFormatError(
            f"listing jumps to {image.entry_point}, expected {result.entry_point}"
        )
    if image.data != payload:
        raise ListingFormatError("listing data does not reproduce the payload")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``pokeloader`` command."""

    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    binary_path: Path = args.binary
    if not binary_path.is_file():
        raise SystemExit(f"binary not found: {binary_path}")

    payload = binary_path.read_bytes()
    load_address = args.address
    if args.prg:
        try:
            image = split_prg(payload)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return EXIT_CONVERSION_FAILED
        payload = image.body
        if load_address is None:
            load_address = image.load_address
        LOGGER.info("PRG header load address $%04X", image.load_address)
    if load_address is None:
        raise SystemExit("a load address is required (--address) unless --prg is used")

    try:
        options = build_options(args)
        result = convert(payload, load_address, args.entry, options)
    except (ConversionError, ConversionConfigError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONVERSION_FAILED

    if args.verify:
        try:
            verify_result(result, payload)
        except ListingFormatError as exc:
            print(f"verification failed: {exc}", file=sys.stderr)
            return EXIT_VERIFY_FAILED
        LOGGER.info("Verified %d bytes at $%04X", len(payload), result.load_address)

    if args.output:
        args.output.write_text(result.listing, encoding="ascii", newline="")
        LOGGER.info("Wrote %s", args.output)
    else:
        sys.stdout.write(result.listing)

    if args.json:
        print(json.dumps(result.to_dict()), file=sys.stderr)
    else:
        print("\n".join(describe_result(result)), file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - exercised via python -m pokeloader.cli
    raise SystemExit(main())
