"""Turn a binary payload into a self-loading BASIC listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from .conversion_config import ConversionOptions
from .listing import render_listing
from .loader_program import synthesize_loader
from .memory_map import validate_load
from .payload_encoder import data_prefix_width, iter_encoded_groups

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """Rendered listing plus the details a caller may want to report."""

    listing: str
    load_address: int
    entry_point: int
    payload_length: int
    data_line_count: int
    last_line_number: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "load_address": self.load_address,
            "entry_point": self.entry_point,
            "payload_length": self.payload_length,
            "data_line_count": self.data_line_count,
            "last_line_number": self.last_line_number,
        }


def convert(
    payload: bytes,
    load_address: int,
    entry_point: int | None = None,
    options: ConversionOptions | None = None,
) -> ConversionResult:
    """Validate, encode, synthesise and render ``payload`` in one call.

    Raises a :class:`~pokeloader.errors.ConversionError` subclass on failure;
    no partial listing is ever produced.
    """

    options = options or ConversionOptions()
    dialect = options.dialect
    payload = bytes(payload)

    # The encoder rejects empty payloads before the range can be checked.
    groups = iter_encoded_groups(
        payload, options.max_line_width, prefix_width=data_prefix_width(dialect)
    )
    load_range = validate_load(
        load_address,
        len(payload),
        entry_point,
        memory_map=dialect.memory_map,
        memory_ceiling=dialect.memory_ceiling,
    )
    LOGGER.debug(
        "Approved $%04X-$%04X (entry $%04X) for %s",
        load_range.load_address,
        load_range.end_address,
        load_range.entry_point,
        dialect.name,
    )

    program = synthesize_loader(
        load_range,
        groups,
        start_line=options.start_line,
        line_step=options.line_step,
        dialect=dialect,
        max_line_width=options.max_line_width,
    )
    listing = render_listing(
        program, max_line_width=options.max_line_width, newline=options.newline
    )
    LOGGER.info(
        "Generated %d data lines for %d bytes (lines %d-%d)",
        len(program.data_lines),
        len(payload),
        program.lines[0].number,
        program.last_line_number,
    )

    return ConversionResult(
        listing=listing,
        load_address=load_range.load_address,
        entry_point=load_range.entry_point,
        payload_length=program.payload_length,
        data_line_count=len(program.data_lines),
        last_line_number=program.last_line_number,
    )


__all__ = ["ConversionResult", "convert"]
