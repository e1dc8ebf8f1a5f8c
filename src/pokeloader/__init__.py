"""Build self-loading Commodore BASIC listings from machine code binaries."""
from __future__ import annotations

from .conversion_config import ConversionOptions, load_conversion_config, parse_address
from .converter import ConversionResult, convert
from .dialect import BasicDialect, C64_BASIC_V2, get_dialect
from .errors import (
    AddressOutOfRange,
    ConversionConfigError,
    ConversionError,
    EmptyPayload,
    EntryPointOutOfPayload,
    InternalInvariantViolation,
    InvalidLineWidth,
    LineNumberOverflow,
    ReservedRegionConflict,
)
from .listing import render_listing
from .loader_check import ListingFormatError, LoaderImage, inspect_listing
from .loader_program import LoaderProgram, ProgramLine, synthesize_loader
from .memory_map import C64_MEMORY_MAP, LoadRange, MemoryMap, ReservedRegion, validate_load
from .payload_encoder import EncodedGroup, encode_payload, iter_encoded_groups

__all__ = [
    "AddressOutOfRange",
    "BasicDialect",
    "C64_BASIC_V2",
    "C64_MEMORY_MAP",
    "ConversionConfigError",
    "ConversionError",
    "ConversionOptions",
    "ConversionResult",
    "EmptyPayload",
    "EncodedGroup",
    "EntryPointOutOfPayload",
    "InternalInvariantViolation",
    "InvalidLineWidth",
    "LineNumberOverflow",
    "ListingFormatError",
    "LoadRange",
    "LoaderImage",
    "LoaderProgram",
    "MemoryMap",
    "ProgramLine",
    "ReservedRegion",
    "ReservedRegionConflict",
    "convert",
    "encode_payload",
    "get_dialect",
    "inspect_listing",
    "iter_encoded_groups",
    "load_conversion_config",
    "parse_address",
    "render_listing",
    "synthesize_loader",
    "validate_load",
]
