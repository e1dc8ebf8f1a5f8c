"""Typed failures raised while converting a binary into a BASIC loader."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .memory_map import ReservedRegion


class ConversionError(ValueError):
    """Base class for every conversion failure.

    None of these failures are transient: repeating the conversion with the
    same inputs raises the same error.
    """


class EmptyPayload(ConversionError):
    def __init__(self) -> None:
        super().__init__("payload is empty; nothing to load")


class AddressOutOfRange(ConversionError):
    """Raised when an address or the payload end leaves addressable memory."""

    def __init__(self, address: int, ceiling: int, *, detail: str | None = None) -> None:
        self.address = address
        self.ceiling = ceiling
        message = f"address {address} exceeds ceiling {ceiling}"
        if detail:
            message = f"{detail}: {message}"
        super().__init__(message)


class ReservedRegionConflict(ConversionError):
    """Raised when the load range overlaps a reserved memory region."""

    def __init__(self, region: "ReservedRegion", start: int, end: int) -> None:
        self.region = region
        self.start = start
        self.end = end
        super().__init__(
            f"load range ${start:04X}-${end:04X} overlaps {region.reason} "
            f"(${region.start:04X}-${region.end:04X})"
        )


class EntryPointOutOfPayload(ConversionError):
    def __init__(self, entry_point: int, start: int, end: int) -> None:
        self.entry_point = entry_point
        self.start = start
        self.end = end
        super().__init__(
            f"entry point {entry_point} lies outside "
            f"the loaded payload ${start:04X}-${end:04X}"
        )


class InvalidLineWidth(ConversionError):
    """Raised when the configured line width cannot hold a required line."""

    def __init__(self, width: int, minimum: int, *, subject: str = "a data line") -> None:
        self.width = width
        self.minimum = minimum
        super().__init__(
            f"max_line_width {width} is too small for {subject}; need at least {minimum}"
        )


class LineNumberOverflow(ConversionError):
    """Raised when numbering would pass the dialect's highest line number."""

    def __init__(self, line_number: int, maximum: int) -> None:
        self.line_number = line_number
        self.maximum = maximum
        super().__init__(
            f"line number {line_number} exceeds maximum {maximum}; "
            "use a smaller line_step or start_line"
        )


class InternalInvariantViolation(ConversionError):
    """Raised when generated output breaks a guarantee of an earlier stage."""


class ConversionConfigError(ValueError):
    """Raised when conversion options or a configuration file fail validation."""


__all__ = [
    "AddressOutOfRange",
    "ConversionConfigError",
    "ConversionError",
    "EmptyPayload",
    "EntryPointOutOfPayload",
    "InternalInvariantViolation",
    "InvalidLineWidth",
    "LineNumberOverflow",
    "ReservedRegionConflict",
]
