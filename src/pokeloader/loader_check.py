"""Read a generated loader listing back into the memory image it produces.

The check only understands listings in the shape :mod:`pokeloader` emits: the
three line prologue followed by ``DATA`` lines.  It replays the READ/POKE loop
so callers can confirm the bytes, their destination and the ``SYS`` target
without an emulator.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .loader_program import PROLOGUE_LENGTH, PROLOGUE_TEMPLATE

_LINE_PATTERN = re.compile(r"^(\d+) (.*)$")
_SETUP_PATTERN = re.compile(r"^A=(\d+):N=(\d+)$")
_SYS_PATTERN = re.compile(r"^SYS (\d+)$")


class ListingFormatError(ValueError):
    """Raised when a listing does not match the generated loader shape."""


@dataclass(frozen=True)
class LoaderImage:
    load_address: int
    trip_count: int
    entry_point: int
    data: bytes
    line_numbers: Tuple[int, ...]

    @property
    def end_address(self) -> int:
        return self.load_address + len(self.data) - 1

    def memory_writes(self) -> Iterator[Tuple[int, int]]:
        """Yield ``(address, value)`` pairs in the order the loop pokes them."""

        for offset, value in enumerate(self.data):
            yield self.load_address + offset, value


def _split_lines(listing: str) -> List[Tuple[int, str]]:
    parsed: List[Tuple[int, str]] = []
    for raw_line in listing.splitlines():
        if not raw_line:
            continue
        match = _LINE_PATTERN.match(raw_line)
        if match is None:
            raise ListingFormatError(f"not a numbered BASIC line: {raw_line!r}")
        parsed.append((int(match.group(1)), match.group(2)))
    return parsed


def _parse_data(number: int, text: str, keyword: str) -> List[int]:
    prefix = f"{keyword} "
    if not text.startswith(prefix):
        raise ListingFormatError(f"line {number} is not a {keyword} statement")
    values: List[int] = []
    for token in text[len(prefix) :].split(","):
        if not token.isdigit():
            raise ListingFormatError(f"line {number}: {token!r} is not a byte value")
        value = int(token)
        if value > 0xFF:
            raise ListingFormatError(f"line {number}: {value} does not fit in a byte")
        values.append(value)
    return values


def inspect_listing(listing: str, *, data_keyword: str = "DATA") -> LoaderImage:
    """Replay the loader in ``listing`` and return what it would poke."""

    lines = _split_lines(listing)
    if len(lines) <= PROLOGUE_LENGTH:
        raise ListingFormatError("listing holds no data lines after the prologue")

    numbers = tuple(number for number, _ in lines)
    if any(later <= earlier for earlier, later in zip(numbers, numbers[1:])):
        raise ListingFormatError("line numbers are not strictly increasing")

    setup, loop, jump = (text for _, text in lines[:PROLOGUE_LENGTH])
    setup_match = _SETUP_PATTERN.match(setup)
    if setup_match is None:
        raise ListingFormatError(f"unexpected loader setup line: {setup!r}")
    if loop != PROLOGUE_TEMPLATE[1]:
        raise ListingFormatError(f"unexpected loader loop line: {loop!r}")
    sys_match = _SYS_PATTERN.match(jump)
    if sys_match is None:
        raise ListingFormatError(f"unexpected loader jump line: {jump!r}")

    tokens: List[int] = []
    for number, text in lines[PROLOGUE_LENGTH:]:
        tokens.extend(_parse_data(number, text, data_keyword))

    trip_count = int(setup_match.group(2))
    if len(tokens) < trip_count:
        raise ListingFormatError(
            f"loop reads {trip_count} values but only {len(tokens)} are present"
        )
    if len(tokens) > trip_count:
        raise ListingFormatError(
            f"{len(tokens) - trip_count} data values are never read by the loop"
        )

    return LoaderImage(
        load_address=int(setup_match.group(1)),
        trip_count=trip_count,
        entry_point=int(sys_match.group(1)),
        data=bytes(tokens),
        line_numbers=numbers,
    )


__all__ = ["ListingFormatError", "LoaderImage", "inspect_listing"]
