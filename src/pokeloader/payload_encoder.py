"""Partition a payload into ``DATA`` statement groups.

A data line renders as ``<line number> DATA t1,t2,...`` where each token is
the decimal value of one byte.  Token order is fixed by memory order and a
token is one to three characters wide, so packing greedily in a single pass
yields the fewest lines for a given width.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from .dialect import BasicDialect
from .errors import EmptyPayload, InvalidLineWidth

TOKEN_SEPARATOR = ","
_WIDEST_TOKEN = len(str(0xFF))


@dataclass(frozen=True)
class EncodedGroup:
    """Byte values destined for one ``DATA`` statement."""

    tokens: Tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.tokens:
            raise ValueError("encoded groups must hold at least one token")

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def text(self) -> str:
        return TOKEN_SEPARATOR.join(str(value) for value in self.tokens)


def data_prefix_width(dialect: BasicDialect) -> int:
    """Characters in front of the first token on the widest possible data line."""

    return dialect.line_number_width + 1 + len(dialect.data_keyword) + 1


def minimum_line_width(prefix_width: int) -> int:
    return prefix_width + _WIDEST_TOKEN


def iter_encoded_groups(
    payload: bytes, max_line_width: int, *, prefix_width: int
) -> Iterator[EncodedGroup]:
    """Lazily yield groups covering every byte of ``payload`` once, in order."""

    if not payload:
        raise EmptyPayload()
    minimum = minimum_line_width(prefix_width)
    if max_line_width < minimum:
        raise InvalidLineWidth(max_line_width, minimum)
    return _pack(payload, max_line_width, prefix_width)


def _pack(payload: bytes, max_line_width: int, prefix_width: int) -> Iterator[EncodedGroup]:
    current: list[int] = []
    width = prefix_width
    for value in payload:
        token_width = len(str(value))
        # Every token after the first needs a separator in front of it.
        needed = token_width + (len(TOKEN_SEPARATOR) if current else 0)
        if current and width + needed > max_line_width:
            yield EncodedGroup(tuple(current))
            current = []
            width = prefix_width
            needed = token_width
        current.append(value)
        width += needed
    if current:
        yield EncodedGroup(tuple(current))


def encode_payload(
    payload: bytes, max_line_width: int, *, prefix_width: int
) -> Tuple[EncodedGroup, ...]:
    return tuple(iter_encoded_groups(payload, max_line_width, prefix_width=prefix_width))


__all__ = [
    "EncodedGroup",
    "TOKEN_SEPARATOR",
    "data_prefix_width",
    "encode_payload",
    "iter_encoded_groups",
    "minimum_line_width",
]
