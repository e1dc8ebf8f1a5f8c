"""Commodore PRG container helpers."""

from __future__ import annotations

from dataclasses import dataclass

PRG_HEADER_BYTES = 2


@dataclass(frozen=True)
class PrgImage:
    load_address: int
    body: bytes


def split_prg(data: bytes) -> PrgImage:
    """Split the little-endian load address header from ``data``."""

    if len(data) < PRG_HEADER_BYTES:
        raise ValueError("PRG data is shorter than its two byte load address")
    load_address = data[0] | (data[1] << 8)
    return PrgImage(load_address=load_address, body=bytes(data[PRG_HEADER_BYTES:]))


__all__ = ["PRG_HEADER_BYTES", "PrgImage", "split_prg"]
