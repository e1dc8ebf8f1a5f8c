"""Reserved memory regions and load-range validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from .errors import AddressOutOfRange, EntryPointOutOfPayload, ReservedRegionConflict

MEMORY_CEILING = 0xFFFF


@dataclass(frozen=True, order=True)
class ReservedRegion:
    """Closed address interval that a payload must never overwrite."""

    start: int
    end: int
    reason: str = ""

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(
                f"invalid reserved region {self.start}-{self.end} ({self.reason})"
            )

    def overlaps(self, start: int, end: int) -> bool:
        return self.start <= end and start <= self.end

    def describe(self) -> str:
        return f"${self.start:04X}-${self.end:04X} {self.reason}"


class MemoryMap:
    """Immutable, start-ordered table of reserved regions."""

    __slots__ = ("_regions",)

    def __init__(self, regions: Iterable[ReservedRegion]) -> None:
        self._regions: Tuple[ReservedRegion, ...] = tuple(sorted(regions))

    @property
    def regions(self) -> Tuple[ReservedRegion, ...]:
        return self._regions

    def __iter__(self) -> Iterator[ReservedRegion]:
        return iter(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MemoryMap):
            return NotImplemented
        return self._regions == other._regions

    def __hash__(self) -> int:
        return hash(self._regions)

    def __repr__(self) -> str:
        return f"MemoryMap({list(self._regions)!r})"

    def conflicts(self, start: int, end: int) -> Iterator[ReservedRegion]:
        """Yield regions intersecting ``[start, end]``, lowest start first."""

        for region in self._regions:
            if region.start > end:
                break
            if region.overlaps(start, end):
                yield region

    def region_at(self, address: int) -> Optional[ReservedRegion]:
        return next(self.conflicts(address, address), None)


# Commodore 64 with the default BASIC/KERNAL/I/O banking.  The loader program
# itself lives in the BASIC text area, so the payload may not overlap it.
C64_RESERVED_REGIONS: Tuple[ReservedRegion, ...] = (
    ReservedRegion(0x0000, 0x00FF, "zero page"),
    ReservedRegion(0x0100, 0x01FF, "processor stack"),
    ReservedRegion(0x0200, 0x03FF, "BASIC/KERNAL work area"),
    ReservedRegion(0x0400, 0x07FF, "screen memory"),
    ReservedRegion(0x0800, 0x9FFF, "BASIC program text and variables"),
    ReservedRegion(0xA000, 0xBFFF, "BASIC ROM"),
    ReservedRegion(0xD000, 0xDFFF, "I/O area"),
    ReservedRegion(0xE000, 0xFFFF, "KERNAL ROM"),
)

C64_MEMORY_MAP = MemoryMap(C64_RESERVED_REGIONS)


@dataclass(frozen=True)
class LoadRange:
    """Certified destination of a payload: disjoint from every reserved region."""

    load_address: int
    end_address: int
    entry_point: int

    @property
    def length(self) -> int:
        return self.end_address - self.load_address + 1

    def __contains__(self, address: object) -> bool:
        return isinstance(address, int) and self.load_address <= address <= self.end_address


def validate_load(
    load_address: int,
    payload_length: int,
    entry_point: int | None = None,
    *,
    memory_map: MemoryMap = C64_MEMORY_MAP,
    memory_ceiling: int = MEMORY_CEILING,
) -> LoadRange:
    """Approve ``payload_length`` bytes at ``load_address`` or raise.

    The entry point may be any address inside the loaded payload so binaries
    with a header in front of their code can still be started directly.
    """

    if not 0 <= load_address <= memory_ceiling:
        raise AddressOutOfRange(load_address, memory_ceiling, detail="load address")
    if payload_length <= 0:
        raise AddressOutOfRange(
            load_address, memory_ceiling, detail="payload length must be positive"
        )

    end_address = load_address + payload_length - 1
    if end_address > memory_ceiling:
        raise AddressOutOfRange(end_address, memory_ceiling, detail="payload end")

    conflict = next(memory_map.conflicts(load_address, end_address), None)
    if conflict is not None:
        raise ReservedRegionConflict(conflict, load_address, end_address)

    if entry_point is None:
        entry_point = load_address
    elif not load_address <= entry_point <= end_address:
        raise EntryPointOutOfPayload(entry_point, load_address, end_address)

    return LoadRange(
        load_address=load_address, end_address=end_address, entry_point=entry_point
    )


__all__ = [
    "C64_MEMORY_MAP",
    "C64_RESERVED_REGIONS",
    "LoadRange",
    "MEMORY_CEILING",
    "MemoryMap",
    "ReservedRegion",
    "validate_load",
]
