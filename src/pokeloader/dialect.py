"""Target BASIC dialect constants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .memory_map import C64_MEMORY_MAP, MEMORY_CEILING, MemoryMap


@dataclass(frozen=True)
class BasicDialect:
    """Limits and keywords of the BASIC that will run the generated loader."""

    name: str
    max_line_number: int
    # Characters a single logical line may hold when typed or tokenised,
    # line number included.
    max_line_width: int
    memory_map: MemoryMap
    memory_ceiling: int = MEMORY_CEILING
    data_keyword: str = "DATA"
    newline: str = "\n"

    @property
    def line_number_width(self) -> int:
        return len(str(self.max_line_number))


# Commodore BASIC V2: two 40-column screen rows form one logical input line.
C64_BASIC_V2 = BasicDialect(
    name="c64",
    max_line_number=63999,
    max_line_width=80,
    memory_map=C64_MEMORY_MAP,
)

DIALECTS: Dict[str, BasicDialect] = {
    C64_BASIC_V2.name: C64_BASIC_V2,
}


def get_dialect(name: str) -> BasicDialect:
    """Return the preset registered as ``name``."""

    try:
        return DIALECTS[name.strip().lower()]
    except KeyError:
        known = ", ".join(sorted(DIALECTS))
        raise KeyError(f"unknown BASIC dialect {name!r} (known: {known})") from None


__all__ = ["BasicDialect", "C64_BASIC_V2", "DIALECTS", "get_dialect"]
