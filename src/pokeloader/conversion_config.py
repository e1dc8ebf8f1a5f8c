"""Conversion options and their TOML configuration overlay."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import tomllib

from .dialect import BasicDialect, C64_BASIC_V2, get_dialect
from .errors import ConversionConfigError
from .memory_map import MemoryMap, ReservedRegion

_NEWLINES: Dict[str, str] = {"lf": "\n", "crlf": "\r\n", "cr": "\r"}


@dataclass(frozen=True)
class ConversionOptions:
    """Numbering and layout settings for one conversion.

    ``max_line_width`` and ``newline`` fall back to the dialect's own limits
    when left unset.
    """

    max_line_width: int | None = None
    start_line: int = 10
    line_step: int = 10
    dialect: BasicDialect = field(default=C64_BASIC_V2)
    newline: str | None = None

    def __post_init__(self) -> None:
        if self.max_line_width is None:
            object.__setattr__(self, "max_line_width", self.dialect.max_line_width)
        if self.newline is None:
            object.__setattr__(self, "newline", self.dialect.newline)

        if isinstance(self.max_line_width, bool) or not isinstance(self.max_line_width, int):
            raise ConversionConfigError("max_line_width must be an integer")
        if self.max_line_width < 1:
            raise ConversionConfigError("max_line_width must be positive")
        for name in ("start_line", "line_step"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConversionConfigError(f"{name} must be an integer")
        # BASIC line numbers are positive.
        if not 1 <= self.start_line <= self.dialect.max_line_number:
            raise ConversionConfigError(
                f"start_line {self.start_line} outside 1-{self.dialect.max_line_number}"
            )
        if self.line_step < 1:
            raise ConversionConfigError("line_step must be at least 1")
        if self.newline not in _NEWLINES.values():
            raise ConversionConfigError(f"unsupported newline {self.newline!r}")


def parse_address(raw: Any) -> int:
    """Parse ``49152``, ``"49152"``, ``"$C000"`` or ``"0xC000"`` into an int."""

    if isinstance(raw, bool):
        raise ConversionConfigError(f"invalid address: {raw!r}")
    if isinstance(raw, int):
        return raw
    if not isinstance(raw, str):
        raise ConversionConfigError(f"invalid address: {raw!r}")

    text = raw.strip()
    try:
        if text.startswith("$"):
            return int(text[1:], 16)
        if text.lower().startswith("0x"):
            return int(text[2:], 16)
        return int(text, 10)
    except ValueError as exc:
        raise ConversionConfigError(f"invalid address: {raw!r}") from exc


def load_conversion_config(config_path: Path) -> ConversionOptions:
    """Parse and validate the ``[loader]`` table at ``config_path``."""

    with config_path.open("rb") as stream:
        try:
            data = tomllib.load(stream)
        except tomllib.TOMLDecodeError as exc:
            raise ConversionConfigError(f"invalid TOML in {config_path}: {exc}") from exc

    loader = data.get("loader")
    if loader is None:
        raise ConversionConfigError("loader configuration requires a [loader] table")
    if not isinstance(loader, Mapping):
        raise ConversionConfigError("[loader] section must be a mapping")

    dialect = _parse_dialect(loader.get("dialect"))
    reserved = loader.get("reserved")
    if reserved is not None:
        dialect = replace(dialect, memory_map=MemoryMap(_parse_reserved(reserved)))

    settings: Dict[str, Any] = {"dialect": dialect}
    for key in ("max_line_width", "start_line", "line_step"):
        if key in loader:
            settings[key] = _coerce_int(loader[key], key)
    if "newline" in loader:
        settings["newline"] = _parse_newline(loader["newline"])

    return ConversionOptions(**settings)


def _parse_dialect(raw: Any) -> BasicDialect:
    if raw is None:
        return C64_BASIC_V2
    if not isinstance(raw, str):
        raise ConversionConfigError("loader.dialect must be a preset name")
    try:
        return get_dialect(raw)
    except KeyError as exc:
        raise ConversionConfigError(str(exc.args[0])) from exc


def _parse_reserved(entries: Any) -> List[ReservedRegion]:
    if not isinstance(entries, Iterable) or isinstance(entries, (str, Mapping)):
        raise ConversionConfigError("[[loader.reserved]] must be an array of tables")

    regions: List[ReservedRegion] = []
    for index, entry in enumerate(entries, start=1):
        if not isinstance(entry, Mapping):
            raise ConversionConfigError(
                f"reserved entry #{index} must be a mapping, received {type(entry)!r}"
            )
        try:
            start = parse_address(entry["start"])
            end = parse_address(entry["end"])
        except KeyError as exc:
            raise ConversionConfigError(
                f"reserved entry #{index} must define start and end"
            ) from exc
        reason = entry.get("reason", "reserved")
        if not isinstance(reason, str):
            raise ConversionConfigError(f"reserved entry #{index} reason must be text")
        try:
            regions.append(ReservedRegion(start, end, reason))
        except ValueError as exc:
            raise ConversionConfigError(f"reserved entry #{index}: {exc}") from exc
    return regions


def _coerce_int(raw: Any, key: str) -> int:
    try:
        return parse_address(raw)
    except ConversionConfigError as exc:
        raise ConversionConfigError(f"loader.{key} must be an integer") from exc


def _parse_newline(raw: Any) -> str:
    if not isinstance(raw, str) or raw.lower() not in _NEWLINES:
        known = ", ".join(sorted(_NEWLINES))
        raise ConversionConfigError(f"loader.newline must be one of {known}")
    return _NEWLINES[raw.lower()]


__all__ = [
    "ConversionOptions",
    "load_conversion_config",
    "parse_address",
]
