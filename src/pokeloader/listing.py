"""Serialise a loader program into a plain-text BASIC listing."""

from __future__ import annotations

from typing import Iterator

from .errors import InternalInvariantViolation
from .loader_program import LoaderProgram


def iter_listing_lines(program: LoaderProgram, *, max_line_width: int) -> Iterator[str]:
    """Yield ``"<line number> <text>"`` strings in line-number order."""

    previous: int | None = None
    for line in program.lines:
        if previous is not None and line.number <= previous:
            raise InternalInvariantViolation(
                f"line {line.number} does not follow line {previous}"
            )
        rendered = line.render()
        if len(rendered) > max_line_width:
            raise InternalInvariantViolation(
                f"line {line.number} renders to {len(rendered)} characters, "
                f"over the {max_line_width} character limit"
            )
        previous = line.number
        yield rendered


def render_listing(
    program: LoaderProgram, *, max_line_width: int, newline: str = "\n"
) -> str:
    """Return the full listing with a single terminating ``newline``."""

    lines = list(iter_listing_lines(program, max_line_width=max_line_width))
    return newline.join(lines) + newline


__all__ = ["iter_listing_lines", "render_listing"]
