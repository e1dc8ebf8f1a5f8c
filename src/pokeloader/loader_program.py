"""Compose the numbered BASIC lines that poke a payload into memory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from .dialect import BasicDialect, C64_BASIC_V2
from .errors import InternalInvariantViolation, InvalidLineWidth, LineNumberOverflow
from .memory_map import LoadRange
from .payload_encoder import EncodedGroup

# Variables used by the prologue: A is the poke address, N the trip count,
# I the loop index and B the byte just read.
PROLOGUE_TEMPLATE: Tuple[str, ...] = (
    "A={load_address}:N={length}",
    "FOR I=1 TO N:READ B:POKE A,B:A=A+1:NEXT I",
    "SYS {entry_point}",
)
PROLOGUE_LENGTH = len(PROLOGUE_TEMPLATE)


@dataclass(frozen=True)
class ProgramLine:
    number: int
    text: str

    def render(self) -> str:
        return f"{self.number} {self.text}"


@dataclass(frozen=True)
class LoaderProgram:
    """Prologue lines followed by one ``DATA`` line per encoded group."""

    lines: Tuple[ProgramLine, ...]
    load_range: LoadRange
    payload_length: int
    prologue_length: int = PROLOGUE_LENGTH

    @property
    def prologue(self) -> Tuple[ProgramLine, ...]:
        return self.lines[: self.prologue_length]

    @property
    def data_lines(self) -> Tuple[ProgramLine, ...]:
        return self.lines[self.prologue_length :]

    @property
    def last_line_number(self) -> int:
        return self.lines[-1].number

    @property
    def trip_count(self) -> int:
        """Number of READ/POKE iterations the prologue performs.

        Read back from the ``N=`` assignment of the setup line.
        """

        _, _, count = self.prologue[0].text.rpartition("N=")
        return int(count)

    @property
    def entry_point(self) -> int:
        return self.load_range.entry_point


def render_prologue(load_range: LoadRange) -> Tuple[str, ...]:
    return tuple(
        template.format(
            load_address=load_range.load_address,
            length=load_range.length,
            entry_point=load_range.entry_point,
        )
        for template in PROLOGUE_TEMPLATE
    )


class _LineNumbers:
    def __init__(self, start_line: int, line_step: int, maximum: int) -> None:
        self._next = start_line
        self._step = line_step
        self._maximum = maximum

    def take(self) -> int:
        number = self._next
        if number > self._maximum:
            raise LineNumberOverflow(number, self._maximum)
        self._next += self._step
        return number


def synthesize_loader(
    load_range: LoadRange,
    groups: Iterable[EncodedGroup],
    *,
    start_line: int = 10,
    line_step: int = 10,
    dialect: BasicDialect = C64_BASIC_V2,
    max_line_width: int | None = None,
) -> LoaderProgram:
    """Build the loader for ``load_range`` from ``groups`` in payload order.

    ``groups`` may be a lazy producer; it is consumed exactly once.  The trip
    count written into the prologue is the certified payload length, so the
    data lines must hold exactly that many tokens.
    """

    width = dialect.max_line_width if max_line_width is None else max_line_width
    numbers = _LineNumbers(start_line, line_step, dialect.max_line_number)

    lines: list[ProgramLine] = []
    for text in render_prologue(load_range):
        line = ProgramLine(numbers.take(), text)
        rendered_width = len(line.render())
        if rendered_width > width:
            raise InvalidLineWidth(width, rendered_width, subject="the loader prologue")
        lines.append(line)

    token_count = 0
    for group in groups:
        lines.append(ProgramLine(numbers.take(), f"{dialect.data_keyword} {group.text}"))
        token_count += len(group)

    if token_count != load_range.length:
        raise InternalInvariantViolation(
            f"data lines hold {token_count} tokens but the loader reads {load_range.length}"
        )

    return LoaderProgram(
        lines=tuple(lines), load_range=load_range, payload_length=load_range.length
    )


__all__ = [
    "LoaderProgram",
    "PROLOGUE_LENGTH",
    "PROLOGUE_TEMPLATE",
    "ProgramLine",
    "render_prologue",
    "synthesize_loader",
]
