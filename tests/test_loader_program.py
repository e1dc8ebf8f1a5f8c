from __future__ import annotations

import pytest

from pokeloader.errors import InternalInvariantViolation, InvalidLineWidth, LineNumberOverflow
from pokeloader.loader_program import (
    PROLOGUE_LENGTH,
    LoaderProgram,
    ProgramLine,
    synthesize_loader,
)
from pokeloader.memory_map import validate_load
from pokeloader.payload_encoder import EncodedGroup


def test_prologue_pokes_then_jumps_to_entry_point() -> None:
    load_range = validate_load(49152, 3)

    program = synthesize_loader(load_range, [EncodedGroup((1, 2, 3))])

    assert program.lines == (
        ProgramLine(10, "A=49152:N=3"),
        ProgramLine(20, "FOR I=1 TO N:READ B:POKE A,B:A=A+1:NEXT I"),
        ProgramLine(30, "SYS 49152"),
        ProgramLine(40, "DATA 1,2,3"),
    )
    assert len(program.prologue) == PROLOGUE_LENGTH
    assert program.data_lines == (ProgramLine(40, "DATA 1,2,3"),)
    assert program.trip_count == 3
    assert program.last_line_number == 40


def test_prologue_size_does_not_depend_on_payload() -> None:
    load_range = validate_load(0xC000, 6, 0xC004)
    groups = [EncodedGroup((1, 2)), EncodedGroup((3, 4)), EncodedGroup((5, 6))]

    program = synthesize_loader(load_range, groups, start_line=1, line_step=1)

    assert [line.number for line in program.lines] == [1, 2, 3, 4, 5, 6]
    assert program.prologue[0].text == "A=49152:N=6"
    assert program.prologue[2].text == "SYS 49156"
    assert program.entry_point == 0xC004
    assert len(program.data_lines) == 3


def test_lazy_groups_are_consumed_once() -> None:
    load_range = validate_load(0xC000, 4)
    produced = (EncodedGroup((value,)) for value in range(4))

    program = synthesize_loader(load_range, produced)

    assert [line.text for line in program.data_lines] == [
        "DATA 0",
        "DATA 1",
        "DATA 2",
        "DATA 3",
    ]


def test_numbering_past_maximum_overflows() -> None:
    load_range = validate_load(0xC000, 2)
    groups = [EncodedGroup((1,)), EncodedGroup((2,))]

    with pytest.raises(LineNumberOverflow) as excinfo:
        synthesize_loader(load_range, groups, start_line=63960, line_step=10)

    assert excinfo.value.line_number == 64000
    assert excinfo.value.maximum == 63999


def test_last_line_may_use_maximum_number() -> None:
    load_range = validate_load(0xC000, 1)

    program = synthesize_loader(
        load_range, [EncodedGroup((7,))], start_line=63960, line_step=13
    )

    assert program.last_line_number == 63999


def test_token_count_must_match_trip_count() -> None:
    load_range = validate_load(0xC000, 3)

    with pytest.raises(InternalInvariantViolation, match="2 tokens"):
        synthesize_loader(load_range, [EncodedGroup((1, 2))])


def test_prologue_wider_than_limit_is_rejected() -> None:
    load_range = validate_load(0xC000, 1)

    with pytest.raises(InvalidLineWidth, match="prologue"):
        synthesize_loader(load_range, [EncodedGroup((1,))], max_line_width=20)


def test_trip_count_is_read_from_the_setup_line() -> None:
    load_range = validate_load(0xC000, 2)
    program = synthesize_loader(load_range, [EncodedGroup((1, 2))], start_line=100, line_step=5)
    edited = LoaderProgram(
        lines=(ProgramLine(100, "A=49152:N=7"), *program.lines[1:]),
        load_range=program.load_range,
        payload_length=program.payload_length,
    )

    assert program.trip_count == 2
    assert edited.trip_count == 7
