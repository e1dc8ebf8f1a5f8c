from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from pokeloader import cli
from pokeloader.converter import convert


def write_binary(tmp_path: Path, data: bytes, name: str = "demo.bin") -> Path:
    path = tmp_path / name
    path.write_bytes(data)
    return path


def test_main_writes_listing_to_stdout(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    binary = write_binary(tmp_path, bytes([1, 2, 3]))

    assert cli.main([str(binary), "--address", "$C000"]) == cli.EXIT_OK

    captured = capsys.readouterr()
    assert captured.out.splitlines() == [
        "10 A=49152:N=3",
        "20 FOR I=1 TO N:READ B:POKE A,B:A=A+1:NEXT I",
        "30 SYS 49152",
        "40 DATA 1,2,3",
    ]
    assert "data lines:   1" in captured.err


def test_main_writes_output_file_and_json_metadata(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    binary = write_binary(tmp_path, bytes(range(40)))
    output = tmp_path / "demo.bas"

    exit_code = cli.main(
        [
            str(binary),
            "-a",
            "49152",
            "-e",
            "0xC004",
            "-o",
            str(output),
            "--start-line",
            "1",
            "--line-step",
            "1",
            "--json",
            "--verify",
        ]
    )

    assert exit_code == cli.EXIT_OK
    captured = capsys.readouterr()
    assert captured.out == ""
    assert json.loads(captured.err) == {
        "load_address": 49152,
        "entry_point": 49156,
        "payload_length": 40,
        "data_line_count": 2,
        "last_line_number": 5,
    }
    listing = output.read_text(encoding="ascii")
    assert listing.startswith("1 A=49152:N=40\n")
    assert "3 SYS 49156\n" in listing


def test_prg_header_supplies_load_address(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    binary = write_binary(tmp_path, bytes([0x00, 0xC0, 0xA9, 0x00, 0x60]), "demo.prg")

    assert cli.main([str(binary), "--prg", "--verify"]) == cli.EXIT_OK

    out = capsys.readouterr().out
    assert "10 A=49152:N=3" in out
    assert "40 DATA 169,0,96" in out


def test_config_file_is_merged_with_overrides(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    binary = write_binary(tmp_path, bytes(3))
    config = tmp_path / "loader.toml"
    config.write_text("[loader]\nstart_line = 1000\nline_step = 2\n", encoding="utf-8")

    assert cli.main([str(binary), "-a", "49152", "--config", str(config), "--line-step", "5"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[0] for line in lines] == ["1000", "1005", "1010", "1015"]


def test_conversion_errors_are_reported_verbatim(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    binary = write_binary(tmp_path, bytes(4))

    assert cli.main([str(binary), "-a", "0"]) == cli.EXIT_CONVERSION_FAILED

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "zero page" in captured.err


def test_invalid_option_is_a_conversion_failure(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    binary = write_binary(tmp_path, bytes(4))

    assert cli.main([str(binary), "-a", "49152", "--line-step", "0"]) == cli.EXIT_CONVERSION_FAILED
    assert "line_step" in capsys.readouterr().err


def test_missing_binary_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="binary not found"):
        cli.main([str(tmp_path / "absent.bin"), "-a", "49152"])


def test_load_address_is_required_without_prg(tmp_path: Path) -> None:
    binary = write_binary(tmp_path, bytes(4))

    with pytest.raises(SystemExit, match="load address is required"):
        cli.main([str(binary)])


def test_verify_failure_is_reported(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    binary = write_binary(tmp_path, bytes([1, 2, 3]))

    def fake_inspect(listing: str):
        raise cli.ListingFormatError("broken")

    monkeypatch.setattr(cli, "inspect_listing", fake_inspect)

    assert cli.main([str(binary), "-a", "49152", "--verify"]) == cli.EXIT_VERIFY_FAILED
    captured = capsys.readouterr()
    assert "verification failed: broken" in captured.err
    assert captured.out == ""


def test_malformed_config_is_a_conversion_failure(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    binary = write_binary(tmp_path, bytes(4))
    config = tmp_path / "loader.toml"
    config.write_text("[loader\nstart_line = 1\n", encoding="utf-8")

    exit_code = cli.main([str(binary), "-a", "49152", "--config", str(config)])

    assert exit_code == cli.EXIT_CONVERSION_FAILED
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "invalid TOML" in captured.err


@pytest.mark.parametrize(
    ("original", "edited", "message"),
    [
        ("A=49152:N=3", "A=49153:N=3", "loads at 49153, expected 49152"),
        ("SYS 49152", "SYS 49154", "jumps to 49154, expected 49152"),
        ("DATA 1,2,3", "DATA 1,2,4", "does not reproduce the payload"),
    ],
)
def test_verify_result_rejects_edited_listing(original: str, edited: str, message: str) -> None:
    payload = bytes([1, 2, 3])
    result = convert(payload, 49152)
    tampered = replace(result, listing=result.listing.replace(original, edited))

    cli.verify_result(result, payload)
    with pytest.raises(cli.ListingFormatError, match=message):
        cli.verify_result(tampered, payload)
