from __future__ import annotations

from oob_generator.cli import main


def test_roll_with_seed(capsys) -> None:
    assert main(["roll", "G", "--seed", "3"]) == 0
    out = capsys.readouterr().out
    assert ", CAP" in out
    assert "Trace:" not in out


def test_roll_unknown_table(capsys) -> None:
    assert main(["roll", "Z"]) == 2
    assert "Error: Unknown table 'Z'" in capsys.readouterr().out


def test_roll_with_flags_and_debug(capsys) -> None:
    code = main(["roll", "A", "--ataf-zone", "2ATAF", "--scenario-date", "post", "--seed", "7", "--debug"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Trace: Nation:" in out


def test_roll_with_extra_param(capsys) -> None:
    assert main(["roll", "F", "--param", "missionType=AWACS", "--seed", "1"]) == 0
    assert "AWACS" in capsys.readouterr().out


def test_roll_missing_parameter(capsys) -> None:
    assert main(["roll", "F"]) == 2
    assert "missionType is required for Table F" in capsys.readouterr().out


def test_tables_for_module(capsys) -> None:
    assert main(["--module", "baltic_approaches", "tables"]) == 0
    out = capsys.readouterr().out
    assert "D3\tNATO\t" in out
    assert "J3\tWP\t" in out


def test_unknown_module(capsys) -> None:
    assert main(["--module", "fulda_gap", "tables"]) == 2
    assert "Error:" in capsys.readouterr().err
