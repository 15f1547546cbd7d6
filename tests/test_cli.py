from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from caverns.cli import main, parse_coord
from caverns.logging_utils import log_unsolved

EXAMPLE = "\n".join(
    [
        "#######",
        "#.G...#",
        "#...EG#",
        "#.#.#G#",
        "#..G#E#",
        "#.....#",
        "#######",
    ]
)


def write_map(tmp_path: Path, text: str) -> str:
    path = tmp_path / "map.txt"
    path.write_text(text + "\n")
    return str(path)


def test_parse_coord():
    assert parse_coord("10,10") == (10, 10)
    assert parse_coord(" 3 , 7 ") == (3, 7)
    for bad in ["10", "a,b", "1,2,3", "-1,4"]:
        with pytest.raises(ValueError):
            parse_coord(bad)


def test_cave_command(capsys):
    assert main(["cave", "--depth", "510", "--target", "10,10"]) == 0
    out = capsys.readouterr().out
    assert "Total risk: 114" in out
    assert "Fastest route: 45 minutes" in out


def test_cave_command_shows_map(capsys):
    assert main(["cave", "--depth", "510", "--target", "10,10", "--show-map"]) == 0
    out = capsys.readouterr().out
    assert "M=.|=.|.|=." in out


def test_cave_command_budget_logs_unsolved(tmp_path, capsys):
    fail_log = tmp_path / "fails.jsonl"
    code = main(
        ["--fail-log", str(fail_log), "cave", "--depth", "510", "--target", "10,10", "--max-expansions", "3"]
    )
    assert code == 1
    assert "unreachable" in capsys.readouterr().out
    entry = json.loads(fail_log.read_text().splitlines()[0])
    assert entry["kind"] == "cave"
    assert entry["target"] == [10, 10]


def test_bad_target_exits_with_2(capsys):
    assert main(["cave", "--depth", "510", "--target", "ten"]) == 2
    assert "error:" in capsys.readouterr().err


def test_combat_command(tmp_path, capsys):
    assert main(["combat", "--infile", write_map(tmp_path, EXAMPLE), "--show-map"]) == 0
    out = capsys.readouterr().out
    assert "Combat ends after 47 full rounds (over)" in out
    assert "Winner: goblins with 590 total hit points left" in out
    assert "Outcome: 27730" in out
    assert "G(200)" in out


def test_combat_command_with_elf_power(tmp_path, capsys):
    assert main(["combat", "--infile", write_map(tmp_path, EXAMPLE), "--elf-power", "15"]) == 0
    assert "Outcome: 4988" in capsys.readouterr().out


def test_combat_find_boost(tmp_path, capsys):
    assert main(["combat", "--infile", write_map(tmp_path, EXAMPLE), "--find-boost"]) == 0
    out = capsys.readouterr().out
    assert "Minimum elf attack power: 15" in out
    assert "Outcome: 4988" in out


def test_combat_without_boost_logs_unsolved(tmp_path, capsys):
    fail_log = tmp_path / "fails.jsonl"
    infile = write_map(tmp_path, "#####\n#E#G#\n#####")
    assert main(["--fail-log", str(fail_log), "combat", "--infile", infile, "--find-boost"]) == 1
    assert "No elf attack power" in capsys.readouterr().out
    entry = json.loads(fail_log.read_text().strip())
    assert entry["kind"] == "boost"
    assert entry["run_id"] == "combat-map.txt"


def test_combat_bad_inputs_exit_with_2(tmp_path, capsys):
    assert main(["combat", "--infile", str(tmp_path / "missing.txt")]) == 2
    assert main(["combat", "--infile", write_map(tmp_path, "#####\n#E?G#\n#####")]) == 2
    assert main(["combat", "--infile", write_map(tmp_path, EXAMPLE), "--elf-power", "0"]) == 2
    assert capsys.readouterr().err.count("error:") == 3


def test_log_unsolved_appends(tmp_path):
    path = tmp_path / "log.jsonl"
    log_unsolved("first", {"kind": "cave"}, str(path))
    log_unsolved("second", {"kind": "boost"}, str(path))
    lines = [json.loads(line) for line in path.read_text().splitlines()]
    assert [line["run_id"] for line in lines] == ["first", "second"]
