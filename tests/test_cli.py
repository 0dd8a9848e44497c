from __future__ import annotations

import pytest

import bracket_engine.cli as cli
from bracket_engine import TournamentStorage


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "BRACKET_TABLE",
        "AWS_REGION",
        "BRACKET_HISTORY_LIMIT",
        "BRACKET_LOG_LEVEL",
        "BRACKET_SHRINK_COMPLETED",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def players_file(tmp_path):
    path = tmp_path / "players.txt"
    path.write_text("Alice\nBob\nCarol\nDave\nErin\n", encoding="utf-8")
    return path


def test_parse_args_defaults(players_file):
    args = cli.parse_args([str(players_file)])

    assert args.players_file == players_file
    assert args.simulate is False
    assert args.shrink_completed is False
    assert args.save is None
    assert args.undo == 0
    assert args.log_level == "INFO"


def test_main_renders_bracket(players_file, capsys):
    assert cli.main([str(players_file)]) == 0

    output = capsys.readouterr().out
    assert output.splitlines()[0] == "Quarterfinals"
    assert "BYE vs #1 Alice" in output
    assert "Completion: 43%" in output
    assert "Champion" not in output


def test_main_simulates_to_a_champion(players_file, capsys):
    assert cli.main([str(players_file), "--simulate"]) == 0

    output = capsys.readouterr().out
    assert "Snapshot 1: Initial Bracket (43%)" in output
    assert "Snapshot 4: After Final (100%)" in output
    assert "Champion: #1 Alice" in output


def test_main_undo_steps_back_through_simulation(players_file, capsys):
    assert cli.main([str(players_file), "--simulate", "--undo", "1"]) == 0

    output = capsys.readouterr().out
    assert "Completion: 86%" in output
    assert "Champion" not in output

    assert cli.main([str(players_file), "--simulate", "--undo", "3"]) == 0
    assert "Completion: 43%" in capsys.readouterr().out


def test_main_undo_is_bounded_by_history_limit(players_file, monkeypatch, capsys):
    monkeypatch.setenv("BRACKET_HISTORY_LIMIT", "2")

    assert cli.main([str(players_file), "--simulate", "--undo", "3"]) == 0

    # only "After Semifinals" and "After Final" are kept
    assert "Completion: 86%" in capsys.readouterr().out


def test_main_skips_duplicate_names(tmp_path, capsys):
    path = tmp_path / "players.txt"
    path.write_text("Alice\nBob\nalice\nCarol\n", encoding="utf-8")

    assert cli.main([str(path)]) == 0

    output = capsys.readouterr().out
    assert "#3 Carol" in output
    assert "#4" not in output


def test_main_reports_bad_input(tmp_path, capsys):
    empty = tmp_path / "empty.txt"
    empty.write_text("\n\n", encoding="utf-8")

    assert cli.main([str(empty)]) == 1
    assert cli.main([str(tmp_path / "missing.txt")]) == 1
    assert capsys.readouterr().out == ""


def test_main_save_requires_table(players_file):
    assert cli.main([str(players_file), "--save", "cup"]) == 1


def test_main_saves_bracket(players_file, monkeypatch):
    saved = {}

    class RecordingStorage(TournamentStorage):
        def get_record(self, tournament_id):
            return None

        def save_record(self, record, *, expected_version=None):
            saved["record"] = record
            saved["expected_version"] = expected_version
            return record

    monkeypatch.setenv("BRACKET_TABLE", "brackets")
    monkeypatch.setattr(cli, "open_table", lambda name, region_name=None: object())
    monkeypatch.setattr(cli, "TournamentStorage", RecordingStorage)

    assert cli.main([str(players_file), "--simulate", "--save", "cup"]) == 0

    record = saved["record"]
    assert record.tournament_id == "cup"
    assert record.status == "completed"
    assert record.bracket.champion().name == "Alice"
    assert saved["expected_version"] == 0
