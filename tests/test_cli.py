"""Tests for the command line host."""

import pytest

from opening_drill.cli import main, parse_user_move, run_drill
from opening_drill.data.storage import JsonFileStore
from opening_drill.data.studies import load_studies
from opening_drill.drill.session import DrillSession

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "studies.json")


def stored(store_path):
    return load_studies(JsonFileStore(store_path))


class TestParseUserMove:
    def test_uci(self):
        assert parse_user_move(START_FEN, "e2e4") == ("e2", "e4", None)

    def test_san(self):
        assert parse_user_move(START_FEN, "Nf3") == ("g1", "f3", None)

    def test_promotion(self):
        assert parse_user_move("8/4P3/8/8/8/8/k7/4K3 w - - 0 1", "e8=N") == ("e7", "e8", "n")

    def test_illegal_square_move_is_still_read(self):
        assert parse_user_move(START_FEN, "e2e5") == ("e2", "e5", None)

    def test_unreadable(self):
        assert parse_user_move(START_FEN, "hello") is None


class TestStudyCommands:
    def test_add_and_list(self, store_path, capsys):
        assert main(["--store", store_path, "add", "--name", "Italian", "--pgn", "1.e4 e5 2.Nf3"]) == 0
        [study] = stored(store_path)
        assert study.name == "Italian"
        assert study.pgn == "1. e4 e5 2. Nf3"
        assert study.preferred_color == "white"

        assert main(["--store", store_path, "list"]) == 0
        assert f"{study.id}  Italian  (white)" in capsys.readouterr().out

    def test_add_from_file(self, store_path, tmp_path):
        pgn_file = tmp_path / "slav.pgn"
        pgn_file.write_text("1. d4 d5 2. c4 c6")
        main(["--store", store_path, "add", "--name", "Slav", "--pgn-file", str(pgn_file), "--color", "black"])
        [study] = stored(store_path)
        assert study.preferred_color == "black"
        assert study.pgn == "1. d4 d5 2. c4 c6"

    def test_add_requires_pgn(self, store_path):
        assert main(["--store", store_path, "add", "--name", "Empty"]) == 1
        assert stored(store_path) == []

    def test_edit(self, store_path):
        main(["--store", store_path, "add", "--name", "Italian", "--pgn", "1. e4 e5"])
        [study] = stored(store_path)
        assert main(["--store", store_path, "edit", study.id, "--name", "Giuoco Piano", "--color", "black"]) == 0
        [edited] = stored(store_path)
        assert edited.id == study.id
        assert edited.name == "Giuoco Piano"
        assert edited.preferred_color == "black"
        assert edited.updated_at > study.updated_at
        assert edited.created_at == study.created_at

    def test_delete(self, store_path):
        main(["--store", store_path, "add", "--name", "Italian", "--pgn", "1. e4 e5"])
        [study] = stored(store_path)
        assert main(["--store", store_path, "delete", study.id[:6]]) == 0
        assert stored(store_path) == []

    def test_unknown_study(self, store_path, capsys):
        assert main(["--store", store_path, "delete", "nope"]) == 1
        assert "No study matches" in capsys.readouterr().out

    def test_lines(self, store_path, capsys):
        main(["--store", store_path, "add", "--name", "Open games", "--pgn", "1. e4 e5 (1... c5 2. Nf3) 2. Nf3"])
        [study] = stored(store_path)
        capsys.readouterr()
        assert main(["--store", store_path, "lines", study.id]) == 0
        out = capsys.readouterr().out
        assert "1. e4 e5 2. Nf3" in out
        assert "1. e4 c5 2. Nf3" in out
        assert "2 lines in Open games" in out

    def test_failed_save_reports_no_success(self, tmp_path, capsys):
        # a directory where the store file should be makes every save fail
        store_dir = tmp_path / "studies.json"
        store_dir.mkdir()
        assert main(["--store", str(store_dir), "add", "--name", "Italian", "--pgn", "1. e4 e5"]) == 1
        captured = capsys.readouterr()
        assert "Added study" not in captured.out
        assert "studies could not be saved" in captured.err


class TestRunDrill:
    def test_drills_every_line(self, monkeypatch, capsys):
        monkeypatch.setenv("OPPONENT_DELAY_SECONDS", "0")
        session = DrillSession("1. e4 e5 (1... c5 2. Nf3) 2. Nf3 Nc6", "white")
        moves = iter(["e4", "d4", "Nf3", "e2e4", "g1f3"])
        completed = run_drill(session, "white", input_func=lambda prompt: next(moves))
        assert completed == 2
        out = capsys.readouterr().out
        assert "Wrong move, try again." in out
        assert "All 2 lines completed." in out

    def test_quit(self, monkeypatch):
        monkeypatch.setenv("OPPONENT_DELAY_SECONDS", "0")
        session = DrillSession("1. e4 e5", "white")
        assert run_drill(session, "white", input_func=lambda prompt: "quit") == 0

    def test_end_of_input(self, monkeypatch):
        monkeypatch.setenv("OPPONENT_DELAY_SECONDS", "0")

        def no_input(prompt):
            raise EOFError

        session = DrillSession("1. e4 e5", "black")
        assert run_drill(session, "black", input_func=no_input) == 0

    def test_illegal_move_is_reported_wrong(self, monkeypatch, capsys):
        monkeypatch.setenv("OPPONENT_DELAY_SECONDS", "0")
        session = DrillSession("1. e4 e5", "white")
        moves = iter(["e2e5", "quit"])
        assert run_drill(session, "white", input_func=lambda prompt: next(moves)) == 0
        out = capsys.readouterr().out
        assert "Wrong move, try again." in out
        assert "Could not read move" not in out
