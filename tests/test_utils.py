import logging

from opening_drill.utils import get_float_env, get_project_root, get_store_path, setup_logging


class TestConfig:
    def test_store_path_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OPENING_DRILL_STORE", str(tmp_path / "s.json"))
        assert get_store_path() == str(tmp_path / "s.json")

    def test_default_store_path(self, monkeypatch):
        monkeypatch.setenv("OPENING_DRILL_STORE", "")
        assert get_store_path() == str(get_project_root() / "data" / "studies.json")

    def test_float_env(self, monkeypatch):
        monkeypatch.setenv("OPPONENT_DELAY_SECONDS", "1.5")
        assert get_float_env("OPPONENT_DELAY_SECONDS", 0.5) == 1.5

    def test_float_env_invalid(self, monkeypatch):
        monkeypatch.setenv("OPPONENT_DELAY_SECONDS", "soon")
        assert get_float_env("OPPONENT_DELAY_SECONDS", 0.5) == 0.5

    def test_float_env_missing(self, monkeypatch):
        monkeypatch.delenv("OPPONENT_DELAY_SECONDS", raising=False)
        assert get_float_env("OPPONENT_DELAY_SECONDS", 0.25) == 0.25

    def test_setup_logging_returns_project_logger(self):
        assert setup_logging() is logging.getLogger("opening_drill")
