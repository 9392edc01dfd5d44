from pathlib import Path

import pytest

from wordgame.config import Settings
from wordgame.words import DEFAULT_WORD_LIST_PATH

ENV_VARS = [
    "WORDGAME_WORD_LENGTH", "WORDGAME_NUM_TRIES", "WORDGAME_WORD_LIST",
    "WORDGAME_SEED", "WORDGAME_LOG_LEVEL", "WORDGAME_LOG_DIR", "WORDGAME_ANIMATE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings.word_length == 5
    assert settings.num_tries == 7
    assert settings.word_list_path == DEFAULT_WORD_LIST_PATH
    assert settings.seed is None
    assert settings.log_level == "INFO"
    assert settings.log_dir is None
    assert settings.animate is True


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("WORDGAME_NUM_TRIES", "6")
    monkeypatch.setenv("WORDGAME_SEED", "3")
    monkeypatch.setenv("WORDGAME_WORD_LIST", str(tmp_path / "w.txt"))
    monkeypatch.setenv("WORDGAME_LOG_LEVEL", "debug")
    monkeypatch.setenv("WORDGAME_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("WORDGAME_ANIMATE", "false")

    settings = Settings.from_env()
    assert settings.num_tries == 6
    assert settings.seed == 3
    assert settings.word_list_path == Path(tmp_path / "w.txt")
    assert settings.log_level == "DEBUG"
    assert settings.log_dir == Path(tmp_path)
    assert settings.animate is False


def test_bad_integer(monkeypatch):
    monkeypatch.setenv("WORDGAME_WORD_LENGTH", "five")
    with pytest.raises(ValueError):
        Settings.from_env()
