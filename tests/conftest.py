import pytest

from wordgame.engine import GameEngine

WORDS = [
    "CRANE", "SLATE", "TRAIN", "NANNY", "ALLOY", "LOYAL",
    "HAPPY", "PAPPY", "MOUSE", "ABOUT",
]


def submit(engine, word):
    """Types a word key by key and presses Enter."""
    for letter in word:
        engine.apply_key(letter)
    return engine.apply_key("Enter")


@pytest.fixture
def words():
    return list(WORDS)


@pytest.fixture
def engine(words):
    return GameEngine(words, target="crane")
