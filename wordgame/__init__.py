from .engine import (
    GameEngine,
    LetterState,
    Outcome,
    SubmitResult,
    AttemptError,
    IncompleteAttempt,
    NotInWordList,
    GameOver,
)
from .session import GameSession
from .render import TextUI
from .words import load_word_list

__all__ = [
    "GameEngine", "LetterState", "Outcome", "SubmitResult",
    "AttemptError", "IncompleteAttempt", "NotInWordList", "GameOver",
    "GameSession", "TextUI", "load_word_list",
]
