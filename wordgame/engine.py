import logging
import random
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .words import words_of_length

logger = logging.getLogger(__name__)

WORD_LENGTH = 5
NUM_TRIES = 7

LETTERS = "abcdefghijklmnopqrstuvwxyz"


class LetterState(Enum):
    PENDING = "pending"
    WRONG = "wrong"
    PARTIAL_MATCH = "partial"
    FULL_MATCH = "match"


# ranks used when merging keyboard states, pending never reaches the keyboard
_RANK = {
    LetterState.WRONG: 0,
    LetterState.PARTIAL_MATCH: 1,
    LetterState.FULL_MATCH: 2,
}

SHARE_SYMBOLS = {
    LetterState.FULL_MATCH: "\U0001F7E9",
    LetterState.PARTIAL_MATCH: "\U0001F7E8",
    LetterState.WRONG: "⬜",
}


class Outcome(Enum):
    CONTINUE = "continue"
    WON = "won"
    LOST = "lost"


class AttemptError(Exception):
    """Base class for a submission the engine refused. State is left untouched."""
    message = "Invalid attempt."

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class IncompleteAttempt(AttemptError):
    message = "Please type all the letters"


class NotInWordList(AttemptError):
    message = "Not in word list"

    def __init__(self, word: str):
        self.word = word
        super().__init__()


class GameOver(AttemptError):
    message = "Game is over."


@dataclass
class Cell:
    text: str = ""
    state: LetterState = LetterState.PENDING


@dataclass
class Attempt:
    cells: List[Cell]

    @property
    def word(self) -> str:
        return "".join(cell.text for cell in self.cells).upper()

    @property
    def states(self) -> List[LetterState]:
        return [cell.state for cell in self.cells]


@dataclass(frozen=True)
class SubmitResult:
    outcome: Outcome
    attempt_index: int
    word: str
    states: List[LetterState]
    # only set when the game is lost
    target: Optional[str] = None

    @property
    def won(self) -> bool:
        return self.outcome is Outcome.WON

    @property
    def lost(self) -> bool:
        return self.outcome is Outcome.LOST


def count_letters(word: str) -> Dict[str, int]:
    """
    Returns a mapping from each letter of the word to how often it appears,
    e.g. 'happy' -> {'h': 1, 'a': 1, 'p': 2, 'y': 1}
    """
    return dict(Counter(word))


def score_guess(guess: str, target: str, letter_counts: Dict[str, int]) -> List[LetterState]:
    """
    Scores a guess against the (lowercase) target in a single left-to-right pass.

    A letter only earns a match while the target still has an unclaimed
    occurrence of it. Positions are resolved strictly in index order, so an
    earlier partial match can use up the slot a later exact match would need:
    target CRANE, guess NANNY scores the N at index 3 as wrong.

    Args:
        guess: the guessed word, any case
        target: the lowercase target word
        letter_counts: occurrence counts of the target, copied before use

    Returns:
        List[LetterState]: one terminal state per position
    """
    counts = dict(letter_counts)
    states = []
    for expected, letter in zip(target, guess):
        got = letter.lower()
        state = LetterState.WRONG

        if got == expected and counts.get(got, 0) > 0:
            counts[expected] -= 1
            state = LetterState.FULL_MATCH
        elif got in target and counts.get(got, 0) > 0:
            counts[got] -= 1
            state = LetterState.PARTIAL_MATCH
        states.append(state)
    return states


def merge_key_state(current: Optional[LetterState], new: LetterState) -> LetterState:
    """Returns the better of two keyboard states, so a key never downgrades."""
    if current is None or _RANK[new] > _RANK[current]:
        return new
    return current


def choose_target(words: Sequence[str], word_length: int, rng: random.Random) -> str:
    """
    Picks a word uniformly at random, retrying until one has the right length.
    """
    if not words_of_length(words, word_length):
        raise ValueError(f"Word list has no {word_length}-letter words.")

    while True:
        word = words[rng.randrange(len(words))]
        if len(word) == word_length:
            return word.lower()


class GameEngine:
    """
    Owns the grid of attempts, the target word and the keyboard state for one game.

    Input arrives one key at a time through apply_key(). Submitting scores the
    active attempt atomically and returns a SubmitResult, leaving any reveal
    pacing to the caller.
    """

    def __init__(
        self,
        words: Sequence[str],
        word_length: int = WORD_LENGTH,
        num_tries: int = NUM_TRIES,
        rng: Optional[random.Random] = None,
        target: Optional[str] = None,
    ):
        if word_length < 1 or num_tries < 1:
            raise ValueError("word_length and num_tries must be positive.")
        if not words:
            raise ValueError("Word list cannot be empty.")

        self.word_length = word_length
        self.num_tries = num_tries

        # dictionary used for validation, always uppercase
        self.words = tuple(word.upper() for word in words)
        self._dictionary = frozenset(self.words)

        self.attempts: List[Attempt] = [
            Attempt([Cell() for _ in range(word_length)]) for _ in range(num_tries)
        ]

        if target is not None:
            if len(target) != word_length:
                raise ValueError(f"Target word must be {word_length} letters long.")
            self._target = target.lower()
        else:
            self._target = choose_target(self.words, word_length, rng or random.Random())
        logger.debug("Target word: %s", self._target)

        # baseline counts, every scoring pass works on a copy
        self._letter_counts = count_letters(self._target)

        self._key_states: Dict[str, LetterState] = {}
        self._cursor = 0
        self._num_submitted = 0
        self._won = False

    @property
    def target_word(self) -> str:
        return self._target.upper()

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def num_submitted(self) -> int:
        return self._num_submitted

    @property
    def won(self) -> bool:
        return self._won

    @property
    def lost(self) -> bool:
        return not self._won and self._num_submitted >= self.num_tries

    @property
    def is_over(self) -> bool:
        return self._won or self._num_submitted >= self.num_tries

    @property
    def active_attempt(self) -> Optional[Attempt]:
        if self.is_over:
            return None
        return self.attempts[self._num_submitted]

    @property
    def current_text(self) -> str:
        attempt = self.active_attempt
        return attempt.word if attempt else ""

    @property
    def key_states(self) -> Dict[str, LetterState]:
        return dict(self._key_states)

    @property
    def submitted_attempts(self) -> List[Attempt]:
        return self.attempts[:self._num_submitted]

    def apply_key(self, key: str) -> Optional[SubmitResult]:
        """
        Handles one raw key: a letter, 'Backspace' or 'Enter'. Anything else is ignored.

        Returns the SubmitResult for 'Enter' and None otherwise. Rejected
        submissions raise an AttemptError and leave the game untouched.
        """
        if self.is_over:
            return None

        row_start = self._num_submitted * self.word_length

        if len(key) == 1 and key.lower() in LETTERS:
            if self._cursor < row_start + self.word_length:
                self._set_letter(key)
                self._cursor += 1
        elif key == "Backspace":
            # never step back into an attempt that was already submitted
            if self._cursor > row_start:
                self._cursor -= 1
                self._set_letter("")
        elif key == "Enter":
            return self.check_current_attempt()
        return None

    def _set_letter(self, letter: str):
        row, col = divmod(self._cursor, self.word_length)
        self.attempts[row].cells[col].text = letter

    def check_current_attempt(self) -> SubmitResult:
        """
        Validates and scores the active attempt.

        Raises:
            IncompleteAttempt: a cell is still empty
            NotInWordList: the typed word is not in the dictionary
            GameOver: the game has already been won or lost
        """
        if self.is_over:
            raise GameOver()

        index = self._num_submitted
        attempt = self.attempts[index]

        if any(cell.text == "" for cell in attempt.cells):
            raise IncompleteAttempt()

        word = attempt.word
        if word not in self._dictionary:
            raise NotInWordList(word)

        states = score_guess(word, self._target, self._letter_counts)
        for cell, state in zip(attempt.cells, states):
            cell.state = state

        for cell, state in zip(attempt.cells, states):
            letter = cell.text.lower()
            self._key_states[letter] = merge_key_state(self._key_states.get(letter), state)

        self._num_submitted += 1

        if all(state is LetterState.FULL_MATCH for state in states):
            self._won = True
            return SubmitResult(Outcome.WON, index, word, states)

        if self._num_submitted >= self.num_tries:
            return SubmitResult(Outcome.LOST, index, word, states, target=self.target_word)

        return SubmitResult(Outcome.CONTINUE, index, word, states)

    def key_state_for(self, letter: str) -> Optional[LetterState]:
        """Returns the best state seen for a keyboard letter, or None if it is unset."""
        return self._key_states.get(letter.lower())

    def export_result_grid(self) -> str:
        """
        Builds the shareable grid: one line per submitted attempt, one square per cell.
        """
        lines = []
        for attempt in self.submitted_attempts:
            lines.append("".join(SHARE_SYMBOLS[state] for state in attempt.states) + "\n")
        return "".join(lines)
