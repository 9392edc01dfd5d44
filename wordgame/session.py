import argparse
import json
import os
import random
import time
import uuid
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .config import Settings
from .engine import (
    AttemptError,
    GameEngine,
    LetterState,
    NotInWordList,
    SubmitResult,
)
from .log import GameLogger
from .render import TextUI, render_screenshot
from .words import load_word_list

# reveal pacing, in milliseconds
FOLD_MS = 180
BOUNCE_MS = 160
SHAKE_MS = 500
SHARE_DELAY_MS = 1500
MESSAGE_MS = 2000
FADE_MS = 500

WIN_MESSAGE = "You win!"
COPIED_MESSAGE = "Copied results to clipboard"


@dataclass(frozen=True)
class Frame:
    """
    One step of the reveal timeline. The front end performs the action and
    then waits delay_ms before the next frame.
    """
    action: str  # 'message', 'fade', 'dismiss', 'shake', 'fold', 'reveal', 'unfold', 'bounce', 'pause', 'share'
    delay_ms: int = 0
    row: Optional[int] = None
    index: Optional[int] = None
    state: Optional[LetterState] = None
    text: Optional[str] = None
    # transient messages disappear after MESSAGE_MS plus FADE_MS
    persistent: bool = False


def reveal_frames(result: SubmitResult) -> List[Frame]:
    """
    Builds the timeline for a scored attempt: each cell folds, takes its
    state and unfolds, left to right. A win adds a bounce across the row, and
    both a win and a loss end with the share dialog after a short pause.
    """
    row = result.attempt_index
    frames = []
    for i, state in enumerate(result.states):
        frames.append(Frame('fold', FOLD_MS, row=row, index=i))
        frames.append(Frame('reveal', row=row, index=i, state=state))
        frames.append(Frame('unfold', FOLD_MS, row=row, index=i))

    if result.won:
        frames.append(Frame('message', text=WIN_MESSAGE))
        for i in range(len(result.states)):
            frames.append(Frame('bounce', BOUNCE_MS, row=row, index=i))
        frames.append(Frame('pause', SHARE_DELAY_MS))
        frames.append(Frame('share'))
    elif result.lost:
        # the answer stays on screen
        frames.append(Frame('message', text=result.target, persistent=True))
        frames.append(Frame('pause', SHARE_DELAY_MS))
        frames.append(Frame('share'))
    return with_dismissals(frames)


def rejection_frames(error: AttemptError, row: int) -> List[Frame]:
    frames = [Frame('message', text=error.message)]
    if isinstance(error, NotInWordList):
        frames.append(Frame('shake', SHAKE_MS, row=row))
    return with_dismissals(frames)


def message_frames(text: str) -> List[Frame]:
    """A transient message on its own: shown, faded out, then removed."""
    return with_dismissals([Frame('message', text=text)])


def with_dismissals(frames: Sequence[Frame]) -> List[Frame]:
    """
    Weaves a 'fade' and a 'dismiss' frame into the timeline for every
    transient message, MESSAGE_MS and MESSAGE_MS + FADE_MS after it appears.

    Frames keep their start times, delays are recomputed around the inserted
    ones. The timeline is stretched when it ends before the last dismissal.
    """
    # (start time, inserted after the originals, source position, frame)
    events = []
    elapsed = 0
    for n, frame in enumerate(frames):
        events.append((elapsed, 0, n, frame))
        if frame.action == 'message' and not frame.persistent:
            events.append((elapsed + MESSAGE_MS, 1, n, Frame('fade', text=frame.text)))
            events.append((elapsed + MESSAGE_MS + FADE_MS, 1, n, Frame('dismiss', text=frame.text)))
        elapsed += frame.delay_ms
    events.sort(key=lambda e: e[:3])

    timed = []
    for i, (start, _, _, frame) in enumerate(events):
        if i + 1 < len(events):
            delay = events[i + 1][0] - start
        else:
            delay = max(0, elapsed - start)
        timed.append(replace(frame, delay_ms=delay))
    return timed


def parse_keys(line: str) -> List[str]:
    """
    Turns a line of terminal input into raw keys. '<' stands for Backspace
    and the end of the line submits.
    """
    keys = []
    for char in line.strip():
        if char == '<':
            keys.append('Backspace')
        elif not char.isspace():
            keys.append(char)
    keys.append('Enter')
    return keys


class GameSession:
    """Drives a GameEngine from raw keys and keeps what the UI needs to show."""

    def __init__(self, engine: GameEngine, game_logger: Optional[GameLogger] = None):
        self.engine = engine
        self.game_logger = game_logger
        self.game_id = str(uuid.uuid4())

        self.info_message: Optional[str] = None
        self.message_persistent = False
        self.message_fading = False
        self.shake_row: Optional[int] = None
        self.share_visible = False

        self._keys_this_turn: List[str] = []
        self.game_state: Dict[str, Any] = {
            "game_id": self.game_id,
            "target_word": engine.target_word,
            "won": False,
            "num_turns": 0,
            "rollout": {},
        }

    def press(self, key: str) -> List[Frame]:
        """
        Feeds one raw key to the engine. Returns the frames the front end
        should play in response, empty for plain typing.
        """
        if self.engine.is_over:
            return []

        self.shake_row = None
        self._keys_this_turn.append(key)
        if self.game_logger:
            self.game_logger.log_key(self.game_id, key, self.engine.cursor)

        row = self.engine.num_submitted
        word = self.engine.current_text
        try:
            result = self.engine.apply_key(key)
        except AttemptError as e:
            self._record(row, word, e.message)
            if self.game_logger:
                self.game_logger.log_rejection(self.game_id, e, word)
            self._show_message(e.message)
            if isinstance(e, NotInWordList):
                self.shake_row = row
            return rejection_frames(e, row)

        if result is None:
            return []

        self._record(row, result.word, [state.value for state in result.states])
        if self.game_logger:
            self.game_logger.log_submission(
                self.game_id, result.attempt_index, result.word,
                [state.value for state in result.states], result.outcome.value
            )

        if result.won:
            self._show_message(WIN_MESSAGE)
            self._finish(won=True)
        elif result.lost:
            self._show_message(result.target, persistent=True)
            self._finish(won=False)
        return reveal_frames(result)

    def type_word(self, keys: Sequence[str]) -> List[Frame]:
        frames = []
        for key in keys:
            frames.extend(self.press(key))
        return frames

    def clear_row(self):
        """Deletes whatever has been typed into the active attempt."""
        while self.engine.current_text:
            self.press('Backspace')

    def share(self) -> Tuple[str, List[Frame]]:
        """
        Returns the share text and the frames acknowledging the copy, like the
        share button.
        """
        text = self.engine.export_result_grid()
        self.share_visible = False
        self._show_message(COPIED_MESSAGE)
        return text, message_frames(COPIED_MESSAGE)

    def apply_frame(self, frame: Frame):
        """Keeps the info message in step with the timeline as it plays."""
        if frame.text != self.info_message or self.message_persistent:
            return
        if frame.action == 'fade':
            self.message_fading = True
        elif frame.action == 'dismiss':
            self.info_message = None
            self.message_fading = False

    def _show_message(self, text: str, persistent: bool = False):
        self.info_message = text
        self.message_persistent = persistent
        self.message_fading = False

    def _record(self, row: int, word: str, feedback: Any):
        turn_str = str(row + 1)
        if turn_str not in self.game_state['rollout']:
            self.game_state['rollout'][turn_str] = {"steps": []}
        self.game_state['rollout'][turn_str]["steps"].append({
            "keys": list(self._keys_this_turn),
            "guess": word,
            "feedback": feedback,
        })
        self._keys_this_turn = []

    def _finish(self, won: bool):
        self.share_visible = True
        self.game_state['won'] = won
        self.game_state['num_turns'] = self.engine.num_submitted
        if self.game_logger:
            self.game_logger.log_game_event(
                self.game_id, 'game_won' if won else 'game_lost',
                target=self.engine.target_word, attempts=self.engine.num_submitted
            )


def play(frames: Sequence[Frame], on_frame: Callable[[Frame], None], sleep: Callable[[float], None] = time.sleep):
    """Plays a timeline, calling on_frame for each step and sleeping between them."""
    for frame in frames:
        on_frame(frame)
        if frame.delay_ms:
            sleep(frame.delay_ms / 1000)


def main(argv: Optional[List[str]] = None):
    """Interactive terminal game."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="Guess the hidden word. Type a word and press return, '<' deletes a letter.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('--target', type=str, default=None, help="Play against a fixed word.")
    parser.add_argument('--seed', type=int, default=settings.seed, help="Seed for target selection.")
    parser.add_argument('--word-list', type=Path, default=settings.word_list_path, help="Path to the word list.")
    parser.add_argument('--tries', type=int, default=settings.num_tries, help="Number of attempts.")
    parser.add_argument('--no-animate', action='store_true', help="Skip the reveal pauses.")
    parser.add_argument('--dump-state', action='store_true', help="Print the game record as JSON at the end.")
    parser.add_argument('--screenshot', type=Path, default=None, help="Save a PNG of the final board here.")
    args = parser.parse_args(argv)

    game_logger = GameLogger(log_dir=settings.log_dir, level=settings.log_level)

    try:
        words = load_word_list(args.word_list)
        engine = GameEngine(
            words,
            word_length=settings.word_length,
            num_tries=args.tries,
            rng=random.Random(args.seed),
            target=args.target,
        )
    except (FileNotFoundError, ValueError) as e:
        game_logger.log_error(None, e, 'start')
        print(e)
        raise SystemExit(1)

    session = GameSession(engine, game_logger)
    ui = TextUI()
    animate = settings.animate and not args.no_animate
    sleep = time.sleep if animate else (lambda _: None)

    def on_frame(frame: Frame):
        session.apply_frame(frame)
        if frame.action == 'message':
            print(f"\n  {frame.text}")
        elif frame.action == 'share':
            text, _ = session.share()
            print("\n" + text)
            print(f"  {session.info_message}")

    ui.print_welcome(engine)
    print(ui.get_board_string(engine))
    print(ui.get_keyboard_string(engine))

    while not engine.is_over:
        try:
            line = ui.get_input(engine)
        except (KeyboardInterrupt, EOFError):
            print("\n\nExiting game.")
            break

        if not line:
            continue

        frames = session.type_word(parse_keys(line))
        if not frames:
            continue

        os.system('cls' if os.name == 'nt' else 'clear')
        ui.print_welcome(engine)
        print(ui.get_board_string(engine, shake_row=session.shake_row))
        print(ui.get_keyboard_string(engine))
        play(frames, on_frame, sleep)

        # a line of input is a whole guess, so start the next one on an empty row
        if engine.current_text:
            session.clear_row()

    if engine.is_over:
        ui.print_game_over(engine)
    if args.dump_state:
        print(json.dumps(session.game_state, indent=4))
    if args.screenshot:
        if render_screenshot(engine, session.info_message, output_path=args.screenshot):
            print(f"Board saved to {args.screenshot}")


if __name__ == "__main__":
    main()
