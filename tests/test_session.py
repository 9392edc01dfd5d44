import logging

import pytest

from wordgame.engine import GameEngine, LetterState
from wordgame.log import GameLogger, LOGGER_NAME
from wordgame.session import (
    BOUNCE_MS,
    COPIED_MESSAGE,
    FADE_MS,
    FOLD_MS,
    MESSAGE_MS,
    SHAKE_MS,
    SHARE_DELAY_MS,
    WIN_MESSAGE,
    GameSession,
    parse_keys,
    main,
    play,
)


def type_line(session, line):
    return session.type_word(parse_keys(line))


def actions(frames):
    return [frame.action for frame in frames]


def start_times(frames):
    times, elapsed = [], 0
    for frame in frames:
        times.append(elapsed)
        elapsed += frame.delay_ms
    return times


def test_parse_keys():
    assert parse_keys("cr<a") == ["c", "r", "Backspace", "a", "Enter"]
    assert parse_keys("  crane \n") == ["c", "r", "a", "n", "e", "Enter"]


def test_typing_produces_no_frames(engine):
    session = GameSession(engine)
    assert session.press("c") == []
    assert session.press("Backspace") == []


def test_reveal_goes_left_to_right(engine):
    session = GameSession(engine)
    frames = type_line(session, "slate")

    assert actions(frames) == ["fold", "reveal", "unfold"] * 5
    reveals = [f for f in frames if f.action == "reveal"]
    assert [f.index for f in reveals] == [0, 1, 2, 3, 4]
    assert [f.state for f in reveals] == engine.attempts[0].states
    assert all(f.row == 0 for f in frames)
    assert [f.delay_ms for f in frames[:3]] == [FOLD_MS, 0, FOLD_MS]
    assert not session.share_visible


def test_not_in_word_list_shakes_the_row(engine):
    session = GameSession(engine)
    type_line(session, "slate")
    frames = type_line(session, "zzzzz")

    assert actions(frames) == ["message", "shake", "fade", "dismiss"]
    assert frames[0].text == "Not in word list"
    assert not frames[0].persistent
    assert frames[1].row == 1
    assert frames[1].delay_ms >= SHAKE_MS
    assert start_times(frames) == [0, 0, MESSAGE_MS, MESSAGE_MS + FADE_MS]
    assert session.shake_row == 1
    assert session.info_message == "Not in word list"
    assert engine.current_text == "ZZZZZ"

    session.press("Backspace")
    assert session.shake_row is None


def test_incomplete_attempt_only_shows_a_message(engine):
    session = GameSession(engine)
    frames = type_line(session, "cra")
    assert actions(frames) == ["message", "fade", "dismiss"]
    assert frames[0].text == "Please type all the letters"
    assert start_times(frames) == [0, MESSAGE_MS, MESSAGE_MS + FADE_MS]
    assert session.shake_row is None

    # the letters stay, so the rest of the word can follow
    frames = type_line(session, "ne")
    assert actions(frames)[-2:] == ["share", "dismiss"]


def test_win_timeline(engine):
    session = GameSession(engine)
    frames = type_line(session, "crane")

    tail = frames[15:]
    assert actions(tail) == ["message"] + ["bounce"] * 5 + ["pause", "fade", "share", "dismiss"]
    assert tail[0].text == WIN_MESSAGE
    assert all(f.delay_ms == BOUNCE_MS for f in tail[1:6])

    times = dict(zip(actions(tail), start_times(frames)[15:]))
    assert times["share"] - times["pause"] == SHARE_DELAY_MS
    assert times["fade"] - times["message"] == MESSAGE_MS
    assert times["dismiss"] - times["message"] == MESSAGE_MS + FADE_MS

    assert session.info_message == WIN_MESSAGE
    assert session.share_visible
    assert session.game_state["won"] is True
    assert session.game_state["num_turns"] == 1
    assert session.press("a") == []


def test_loss_keeps_the_answer_on_screen(words):
    engine = GameEngine(words, num_tries=2, target="crane")
    session = GameSession(engine)
    type_line(session, "slate")
    frames = type_line(session, "train")

    tail = frames[15:]
    assert actions(tail) == ["message", "pause", "share"]
    assert tail[0].text == "CRANE"
    assert tail[0].persistent
    assert tail[1].delay_ms == SHARE_DELAY_MS
    assert session.message_persistent

    play(frames, session.apply_frame, lambda _: None)
    assert session.info_message == "CRANE"
    assert session.game_state["won"] is False
    assert session.game_state["num_turns"] == 2


def test_share(engine):
    session = GameSession(engine)
    type_line(session, "slate")
    type_line(session, "crane")

    text, frames = session.share()
    assert text == engine.export_result_grid()
    assert text.count("\n") == 2
    assert session.info_message == COPIED_MESSAGE
    assert not session.share_visible

    assert actions(frames) == ["message", "fade", "dismiss"]
    assert frames[0].text == COPIED_MESSAGE
    assert start_times(frames) == [0, MESSAGE_MS, MESSAGE_MS + FADE_MS]


def test_playing_a_rejection_dismisses_the_message(engine):
    session = GameSession(engine)
    frames = type_line(session, "zzzzz")
    slept = []

    play(frames[:3], session.apply_frame, slept.append)
    assert session.info_message == "Not in word list"
    assert session.message_fading

    play(frames[3:], session.apply_frame, slept.append)
    assert session.info_message is None
    assert not session.message_fading
    assert sum(slept) == pytest.approx((MESSAGE_MS + FADE_MS) / 1000)


def test_dismissal_leaves_a_newer_message_alone(engine):
    session = GameSession(engine)
    old = type_line(session, "cra")
    session.clear_row()
    type_line(session, "zzzzz")

    play(old, session.apply_frame, lambda _: None)
    assert session.info_message == "Not in word list"


def test_rollout_records_each_submission(engine):
    session = GameSession(engine)
    type_line(session, "zzzzz")
    session.clear_row()
    type_line(session, "slate")

    steps = session.game_state["rollout"]["1"]["steps"]
    assert steps[0]["guess"] == "ZZZZZ"
    assert steps[0]["feedback"] == "Not in word list"
    assert steps[0]["keys"] == ["z"] * 5 + ["Enter"]
    assert steps[1]["guess"] == "SLATE"
    assert steps[1]["feedback"] == ["wrong", "wrong", "match", "wrong", "match"]
    assert steps[1]["keys"] == ["Backspace"] * 5 + list("slate") + ["Enter"]
    assert session.game_state["target_word"] == "CRANE"


def test_clear_row(engine):
    session = GameSession(engine)
    for key in "cra":
        session.press(key)
    session.clear_row()
    assert engine.current_text == ""
    assert engine.cursor == 0


def test_play_sleeps_between_frames(engine):
    session = GameSession(engine)
    frames = type_line(session, "crane")
    seen, slept = [], []
    play(frames, seen.append, slept.append)

    assert seen == list(frames)
    assert slept[0] == FOLD_MS / 1000
    # the win message is dismissed after the share dialog appears
    assert sum(slept) == pytest.approx((5 * 2 * FOLD_MS + MESSAGE_MS + FADE_MS) / 1000)


def test_session_logs_to_file(engine, tmp_path):
    game_logger = GameLogger(log_dir=tmp_path)
    session = GameSession(engine, game_logger)
    type_line(session, "zzzzz")
    session.clear_row()
    type_line(session, "crane")

    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.flush()
    contents = "".join(p.read_text(encoding="utf-8") for p in tmp_path.glob("game_log_*.log"))
    assert "REJECTED" in contents
    assert "SUBMISSION" in contents
    assert "game_won" in contents

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_cells_keep_their_states_after_reveal(engine):
    session = GameSession(engine)
    type_line(session, "train")
    assert engine.attempts[0].states == [
        LetterState.WRONG, LetterState.FULL_MATCH, LetterState.FULL_MATCH,
        LetterState.WRONG, LetterState.PARTIAL_MATCH,
    ]


def run_cli(monkeypatch, capsys, lines, *args):
    feed = iter(lines)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(feed))
    monkeypatch.setattr("wordgame.session.os.system", lambda cmd: 0)
    monkeypatch.delenv("WORDGAME_LOG_DIR", raising=False)
    main(["--target", "crane", "--no-animate", *args])
    return capsys.readouterr().out


def test_cli_win_after_rejection(monkeypatch, capsys):
    out = run_cli(monkeypatch, capsys, ["zzzzz", "crane"], "--dump-state")
    assert "Not in word list" in out
    assert WIN_MESSAGE in out
    assert "guessed 'CRANE' in 1 tries" in out
    assert '"won": true' in out


def test_cli_loss_reveals_target(monkeypatch, capsys):
    out = run_cli(monkeypatch, capsys, ["slate"], "--tries", "1")
    assert "Game over! The secret word was: CRANE" in out
    assert "⬜⬜\U0001F7E9⬜\U0001F7E9" in out


def test_cli_incomplete_line_does_not_leak_into_the_next(monkeypatch, capsys):
    out = run_cli(monkeypatch, capsys, ["cra", "crane"])
    assert "Please type all the letters" in out
    assert "Not in word list" not in out
    assert WIN_MESSAGE in out
    assert "guessed 'CRANE' in 1 tries" in out
