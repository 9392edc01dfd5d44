import re
import os
import json
import random
from pathlib import Path
from typing import List, Dict, Optional, Sequence, Tuple, Any
from enum import Enum

from dotenv import load_dotenv
from litellm import completion, get_supported_openai_params

from wordgame import GameEngine, GameSession, TextUI, load_word_list
from wordgame.config import Settings
from wordgame.log import GameLogger
from wordgame.words import words_of_length

load_dotenv()

FALLBACK_GUESS = "RAISE"
# consecutive rejected guesses before the agent is stopped
MAX_REJECTED_GUESSES = 10


class ReasoningEffort(Enum):
    DISABLE = "disable"
    LOW     = "low"
    MEDIUM  = "medium"
    HIGH    = "high"


def colored(st, color: Optional[str], background=False): return f"\u001b[{10*background+60*(color.upper() == color)+30+['black', 'red', 'green', 'yellow', 'blue', 'magenta', 'cyan', 'white'].index(color.lower())}m{st}\u001b[0m" if color is not None else st


def query(
    model: str,
    reasoning_effort: Optional[ReasoningEffort],
    messages: List[Dict[str, Any]],
) -> Tuple[str, Optional[str], Any]:
    if reasoning_effort is not None:
        response = completion(model=model, messages=messages, reasoning_effort=reasoning_effort.value)
    else:
        response = completion(model=model, messages=messages)
    answer = response.choices[0].message.content
    cot = getattr(response.choices[0].message, "reasoning_content", None)
    token_usage = response.usage
    return answer, cot, token_usage


def parse_guess(answer: Optional[str], word_length: int) -> Optional[str]:
    """Pulls the first bracketed guess, e.g. '[CRANE]', out of a model answer."""
    if not answer:
        return None
    match = re.search(r'\[([A-Z]{%d})\]' % word_length, answer.upper())
    return match.group(1) if match else None


def pick_fallback(words: Sequence[str], word_length: int) -> str:
    """Guess used when the model answer has none: RAISE if it fits, else the first word of the right length."""
    if len(FALLBACK_GUESS) == word_length and FALLBACK_GUESS in words:
        return FALLBACK_GUESS
    candidates = words_of_length(words, word_length)
    return candidates[0] if candidates else FALLBACK_GUESS


def play_wordgame(model: str, reasoning_effort: ReasoningEffort, target_word: Optional[str] = None, logging_enabled: bool = True):
    """
    Plays one game with an LLM agent typing its guesses key by key.

    Args:
        model (str): The identifier of the model to use.
        reasoning_effort (ReasoningEffort): The reasoning effort setting for the model.
        target_word (str): The secret word, random when None.
        logging_enabled (bool): If True, saves the game record and conversation to disk.
    """
    settings = Settings.from_env()
    game_logger = GameLogger(log_dir=settings.log_dir, level=settings.log_level)

    engine = GameEngine(
        load_word_list(settings.word_list_path),
        word_length=settings.word_length,
        num_tries=settings.num_tries,
        rng=random.Random(settings.seed),
        target=target_word,
    )
    session = GameSession(engine, game_logger)
    ui = TextUI()

    print(colored("=" * 30, "blue"))
    print(colored("Let's Play Wordgame with an LLM!", "cyan"))
    print(f"{colored('Model:', 'magenta')} {colored(model, 'yellow')}")
    print(f"{colored('Target Word:', 'magenta')} {colored(engine.target_word, 'yellow')}")
    print(f"{colored('Logging:', 'magenta')} {colored('Enabled' if logging_enabled else 'Disabled', 'yellow')}")
    print(colored("=" * 30, "blue"))

    game_log_dir: Optional[Path] = None
    if logging_enabled:
        model_dir_name = model.replace('/', '_')
        game_log_dir = Path("logs") / model_dir_name / session.game_id
        os.makedirs(game_log_dir, exist_ok=True)
        print(colored(f"Logs for this game will be saved to: {game_log_dir}", "blue"))

    system_prompt = {"role": "system", "content": (
        f"You are an expert word-guessing player. Your objective is to guess a {engine.word_length}-letter "
        f"secret word in {engine.num_tries} tries. After each guess I will show you the board, where "
        "G marks a letter in the right spot, Y a letter elsewhere in the word and X a letter that is not in it. "
        f"Your response MUST contain a single valid {engine.word_length}-letter English word "
        "enclosed in square brackets, like [WORD]."
    )}
    messages: List[Dict[str, Any]] = [system_prompt]

    observation_text = ui.get_text_observation(engine)
    print(observation_text)
    messages.append({"role": "user", "content": f"Here is the initial state:\n{observation_text}\n\nWhat is your first guess?"})

    fallback_guess = pick_fallback(engine.words, engine.word_length)
    rejected_in_a_row = 0

    while not engine.is_over:
        supported_params = get_supported_openai_params(model=model) or []
        current_reasoning_effort = reasoning_effort if "reasoning_effort" in supported_params else None

        answer, thoughts, _ = query(model, current_reasoning_effort, messages)

        guess = parse_guess(answer, engine.word_length)
        if guess is None:
            print(colored(f"LLM returned an invalid response: '{answer}'. Defaulting to '{fallback_guess}'.", "red"))
            guess = fallback_guess

        if thoughts: print(colored("\n[chain-of-thought]", "yellow"), f"\n{thoughts}")

        print(f"\n{colored(f'LLM Guess ({engine.num_submitted + 1}/{engine.num_tries}):', 'cyan')} {colored(guess, 'yellow')}")
        print(30*"-", "\n")
        messages.append({"role": "assistant", "content": f"[{guess}]"})

        session.type_word(list(guess) + ["Enter"])
        message = None
        if session.shake_row is not None or engine.current_text:
            # rejected, start the next guess on an empty row
            message = f"Invalid Guess: {session.info_message}"
            session.clear_row()
            rejected_in_a_row += 1
        else:
            rejected_in_a_row = 0

        observation_text = ui.get_text_observation(engine, message=message)
        print(observation_text)
        if engine.is_over:
            break
        if rejected_in_a_row >= MAX_REJECTED_GUESSES:
            print(colored(f"Stopping after {rejected_in_a_row} rejected guesses in a row.", "red"))
            break

        messages.append({"role": "user", "content": f"Here is the current state:\n{observation_text}\n\nWhat is your next guess?"})

    print(colored("=" * 30, "blue"))
    agent_name = f"{model} with {reasoning_effort.value} reasoning"
    if engine.won:
        print(colored(f"{agent_name} won! Guessed '{engine.target_word}' in {engine.num_submitted} tries.", "green"))
    else:
        print(colored(f"{agent_name} lost. The word was '{engine.target_word}'.", "red"))
    print(engine.export_result_grid())

    if logging_enabled and game_log_dir:
        print(colored("-" * 30, "blue"))

        game_state_filepath = game_log_dir / "game_state.json"
        try:
            with open(game_state_filepath, 'w') as f:
                json.dump(session.game_state, f, indent=4)
            print(colored(f"Game state log saved to: {game_state_filepath}", "green"))
        except OSError as e:
            print(colored(f"Error saving game state file: {e}", "red"))

        log_filepath = game_log_dir / "conversation.json"
        try:
            with open(log_filepath, 'w') as f:
                json.dump(messages, f, indent=4)
            print(colored(f"Conversation log saved to: {log_filepath}", "green"))
        except OSError as e:
            print(colored(f"Error saving conversation log: {e}", "red"))

    print(colored("=" * 30, "blue"))


if __name__ == "__main__":
    params = {
        "model": "gemini/gemini-2.5-flash-lite",
        # "model": "groq/openai/gpt-oss-120b",
        "reasoning_effort": ReasoningEffort.LOW,
        "target_word": None,
        "logging_enabled": True
    }
    play_wordgame(**params)
