"""
Runtime settings, read from environment variables (and a local .env file).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .engine import NUM_TRIES, WORD_LENGTH
from .words import DEFAULT_WORD_LIST_PATH

load_dotenv()


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    word_length: int = WORD_LENGTH
    num_tries: int = NUM_TRIES
    word_list_path: Path = DEFAULT_WORD_LIST_PATH
    # fixed seed makes target selection reproducible
    seed: Optional[int] = None
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    animate: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        log_dir = os.getenv("WORDGAME_LOG_DIR")
        return cls(
            word_length=_int_env("WORDGAME_WORD_LENGTH", WORD_LENGTH),
            num_tries=_int_env("WORDGAME_NUM_TRIES", NUM_TRIES),
            word_list_path=Path(os.getenv("WORDGAME_WORD_LIST", str(DEFAULT_WORD_LIST_PATH))),
            seed=_int_env("WORDGAME_SEED", None),
            log_level=os.getenv("WORDGAME_LOG_LEVEL", "INFO").upper(),
            log_dir=Path(log_dir) if log_dir else None,
            animate=_bool_env("WORDGAME_ANIMATE", True),
        )
