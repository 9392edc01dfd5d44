"""
Game event logging.

Events are written as JSON entries so a game can be replayed or summarised
from its log. Console output is limited to warnings and errors.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

LOGGER_NAME = 'wordgame'


class GameLogger:
    """
    Thin wrapper around the 'wordgame' logger.

    Features:
    - optional dated log file under log_dir
    - key presses at DEBUG, submissions and game results at INFO
    - rejected submissions at INFO, they are normal play
    """

    def __init__(self, log_dir: Optional[Path] = None, level: str = "INFO"):
        self.log_dir = Path(log_dir) if log_dir else None
        self.level = getattr(logging, level.upper(), logging.INFO)
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(self.level)

        # prevent duplicate handlers when several sessions are created
        if logger.handlers:
            logger.handlers.clear()

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            log_file = self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(self.level)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            logger.addHandler(file_handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        logger.addHandler(console_handler)

        return logger

    def _entry(self, event_type: str, action: str, game_id: Optional[str], details: Dict[str, Any]) -> str:
        return json.dumps({
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'game_id': game_id,
            'details': details,
        }, ensure_ascii=False)

    def log_key(self, game_id: Optional[str], key: str, cursor: int):
        self.logger.debug(self._entry('KEY', 'press', game_id, {'key': key, 'cursor': cursor}))

    def log_submission(self, game_id: Optional[str], attempt_index: int, word: str, states: List[str], outcome: str):
        self.logger.info(self._entry('SUBMISSION', outcome, game_id, {
            'attempt': attempt_index,
            'word': word,
            'states': states,
        }))

    def log_rejection(self, game_id: Optional[str], error: Exception, word: str):
        self.logger.info(self._entry('REJECTED', type(error).__name__, game_id, {
            'word': word,
            'message': str(error),
        }))

    def log_game_event(self, game_id: Optional[str], event: str, **kwargs):
        """
        Logs the end of a game ('game_won', 'game_lost') or other one-off events.
        """
        self.logger.info(self._entry('GAME_EVENT', event, game_id, kwargs))

    def log_error(self, game_id: Optional[str], error: Exception, action: str):
        self.logger.error(self._entry('ERROR', action, game_id, {
            'error_type': type(error).__name__,
            'error_message': str(error),
        }))
