import os
from html import escape
from pathlib import Path
from typing import Optional, List, TYPE_CHECKING

from .engine import LetterState

# forward reference only, the session module imports this one
if TYPE_CHECKING:
    from .engine import GameEngine

# --- Constants and Paths ---
ASSETS_DIR = Path(__file__).parent / 'assets'
TEMPLATE_PATH = ASSETS_DIR / 'template.html'
CSS_PATH = ASSETS_DIR / 'styles.css'
SCREENSHOTS_DIR = Path('logs')

KEYBOARD_ROWS = [
    ['Q', 'W', 'E', 'R', 'T', 'Y', 'U', 'I', 'O', 'P'],
    ['A', 'S', 'D', 'F', 'G', 'H', 'J', 'K', 'L'],
    ['Enter', 'Z', 'X', 'C', 'V', 'B', 'N', 'M', 'Backspace'],
]


def key_class(engine: 'GameEngine', key: str) -> str:
    """CSS classes for an on-screen key, tinted by the best state seen for it."""
    if len(key) != 1:
        return 'key wide'
    state = engine.key_state_for(key)
    if state is None:
        return 'key'
    return f'{state.value} key'


# --- Text-based UI Class ---
class TextUI:
    def __init__(self):
        self.feedback_char_map = {
            LetterState.FULL_MATCH: "G",
            LetterState.PARTIAL_MATCH: "Y",
            LetterState.WRONG: "X",
            LetterState.PENDING: " ",
        }

    def print_welcome(self, engine: 'GameEngine'):
        print("Wordgame!")
        print(f"Guess the {engine.word_length}-letter word in {engine.num_tries} tries.")
        print(f"Feedback: [{self.feedback_char_map[LetterState.FULL_MATCH]}] Correct spot, "
              f"[{self.feedback_char_map[LetterState.PARTIAL_MATCH]}] Elsewhere, "
              f"[{self.feedback_char_map[LetterState.WRONG]}] Not in word.")
        print("-" * 50)

    def get_input(self, engine: 'GameEngine') -> str:
        attempt_num = engine.num_submitted + 1
        remaining = engine.num_tries - engine.num_submitted
        typed = engine.current_text
        prompt = f"Attempt #{attempt_num} ({remaining} left). Enter your guess: {typed}"
        return input(prompt).strip().upper()

    def get_text_observation(self, engine: 'GameEngine', message: Optional[str] = None) -> str:
        board_str = self.get_board_string(engine)
        letters_str = self.get_keyboard_string(engine)
        status_message = f"{message}\n\n" if message else ""
        return f"{status_message}{board_str}\n{letters_str}"

    def print_game_over(self, engine: 'GameEngine', player_name: str = "You"):
        print("\n" + "=" * 50)
        if engine.won:
            print(f"{player_name} guessed '{engine.target_word}' in {engine.num_submitted} tries!")
        else:
            print(f"Game over! The secret word was: {engine.target_word}")
        print("=" * 50)

    def get_board_string(self, engine: 'GameEngine', shake_row: Optional[int] = None) -> str:
        width = engine.word_length
        lines = ["=" * (width + 2)]
        for i, attempt in enumerate(engine.attempts):
            word = "".join(cell.text.upper() or " " for cell in attempt.cells)
            feedback = "".join(self.feedback_char_map[state] for state in attempt.states)
            marker = "  <- not in word list" if i == shake_row else ""
            lines.append(f"|{word}|{marker}")
            lines.append(f"|{feedback}|")
            if i < engine.num_tries - 1:
                lines.append("-" * (width + 2))
        lines.append("=" * (width + 2))
        return "\n".join(lines)

    def get_keyboard_string(self, engine: 'GameEngine') -> str:
        groups = {state: [] for state in (LetterState.FULL_MATCH, LetterState.PARTIAL_MATCH, LetterState.WRONG)}
        unused = []
        for row in KEYBOARD_ROWS:
            for key in row:
                if len(key) != 1:
                    continue
                state = engine.key_state_for(key)
                if state is None:
                    unused.append(key)
                else:
                    groups[state].append(key)

        lines = ["\nLetters:"]
        lines.append(f"  Correct: {' '.join(sorted(groups[LetterState.FULL_MATCH]))}")
        lines.append(f"  Present: {' '.join(sorted(groups[LetterState.PARTIAL_MATCH]))}")
        lines.append(f"  Absent:  {' '.join(sorted(groups[LetterState.WRONG]))}")
        lines.append(f"  Unused:  {' '.join(sorted(unused))}")
        return "\n".join(lines)


# --- Screenshot and HTML generation ---
def generate_html(engine: 'GameEngine', info_message: Optional[str] = None, shake_row: Optional[int] = None) -> str:
    message_html = ''
    if info_message:
        message_html = f'<div class="info-msg">{escape(info_message)}</div>'

    grid_html = ''
    for r, attempt in enumerate(engine.attempts):
        row_cls = 'try-container shake' if r == shake_row else 'try-container'
        grid_html += f'<div class="{row_cls}">'
        for cell in attempt.cells:
            cls = 'letter-container'
            if cell.text:
                cls += ' has-text'
            if cell.state is not LetterState.PENDING:
                cls += f' {cell.state.value}'
            grid_html += f'<div class="{cls}">{escape(cell.text.upper())}</div>'
        grid_html += '</div>'

    keyboard_html = ''
    for row in KEYBOARD_ROWS:
        keyboard_html += '<div class="keyboard-row">'
        for key in row:
            label = '&#9003;' if key == 'Backspace' else escape(key)
            keyboard_html += f'<button class="{key_class(engine, key)}">{label}</button>'
        keyboard_html += '</div>'

    with open(TEMPLATE_PATH, 'r', encoding='utf-8') as f:
        html_template = f.read()
    return html_template.format(grid_html=grid_html, keyboard_html=keyboard_html, message_html=message_html)


def render_screenshot(
    engine: 'GameEngine',
    info_message: Optional[str] = None,
    shake_row: Optional[int] = None,
    output_path: Optional[Path] = None
) -> Optional[bytes]:
    """
    Renders the board as a PNG and returns its bytes.
    If output_path is provided, the image is also saved there.
    """
    try:
        from html2image import Html2Image
    except ImportError:
        print("\n[ERROR] html2image is not installed. To render images, run: 'pip install html2image'")
        return None

    html = generate_html(engine, info_message, shake_row)
    with open(CSS_PATH, 'r', encoding='utf-8') as f:
        css = f.read()

    temp_dir = SCREENSHOTS_DIR / ".temp"
    os.makedirs(temp_dir, exist_ok=True)

    hti = Html2Image(custom_flags=['--disable-gpu', '--no-sandbox', '--headless=new', '--log-level=3'], output_path=str(temp_dir))

    temp_files: List[str] = hti.screenshot(html_str=html, css_str=css, size=(500, 900))
    if not temp_files:
        return None

    temp_file_path = Path(temp_files[0])
    with open(temp_file_path, 'rb') as f:
        image_bytes = f.read()

    if output_path:
        os.makedirs(output_path.parent, exist_ok=True)
        temp_file_path.rename(output_path)
    else:
        os.remove(temp_file_path)

    return image_bytes
