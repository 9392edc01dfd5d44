from pathlib import Path
from typing import List, Sequence

DEFAULT_WORD_LIST_PATH = Path(__file__).parent / 'data' / 'words.txt'


def load_word_list(path: Path = DEFAULT_WORD_LIST_PATH) -> List[str]:
    """
    Reads a word list with one word per line.

    Words are uppercased and de-duplicated with their order kept. Blank lines
    and anything that is not purely alphabetic are skipped. Lengths are left
    alone, the engine rejects wrong-length words when it picks a target.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Error: Word list not found at '{path}'")

    seen = set()
    words = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            word = line.strip().upper()
            if not word or not word.isalpha() or word in seen:
                continue
            seen.add(word)
            words.append(word)

    if not words:
        raise ValueError(f"Word list at '{path}' is empty.")
    return words


def words_of_length(words: Sequence[str], length: int) -> List[str]:
    return [word for word in words if len(word) == length]
