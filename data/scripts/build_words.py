import os
import sys
import json
import argparse

import spacy
import inflect
from wordfreq import zipf_frequency

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, '..', '..'))
DEFAULT_OUTPUT = os.path.join(PROJECT_ROOT, "wordgame", "data", "words.txt")

ZIPF_FREQUENCY_THRESHOLD = 2.5


def is_regular_plural(tok, p) -> bool:
    """True for nouns that are just their singular form plus 's' or 'es'."""
    if tok.pos_ not in ("NOUN", "PROPN"):
        return False
    word = tok.text.lower()
    singular_form = p.singular_noun(word)
    if not singular_form:
        return False
    return (singular_form + 's') == word or (singular_form + 'es') == word


def build_word_list(raw_path, output_path, word_length=5, threshold=ZIPF_FREQUENCY_THRESHOLD):
    """
    Builds the game word list from a raw list of words.

    The process is as follows:
    1.  Read the raw words, keeping alphabetic words of the requested length.
    2.  Drop regular plural nouns (CHAIRS, BOXES) which make poor targets.
    3.  Drop obscure words below a Zipf frequency threshold.
    4.  Save the remaining words, most frequent first, one per line in uppercase.
    5.  Save a JSON summary next to the output file.
    """
    # --- Step 1: Read the raw list ---
    try:
        with open(raw_path, 'r') as f:
            raw_words = {line.strip().upper() for line in f if line.strip()}
    except FileNotFoundError:
        print(f"Error: Raw word file not found at '{raw_path}'.", file=sys.stderr)
        sys.exit(1)

    candidates = sorted(w for w in raw_words if len(w) == word_length and w.isalpha())
    print(f"Found {len(candidates)} {word_length}-letter candidates out of {len(raw_words)} raw words.")

    # --- Step 2: Plural filter, applied to nouns only ---
    print("\nLoading spaCy model and filtering plurals... (This may take a moment)")
    try:
        nlp = spacy.load("en_core_web_sm", disable=["ner", "parser"])
    except OSError:
        print("\n--- SpaCy Model Not Found ---", file=sys.stderr)
        print("Please download it by running: python -m spacy download en_core_web_sm", file=sys.stderr)
        sys.exit(1)

    p = inflect.engine()
    kept, rejected_plurals = [], []
    for doc in nlp.pipe([w.lower() for w in candidates], batch_size=1000):
        tok = doc[0]
        if is_regular_plural(tok, p):
            rejected_plurals.append(tok.text.upper())
        else:
            kept.append(tok.text.upper())
    print(f"Retained {len(kept)} words after removing {len(rejected_plurals)} plural nouns.")

    # --- Step 3: Frequency filter ---
    print(f"\nFiltering words with Zipf frequency < {threshold}...")
    with_freq = [(w, zipf_frequency(w.lower(), "en")) for w in kept]
    with_freq = [(w, freq) for w, freq in with_freq if freq >= threshold]
    with_freq.sort(key=lambda x: x[1], reverse=True)
    print(f"Retained {len(with_freq)} words after frequency filter.")

    # --- Step 4: Save the list ---
    os.makedirs(os.path.dirname(output_path), exist_ok=True)
    try:
        with open(output_path, 'w') as f:
            for word, _ in with_freq:
                f.write(f"{word}\n")
        print(f"Saved {len(with_freq)} words to '{output_path}'.")
    except IOError as e:
        print(f"Error writing to '{output_path}': {e}", file=sys.stderr)
        sys.exit(1)

    # --- Step 5: Summary ---
    summary_stats = {
        "parameters": {
            "word_length": word_length,
            "zipf_frequency_threshold": threshold,
        },
        "counts": {
            "raw_words": len(raw_words),
            "candidates": len(candidates),
            "removed_plural_nouns": len(rejected_plurals),
            "final_word_list": len(with_freq),
        },
        "zipf_frequency_range": f"{with_freq[0][1]:.2f} - {with_freq[-1][1]:.2f}" if with_freq else "N/A",
    }
    summary_filepath = os.path.splitext(output_path)[0] + "_summary.json"
    try:
        with open(summary_filepath, 'w') as f:
            json.dump(summary_stats, f, indent=4)
        print(f"\nSummary saved to '{summary_filepath}'.")
    except IOError as e:
        print(f"Error writing summary file '{summary_filepath}': {e}", file=sys.stderr)


def main():
    parser = argparse.ArgumentParser(description="Build the game word list from a raw word file.")
    parser.add_argument('raw_path', help="Raw word file, one word per line.")
    parser.add_argument('--output', default=DEFAULT_OUTPUT, help="Where to write the word list.")
    parser.add_argument('--length', type=int, default=5, help="Word length to keep.")
    parser.add_argument('--threshold', type=float, default=ZIPF_FREQUENCY_THRESHOLD, help="Minimum Zipf frequency.")
    args = parser.parse_args()
    build_word_list(args.raw_path, args.output, args.length, args.threshold)


if __name__ == "__main__":
    main()
