"""
Hangman - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise descriptive exceptions.
"""

import string
import unicodedata
from typing import Mapping, Sequence

from src.engine.errors import InputError, InputErrorReason


# Characters with no NFKD decomposition to a plain ASCII letter.
_SPECIAL_FOLDS = {
    "ø": "o",
    "æ": "ae",
    "œ": "oe",
    "ß": "ss",
    "ł": "l",
    "đ": "d",
}


def fold_accents(text: str) -> str:
    """
    Lowercase `text` and strip diacritics.

    Args:
        text: Raw text

    Returns:
        Folded text, e.g. "Café" -> "cafe"
    """
    lowered = text.lower()
    out: list[str] = []
    for ch in lowered:
        if ch in _SPECIAL_FOLDS:
            out.append(_SPECIAL_FOLDS[ch])
            continue
        decomposed = unicodedata.normalize("NFKD", ch)
        out.append("".join(c for c in decomposed if not unicodedata.combining(c)))
    return "".join(out)


def validate_guess(raw: object) -> str:
    """
    Validate and normalize a guessed letter.

    Args:
        raw: Whatever the presentation layer handed in

    Returns:
        A single lowercase ASCII letter

    Raises:
        InputError: With the specific reason the guess was rejected
    """
    if raw is None or not isinstance(raw, str):
        raise InputError(InputErrorReason.INVALID if raw is not None else InputErrorReason.EMPTY, raw)

    text = raw.strip()
    if not text:
        raise InputError(InputErrorReason.EMPTY, raw)

    first = text[0]
    if len(text) > 1:
        if first.isdigit():
            raise InputError(InputErrorReason.DIGIT, raw)
        raise InputError(InputErrorReason.MULTI_CHARACTER, raw)

    if first.isdigit():
        raise InputError(InputErrorReason.DIGIT, raw)
    if first in string.punctuation:
        raise InputError(InputErrorReason.PUNCTUATION, raw)

    folded = fold_accents(first)
    if len(folded) != 1 or folded not in string.ascii_lowercase:
        raise InputError(InputErrorReason.INVALID, raw)
    return folded


def validate_word(word: str) -> str:
    """
    Normalize a catalog word.

    Returns:
        The folded word with surrounding and repeated whitespace collapsed

    Raises:
        ValueError: If the word is empty, contains no letters, or has a
            letter that cannot be guessed
    """
    if not isinstance(word, str):
        raise ValueError(f"Word must be a string, got {type(word).__name__}.")
    cleaned = " ".join(fold_accents(word).split())
    unguessable = sorted({ch for ch in cleaned if ch.isalpha() and ch not in string.ascii_lowercase})
    if unguessable:
        raise ValueError(f"Word {word!r} has letters that cannot be guessed: {''.join(unguessable)}.")
    if not any(ch in string.ascii_lowercase for ch in cleaned):
        raise ValueError(f"Word {word!r} contains no letters.")
    return cleaned


def validate_catalog(raw: object) -> dict[str, dict[str, list[str]]]:
    """
    Validate and normalize a word catalog.

    Invalid words are dropped, duplicate words collapsed, and empty
    categories removed.

    Args:
        raw: Mapping of difficulty -> category -> words

    Returns:
        Normalized catalog

    Raises:
        ValueError: If nothing playable remains
    """
    if not isinstance(raw, Mapping):
        raise ValueError(f"Catalog must be a mapping, got {type(raw).__name__}.")

    catalog: dict[str, dict[str, list[str]]] = {}
    for difficulty, categories in raw.items():
        if not isinstance(categories, Mapping):
            continue
        cleaned: dict[str, list[str]] = {}
        for category, words in categories.items():
            if isinstance(words, str) or not isinstance(words, Sequence):
                continue
            valid: list[str] = []
            for word in words:
                try:
                    normalized = validate_word(word)
                except ValueError:
                    continue
                if normalized not in valid:
                    valid.append(normalized)
            if valid:
                cleaned[str(category).strip().lower()] = valid
        if cleaned:
            catalog[str(difficulty).strip().lower()] = cleaned

    if not catalog:
        raise ValueError("Catalog contains no playable words.")
    return catalog


def validate_player_names(names: Sequence[str]) -> list[str]:
    """
    Normalize multiplayer names, filling blanks with `Player N`.

    Raises:
        ValueError: If fewer than 2 players are given
    """
    if isinstance(names, str) or len(names) < 2:
        raise ValueError("Multiplayer requires at least 2 players.")
    return [
        (name or "").strip() or f"Player {index + 1}"
        for index, name in enumerate(names)
    ]


def validate_total_rounds(total_rounds: int | None) -> int | None:
    """Validate the multiplayer round limit (None = unlimited)."""
    if total_rounds is None:
        return None
    if not isinstance(total_rounds, int) or isinstance(total_rounds, bool):
        raise ValueError(f"Total rounds must be an integer, got {type(total_rounds).__name__}.")
    if total_rounds < 1:
        raise ValueError(f"Total rounds must be positive, got {total_rounds}.")
    return total_rounds


def validate_time_limit(time_limit: int) -> int:
    """Validate a timed-mode limit in milliseconds."""
    if not isinstance(time_limit, int) or isinstance(time_limit, bool):
        raise ValueError(f"Time limit must be an integer, got {type(time_limit).__name__}.")
    if time_limit <= 0:
        raise ValueError(f"Time limit must be positive, got {time_limit}.")
    return time_limit
