"""
Hangman - Engine Errors

Every failure the engine can report. Only SelectionError ever escapes to the
caller; the rest are recovered where they are raised.
"""

from enum import Enum


class HangmanError(Exception):
    """Base class for all engine errors."""


class InputErrorReason(Enum):
    """Why a guess was rejected."""
    EMPTY = "empty"
    DIGIT = "digit"
    PUNCTUATION = "punctuation"
    MULTI_CHARACTER = "multi_character"
    INVALID = "invalid"


_MESSAGES = {
    InputErrorReason.EMPTY: "Please enter a letter.",
    InputErrorReason.DIGIT: "Numbers are not allowed. Please enter a letter.",
    InputErrorReason.PUNCTUATION: "Special characters are not allowed. Please enter a letter.",
    InputErrorReason.MULTI_CHARACTER: "Please enter only one letter at a time.",
    InputErrorReason.INVALID: "Invalid character. Please enter a letter (A-Z).",
}


class InputError(HangmanError, ValueError):
    """A guess that is not a single alphabetic character."""

    def __init__(self, reason: InputErrorReason, raw: object = None) -> None:
        self.reason = reason
        self.raw = raw
        super().__init__(_MESSAGES[reason])

    @property
    def message(self) -> str:
        return _MESSAGES[self.reason]


class SelectionError(HangmanError):
    """The word selector exhausted every fallback."""


class DataError(HangmanError):
    """A persisted structure failed validation."""

    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        self.detail = detail
        super().__init__(f"Invalid data for {key!r}: {detail}")


class StorageError(HangmanError):
    """A persistence write failed."""


class CatalogLoadError(HangmanError):
    """The word catalog could not be obtained."""
