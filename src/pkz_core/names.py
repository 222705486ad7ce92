"""PKZ audio - Name token helpers."""
from __future__ import annotations

from .protocol import NAME_REQUIRED_CHAR, WEM_SUFFIX

_WORD_BYTES = frozenset(
    b"abcdefghijklmnopqrstuvwxyz"
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    b"0123456789_"
)


def is_word_byte(b: int) -> bool:
    """ASCII letter, digit or underscore."""
    return b in _WORD_BYTES


def is_valid_name(token: str) -> bool:
    """Accept a recovered token only if it follows the underscore naming convention."""
    return bool(token) and NAME_REQUIRED_CHAR in token


def wem_name(token: str) -> str:
    return token + WEM_SUFFIX
