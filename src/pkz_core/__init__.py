"""PKZ audio - Shared protocol and naming."""
from .names import is_word_byte, is_valid_name, wem_name

__all__ = ["is_word_byte", "is_valid_name", "wem_name"]
