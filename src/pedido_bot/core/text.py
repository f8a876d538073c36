"""
Text helpers shared by catalog matching and entity extraction.
"""

import re
import unicodedata

_WORD_PATTERN = re.compile(r"[a-z0-9]+")


def normalize(text: str) -> str:
    """Lower-case text and strip diacritics ("Lácteos" -> "lacteos")."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def tokenize(text: str, min_length: int = 0) -> list[str]:
    """
    Split text into normalized alphanumeric words.

    Args:
        text: Raw text
        min_length: Only keep words strictly longer than this

    Returns:
        Words in their original order
    """
    return [w for w in _WORD_PATTERN.findall(normalize(text)) if len(w) > min_length]

