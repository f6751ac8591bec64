"""Diacritic folding for matching and collation."""

import unicodedata


def fold_diacritics(text: str) -> str:
    """Strip accents per character, keeping the string length unchanged.

    Spans found in the folded string index the same characters in ``text``
    as long as ``text`` is NFC-normalized.
    """
    return "".join(_fold_char(c) for c in text)


def _fold_char(character: str) -> str:
    decomposed = unicodedata.normalize("NFD", character)
    if len(decomposed) > 1 and not unicodedata.combining(decomposed[0]):
        return decomposed[0]
    return character


def collation_key(text: str) -> tuple[str, str, str]:
    """Sort key approximating locale-aware ordering for titles.

    Accent- and case-insensitive first, then case-insensitive, then exact,
    so "árbol" sorts beside "arbol" and before "Banco".
    """
    normalized = unicodedata.normalize("NFC", text)
    folded = normalized.casefold()
    return fold_diacritics(folded), folded, normalized
