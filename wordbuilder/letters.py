"""Letter helpers for presenting prefix/suffix sets."""

from __future__ import annotations
from typing import Iterable

VOWELS = frozenset("aeiou")


def is_vowel(letter: str) -> bool:
    return letter.lower() in VOWELS


def split_letters(letters: Iterable[str]) -> tuple[list[str], list[str]]:
    """Sort letters and split them into (vowels, consonants)."""
    ordered = sorted(letters)
    vowels = [letter for letter in ordered if is_vowel(letter)]
    consonants = [letter for letter in ordered if not is_vowel(letter)]
    return vowels, consonants
