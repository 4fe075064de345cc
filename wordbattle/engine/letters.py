"""Letter values, the tile distribution, and seeded drawing."""

import random
from typing import Dict, List, NamedTuple, Optional

from .models import Letter


class LetterSpec(NamedTuple):
    count: int
    points: int


# Letter distribution based on English frequency (98 tiles)
LETTER_CONFIG: Dict[str, LetterSpec] = {
    "A": LetterSpec(9, 1), "B": LetterSpec(2, 3), "C": LetterSpec(2, 3),
    "D": LetterSpec(4, 2), "E": LetterSpec(12, 1), "F": LetterSpec(2, 4),
    "G": LetterSpec(3, 2), "H": LetterSpec(2, 4), "I": LetterSpec(9, 1),
    "J": LetterSpec(1, 8), "K": LetterSpec(1, 5), "L": LetterSpec(4, 1),
    "M": LetterSpec(2, 3), "N": LetterSpec(6, 1), "O": LetterSpec(8, 1),
    "P": LetterSpec(2, 3), "Q": LetterSpec(1, 10), "R": LetterSpec(6, 1),
    "S": LetterSpec(4, 1), "T": LetterSpec(6, 1), "U": LetterSpec(4, 1),
    "V": LetterSpec(2, 4), "W": LetterSpec(2, 4), "X": LetterSpec(1, 8),
    "Y": LetterSpec(2, 4), "Z": LetterSpec(1, 10),
}

VOWELS = frozenset("AEIOU")
WILDCARD = "?"


def letter_points(char: str) -> int:
    """Point value of a letter; unknown characters are worth nothing."""
    spec = LETTER_CONFIG.get(char.upper())
    return spec.points if spec else 0


def make_letter(char: str) -> Letter:
    """Build a tile for ``char`` with its standard point value."""
    return Letter(char=char, points=letter_points(char))


def make_wildcard() -> Letter:
    return Letter(char=WILDCARD, points=0, is_wildcard=True)


def create_letter_distribution() -> List[Letter]:
    """The full tile set, in alphabetical order."""
    distribution: List[Letter] = []
    for char, spec in LETTER_CONFIG.items():
        distribution.extend(Letter(char=char, points=spec.points) for _ in range(spec.count))
    return distribution


def shuffle_letters(letters: List[Letter], rng: Optional[random.Random] = None) -> List[Letter]:
    """Return a shuffled copy of ``letters``; the input is left untouched."""
    shuffled = list(letters)
    (rng or random.Random()).shuffle(shuffled)
    return shuffled


def draw_letters(
    count: int,
    distribution: List[Letter],
    rng: Optional[random.Random] = None,
) -> List[Letter]:
    """
    Draw up to ``count`` tiles from a shuffled copy of ``distribution``.

    Args:
        count: Number of tiles wanted
        distribution: Tiles to draw from (not modified)
        rng: Random source; pass a seeded one for reproducible draws

    Returns:
        ``min(count, len(distribution))`` tiles
    """
    if count <= 0:
        return []
    return shuffle_letters(distribution, rng)[:count]


def hand_counts(hand: List[Letter]) -> Dict[str, int]:
    """Count the non-wildcard tiles in a hand by letter."""
    counts: Dict[str, int] = {}
    for letter in hand:
        if not letter.is_wildcard:
            counts[letter.char] = counts.get(letter.char, 0) + 1
    return counts
