"""Word Battle: a crossword-style two-player word-building game engine."""

__version__ = "0.1.0"
