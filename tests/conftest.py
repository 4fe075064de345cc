"""Shared fixtures for the Word Battle test suite."""

import pytest

from wordbattle.engine import Dictionary, Position, create_empty_board, make_letter


@pytest.fixture
def empty_board():
    """An empty 8x8 board; the center is (4, 4)."""
    return create_empty_board()


@pytest.fixture
def cat_board(empty_board):
    """CAT across row 4, columns 3-5, through the center."""
    return empty_board.with_letters({
        Position(4, 3): make_letter("C"),
        Position(4, 4): make_letter("A"),
        Position(4, 5): make_letter("T"),
    })


@pytest.fixture
def make_hand():
    """Build a hand of tiles from a string of letters."""
    def build(letters: str):
        return [make_letter(char) for char in letters]
    return build


@pytest.fixture
def words():
    """Build a small in-memory dictionary."""
    def build(*entries: str) -> Dictionary:
        return Dictionary(entries)
    return build
