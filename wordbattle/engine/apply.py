"""Commit a validated move to the board and hand."""

from typing import List, Sequence
from pydantic import BaseModel, ConfigDict

from .board import Board
from .models import Letter, Move, Position
from .scoring import score_move


class ApplyResult(BaseModel):
    """New board, new hand and score for an applied move."""
    model_config = ConfigDict(frozen=True)

    new_board: Board
    new_hand: List[Letter]
    score: int
    placed: List[Position]


def take_tile(hand: List[Letter], char: str) -> Letter:
    """
    Remove and return the tile that plays ``char`` from ``hand``.

    An exact tile is preferred; otherwise a wildcard is spent and returned
    as a zero-point ``char``.

    Raises:
        ValueError: If neither is in the hand
    """
    for i, letter in enumerate(hand):
        if letter.char == char and not letter.is_wildcard:
            return hand.pop(i)
    for i, letter in enumerate(hand):
        if letter.is_wildcard:
            hand.pop(i)
            return Letter(char=char, points=0, is_wildcard=True)
    raise ValueError(f"No tile for '{char}' in hand")


def apply_move(board: Board, move: Move, hand: Sequence[Letter]) -> ApplyResult:
    """
    Place a validated move.

    Empty squares take a tile from the hand; occupied squares are left
    alone. The score is computed on the resulting board. ``board`` and
    ``hand`` are not modified.

    Args:
        board: Board the move was validated against
        move: The validated move
        hand: The acting player's tiles

    Returns:
        ApplyResult with the new board, the remaining hand, the move score
        and the squares that received tiles

    Raises:
        ValueError: If the move does not fit the board or hand
    """
    if len(move.word) != len(move.positions):
        raise ValueError("Word length does not match positions")

    new_hand = list(hand)
    placements = {}
    for pos, char in zip(move.positions, move.word):
        if not board.in_bounds(pos):
            raise ValueError(f"Position ({pos.row}, {pos.col}) is off the board")
        existing = board.letter_at(pos)
        if existing is not None:
            if existing.char != char:
                raise ValueError(f"Square ({pos.row}, {pos.col}) already holds {existing.char}")
            continue
        placements[pos] = take_tile(new_hand, char)

    placed = list(placements)
    new_board = board.with_letters(placements, newly_placed=True)
    score = score_move(new_board, move)
    return ApplyResult(
        new_board=new_board.clear_new_flags(),
        new_hand=new_hand,
        score=score,
        placed=placed,
    )
