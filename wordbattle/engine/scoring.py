"""Flat additive scoring: no letter or word multipliers."""

from typing import Sequence

from .board import Board
from .models import Move, Position
from .words import get_all_words_from_move


def calculate_word_score(word: str, positions: Sequence[Position], board: Board) -> int:
    """Sum of the points of the letters physically present at ``positions``."""
    score = 0
    for pos in positions[:len(word)]:
        letter = board.letter_at(pos)
        if letter is not None:
            score += letter.points
    return score


def score_move(board: Board, move: Move) -> int:
    """
    Total score of a move on a board that holds its letters.

    Every formed word is scored in full, so a letter shared by the primary
    word and a cross word counts once for each.
    """
    return sum(
        calculate_word_score(formed.word, formed.positions, board)
        for formed in get_all_words_from_move(board, move)
    )
