"""Word extraction: the primary word and cross words formed by a move."""

from typing import Iterable, List

from .board import Board
from .models import Direction, FormedWord, Move, Position


def move_direction(move: Move) -> Direction:
    """Declared direction, else inferred from the first two positions."""
    if move.direction:
        return move.direction
    if len(move.positions) < 2:
        return "horizontal"
    first, second = move.positions[0], move.positions[1]
    return "horizontal" if first.row == second.row else "vertical"


def perpendicular(direction: Direction) -> Direction:
    return "vertical" if direction == "horizontal" else "horizontal"


def collect_word_positions(board: Board, anchor: Position, direction: Direction) -> List[Position]:
    """
    Positions of the contiguous run of letters through ``anchor``.

    Walks backward from the anchor to the start of the run, then forward
    until an empty square. An empty anchor yields an empty list.
    """
    if not board.has_letter(anchor):
        return []
    dr, dc = (0, 1) if direction == "horizontal" else (1, 0)
    row, col = anchor
    while board.has_letter(Position(row - dr, col - dc)):
        row, col = row - dr, col - dc
    positions = []
    while board.has_letter(Position(row, col)):
        positions.append(Position(row, col))
        row, col = row + dr, col + dc
    return positions


def read_word(board: Board, positions: Iterable[Position]) -> str:
    return "".join(board.letter_at(pos).char for pos in positions)


def extract_word_from_board(board: Board, start: Position, direction: Direction) -> str:
    """The word running through ``start`` along ``direction``."""
    return read_word(board, collect_word_positions(board, start, direction))


def get_all_words_from_move(board: Board, move: Move) -> List[FormedWord]:
    """
    Words formed by ``move`` on a board that already holds its letters.

    The primary word runs through ``move.positions[0]`` along the move's
    direction. A cross word is read perpendicular through every move
    position, including squares that already held a letter. Only words of
    two or more letters are returned, primary first, and a cross word equal
    to the primary word in letters and squares is dropped.

    Args:
        board: Board with the move's letters present (projected or committed)
        move: The move

    Returns:
        List of formed words
    """
    if not move.positions:
        return []

    words: List[FormedWord] = []
    direction = move_direction(move)

    main_positions = collect_word_positions(board, move.positions[0], direction)
    main = FormedWord(word=read_word(board, main_positions), positions=tuple(main_positions))
    if len(main.word) > 1:
        words.append(main)

    cross_direction = perpendicular(direction)
    for pos in move.positions:
        cross_positions = collect_word_positions(board, pos, cross_direction)
        if len(cross_positions) <= 1:
            continue
        cross = FormedWord(word=read_word(board, cross_positions), positions=tuple(cross_positions))
        if cross.word == main.word and set(cross.positions) == set(main.positions):
            continue
        words.append(cross)

    return words
