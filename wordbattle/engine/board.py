"""
Board model.

A board is an immutable grid of cells. Updates go through ``with_cells`` /
``with_letters``, which return a new board that shares every row the update
did not touch, so projecting a hypothetical move never copies the whole grid.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from pydantic import BaseModel, Field, ConfigDict

from .letters import make_letter
from .models import Cell, Letter, Position


BOARD_SIZE = 8

ADJACENT_OFFSETS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


class Board(BaseModel):
    """
    Rectangular grid of cells with exactly one center cell.

    Attributes:
        width: Number of columns
        height: Number of rows
        cells: Row-major tuple of rows
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=BOARD_SIZE, ge=1)
    height: int = Field(default=BOARD_SIZE, ge=1)
    cells: Tuple[Tuple[Cell, ...], ...] = ()

    @property
    def center(self) -> Position:
        return Position(self.height // 2, self.width // 2)

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos[0] < self.height and 0 <= pos[1] < self.width

    def cell(self, pos: Position) -> Cell:
        """Cell at ``pos``. Raises ValueError outside the board."""
        if not self.in_bounds(pos):
            raise ValueError(f"Position {tuple(pos)} is outside the {self.height}x{self.width} board")
        return self.cells[pos[0]][pos[1]]

    def letter_at(self, pos: Position) -> Optional[Letter]:
        """Letter at ``pos``, or None for an empty or off-board square."""
        if not self.in_bounds(pos):
            return None
        return self.cells[pos[0]][pos[1]].letter

    def has_letter(self, pos: Position) -> bool:
        return self.letter_at(pos) is not None

    def occupied(self) -> Iterator[Tuple[Position, Letter]]:
        """Yield every placed letter in row-major order."""
        for r, row in enumerate(self.cells):
            for c, cell in enumerate(row):
                if cell.letter is not None:
                    yield Position(r, c), cell.letter

    @property
    def is_empty(self) -> bool:
        return next(self.occupied(), None) is None

    def with_cells(self, updates: Dict[Position, Cell]) -> "Board":
        """Return a new board with the given cells replaced."""
        if not updates:
            return self
        rows = list(self.cells)
        touched: Dict[int, List[Cell]] = {}
        for pos, cell in updates.items():
            row = touched.get(pos[0])
            if row is None:
                row = touched[pos[0]] = list(rows[pos[0]])
            row[pos[1]] = cell
        for r, row in touched.items():
            rows[r] = tuple(row)
        return self.model_copy(update={"cells": tuple(rows)})

    def with_letters(self, placements: Dict[Position, Letter], newly_placed: bool = False) -> "Board":
        """Return a new board with letters placed at the given positions."""
        updates = {}
        for pos, letter in placements.items():
            cell = self.cell(pos)
            updates[Position(*pos)] = cell.model_copy(
                update={"letter": letter, "is_newly_placed": newly_placed}
            )
        return self.with_cells(updates)

    def clear_new_flags(self) -> "Board":
        """Return a board with every ``is_newly_placed`` flag cleared."""
        updates = {
            Position(r, c): cell.model_copy(update={"is_newly_placed": False})
            for r, row in enumerate(self.cells)
            for c, cell in enumerate(row)
            if cell.is_newly_placed
        }
        return self.with_cells(updates)


def create_empty_board(width: Optional[int] = None, height: Optional[int] = None) -> Board:
    """
    Allocate an empty board.

    Args:
        width: Number of columns (default 8)
        height: Number of rows (default 8)

    Returns:
        A board whose only center cell is ``(height // 2, width // 2)``
    """
    width = width or BOARD_SIZE
    height = height or BOARD_SIZE
    center = Position(height // 2, width // 2)
    cells = tuple(
        tuple(Cell(is_center=(r, c) == center) for c in range(width))
        for r in range(height)
    )
    return Board(width=width, height=height, cells=cells)


def get_board_center(board: Board) -> Position:
    return board.center


def is_valid_position(pos: Position, board: Board) -> bool:
    return board.in_bounds(pos)


def get_adjacent_positions(board: Board, pos: Position) -> List[Position]:
    """In-bounds 4-connected neighbours of ``pos`` (up, down, left, right)."""
    neighbours = (Position(pos[0] + dr, pos[1] + dc) for dr, dc in ADJACENT_OFFSETS)
    return [n for n in neighbours if board.in_bounds(n)]


def has_adjacent_letter(board: Board, pos: Position) -> bool:
    return any(board.has_letter(n) for n in get_adjacent_positions(board, pos))


def is_first_move(board: Board) -> bool:
    """True iff no cell other than the center holds a letter."""
    center = board.center
    return all(pos == center for pos, _ in board.occupied())


def passes_through_center(board: Board, positions: Iterable[Position]) -> bool:
    center = board.center
    return any(tuple(pos) == center for pos in positions)


def place_starting_word(board: Board, word: str) -> Board:
    """
    Pre-fill ``word`` horizontally on the center row.

    The word's middle letter lands on the center column; letters that would
    fall off the board are dropped.
    """
    row = board.center.row
    start_col = board.center.col - len(word) // 2
    placements = {}
    for i, char in enumerate(word.upper()):
        pos = Position(row, start_col + i)
        if board.in_bounds(pos) and char.isalpha():
            placements[pos] = make_letter(char)
    return board.with_letters(placements)


def mark_forbidden_squares(board: Board, positions: Iterable[Position]) -> Board:
    """Mark squares on which no tile may ever be placed."""
    updates = {
        Position(*pos): board.cell(pos).model_copy(update={"is_forbidden": True})
        for pos in positions
        if board.in_bounds(pos)
    }
    return board.with_cells(updates)


def board_contains_word(board: Board, word: str) -> bool:
    """Whether ``word`` reads left-to-right or top-to-bottom anywhere on the board."""
    if not word:
        return False
    target = word.upper()
    length = len(target)

    def reads(start: Position, dr: int, dc: int) -> bool:
        for i, char in enumerate(target):
            letter = board.letter_at(Position(start.row + dr * i, start.col + dc * i))
            if letter is None or letter.char != char:
                return False
        return True

    for pos, letter in board.occupied():
        if letter.char != target[0]:
            continue
        if pos.col + length <= board.width and reads(pos, 0, 1):
            return True
        if pos.row + length <= board.height and reads(pos, 1, 0):
            return True
    return False


def render_board(board: Board) -> str:
    """Render the board to a string: letters, '.' empty, '*' empty center, '#' forbidden."""
    lines = []
    for row in board.cells:
        chars = []
        for cell in row:
            if cell.letter is not None:
                chars.append(cell.letter.char)
            elif cell.is_forbidden:
                chars.append("#")
            elif cell.is_center:
                chars.append("*")
            else:
                chars.append(".")
        lines.append("".join(chars))
    return "\n".join(lines)
