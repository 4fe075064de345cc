"""
Move validation.

Validates a proposed move against the board, the acting player's hand and a
dictionary oracle. Checks run in a fixed order and the first failure is
reported:

0. Forbidden squares
1. Geometry (straight line, strictly increasing, consecutive or gap-backed,
   declared direction agrees with the positions)
2. Placement (first move covers the center, later moves connect)
3. Bounds
4. Length match
5. Tile availability (with multiplicity, wildcards cover shortfalls)
6. Parallel-word spacing
7. Dictionary legality of every formed word

Failures are returned as ``ValidationResult(valid=False, ...)``; the only
suspension point is the oracle, which ``validate_move_async`` bounds with a
timeout.
"""

import asyncio
import inspect
import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .board import Board, has_adjacent_letter, is_first_move, passes_through_center
from .dictionary import DEFAULT_ORACLE_TIMEOUT, WordOracle, check_word_async
from .letters import hand_counts, make_letter
from .models import Direction, ErrorCategory, FormedWord, Letter, Move, Position, ValidationResult
from .words import collect_word_positions, get_all_words_from_move


logger = logging.getLogger(__name__)


ERROR_CATEGORIES: Dict[str, ErrorCategory] = {
    "NO_POSITIONS": "geometry",
    "NOT_STRAIGHT": "geometry",
    "OUT_OF_ORDER": "geometry",
    "NOT_CONSECUTIVE": "geometry",
    "GAP_NOT_FILLED": "geometry",
    "DIRECTION_MISMATCH": "geometry",
    "FORBIDDEN_SQUARE": "placement",
    "MISSING_CENTER": "placement",
    "NOT_CONNECTED": "placement",
    "OUT_OF_BOUNDS": "placement",
    "LENGTH_MISMATCH": "geometry",
    "INVALID_CHARACTER": "resource",
    "LETTER_CONFLICT": "resource",
    "INSUFFICIENT_LETTERS": "resource",
    "NO_NEW_TILES": "resource",
    "PARALLEL_SPACING": "placement",
    "NO_WORD_FORMED": "dictionary",
    "INVALID_WORD": "dictionary",
}


def _fail(code: str, message: str, invalid_words: Optional[List[str]] = None) -> ValidationResult:
    return ValidationResult(
        valid=False,
        error=message,
        code=code,
        category=ERROR_CATEGORIES[code],
        invalid_words=invalid_words or [],
    )


def project_move(board: Board, move: Move) -> Board:
    """
    Hypothetically place the move's letters on empty in-bounds squares.

    Returns a new board; ``board`` is not modified. Occupied squares keep
    their letter.
    """
    placements = {}
    for pos, char in zip(move.positions, move.word):
        if board.in_bounds(pos) and not board.has_letter(pos):
            placements[pos] = make_letter(char)
    return board.with_letters(placements)


def empty_positions(board: Board, move: Move) -> List[Position]:
    """Move positions that do not yet hold a letter, in move order."""
    return [pos for pos in move.positions if not board.has_letter(pos)]


def check_geometry(
    board: Board,
    move: Move,
    allow_gaps: bool = False,
) -> Tuple[Optional[ValidationResult], Optional[Direction]]:
    """
    Check that the positions form a straight, increasing run.

    Returns:
        (failure or None, direction inferred from the positions or None for
        a single position)
    """
    positions = move.positions
    if not positions:
        return _fail("NO_POSITIONS", "No positions provided"), None
    if len(positions) == 1:
        return None, None

    first, second = positions[0], positions[1]
    if first.row == second.row:
        direction: Direction = "horizontal"
    elif first.col == second.col:
        direction = "vertical"
    else:
        return _fail("NOT_STRAIGHT", "Positions must form a straight line (horizontal or vertical)"), None

    axis = 1 if direction == "horizontal" else 0
    fixed = first[1 - axis]
    for pos in positions:
        if pos[1 - axis] != fixed:
            line = "row" if direction == "horizontal" else "column"
            return _fail("NOT_STRAIGHT", f"All positions must be in the same {line} for {direction} words"), None

    for prev, curr in zip(positions, positions[1:]):
        gap = curr[axis] - prev[axis]
        if gap < 1:
            return _fail("OUT_OF_ORDER", "Positions must be in order"), None
        if gap == 1:
            continue
        if not allow_gaps:
            return _fail("NOT_CONSECUTIVE", "Positions must be consecutive with no gaps"), None
        for step in range(prev[axis] + 1, curr[axis]):
            between = Position(fixed, step) if direction == "horizontal" else Position(step, fixed)
            if not board.has_letter(between):
                return _fail(
                    "GAP_NOT_FILLED",
                    "Gaps between positions must be filled by existing letters on the board",
                ), None

    if move.direction and move.direction != direction:
        return _fail(
            "DIRECTION_MISMATCH",
            f"Declared direction ({move.direction}) does not match actual positions ({direction})",
        ), None
    return None, direction


def check_placement(board: Board, positions: Sequence[Position]) -> Optional[ValidationResult]:
    """First move must cover the center; later moves must touch existing letters."""
    if is_first_move(board):
        if not passes_through_center(board, positions):
            return _fail("MISSING_CENTER", "First word must pass through the center")
        return None
    if not any(board.has_letter(pos) or has_adjacent_letter(board, pos) for pos in positions):
        return _fail("NOT_CONNECTED", "Word must connect to existing letters")
    return None


def check_tiles(board: Board, move: Move, hand: Sequence[Letter]) -> Optional[ValidationResult]:
    """The hand must cover every empty square; occupied squares must already match."""
    required: Dict[str, int] = {}
    for pos, char in zip(move.positions, move.word):
        if not ("A" <= char <= "Z"):
            return _fail("INVALID_CHARACTER", f"Invalid character in word: {char!r}")
        existing = board.letter_at(pos)
        if existing is not None:
            if existing.char != char:
                return _fail(
                    "LETTER_CONFLICT",
                    f"Cannot place {char} at ({pos.row}, {pos.col}): square already holds {existing.char}",
                )
            continue
        required[char] = required.get(char, 0) + 1

    if not required:
        return _fail("NO_NEW_TILES", "Move must place at least one new tile")

    available = hand_counts(list(hand))
    wildcards = sum(1 for letter in hand if letter.is_wildcard)
    for char, count in required.items():
        shortfall = count - available.get(char, 0)
        if shortfall <= 0:
            continue
        if shortfall > wildcards:
            return _fail("INSUFFICIENT_LETTERS", f"Not enough letters: {char}")
        wildcards -= shortfall
    return None


def check_parallel_spacing(
    board: Board,
    move: Move,
    direction: Direction,
    placed: Sequence[Position],
) -> Optional[ValidationResult]:
    """
    Reject new tiles that touch a parallel word side-on.

    A letter perpendicular-adjacent to a new tile is allowed when it is part
    of the move or stands alone along the move's axis (it then forms a cross
    word, which the dictionary check covers). A letter belonging to a run of
    two or more along the move's axis is a parallel word and is rejected.
    """
    move_squares = set(move.positions)
    offsets = ((-1, 0), (1, 0)) if direction == "horizontal" else ((0, -1), (0, 1))
    for pos in placed:
        for dr, dc in offsets:
            neighbour = Position(pos.row + dr, pos.col + dc)
            if neighbour in move_squares or not board.has_letter(neighbour):
                continue
            if len(collect_word_positions(board, neighbour, direction)) >= 2:
                return _fail(
                    "PARALLEL_SPACING",
                    "Parallel words must have at least one empty square between them, "
                    "or share a letter at an intersection",
                )
    return None


def _prepare(
    board: Board,
    move: Move,
    hand: Sequence[Letter],
    allow_gaps: bool,
) -> Union[ValidationResult, List[FormedWord]]:
    """Run every check before the dictionary; return a failure or the words to look up."""
    for pos in move.positions:
        if board.in_bounds(pos) and board.cell(pos).is_forbidden:
            return _fail("FORBIDDEN_SQUARE", "Cannot place letters on forbidden squares")

    failure, inferred = check_geometry(board, move, allow_gaps)
    if failure:
        return failure
    direction: Direction = move.direction or inferred or "horizontal"

    failure = check_placement(board, move.positions)
    if failure:
        return failure

    for pos in move.positions:
        if not board.in_bounds(pos):
            return _fail("OUT_OF_BOUNDS", f"Invalid position ({pos.row}, {pos.col})")

    if len(move.word) != len(move.positions):
        return _fail("LENGTH_MISMATCH", "Word length does not match positions")

    failure = check_tiles(board, move, hand)
    if failure:
        return failure

    # A lone tile is checked along its declared direction, horizontal by default.
    failure = check_parallel_spacing(board, move, direction, empty_positions(board, move))
    if failure:
        return failure

    resolved = move if move.direction else move.model_copy(update={"direction": direction})
    words = [w for w in get_all_words_from_move(project_move(board, move), resolved) if len(w.word) > 1]
    if not words:
        return _fail("NO_WORD_FORMED", "Move must form a word of at least two letters")
    return words


def _dictionary_result(words: List[FormedWord], verdicts: Dict[str, bool]) -> ValidationResult:
    invalid = []
    for formed in words:
        if not verdicts[formed.word] and formed.word not in invalid:
            invalid.append(formed.word)
    if invalid:
        return _fail(
            "INVALID_WORD",
            f"Invalid word(s): {', '.join(invalid)}. All words (main + crosses) must be valid dictionary words.",
            invalid_words=invalid,
        )
    return ValidationResult(valid=True, words=words)


def _lookup(is_valid_word: WordOracle, word: str) -> bool:
    try:
        result = is_valid_word(word)
    except Exception:
        logger.exception("Dictionary lookup for %r failed", word)
        return False
    if inspect.isawaitable(result):
        if asyncio.iscoroutine(result):
            result.close()
        raise TypeError("validate_move needs a synchronous oracle; use validate_move_async instead")
    return bool(result)


def validate_move(
    board: Board,
    move: Move,
    hand: Sequence[Letter],
    is_valid_word: WordOracle,
    allow_gaps: bool = False,
) -> ValidationResult:
    """
    Validate a move with a synchronous dictionary oracle.

    Args:
        board: Current board (not modified)
        move: Proposed move (not modified)
        hand: The acting player's tiles
        is_valid_word: Oracle returning True for legal words
        allow_gaps: Allow skipped squares that already hold letters

    Returns:
        ValidationResult; on success ``words`` lists every formed word

    Raises:
        TypeError: If the oracle returns an awaitable
    """
    prepared = _prepare(board, move, hand, allow_gaps)
    if isinstance(prepared, ValidationResult):
        return prepared
    verdicts: Dict[str, bool] = {}
    for formed in prepared:
        if formed.word not in verdicts:
            verdicts[formed.word] = _lookup(is_valid_word, formed.word)
    return _dictionary_result(prepared, verdicts)


async def validate_move_async(
    board: Board,
    move: Move,
    hand: Sequence[Letter],
    is_valid_word: WordOracle,
    allow_gaps: bool = False,
    timeout: float = DEFAULT_ORACLE_TIMEOUT,
) -> ValidationResult:
    """
    Validate a move with a sync or async oracle.

    Each lookup is bounded by ``timeout`` seconds; a lookup that times out
    or raises counts as an invalid word.
    """
    prepared = _prepare(board, move, hand, allow_gaps)
    if isinstance(prepared, ValidationResult):
        return prepared
    unique = list(dict.fromkeys(formed.word for formed in prepared))
    answers = await asyncio.gather(*(check_word_async(is_valid_word, word, timeout) for word in unique))
    return _dictionary_result(prepared, dict(zip(unique, answers)))
