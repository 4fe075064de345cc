"""
AI move generator.

One strategy for every difficulty: enumerate candidate placements from the
hand and the board, keep the ones the validator accepts, score them with a
weighted heuristic, perturb each score with seeded noise and pick the best.
Difficulty presets only change the numbers in ``AIConfig``.
"""

import asyncio
import inspect
import logging
import random
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple
from pydantic import BaseModel, Field, ConfigDict

from .board import Board, is_first_move
from .dictionary import WordOracle, default_dictionary
from .letters import hand_counts
from .models import Direction, Letter, Move, Position
from .scoring import score_move
from .validation import empty_positions, project_move, validate_move


logger = logging.getLogger(__name__)

AI_PLAYER_ID = "ai-1"

# Stand-in for a real blocking evaluation; presets still weight it.
BLOCKING_PLACEHOLDER = 0.1


class AIConfig(BaseModel):
    """Per-difficulty tuning for the move generator."""
    model_config = ConfigDict(frozen=True)

    difficulty: str = "easy"
    min_word_length: int = Field(default=2, ge=1)
    max_word_length: int = Field(default=4, ge=1)
    vocabulary_tier: int = Field(default=1, ge=1, le=5)
    points_weight: float = 30
    blocking_weight: float = 10
    board_control_weight: float = 10
    letter_management_weight: float = 20
    randomness_factor: float = Field(default=30, ge=0)
    bluff_moves: bool = False
    use_power_ups: bool = False
    power_up_aggression: int = 0


AI_CONFIGS: Dict[str, AIConfig] = {
    "easy": AIConfig(
        difficulty="easy", min_word_length=2, max_word_length=4, vocabulary_tier=1,
        points_weight=30, blocking_weight=10, board_control_weight=10, letter_management_weight=20,
        randomness_factor=30,
    ),
    "medium": AIConfig(
        difficulty="medium", min_word_length=3, max_word_length=5, vocabulary_tier=2,
        points_weight=50, blocking_weight=30, board_control_weight=30, letter_management_weight=40,
        randomness_factor=15,
    ),
    "hard": AIConfig(
        difficulty="hard", min_word_length=4, max_word_length=6, vocabulary_tier=3,
        points_weight=70, blocking_weight=60, board_control_weight=50, letter_management_weight=60,
        randomness_factor=10, bluff_moves=True, use_power_ups=True, power_up_aggression=30,
    ),
    "very_hard": AIConfig(
        difficulty="very_hard", min_word_length=4, max_word_length=7, vocabulary_tier=4,
        points_weight=85, blocking_weight=80, board_control_weight=70, letter_management_weight=80,
        randomness_factor=5, bluff_moves=True, use_power_ups=True, power_up_aggression=50,
    ),
    "nightmare": AIConfig(
        difficulty="nightmare", min_word_length=4, max_word_length=8, vocabulary_tier=5,
        points_weight=100, blocking_weight=100, board_control_weight=90, letter_management_weight=95,
        randomness_factor=5, bluff_moves=True, use_power_ups=True, power_up_aggression=70,
    ),
}


def get_ai_config(difficulty: str, overrides: Optional[Dict] = None) -> AIConfig:
    """Preset for ``difficulty`` with optional field overrides."""
    if difficulty not in AI_CONFIGS:
        raise ValueError(f"Unknown AI difficulty: {difficulty}")
    config = AI_CONFIGS[difficulty]
    if not overrides:
        return config
    return AIConfig.model_validate({**config.model_dump(), **overrides})


def _memoize(is_valid_word: WordOracle, cache: Dict[str, bool]) -> Callable[[str], bool]:
    def lookup(word: str) -> bool:
        if word not in cache:
            result = is_valid_word(word)
            if inspect.isawaitable(result):
                if asyncio.iscoroutine(result):
                    result.close()
                raise TypeError("The AI move search needs a synchronous dictionary oracle")
            cache[word] = bool(result)
        return cache[word]
    return lookup


def generate_words_from_letters(
    letters: Iterable[str],
    min_length: int,
    max_length: int,
    is_valid_word: Callable[[str], bool],
    required: Optional[str] = None,
    is_prefix: Optional[Callable[[str], bool]] = None,
) -> List[str]:
    """
    Every dictionary word spelled from a multiset of letters.

    Depth-first over the remaining letter counts with an explicit stack,
    visiting letters in order of first appearance, so results come out in
    the order a recursive search would find them.

    Args:
        letters: Available letters; repeats count
        min_length: Shortest word to keep
        max_length: Longest word to build
        is_valid_word: Dictionary oracle
        required: Letter every returned word must contain
        is_prefix: Optional prefix oracle used to prune dead branches

    Returns:
        Distinct words in discovery order
    """
    counts: Dict[str, int] = {}
    for char in letters:
        char = char.upper()
        if "A" <= char <= "Z":
            counts[char] = counts.get(char, 0) + 1
    chars = list(counts)
    required = required.upper() if required else None

    found: List[str] = []
    seen = set()
    stack: List[Tuple[str, Tuple[int, ...]]] = [("", tuple(counts[c] for c in chars))]
    while stack:
        current, remaining = stack.pop()
        if (
            min_length <= len(current) <= max_length
            and current not in seen
            and (required is None or required in current)
            and is_valid_word(current)
        ):
            seen.add(current)
            found.append(current)
        if len(current) >= max_length:
            continue
        if current and is_prefix is not None and not is_prefix(current):
            continue
        for i in reversed(range(len(chars))):
            if remaining[i]:
                rest = remaining[:i] + (remaining[i] - 1,) + remaining[i + 1:]
                stack.append((current + chars[i], rest))
    return found


def _line(start: Position, direction: Direction, length: int) -> Tuple[Position, ...]:
    dr, dc = (0, 1) if direction == "horizontal" else (1, 0)
    return tuple(Position(start.row + dr * i, start.col + dc * i) for i in range(length))


def _fits(board: Board, positions: Sequence[Position], word: str, counts: Dict[str, int]) -> bool:
    """Cheap pre-check: on the board, board letters match, the hand covers the rest."""
    needed: Dict[str, int] = {}
    for pos, char in zip(positions, word):
        if not board.in_bounds(pos):
            return False
        existing = board.letter_at(pos)
        if existing is not None:
            if existing.char != char:
                return False
            continue
        needed[char] = needed.get(char, 0) + 1
        if needed[char] > counts.get(char, 0):
            return False
    return bool(needed)


def _first_move_placements(board: Board, word: str) -> Iterator[Tuple[Tuple[Position, ...], Direction]]:
    center = board.center
    length = len(word)
    if length <= board.width:
        for col in range(max(0, center.col - length + 1), min(board.width - length, center.col) + 1):
            yield _line(Position(center.row, col), "horizontal", length), "horizontal"
    if length <= board.height:
        for row in range(max(0, center.row - length + 1), min(board.height - length, center.row) + 1):
            yield _line(Position(row, center.col), "vertical", length), "vertical"


def _board_placements(board: Board, word: str) -> Iterator[Tuple[Tuple[Position, ...], Direction]]:
    length = len(word)
    for row in range(board.height):
        for col in range(board.width - length + 1):
            yield _line(Position(row, col), "horizontal", length), "horizontal"
    for row in range(board.height - length + 1):
        for col in range(board.width):
            yield _line(Position(row, col), "vertical", length), "vertical"


def _hook_placements(
    pos: Position,
    char: str,
    word: str,
) -> Iterator[Tuple[Tuple[Position, ...], Direction]]:
    # The board letter sits at the word's first occurrence of its character.
    index = word.find(char)
    if index < 0:
        return
    yield _line(Position(pos.row, pos.col - index), "horizontal", len(word)), "horizontal"
    yield _line(Position(pos.row - index, pos.col), "vertical", len(word)), "vertical"


def generate_candidate_moves(
    board: Board,
    hand: Sequence[Letter],
    config: AIConfig,
    is_valid_word: Callable[[str], bool],
    is_prefix: Optional[Callable[[str], bool]] = None,
    player_id: str = AI_PLAYER_ID,
) -> Iterator[Move]:
    """
    Yield distinct placements worth validating, in generation order.

    First move: each hand word through the center, horizontal offsets then
    vertical. Later moves: each hand word at every board position, then
    hook plays built around each board letter.
    """
    counts = hand_counts(list(hand))
    hand_letters = "".join(letter.char for letter in hand if not letter.is_wildcard)
    words = generate_words_from_letters(
        hand_letters, config.min_word_length, config.max_word_length, is_valid_word, is_prefix=is_prefix,
    )
    seen = set()

    def emit(word: str, positions: Tuple[Position, ...], direction: Direction) -> Optional[Move]:
        key = (word, positions)
        if key in seen or not _fits(board, positions, word, counts):
            return None
        seen.add(key)
        return Move(positions=positions, word=word, direction=direction, player_id=player_id)

    if is_first_move(board):
        for word in words:
            for positions, direction in _first_move_placements(board, word):
                move = emit(word, positions, direction)
                if move:
                    yield move
        return

    for word in words:
        for positions, direction in _board_placements(board, word):
            move = emit(word, positions, direction)
            if move:
                yield move

    for pos, letter in list(board.occupied()):
        hooked = generate_words_from_letters(
            letter.char + hand_letters, config.min_word_length, config.max_word_length,
            is_valid_word, required=letter.char, is_prefix=is_prefix,
        )
        for word in hooked:
            for positions, direction in _hook_placements(pos, letter.char, word):
                move = emit(word, positions, direction)
                if move:
                    yield move


def iter_legal_moves(
    board: Board,
    hand: Sequence[Letter],
    config: AIConfig,
    allow_gaps: bool = False,
    is_valid_word: Optional[WordOracle] = None,
    is_prefix: Optional[Callable[[str], bool]] = None,
    player_id: str = AI_PLAYER_ID,
) -> Iterator[Move]:
    """
    Candidates that pass the full move validator.

    Raises:
        TypeError: If the oracle returns an awaitable
    """
    if is_valid_word is None:
        dictionary = default_dictionary()
        is_valid_word = dictionary.is_valid_word
        is_prefix = is_prefix or dictionary.is_prefix
    lookup = _memoize(is_valid_word, {})
    for move in generate_candidate_moves(board, hand, config, lookup, is_prefix, player_id):
        if validate_move(board, move, hand, lookup, allow_gaps).valid:
            yield move


def has_legal_move(
    board: Board,
    hand: Sequence[Letter],
    config: AIConfig,
    allow_gaps: bool = False,
    is_valid_word: Optional[WordOracle] = None,
    is_prefix: Optional[Callable[[str], bool]] = None,
) -> bool:
    """Whether the generator can find any legal move for ``hand``."""
    return next(iter_legal_moves(board, hand, config, allow_gaps, is_valid_word, is_prefix), None) is not None


def _control_score(board: Board, move: Move) -> float:
    center = board.center
    return sum(
        0.5 / (abs(pos.row - center.row) + abs(pos.col - center.col) + 1)
        for pos in move.positions
    )


def _letter_management_score(tiles: Sequence[Letter]) -> float:
    """Rewards spending low-value letters and keeping Q, Z, J, X."""
    if not tiles:
        return 0.0
    return sum((10 - tile.points) / 10 for tile in tiles) / len(tiles)


def evaluate_move(board: Board, move: Move, config: AIConfig) -> Tuple[float, int]:
    """
    Heuristic value of a legal move and its raw points.

    value = points_weight * points / 100
          + blocking_weight * BLOCKING_PLACEHOLDER
          + board_control_weight * center proximity
          + letter_management_weight * low-value letter preference
    """
    placed = empty_positions(board, move)
    projected = project_move(board, move)
    points = score_move(projected, move)
    tiles = [projected.letter_at(pos) for pos in placed]
    value = (
        config.points_weight * points / 100
        + config.blocking_weight * BLOCKING_PLACEHOLDER
        + config.board_control_weight * _control_score(board, move)
        + config.letter_management_weight * _letter_management_score(tiles)
    )
    return value, points


def calculate_ai_move(
    board: Board,
    ai_hand: Sequence[Letter],
    opponent_hand: Sequence[Letter],
    config: AIConfig,
    turn: int,
    allow_gaps: bool = False,
    *,
    is_valid_word: Optional[WordOracle] = None,
    is_prefix: Optional[Callable[[str], bool]] = None,
    rng: Optional[random.Random] = None,
    player_id: str = AI_PLAYER_ID,
) -> Optional[Move]:
    """
    Choose a move for the AI, or None when no legal move exists.

    Every candidate's heuristic value is scaled by a uniform factor in
    ``1 ± randomness_factor / 100`` drawn from ``rng``; the highest value
    wins and ties go to the earliest candidate. ``opponent_hand`` and
    ``turn`` are accepted for the blocking evaluation, which is currently a
    constant.

    Args:
        board: Current board
        ai_hand: The AI's tiles
        opponent_hand: The opponent's tiles
        config: Difficulty preset
        turn: Current turn number
        allow_gaps: Whether gapped placements are legal at this level
        is_valid_word: Dictionary oracle (the bundled word list by default)
        is_prefix: Prefix oracle for pruning the word search
        rng: Random source for the score noise
        player_id: Id stamped on the returned move

    Returns:
        The chosen move with ``score`` set to its raw points, or None

    Raises:
        TypeError: If ``is_valid_word`` is asynchronous
    """
    rng = rng or random.Random()
    best: Optional[Move] = None
    best_value = 0.0
    considered = 0

    for move in iter_legal_moves(board, ai_hand, config, allow_gaps, is_valid_word, is_prefix, player_id):
        considered += 1
        value, points = evaluate_move(board, move, config)
        if config.randomness_factor:
            value *= 1 + rng.uniform(-config.randomness_factor, config.randomness_factor) / 100
        if best is None or value > best_value:
            best = move.model_copy(update={"score": points})
            best_value = value

    logger.debug(
        "AI (%s) considered %d legal moves on turn %d; chose %s",
        config.difficulty, considered, turn, best.word if best else None,
    )
    return best
