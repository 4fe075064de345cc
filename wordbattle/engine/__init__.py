"""Board, move validation, scoring and AI for Word Battle."""

from .models import Position, Letter, Cell, Move, FormedWord, ValidationResult, Direction
from .board import (
    Board,
    BOARD_SIZE,
    create_empty_board,
    get_board_center,
    is_valid_position,
    get_adjacent_positions,
    has_adjacent_letter,
    is_first_move,
    passes_through_center,
    place_starting_word,
    mark_forbidden_squares,
    board_contains_word,
    render_board,
)
from .letters import (
    LETTER_CONFIG,
    VOWELS,
    WILDCARD,
    letter_points,
    make_letter,
    make_wildcard,
    create_letter_distribution,
    shuffle_letters,
    draw_letters,
)
from .words import collect_word_positions, extract_word_from_board, get_all_words_from_move
from .scoring import calculate_word_score, score_move
from .validation import validate_move, validate_move_async, project_move
from .apply import ApplyResult, apply_move
from .dictionary import Dictionary, default_dictionary, check_word, check_word_async, is_async_oracle
from .ai import AIConfig, AI_CONFIGS, get_ai_config, calculate_ai_move, has_legal_move

__all__ = [
    # Models
    "Position",
    "Letter",
    "Cell",
    "Move",
    "FormedWord",
    "ValidationResult",
    "Direction",
    # Board
    "Board",
    "BOARD_SIZE",
    "create_empty_board",
    "get_board_center",
    "is_valid_position",
    "get_adjacent_positions",
    "has_adjacent_letter",
    "is_first_move",
    "passes_through_center",
    "place_starting_word",
    "mark_forbidden_squares",
    "board_contains_word",
    "render_board",
    # Letters
    "LETTER_CONFIG",
    "VOWELS",
    "WILDCARD",
    "letter_points",
    "make_letter",
    "make_wildcard",
    "create_letter_distribution",
    "shuffle_letters",
    "draw_letters",
    # Words and scoring
    "collect_word_positions",
    "extract_word_from_board",
    "get_all_words_from_move",
    "calculate_word_score",
    "score_move",
    # Validation and application
    "validate_move",
    "validate_move_async",
    "project_move",
    "ApplyResult",
    "apply_move",
    # Dictionary
    "Dictionary",
    "default_dictionary",
    "check_word",
    "check_word_async",
    "is_async_oracle",
    # AI
    "AIConfig",
    "AI_CONFIGS",
    "get_ai_config",
    "calculate_ai_move",
    "has_legal_move",
]
