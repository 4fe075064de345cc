"""Match environment for Word Battle."""

from .models import (
    GameMode,
    GameStatus,
    Objective,
    SigilEffect,
    GameEvent,
    BossBattleConfig,
    LevelConfig,
    WinCheck,
    GameState,
    TurnResult,
    PlayerConfig,
    MatchConfig,
    MatchResult,
)
from .player import Player, AIDifficulty
from .game import LetterPool, VOWEL_WEIGHTS
from .levels import JOURNEY_LEVELS, ARENA_RANKS, get_level, get_arena_rank
from .turns import (
    calculate_damage,
    check_win_condition,
    apply_boss_damage,
    advance_turn,
    record_checkmate,
    finish_game,
)
from .wordbattle import WordBattle, resolve_level

__all__ = [
    # Models
    "GameMode",
    "GameStatus",
    "Objective",
    "SigilEffect",
    "GameEvent",
    "BossBattleConfig",
    "LevelConfig",
    "WinCheck",
    "GameState",
    "TurnResult",
    "PlayerConfig",
    "MatchConfig",
    "MatchResult",
    # Players and tiles
    "Player",
    "AIDifficulty",
    "LetterPool",
    "VOWEL_WEIGHTS",
    # Levels
    "JOURNEY_LEVELS",
    "ARENA_RANKS",
    "get_level",
    "get_arena_rank",
    # Turn / win engine
    "calculate_damage",
    "check_win_condition",
    "apply_boss_damage",
    "advance_turn",
    "record_checkmate",
    "finish_game",
    # Orchestrator
    "WordBattle",
    "resolve_level",
]
