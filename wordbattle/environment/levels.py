"""Journey levels and arena ranks as ``LevelConfig`` presets."""

from typing import Dict, List, Optional

from .models import BossBattleConfig, LevelConfig


JOURNEY_LEVELS: List[LevelConfig] = [
    LevelConfig(
        id=1,
        name="First Steps",
        description="Build at least 2 words before turn 10.",
        objective="word_count",
        target_word_count=2,
        turn_limit=10,
    ),
    LevelConfig(
        id=2,
        name="Building Blocks",
        description="Score 20 points by turn 10. Reaching 45 ends the level early.",
        objective="score_threshold",
        target_score=20,
        early_win_score=45,
        turn_limit=10,
    ),
    LevelConfig(
        id=3,
        name="Speed Challenge",
        description="Race to 50 points from RACING. 10 points by turn 10 passes.",
        objective="race_to_score",
        target_score=10,
        early_win_score=50,
        turn_limit=10,
        starting_word="RACING",
        ai_overrides={
            "min_word_length": 2,
            "max_word_length": 3,
            "points_weight": 10,
            "blocking_weight": 0,
            "board_control_weight": 0,
            "letter_management_weight": 5,
            "randomness_factor": 50,
        },
    ),
    LevelConfig(
        id=4,
        name="Scoring Points",
        description="Score 30 points by turn 10. Gaps backed by board letters are allowed.",
        objective="score_threshold",
        target_score=30,
        early_win_score=45,
        turn_limit=10,
        allow_gaps=True,
    ),
    LevelConfig(
        id=5,
        name="Boss Battle: Long Words",
        description="Damage scales with word length. Every 3 words: 4 damage now, 2 on each of the next 3 moves.",
        objective="defeat_boss",
        allow_gaps=True,
        boss_battle=BossBattleConfig(player_hp=100, ai_hp=65, sigil="endless_knowledge"),
    ),
    LevelConfig(
        id=6,
        name="Solo Practice",
        description="No opponent. Build from EMISSION until turn 10.",
        objective="free_play",
        ai_difficulty="medium",
        turn_limit=10,
        allow_gaps=True,
        has_ai=False,
        starting_word="EMISSION",
    ),
    LevelConfig(
        id=7,
        name="Strategic Play",
        description="No opponent. Spell STARS before turn 10 while avoiding forbidden squares.",
        objective="build_word",
        ai_difficulty="medium",
        target_word="STARS",
        turn_limit=10,
        allow_gaps=True,
        has_ai=False,
        forbidden_square_count=3,
    ),
    LevelConfig(
        id=8,
        name="Time Pressure",
        description="Outscore the AI within 20 turns.",
        objective="win",
        ai_difficulty="medium",
        turn_limit=20,
        allow_gaps=True,
    ),
    LevelConfig(
        id=9,
        name="Star Challenge",
        description="Outscore the AI within 20 turns.",
        objective="win",
        ai_difficulty="medium",
        turn_limit=20,
        allow_gaps=True,
    ),
    LevelConfig(
        id=10,
        name="Boss Battle: Arena Unlock",
        description="Every 5 words deals 10 damage per five-letter word built.",
        objective="defeat_boss",
        ai_difficulty="medium",
        allow_gaps=True,
        boss_battle=BossBattleConfig(player_hp=100, ai_hp=75, sigil="endless_knowledge_plus"),
    ),
]

ARENA_DEFAULT_SCORE_LIMIT = 200

ARENA_RANKS: List[LevelConfig] = [
    LevelConfig(id=0, name="Novice", mode="arena", ai_difficulty="easy", score_limit=100),
    LevelConfig(id=1, name="Apprentice", mode="arena", ai_difficulty="medium", score_limit=100),
    LevelConfig(id=2, name="Adept", mode="arena", ai_difficulty="hard", score_limit=150),
    LevelConfig(id=3, name="Expert", mode="arena", ai_difficulty="very_hard", score_limit=150),
    LevelConfig(id=4, name="Master", mode="arena", ai_difficulty="nightmare", score_limit=220),
]

_LEVELS_BY_ID: Dict[int, LevelConfig] = {level.id: level for level in JOURNEY_LEVELS}
_RANKS_BY_ID: Dict[int, LevelConfig] = {rank.id: rank for rank in ARENA_RANKS}


def get_level(level_id: int) -> Optional[LevelConfig]:
    """Journey level by id, or None."""
    return _LEVELS_BY_ID.get(level_id)


def get_arena_rank(rank_id: Optional[int]) -> LevelConfig:
    """Arena preset for a rank; unknown ranks fall back to a 200-point limit."""
    if rank_id in _RANKS_BY_ID:
        return _RANKS_BY_ID[rank_id]
    return LevelConfig(id=-1, name="Arena", mode="arena", score_limit=ARENA_DEFAULT_SCORE_LIMIT)
