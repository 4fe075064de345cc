"""
Pydantic models for the match environment.

Game state, level configuration, turn and match results. The logic that
drives them lives in ``turns``, ``game`` and ``wordbattle``.
"""

from typing import List, Dict, Optional, Literal, Tuple, Union
from pydantic import BaseModel, Field, ConfigDict

from ..engine.board import Board
from ..engine.models import Move, Position, ValidationResult
from .player import AIDifficulty, Player


# Type aliases
GameMode = Literal["quick", "journey", "arena", "daily"]
GameStatus = Literal["waiting", "playing", "finished"]
Objective = Literal[
    "win", "word_count", "score_threshold", "race_to_score", "build_word", "defeat_boss", "free_play",
]
SigilType = Literal["endless_knowledge", "endless_knowledge_plus"]


class SigilEffect(BaseModel):
    """Damage applied on each of the owner's next ``turns_remaining`` moves."""
    type: SigilType
    damage: int
    turns_remaining: int


class GameEvent(BaseModel):
    """Notable non-move event, such as a player with no legal move."""
    type: Literal["checkmate"]
    player_id: str
    message: str = ""


class BossBattleConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_hp: int = 100
    ai_hp: int = 200
    sigil: Optional[SigilType] = None


class LevelConfig(BaseModel):
    """
    Mode and level rules consumed by the turn/win engine.

    ``target_score`` is the pass bar checked at the turn limit,
    ``early_win_score`` ends the game as soon as the challenger reaches it,
    and ``score_limit`` ends it as soon as either side reaches it.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    description: str = ""
    mode: GameMode = "journey"
    objective: Objective = "win"
    ai_difficulty: AIDifficulty = "easy"
    target_score: Optional[int] = None
    early_win_score: Optional[int] = None
    score_limit: Optional[int] = None
    target_word_count: Optional[int] = None
    target_word: Optional[str] = None
    turn_limit: Optional[int] = None
    allow_gaps: bool = False
    has_ai: bool = True
    board_width: Optional[int] = None
    board_height: Optional[int] = None
    starting_word: Optional[str] = None
    forbidden_square_count: int = 0
    boss_battle: Optional[BossBattleConfig] = None
    ai_overrides: Dict[str, Union[int, float]] = Field(default_factory=dict)


class WinCheck(BaseModel):
    finished: bool = False
    winner_id: Optional[str] = None
    reason: Optional[str] = None


class GameState(BaseModel):
    """
    Aggregate root for one match.

    Replaced as a whole on every committed turn and never changed once
    ``status`` is ``finished``.
    """
    id: str
    mode: GameMode = "quick"
    board: Board
    players: List[Player]
    current_player_id: str
    turn: int = 1
    status: GameStatus = "waiting"
    winner_id: Optional[str] = None
    end_reason: str = ""
    turn_history: List[Move] = Field(default_factory=list)
    word_count: int = 0
    sigil_count: int = 0
    active_sigil_effects: List[SigilEffect] = Field(default_factory=list)
    five_letter_word_count: int = 0
    level_id: Optional[int] = None
    daily_target_score: Optional[int] = None
    last_event: Optional[GameEvent] = None

    @property
    def is_finished(self) -> bool:
        return self.status == "finished"

    def get_player(self, player_id: str) -> Player:
        for player in self.players:
            if player.id == player_id:
                return player
        raise ValueError(f"Unknown player: {player_id}")

    @property
    def current_player(self) -> Player:
        return self.get_player(self.current_player_id)

    def opponent_of(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id != player_id:
                return player
        return None

    def sides(self) -> Tuple[Optional[Player], Optional[Player]]:
        """
        (challenger, ai opponent).

        The challenger is the first human player, or the first player when
        every seat is AI-driven. The opponent is the first other AI player.
        """
        if not self.players:
            return None, None
        challenger = next((p for p in self.players if not p.is_ai), self.players[0])
        opponent = next((p for p in self.players if p.is_ai and p.id != challenger.id), None)
        return challenger, opponent

    def get_state(self) -> Dict:
        return {
            "id": self.id,
            "mode": self.mode,
            "level_id": self.level_id,
            "daily_target_score": self.daily_target_score,
            "turn": self.turn,
            "status": self.status,
            "current_player_id": self.current_player_id,
            "winner_id": self.winner_id,
            "end_reason": self.end_reason,
            "word_count": self.word_count,
            "moves_played": len(self.turn_history),
        }


class TurnResult(BaseModel):
    """Result of a single move submission or AI turn."""
    player_id: str
    turn_number: int
    move: Optional[Move] = None
    accepted: bool = False
    validation: Optional[ValidationResult] = None
    score: int = 0
    damage: int = 0
    placed: List[Position] = Field(default_factory=list)
    hand_before: str = ""
    hand_after: str = ""
    error: Optional[str] = None
    event: Optional[GameEvent] = None


class PlayerConfig(BaseModel):
    """Configuration for a single seat in a match."""
    name: Optional[str] = None
    difficulty: AIDifficulty = "easy"
    is_ai: bool = True


class MatchConfig(BaseModel):
    """Configuration for a match run."""
    max_turns: int = Field(default=100, ge=1)
    seed: Optional[int] = None
    hand_size: int = Field(default=10, ge=1)
    mode: GameMode = "quick"
    level_id: Optional[int] = None
    arena_rank: Optional[int] = None
    daily_target_score: Optional[int] = Field(default=None, ge=1)
    finite_bag: bool = False
    oracle_timeout: float = Field(default=2.0, gt=0)
    dictionary_path: Optional[str] = None
    players: List[PlayerConfig] = Field(
        default_factory=lambda: [PlayerConfig(difficulty="easy"), PlayerConfig(difficulty="medium")]
    )

    @property
    def num_players(self) -> int:
        return len(self.players)


class MatchResult(BaseModel):
    """Result of a complete match."""
    config: MatchConfig
    winner: Optional[str] = None
    total_turns: int = 0
    end_reason: str = ""
    player_results: Dict[str, Dict] = Field(default_factory=dict)
    turn_history: List[TurnResult] = Field(default_factory=list)
    final_board: str = ""
    game_state: Dict = Field(default_factory=dict)
    started_at: str = ""
    ended_at: str = ""
    duration_seconds: float = 0.0
