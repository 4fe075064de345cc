import json
import logging
import random
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Optional, Any, Callable
from pydantic import BaseModel, Field, ConfigDict

from ..engine.ai import AIConfig, calculate_ai_move, get_ai_config, has_legal_move
from ..engine.apply import apply_move
from ..engine.board import (
    Board,
    create_empty_board,
    mark_forbidden_squares,
    place_starting_word,
    render_board,
)
from ..engine.dictionary import Dictionary, WordOracle, default_dictionary, is_async_oracle
from ..engine.models import Move, Position, ValidationResult
from ..engine.validation import validate_move, validate_move_async
from .game import LetterPool
from .levels import get_arena_rank, get_level
from .models import GameState, LevelConfig, MatchConfig, MatchResult, PlayerConfig, TurnResult, WinCheck
from .player import Player
from .turns import advance_turn, apply_boss_damage, check_win_condition, finish_game, record_checkmate


logger = logging.getLogger(__name__)

CHALLENGER_ID = "player-1"
OPPONENT_ID = "ai-1"


def resolve_level(config: MatchConfig) -> Optional[LevelConfig]:
    """
    Level rules for a match config.

    Raises:
        ValueError: If a journey match names an unknown level, or a daily
            match has no target score
    """
    if config.mode == "journey":
        if config.level_id is None:
            raise ValueError("Journey matches need a level_id")
        level = get_level(config.level_id)
        if level is None:
            raise ValueError(f"Unknown journey level: {config.level_id}")
        return level
    if config.mode == "arena":
        return get_arena_rank(config.arena_rank)
    if config.mode == "daily" and config.daily_target_score is None:
        raise ValueError("Daily matches need a daily_target_score")
    return None


class WordBattle(BaseModel):
    """
    Top-level orchestrator for a Word Battle match.

    Owns the current ``GameState`` and replaces it as a whole after every
    committed turn. A rejected move, an oracle failure or a timeout leaves
    the state exactly as it was.

    Attributes:
        config: Match configuration
        level: Level or arena rules, None for quick matches
        pool: Tile source for hands
        state: Current game state, set by ``setup()``
        turn_history: Every submission and AI turn, accepted or not
        is_valid_word: Dictionary oracle (sync or async)
        is_prefix: Optional prefix oracle for the AI word search
        ai_is_valid_word: Synchronous oracle for AI turns; the configured word
            list when ``is_valid_word`` is async
        ai_is_prefix: Prefix oracle paired with ``ai_is_valid_word``
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: MatchConfig = Field(default_factory=MatchConfig)
    level: Optional[LevelConfig] = None
    pool: Optional[LetterPool] = None
    state: Optional[GameState] = None
    turn_history: List[TurnResult] = Field(default_factory=list)
    is_valid_word: Optional[WordOracle] = None
    is_prefix: Optional[Callable[[str], bool]] = None
    ai_is_valid_word: Optional[Callable[[str], bool]] = None
    ai_is_prefix: Optional[Callable[[str], bool]] = None
    started_at: Optional[datetime] = None
    _ai_rng: random.Random = None

    def model_post_init(self, __context) -> None:
        self._ai_rng = random.Random(self.config.seed)

    @classmethod
    def create(
        cls,
        config: Optional[MatchConfig] = None,
        is_valid_word: Optional[WordOracle] = None,
        is_prefix: Optional[Callable[[str], bool]] = None,
        **config_kwargs: Any
    ) -> "WordBattle":
        """
        Factory method to create a match with its level rules, pool and dictionary.

        Args:
            config: Optional MatchConfig instance
            is_valid_word: Dictionary oracle; the configured word list by default
            is_prefix: Prefix oracle for the AI word search
            **config_kwargs: Config parameters if config not provided

        Returns:
            Configured WordBattle instance
        """
        if config is None:
            config = MatchConfig(**config_kwargs)
        if config.num_players > 2:
            raise ValueError(f"Word Battle is a two-player game, got {config.num_players} players")

        level = resolve_level(config)
        ai_is_valid_word, ai_is_prefix = is_valid_word, is_prefix
        if is_valid_word is None or is_async_oracle(is_valid_word):
            dictionary = (
                Dictionary.from_file(config.dictionary_path)
                if config.dictionary_path
                else default_dictionary()
            )
            if is_valid_word is None:
                is_valid_word = dictionary.is_valid_word
                is_prefix = is_prefix or dictionary.is_prefix
                ai_is_valid_word, ai_is_prefix = is_valid_word, is_prefix
            else:
                # The move search calls its oracle synchronously.
                logger.info("Async dictionary oracle: AI turns use the local word list")
                ai_is_valid_word, ai_is_prefix = dictionary.is_valid_word, dictionary.is_prefix

        return cls(
            config=config,
            level=level,
            pool=LetterPool.create(seed=config.seed, finite=config.finite_bag),
            is_valid_word=is_valid_word,
            is_prefix=is_prefix,
            ai_is_valid_word=ai_is_valid_word,
            ai_is_prefix=ai_is_prefix,
        )

    @property
    def allow_gaps(self) -> bool:
        return bool(self.level and self.level.allow_gaps)

    def _build_board(self) -> Board:
        level = self.level
        if level is None:
            return create_empty_board()
        board = create_empty_board(level.board_width, level.board_height)
        if level.starting_word:
            board = place_starting_word(board, level.starting_word)
        if level.forbidden_square_count:
            center = board.center
            free = [
                Position(row, col)
                for row in range(board.height)
                for col in range(board.width)
                if Position(row, col) != center and not board.has_letter(Position(row, col))
            ]
            board = mark_forbidden_squares(board, self.pool.pick(free, level.forbidden_square_count))
        return board

    def _build_players(self) -> List[Player]:
        level = self.level
        seats = self.config.players or [PlayerConfig()]
        boss = level.boss_battle if level else None

        challenger_seat = seats[0]
        players = [Player(
            id=CHALLENGER_ID,
            name=challenger_seat.name or "",
            is_ai=challenger_seat.is_ai,
            ai_difficulty=challenger_seat.difficulty if challenger_seat.is_ai else None,
            hp=boss.player_hp if boss else None,
        )]

        if level is None or level.has_ai:
            opponent_seat = seats[1] if len(seats) > 1 else PlayerConfig()
            players.append(Player(
                id=OPPONENT_ID,
                name=opponent_seat.name or "",
                is_ai=True,
                ai_difficulty=level.ai_difficulty if level else opponent_seat.difficulty,
                hp=boss.ai_hp if boss else None,
            ))

        return [
            player.model_copy(update={"hand": self.pool.draw(self.config.hand_size)})
            for player in players
        ]

    def setup(self) -> None:
        """
        Start the match: build the board, seat the players and deal hands.
        """
        if self.pool is None:
            raise ValueError("Letter pool not initialized")

        board = self._build_board()
        players = self._build_players()
        level = self.level

        self.state = GameState(
            id=uuid.uuid4().hex[:12],
            mode=level.mode if level else self.config.mode,
            board=board,
            players=players,
            current_player_id=players[0].id,
            status="playing",
            level_id=level.id if level and level.mode == "journey" else None,
            daily_target_score=self.config.daily_target_score if self.config.mode == "daily" else None,
        )
        self.turn_history = []
        self.started_at = datetime.now()
        logger.info(
            "Started %s match %s (level %s) with %s",
            self.state.mode, self.state.id, self.state.level_id,
            ", ".join(p.name for p in players),
        )

    def _require_state(self) -> GameState:
        if self.state is None:
            raise ValueError("Game not initialized. Call setup() first.")
        return self.state

    def get_current_player(self) -> Player:
        """Get the player whose turn it is."""
        return self._require_state().current_player

    def _record(self, turn_result: TurnResult) -> TurnResult:
        self.turn_history.append(turn_result)
        return turn_result

    def _end(self, state: GameState, check: WinCheck) -> GameState:
        self.state = finish_game(state, check)
        return self.state

    def _precheck(self) -> Optional[TurnResult]:
        """Refuse turns on a finished game or past the level's turn limit."""
        state = self._require_state()
        player = state.current_player

        if state.is_finished:
            return self._record(TurnResult(
                player_id=player.id,
                turn_number=state.turn,
                hand_before=player.hand_letters,
                hand_after=player.hand_letters,
                error="Game is already finished",
            ))

        limit = self.level.turn_limit if self.level else None
        if limit and state.turn + 1 > limit:
            self._end(state, check_win_condition(state, self.level))
            return self._record(TurnResult(
                player_id=player.id,
                turn_number=state.turn,
                hand_before=player.hand_letters,
                hand_after=player.hand_letters,
                error=f"Turn limit ({limit}) reached",
            ))

        return None

    def _check_turn_owner(self, move: Move) -> Optional[TurnResult]:
        state = self._require_state()
        player = state.current_player
        if move.player_id and move.player_id != player.id:
            return self._record(TurnResult(
                player_id=move.player_id,
                turn_number=state.turn,
                move=move,
                error=f"Not {move.player_id}'s turn (current player: {player.id})",
            ))
        return None

    def _commit(self, player: Player, move: Move, validation: ValidationResult) -> TurnResult:
        """
        Apply a validated move and advance the game.

        The new state is assembled aside and assigned in one step, so an
        exception anywhere below leaves ``self.state`` untouched.
        """
        state = self._require_state()
        turn_number = state.turn
        hand_before = player.hand_letters

        if not validation.valid:
            logger.debug("Rejected %s from %s: %s", move.word, player.id, validation.error)
            return self._record(TurnResult(
                player_id=player.id,
                turn_number=turn_number,
                move=move,
                validation=validation,
                hand_before=hand_before,
                hand_after=hand_before,
                error=validation.error,
            ))

        applied = apply_move(state.board, move, player.hand)
        new_hand = self.pool.refill(applied.new_hand, self.config.hand_size)
        updated = player.model_copy(update={"hand": new_hand, "score": player.score + applied.score})
        played = move.model_copy(update={"score": applied.score, "player_id": player.id})

        challenger, _ = state.sides()
        is_challenger = challenger is not None and challenger.id == player.id

        new_state = state.model_copy(update={
            "board": applied.new_board,
            "players": [updated if p.id == player.id else p for p in state.players],
            "turn_history": state.turn_history + [played],
            "word_count": state.word_count + (1 if is_challenger else 0),
            "last_event": None,
        })
        primary_word = validation.words[0].word if validation.words else move.word
        new_state, damage = apply_boss_damage(new_state, player.id, primary_word, self.level)
        new_state = advance_turn(new_state)

        check = check_win_condition(new_state, self.level)
        if check.finished:
            new_state = finish_game(new_state, check)

        self.state = new_state
        logger.debug("%s played %s for %d points", player.id, played.word, applied.score)
        return self._record(TurnResult(
            player_id=player.id,
            turn_number=turn_number,
            move=played,
            accepted=True,
            validation=validation,
            score=applied.score,
            damage=damage,
            placed=applied.placed,
            hand_before=hand_before,
            hand_after=updated.hand_letters,
        ))

    def submit_move(self, move: Move) -> TurnResult:
        """
        Validate and play a move for the current player with the sync oracle.

        Args:
            move: The proposed placement

        Returns:
            TurnResult; ``accepted`` is False and ``error`` is set on refusal
        """
        refused = self._precheck() or self._check_turn_owner(move)
        if refused:
            return refused
        player = self.state.current_player
        validation = validate_move(self.state.board, move, player.hand, self.is_valid_word, self.allow_gaps)
        return self._commit(player, move, validation)

    async def submit_move_async(self, move: Move) -> TurnResult:
        """
        Validate and play a move, awaiting the oracle if it is asynchronous.

        Each lookup is bounded by ``config.oracle_timeout``; a timeout or
        oracle error rejects the move and leaves the state unchanged.
        """
        refused = self._precheck() or self._check_turn_owner(move)
        if refused:
            return refused
        state = self.state
        player = state.current_player
        validation = await validate_move_async(
            state.board, move, player.hand, self.is_valid_word, self.allow_gaps,
            timeout=self.config.oracle_timeout,
        )
        if self.state is not state:
            return self._record(TurnResult(
                player_id=player.id,
                turn_number=state.turn,
                move=move,
                error="Game state changed while the move was being validated",
            ))
        return self._commit(player, move, validation)

    def _ai_config(self, player: Player) -> AIConfig:
        overrides = self.level.ai_overrides if self.level and player.id == OPPONENT_ID else None
        return get_ai_config(player.ai_difficulty or "easy", overrides)

    def _checkmate(self, player: Player) -> TurnResult:
        state = record_checkmate(self._require_state(), player.id)
        check = check_win_condition(state, self.level)
        state = self._end(state, check) if check.finished else state
        self.state = state
        logger.info("Checkmate: %s", state.last_event.message)
        return self._record(TurnResult(
            player_id=player.id,
            turn_number=state.turn,
            hand_before=player.hand_letters,
            hand_after=player.hand_letters,
            error=state.last_event.message,
            event=state.last_event,
        ))

    def play_ai_turn(self) -> TurnResult:
        """
        Let the move generator play for the current player.

        A player with no legal move is checkmated and the game ends.

        Raises:
            ValueError: If the current player is not AI-controlled
        """
        refused = self._precheck()
        if refused:
            return refused
        state = self.state
        player = state.current_player
        if not player.is_ai:
            raise ValueError(f"{player.name} is not AI-controlled")

        opponent = state.opponent_of(player.id)
        move = calculate_ai_move(
            state.board,
            player.hand,
            opponent.hand if opponent else [],
            self._ai_config(player),
            state.turn,
            self.allow_gaps,
            is_valid_word=self.ai_is_valid_word,
            is_prefix=self.ai_is_prefix,
            rng=self._ai_rng,
            player_id=player.id,
        )
        if move is None:
            return self._checkmate(player)
        validation = validate_move(state.board, move, player.hand, self.ai_is_valid_word, self.allow_gaps)
        return self._commit(player, move, validation)

    def check_stalemate(self) -> bool:
        """
        Check whether the current player has any legal move.

        A player without one is checkmated, which ends the game.

        Returns:
            True if the player was checkmated
        """
        state = self._require_state()
        if state.is_finished:
            return False
        player = state.current_player
        board = state.board
        search = get_ai_config("easy", {
            "min_word_length": 2,
            "max_word_length": max(2, min(len(player.hand) + 1, max(board.width, board.height))),
        })
        if has_legal_move(board, player.hand, search, self.allow_gaps, self.ai_is_valid_word, self.ai_is_prefix):
            return False
        self._checkmate(player)
        return True

    def exchange_vowel(self) -> Player:
        """
        Swap the current player's first consonant for a random vowel.

        Does not use up the turn.

        Returns:
            The updated player

        Raises:
            ValueError: If the game is finished or the hand has no consonant
        """
        state = self._require_state()
        if state.is_finished:
            raise ValueError("Game is already finished")
        player = state.current_player
        updated = player.model_copy(update={"hand": self.pool.exchange_vowel(player.hand)})
        self.state = state.model_copy(update={
            "players": [updated if p.id == player.id else p for p in state.players],
        })
        return updated

    def _finish_max_turns(self) -> None:
        state = self._require_state()
        challenger, opponent = state.sides()
        winner = None
        if opponent is None:
            winner = challenger.id
        elif challenger.score != opponent.score:
            winner = challenger.id if challenger.score > opponent.score else opponent.id
        self._end(state, WinCheck(finished=True, winner_id=winner, reason="max_turns_reached"))

    def get_state(self) -> Dict:
        """
        Get the current match state.

        Returns:
            Dictionary containing match state
        """
        state = self.state
        return {
            "game": state.get_state() if state else None,
            "level": self.level.name if self.level else None,
            "players": [p.get_state() for p in state.players] if state else [],
            "pool": self.pool.get_state() if self.pool else None,
            "num_turns_recorded": len(self.turn_history),
        }

    def get_result(self) -> MatchResult:
        """
        Get the final match result.

        Returns:
            MatchResult containing full run data
        """
        state = self._require_state()
        ended_at = datetime.now()
        duration = (ended_at - self.started_at).total_seconds() if self.started_at else 0.0

        return MatchResult(
            config=self.config,
            winner=state.winner_id,
            total_turns=state.turn - 1,
            end_reason=state.end_reason,
            player_results={p.id: p.get_state() for p in state.players},
            turn_history=self.turn_history,
            final_board=render_board(state.board),
            game_state=state.get_state(),
            started_at=self.started_at.isoformat() if self.started_at else "",
            ended_at=ended_at.isoformat(),
            duration_seconds=duration,
        )

    def save_result(self, path: str | Path) -> None:
        """
        Save the match result to a JSON file.

        Args:
            path: Path to save the result file
        """
        result = self.get_result()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            json.dump(result.model_dump(), f, indent=2, default=str)

    def run(
        self,
        on_turn: Optional[Callable[[TurnResult], None]] = None,
        verbose: bool = False,
    ) -> MatchResult:
        """
        Play AI-controlled turns until the match ends or ``max_turns`` is hit.

        Args:
            on_turn: Optional callback called after each turn
            verbose: If True, print progress to stdout

        Returns:
            MatchResult containing the full run data
        """
        if self.state is None:
            self.setup()

        if verbose:
            print(f"Starting {self.state.mode} match with {len(self.state.players)} players")
            if self.level:
                print(f"Level: {self.level.name}")
            print(f"Max turns: {self.config.max_turns}")
            print("-" * 40)

        while not self.state.is_finished:
            if self.state.turn > self.config.max_turns:
                self._finish_max_turns()
                break

            player = self.get_current_player()
            if verbose:
                print(f"\nTurn {self.state.turn}: {player.name}")
                print(f"Hand: {' '.join(sorted(player.hand_letters))}")

            turn_result = self.play_ai_turn()

            if verbose:
                if turn_result.accepted:
                    print(f"Played {turn_result.move.word} for {turn_result.score} points")
                    if turn_result.damage:
                        print(f"Dealt {turn_result.damage} damage")
                    print(render_board(self.state.board))
                else:
                    print(f"No move: {turn_result.error}")

            if on_turn:
                on_turn(turn_result)

        if verbose:
            print("-" * 40)
            print(f"Match complete: {self.state.end_reason}")
            if self.state.winner_id:
                print(f"Winner: {self.state.winner_id}")
            for player in self.state.players:
                print(f"{player.name}: {player.score} points")

        return self.get_result()
