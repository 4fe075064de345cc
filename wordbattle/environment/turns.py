"""
Turn and win engine.

Pure functions over ``GameState``: every helper returns a new state or a
verdict and never edits its input.
"""

import logging
from typing import List, Optional, Tuple

from ..engine.board import board_contains_word
from .levels import get_level
from .models import GameEvent, GameState, LevelConfig, SigilEffect, WinCheck


logger = logging.getLogger(__name__)

ENDLESS_KNOWLEDGE_CADENCE = 3
ENDLESS_KNOWLEDGE_BURST = 4
ENDLESS_KNOWLEDGE_TICK = 2
ENDLESS_KNOWLEDGE_TURNS = 3
ENDLESS_KNOWLEDGE_PLUS_CADENCE = 5
ENDLESS_KNOWLEDGE_PLUS_MULTIPLIER = 10


def calculate_damage(word_length: int) -> int:
    """5 damage below five letters, plus one per letter beyond five."""
    if word_length < 5:
        return 5
    return 5 + (word_length - 5)


def _resolve_level(game_state: GameState, level_config: Optional[LevelConfig], level_id: Optional[int]) -> Optional[LevelConfig]:
    if level_config is not None:
        return level_config
    level_id = level_id if level_id is not None else game_state.level_id
    if level_id is None:
        return None
    return get_level(level_id)


def _target_word_built(game_state: GameState, target: str) -> bool:
    target = target.upper()
    return (
        any(move.word == target for move in game_state.turn_history)
        or board_contains_word(game_state.board, target)
    )


def _objective_met(game_state: GameState, level: LevelConfig, score: int) -> Optional[bool]:
    """Whether the challenger passed the level bar; None when the objective has no bar."""
    if level.objective == "word_count":
        return level.target_word_count is not None and game_state.word_count >= level.target_word_count
    if level.objective in ("score_threshold", "race_to_score"):
        return level.target_score is not None and score >= level.target_score
    return None


def check_win_condition(
    game_state: GameState,
    level_config: Optional[LevelConfig] = None,
    level_id: Optional[int] = None,
) -> WinCheck:
    """
    Decide whether the match is over.

    Conditions are checked in priority order: hit points, the daily target
    score, level objectives that end a game early, the turn limit, letter
    depletion, and finally a recorded checkmate for the player to act.

    Args:
        game_state: State after the latest half-turn
        level_config: Level rules; looked up from ``level_id`` when omitted
        level_id: Journey level id, defaulting to ``game_state.level_id``

    Returns:
        WinCheck with the winner and a machine-readable reason
    """
    level = _resolve_level(game_state, level_config, level_id)
    player, ai = game_state.sides()

    if player and ai and player.hp is not None and ai.hp is not None:
        if ai.hp <= 0:
            return WinCheck(finished=True, winner_id=player.id, reason="boss_defeated")
        if player.hp <= 0:
            return WinCheck(finished=True, winner_id=ai.id, reason="player_defeated")

    target = game_state.daily_target_score
    if game_state.mode == "daily" and target is not None and player is not None and player.score >= target:
        return WinCheck(finished=True, winner_id=player.id, reason="daily_target_reached")

    if level is not None and player is not None:
        if level.target_word and _target_word_built(game_state, level.target_word):
            return WinCheck(finished=True, winner_id=player.id, reason="target_word_built")

        if level.score_limit is not None:
            for side in (player, ai):
                if side is not None and side.score >= level.score_limit:
                    return WinCheck(finished=True, winner_id=side.id, reason="score_limit_reached")

        if level.early_win_score is not None and player.score >= level.early_win_score:
            return WinCheck(finished=True, winner_id=player.id, reason="three_star_achieved")

        if level.turn_limit and game_state.turn >= level.turn_limit:
            if ai is None:
                if level.target_word:
                    return WinCheck(finished=True, winner_id=None, reason="turn_limit_reached_no_winner")
                return WinCheck(finished=True, winner_id=player.id, reason="turn_limit_reached")
            passed = _objective_met(game_state, level, player.score)
            if passed is None:
                passed = player.score > ai.score
            winner = player if passed else ai
            return WinCheck(finished=True, winner_id=winner.id, reason="turn_limit_reached")

    for candidate in game_state.players:
        if not candidate.hand:
            return WinCheck(finished=True, winner_id=candidate.id, reason="letter_depletion")

    event = game_state.last_event
    if event is not None and event.type == "checkmate" and event.player_id == game_state.current_player_id:
        opponent = game_state.opponent_of(event.player_id)
        return WinCheck(finished=True, winner_id=opponent.id if opponent else None, reason="checkmate")

    return WinCheck(finished=False)


def finish_game(game_state: GameState, check: WinCheck) -> GameState:
    """Return the finished state for a terminal verdict."""
    logger.info("Game %s finished: %s (winner: %s)", game_state.id, check.reason, check.winner_id)
    return game_state.model_copy(update={
        "status": "finished",
        "winner_id": check.winner_id,
        "end_reason": check.reason or "",
    })


def advance_turn(game_state: GameState) -> GameState:
    """Hand the turn to the other player and bump the turn counter."""
    opponent = game_state.opponent_of(game_state.current_player_id)
    next_id = opponent.id if opponent else game_state.current_player_id
    return game_state.model_copy(update={"current_player_id": next_id, "turn": game_state.turn + 1})


def record_checkmate(game_state: GameState, player_id: str) -> GameState:
    """Record that ``player_id`` has no legal move."""
    player = game_state.get_player(player_id)
    event = GameEvent(type="checkmate", player_id=player_id, message=f"{player.name} has no legal move")
    return game_state.model_copy(update={"last_event": event})


def _sigil_damage(
    game_state: GameState,
    level: LevelConfig,
    word_length: int,
) -> Tuple[int, int, int, List[SigilEffect]]:
    """(bonus damage, new sigil count, new five-letter count, remaining effects) for a challenger move."""
    bonus = 0
    effects: List[SigilEffect] = []
    for effect in game_state.active_sigil_effects:
        bonus += effect.damage
        if effect.turns_remaining > 1:
            effects.append(effect.model_copy(update={"turns_remaining": effect.turns_remaining - 1}))

    sigil_count = game_state.sigil_count + 1
    five_letter = game_state.five_letter_word_count
    sigil = level.boss_battle.sigil if level.boss_battle else None

    if sigil == "endless_knowledge" and sigil_count % ENDLESS_KNOWLEDGE_CADENCE == 0:
        bonus += ENDLESS_KNOWLEDGE_BURST
        effects.append(SigilEffect(
            type="endless_knowledge",
            damage=ENDLESS_KNOWLEDGE_TICK,
            turns_remaining=ENDLESS_KNOWLEDGE_TURNS,
        ))
    elif sigil == "endless_knowledge_plus":
        if word_length == 5:
            five_letter += 1
        if sigil_count % ENDLESS_KNOWLEDGE_PLUS_CADENCE == 0:
            bonus += ENDLESS_KNOWLEDGE_PLUS_MULTIPLIER * five_letter

    return bonus, sigil_count, five_letter, effects


def apply_boss_damage(
    game_state: GameState,
    attacker_id: str,
    word: str,
    level_config: Optional[LevelConfig] = None,
) -> Tuple[GameState, int]:
    """
    Deal word-length damage from ``attacker_id`` to the other player.

    Sigils only power the challenger's moves. HP never drops below zero.
    States without hit points are returned unchanged with zero damage.

    Returns:
        (new state, damage dealt)
    """
    level = _resolve_level(game_state, level_config, None)
    defender = game_state.opponent_of(attacker_id)
    attacker = game_state.get_player(attacker_id)
    if defender is None or defender.hp is None or attacker.hp is None:
        return game_state, 0

    damage = calculate_damage(len(word))
    update = {}
    challenger, _ = game_state.sides()
    if level is not None and level.boss_battle is not None and challenger and challenger.id == attacker_id:
        bonus, sigil_count, five_letter, effects = _sigil_damage(game_state, level, len(word))
        damage += bonus
        update.update(
            sigil_count=sigil_count,
            five_letter_word_count=five_letter,
            active_sigil_effects=effects,
        )

    players = [
        p.model_copy(update={"hp": max(0, p.hp - damage)}) if p.id == defender.id else p
        for p in game_state.players
    ]
    update["players"] = players
    return game_state.model_copy(update=update), damage
