"""
Tests for the match environment: letter pool, orchestrator and result saving.
"""

import asyncio
import json

import pytest

from wordbattle.engine import Dictionary, Move, Position, VOWELS, make_letter, render_board
from wordbattle.environment import LetterPool, MatchConfig, PlayerConfig, WordBattle


def set_hands(battle, **hands):
    """Replace hands by player id (use underscores for dashes)."""
    state = battle.state
    players = []
    for player in state.players:
        letters = hands.get(player.id.replace("-", "_"))
        if letters is not None:
            player = player.model_copy(update={"hand": [make_letter(c) for c in letters]})
        players.append(player)
    battle.state = state.model_copy(update={"players": players})


def new_battle(oracle=None, **config):
    config.setdefault("seed", 11)
    battle = WordBattle.create(config=MatchConfig(**config), is_valid_word=oracle or Dictionary(["CAT", "AT", "AS"]))
    battle.setup()
    return battle


def cat_move():
    return Move(positions=[(4, 3), (4, 4), (4, 5)], word="CAT", direction="horizontal")


class TestLetterPool:
    """Test cases for the tile source."""

    def test_seeded_draws_repeat(self):
        first = LetterPool.create(seed=5).draw(10)
        second = LetterPool.create(seed=5).draw(10)
        assert [t.char for t in first] == [t.char for t in second]

    def test_endless_pool(self):
        pool = LetterPool.create(seed=1)
        assert pool.tiles_remaining is None
        for _ in range(20):
            assert len(pool.draw(10)) == 10

    def test_finite_bag_shrinks(self):
        pool = LetterPool.create(seed=1, finite=True)
        assert pool.tiles_remaining == 98
        pool.draw(10)
        assert pool.tiles_remaining == 88

    def test_finite_bag_runs_dry(self):
        pool = LetterPool.create(seed=1, finite=True)
        pool.draw(95)
        assert len(pool.draw(10)) == 3
        assert pool.draw(10) == []

    def test_refill(self):
        pool = LetterPool.create(seed=1)
        hand = pool.refill([make_letter("A")], 10)
        assert len(hand) == 10
        assert hand[0].char == "A"

    def test_exchange_vowel_replaces_first_consonant(self):
        pool = LetterPool.create(seed=3)
        hand = [make_letter(c) for c in "ABCE"]
        new_hand = pool.exchange_vowel(hand)
        assert new_hand[0].char == "A"
        assert new_hand[1].char in VOWELS
        assert [t.char for t in new_hand[2:]] == ["C", "E"]
        assert hand[1].char == "B"

    def test_exchange_vowel_needs_consonant(self):
        with pytest.raises(ValueError):
            LetterPool.create().exchange_vowel([make_letter(c) for c in "AEI"])

    def test_vowel_weights_favour_e(self):
        pool = LetterPool.create(seed=0)
        draws = [pool.random_vowel().char for _ in range(2000)]
        assert draws.count("E") > draws.count("U")
        assert set(draws) <= set("AEIOU")


class TestSetup:
    """Test cases for starting a match."""

    def test_quick_match(self):
        battle = new_battle()
        state = battle.state
        assert state.status == "playing"
        assert state.turn == 1
        assert [p.id for p in state.players] == ["player-1", "ai-1"]
        assert all(len(p.hand) == 10 for p in state.players)
        assert state.current_player_id == "player-1"
        assert state.board.is_empty

    def test_setup_is_seeded(self):
        first = new_battle(seed=99)
        second = new_battle(seed=99)
        assert [p.hand_letters for p in first.state.players] == [p.hand_letters for p in second.state.players]

    def test_level_starting_word(self):
        battle = new_battle(mode="journey", level_id=3)
        assert "RACING" in render_board(battle.state.board)
        assert battle.state.level_id == 3

    def test_boss_hit_points(self):
        battle = new_battle(mode="journey", level_id=5)
        assert battle.state.get_player("player-1").hp == 100
        assert battle.state.get_player("ai-1").hp == 65

    def test_solo_level_forbidden_squares(self):
        battle = new_battle(mode="journey", level_id=7)
        board = battle.state.board
        forbidden = [
            (r, c) for r, row in enumerate(board.cells) for c, cell in enumerate(row) if cell.is_forbidden
        ]
        assert len(battle.state.players) == 1
        assert len(forbidden) == 3
        assert (4, 4) not in forbidden

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            WordBattle.create(config=MatchConfig(mode="journey", level_id=42))

    def test_too_many_players(self):
        with pytest.raises(ValueError):
            WordBattle.create(players=[PlayerConfig(), PlayerConfig(), PlayerConfig()])

    def test_arena_rank(self):
        battle = new_battle(mode="arena", arena_rank=4)
        assert battle.level.score_limit == 220
        assert battle.state.get_player("ai-1").ai_difficulty == "nightmare"

    def test_requires_setup(self):
        battle = WordBattle.create(config=MatchConfig(seed=1), is_valid_word=Dictionary(["CAT"]))
        with pytest.raises(ValueError):
            battle.submit_move(cat_move())


class TestSubmitMove:
    """Test cases for playing moves."""

    def test_accepted_move(self):
        battle = new_battle()
        set_hands(battle, player_1="CAT")
        result = battle.submit_move(cat_move())

        assert result.accepted
        assert result.score == 5
        assert result.placed == [Position(4, 3), Position(4, 4), Position(4, 5)]
        assert result.hand_before == "CAT"
        assert len(result.hand_after) == 10

        state = battle.state
        assert state.turn == 2
        assert state.current_player_id == "ai-1"
        assert state.get_player("player-1").score == 5
        assert state.word_count == 1
        assert state.turn_history[-1].score == 5
        assert state.turn_history[-1].player_id == "player-1"

    def test_rejected_move_leaves_state(self):
        battle = new_battle()
        set_hands(battle, player_1="CAT")
        before = battle.state
        move = Move(positions=[(3, 3), (3, 4), (3, 5)], word="CAT")
        result = battle.submit_move(move)

        assert not result.accepted
        assert result.validation.code == "MISSING_CENTER"
        assert result.error == "First word must pass through the center"
        assert battle.state is before
        assert battle.turn_history[-1] is result

    def test_wrong_player(self):
        battle = new_battle()
        set_hands(battle, player_1="CAT")
        move = cat_move().model_copy(update={"player_id": "ai-1"})
        result = battle.submit_move(move)
        assert not result.accepted
        assert battle.state.turn == 1

    def test_finished_game_refuses_moves(self):
        battle = new_battle()
        battle.state = battle.state.model_copy(update={"status": "finished"})
        result = battle.submit_move(cat_move())
        assert not result.accepted
        assert result.error == "Game is already finished"

    def test_turn_limit_precheck(self):
        """Level 1 asks for two words; none were played."""
        battle = new_battle(mode="journey", level_id=1)
        battle.state = battle.state.model_copy(update={"turn": 10})
        result = battle.submit_move(cat_move())
        assert not result.accepted
        assert result.error == "Turn limit (10) reached"
        assert battle.state.is_finished
        assert battle.state.end_reason == "turn_limit_reached"
        assert battle.state.winner_id == "ai-1"

    def test_turn_limit_precheck_objective_met(self):
        battle = new_battle(mode="journey", level_id=1)
        battle.state = battle.state.model_copy(update={"turn": 10, "word_count": 2})
        battle.submit_move(cat_move())
        assert battle.state.winner_id == "player-1"

    def test_turn_limit_precheck_tie_goes_to_opponent(self):
        """A win level needs a strict lead, at the limit and before it."""
        battle = new_battle(mode="journey", level_id=8)
        battle.state = battle.state.model_copy(update={"turn": 20})
        result = battle.submit_move(cat_move())
        assert result.error == "Turn limit (20) reached"
        assert battle.state.winner_id == "ai-1"
        assert battle.state.end_reason == "turn_limit_reached"

    def test_daily_target_ends_match(self):
        battle = new_battle(mode="daily", daily_target_score=5)
        assert battle.state.daily_target_score == 5
        set_hands(battle, player_1="CAT")
        battle.submit_move(cat_move())
        assert battle.state.is_finished
        assert battle.state.winner_id == "player-1"
        assert battle.state.end_reason == "daily_target_reached"

    def test_daily_needs_target(self):
        with pytest.raises(ValueError):
            WordBattle.create(config=MatchConfig(mode="daily"))

    def test_boss_damage_on_move(self):
        battle = new_battle(mode="journey", level_id=5)
        set_hands(battle, player_1="CAT")
        result = battle.submit_move(cat_move())
        assert result.damage == 5
        assert battle.state.get_player("ai-1").hp == 60

    def test_async_oracle(self):
        async def oracle(word):
            await asyncio.sleep(0)
            return word == "CAT"

        battle = new_battle(oracle=oracle)
        set_hands(battle, player_1="CAT")
        result = asyncio.run(battle.submit_move_async(cat_move()))
        assert result.accepted
        assert battle.state.turn == 2

    def test_oracle_failure_rolls_back(self):
        async def oracle(word):
            raise ConnectionError("dictionary offline")

        battle = new_battle(oracle=oracle)
        set_hands(battle, player_1="CAT")
        before = battle.state
        result = asyncio.run(battle.submit_move_async(cat_move()))
        assert not result.accepted
        assert result.validation.code == "INVALID_WORD"
        assert battle.state is before

    def test_oracle_timeout_rolls_back(self):
        async def slow(word):
            await asyncio.sleep(5)
            return True

        battle = new_battle(oracle=slow, oracle_timeout=0.01)
        set_hands(battle, player_1="CAT")
        before = battle.state
        result = asyncio.run(battle.submit_move_async(cat_move()))
        assert not result.accepted
        assert battle.state is before


class TestAITurns:
    """Test cases for AI-driven turns and stalemates."""

    def test_ai_plays_legal_move(self):
        battle = new_battle()
        set_hands(battle, player_1="CAT")
        result = battle.play_ai_turn()
        assert result.accepted
        assert result.move.word in {"CAT", "AT"}
        assert battle.state.current_player_id == "ai-1"

    def test_checkmate_when_no_move(self):
        battle = new_battle()
        set_hands(battle, player_1="QXZ")
        result = battle.play_ai_turn()
        assert not result.accepted
        assert result.event.type == "checkmate"
        assert battle.state.is_finished
        assert battle.state.winner_id == "ai-1"
        assert battle.state.end_reason == "checkmate"

    def test_async_oracle_leaves_ai_on_word_list(self):
        """Submissions await the oracle; AI turns search the bundled words."""
        async def oracle(word):
            return word in {"CAT", "AT"}

        battle = new_battle(oracle=oracle)
        assert battle.is_valid_word is oracle
        assert battle.ai_is_valid_word is not oracle
        set_hands(battle, player_1="CAT")
        assert battle.check_stalemate() is False
        result = battle.play_ai_turn()
        assert result.accepted
        assert battle.state.turn == 2

    def test_human_player_not_driven(self):
        battle = new_battle(players=[PlayerConfig(is_ai=False), PlayerConfig()])
        with pytest.raises(ValueError):
            battle.play_ai_turn()

    def test_check_stalemate(self):
        battle = new_battle()
        set_hands(battle, player_1="CAT")
        assert battle.check_stalemate() is False
        assert not battle.state.is_finished

        set_hands(battle, player_1="QXZ")
        assert battle.check_stalemate() is True
        assert battle.state.end_reason == "checkmate"

    def test_exchange_vowel(self):
        battle = new_battle()
        set_hands(battle, player_1="BAE")
        player = battle.exchange_vowel()
        assert player.hand[0].char in VOWELS
        assert player.hand_letters[1:] == "AE"
        assert battle.state.turn == 1
        assert battle.state.current_player_id == "player-1"


class TestRun:
    """Test cases for full AI-vs-AI matches."""

    def test_run_respects_max_turns(self):
        battle = WordBattle.create(seed=4, max_turns=4)
        result = battle.run()
        assert battle.state.is_finished
        assert result.total_turns <= 4
        assert result.end_reason in {"max_turns_reached", "checkmate"}

    def test_run_is_reproducible(self):
        first = WordBattle.create(seed=8, max_turns=4)
        second = WordBattle.create(seed=8, max_turns=4)
        first.run()
        second.run()
        played = lambda battle: [(t.player_id, t.move.word if t.move else None) for t in battle.turn_history]
        assert played(first) == played(second)
        assert render_board(first.state.board) == render_board(second.state.board)

    def test_save_result(self, tmp_path):
        battle = new_battle()
        set_hands(battle, player_1="CAT")
        battle.submit_move(cat_move())
        path = tmp_path / "out" / "match.json"
        battle.save_result(path)

        data = json.loads(path.read_text())
        assert data["total_turns"] == 1
        assert data["turn_history"][0]["move"]["word"] == "CAT"
        assert data["player_results"]["player-1"]["score"] == 5
        assert "CAT" in data["final_board"]

    def test_get_state(self):
        battle = new_battle()
        state = battle.get_state()
        assert state["game"]["turn"] == 1
        assert len(state["players"]) == 2
        assert state["pool"]["finite"] is False
