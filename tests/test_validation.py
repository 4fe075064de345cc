"""
Test suite for move validation.

Covers every rejection code in check order:
- Geometry (NO_POSITIONS, NOT_STRAIGHT, OUT_OF_ORDER, NOT_CONSECUTIVE, GAP_NOT_FILLED, DIRECTION_MISMATCH)
- Placement (FORBIDDEN_SQUARE, MISSING_CENTER, NOT_CONNECTED, OUT_OF_BOUNDS, PARALLEL_SPACING)
- Resources (LENGTH_MISMATCH, INVALID_CHARACTER, LETTER_CONFLICT, INSUFFICIENT_LETTERS, NO_NEW_TILES)
- Dictionary (NO_WORD_FORMED, INVALID_WORD), including async oracles
"""

import asyncio

import pytest

from wordbattle.engine import (
    Move,
    Position,
    make_letter,
    make_wildcard,
    mark_forbidden_squares,
    place_starting_word,
    project_move,
    validate_move,
    validate_move_async,
)


def horizontal(row, start_col, word):
    return Move(
        positions=[(row, start_col + i) for i in range(len(word))],
        word=word,
        direction="horizontal",
    )


class TestValidMoves:
    """Test cases for moves that should be accepted."""

    def test_first_move_through_center(self, empty_board, make_hand, words):
        """RACING across the center row is a legal opening."""
        move = horizontal(4, 1, "RACING")
        result = validate_move(empty_board, move, make_hand("RACINGXYZE"), words("RACING"))
        assert result.valid is True
        assert result.error is None
        assert [w.word for w in result.words] == ["RACING"]

    def test_lowercase_word_accepted(self, empty_board, make_hand, words):
        move = Move(positions=[(4, 4), (4, 5)], word="at")
        result = validate_move(empty_board, move, make_hand("AT"), words("AT"))
        assert result.valid is True

    def test_reused_letter_rereads_crossing_word(self, empty_board, make_hand, words):
        """AS hung off the A of CAT reads CAT again through the shared square."""
        board = empty_board.with_letters({
            Position(2, 2): make_letter("C"),
            Position(2, 3): make_letter("A"),
            Position(2, 4): make_letter("T"),
        })
        move = Move(positions=[(2, 3), (3, 3)], word="AS", direction="vertical")
        result = validate_move(board, move, make_hand("S"), words("AS", "CAT"))
        assert result.valid is True
        assert [w.word for w in result.words] == ["AS", "CAT"]

    def test_reused_letter_crossing_word_must_be_valid(self, empty_board, make_hand, words):
        board = empty_board.with_letters({
            Position(2, 2): make_letter("C"),
            Position(2, 3): make_letter("A"),
            Position(2, 4): make_letter("T"),
        })
        move = Move(positions=[(2, 3), (3, 3)], word="AS", direction="vertical")
        result = validate_move(board, move, make_hand("S"), words("AS"))
        assert result.code == "INVALID_WORD"
        assert result.invalid_words == ["CAT"]

    def test_cross_word_formed(self, empty_board, make_hand, words):
        """NE under TO also spells TON downwards."""
        board = empty_board.with_letters({
            Position(3, 4): make_letter("T"),
            Position(4, 4): make_letter("O"),
        })
        move = Move(positions=[(5, 4), (5, 5)], word="NE", direction="horizontal")
        result = validate_move(board, move, make_hand("NE"), words("NE", "TON"))
        assert result.valid is True
        assert [w.word for w in result.words] == ["NE", "TON"]

    def test_single_tile_hook(self, cat_board, make_hand, words):
        """One tile under the A of CAT spells AS downwards."""
        move = Move(positions=[(5, 4)], word="S", direction="vertical")
        result = validate_move(cat_board, move, make_hand("S"), words("AS"))
        assert result.valid is True
        assert [w.word for w in result.words] == ["AS"]

    def test_extend_existing_word(self, cat_board, make_hand, words):
        move = horizontal(4, 3, "CATS")
        result = validate_move(cat_board, move, make_hand("S"), words("CATS"))
        assert result.valid is True

    def test_gapped_move_when_allowed(self, cat_board, make_hand, words):
        """B above and T below the A of CAT read BAT."""
        move = Move(positions=[(3, 4), (5, 4)], word="BT")
        result = validate_move(cat_board, move, make_hand("BT"), words("BAT"), allow_gaps=True)
        assert result.valid is True
        assert [w.word for w in result.words] == ["BAT"]

    def test_wildcard_covers_missing_letter(self, empty_board, make_hand, words):
        move = horizontal(4, 3, "CAT")
        hand = make_hand("CA") + [make_wildcard()]
        result = validate_move(empty_board, move, hand, words("CAT"))
        assert result.valid is True

    def test_inputs_not_modified(self, cat_board, make_hand, words):
        hand = make_hand("S")
        move = horizontal(4, 3, "CATS")
        validate_move(cat_board, move, hand, words("CATS"))
        assert cat_board.letter_at(Position(4, 6)) is None
        assert [t.char for t in hand] == ["S"]


class TestGeometryErrors:
    """Test cases for malformed position lists."""

    def test_no_positions(self, empty_board, make_hand, words):
        result = validate_move(empty_board, Move(word="A"), make_hand("A"), words())
        assert result.valid is False
        assert result.code == "NO_POSITIONS"
        assert result.category == "geometry"

    def test_diagonal(self, empty_board, make_hand, words):
        move = Move(positions=[(3, 3), (4, 4)], word="AT")
        result = validate_move(empty_board, move, make_hand("AT"), words("AT"))
        assert result.code == "NOT_STRAIGHT"

    def test_bent_line(self, empty_board, make_hand, words):
        move = Move(positions=[(4, 3), (4, 4), (5, 4)], word="CAT")
        result = validate_move(empty_board, move, make_hand("CAT"), words("CAT"))
        assert result.code == "NOT_STRAIGHT"
        assert "same row" in result.error

    def test_reversed_positions(self, empty_board, make_hand, words):
        move = Move(positions=[(4, 5), (4, 4)], word="TA")
        result = validate_move(empty_board, move, make_hand("AT"), words("TA"))
        assert result.code == "OUT_OF_ORDER"

    def test_duplicate_position(self, empty_board, make_hand, words):
        move = Move(positions=[(4, 4), (4, 4)], word="AA")
        result = validate_move(empty_board, move, make_hand("AA"), words("AA"))
        assert result.code == "OUT_OF_ORDER"

    def test_gap_not_allowed(self, cat_board, make_hand, words):
        move = Move(positions=[(3, 4), (5, 4)], word="BT")
        result = validate_move(cat_board, move, make_hand("BT"), words("BAT"))
        assert result.code == "NOT_CONSECUTIVE"
        assert result.error == "Positions must be consecutive with no gaps"

    def test_gap_over_empty_square(self, cat_board, make_hand, words):
        move = Move(positions=[(5, 4), (7, 4)], word="ST")
        result = validate_move(cat_board, move, make_hand("ST"), words("SAT"), allow_gaps=True)
        assert result.code == "GAP_NOT_FILLED"

    def test_declared_direction_mismatch(self, empty_board, make_hand, words):
        move = Move(positions=[(4, 4), (4, 5)], word="AT", direction="vertical")
        result = validate_move(empty_board, move, make_hand("AT"), words("AT"))
        assert result.code == "DIRECTION_MISMATCH"


class TestPlacementErrors:
    """Test cases for where a move may go."""

    def test_first_move_misses_center(self, empty_board, make_hand, words):
        move = horizontal(3, 1, "RACING")
        result = validate_move(empty_board, move, make_hand("RACING"), words("RACING"))
        assert result.valid is False
        assert result.code == "MISSING_CENTER"
        assert result.error == "First word must pass through the center"

    def test_disconnected_move(self, cat_board, make_hand, words):
        move = horizontal(0, 0, "AT")
        result = validate_move(cat_board, move, make_hand("AT"), words("AT"))
        assert result.code == "NOT_CONNECTED"

    def test_off_board(self, cat_board, make_hand, words):
        move = horizontal(4, 5, "TAXI")
        result = validate_move(cat_board, move, make_hand("AXI"), words("TAXI"))
        assert result.code == "OUT_OF_BOUNDS"
        assert result.error == "Invalid position (4, 8)"

    def test_forbidden_square(self, empty_board, make_hand, words):
        board = mark_forbidden_squares(empty_board, [Position(4, 5)])
        move = horizontal(4, 4, "AT")
        result = validate_move(board, move, make_hand("AT"), words("AT"))
        assert result.code == "FORBIDDEN_SQUARE"
        assert result.category == "placement"

    def test_parallel_word_rejected(self, cat_board, make_hand, words):
        """AT directly under CA touches CAT side-on."""
        move = horizontal(5, 3, "AT")
        result = validate_move(cat_board, move, make_hand("AT"), words("AT"))
        assert result.code == "PARALLEL_SPACING"

    def test_single_tile_parallel_word_rejected(self, cat_board, make_hand, words):
        """O beside a T under CAT spells TO flush against it."""
        board = cat_board.with_letters({Position(5, 4): make_letter("T")})
        move = Move(positions=[(5, 5)], word="O", direction="horizontal")
        result = validate_move(board, move, make_hand("O"), words("TO", "AT"))
        assert result.valid is False
        assert result.code == "PARALLEL_SPACING"

    def test_single_tile_defaults_to_horizontal(self, cat_board, make_hand, words):
        """An undeclared lone S under the A of CAT is read across, touching CAT side-on."""
        move = Move(positions=[(5, 4)], word="S")
        result = validate_move(cat_board, move, make_hand("S"), words("AS"))
        assert result.code == "PARALLEL_SPACING"

    def test_parallel_word_with_space_accepted(self, cat_board, make_hand, words):
        """A vertical word hooked to the end of CAT does not touch it side-on."""
        move = Move(positions=[(4, 5), (5, 5), (6, 5)], word="TOE")
        result = validate_move(cat_board, move, make_hand("OE"), words("TOE", "CAT"))
        assert result.valid is True


class TestResourceErrors:
    """Test cases for word/hand consistency."""

    def test_length_mismatch(self, empty_board, make_hand, words):
        move = Move(positions=[(4, 3), (4, 4)], word="CAT")
        result = validate_move(empty_board, move, make_hand("CAT"), words("CAT"))
        assert result.code == "LENGTH_MISMATCH"

    def test_not_enough_letters(self, empty_board, make_hand, words):
        """BANANA needs three A tiles."""
        move = horizontal(4, 1, "BANANA")
        result = validate_move(empty_board, move, make_hand("BANNA"), words("BANANA"))
        assert result.code == "INSUFFICIENT_LETTERS"
        assert result.error == "Not enough letters: A"
        assert result.category == "resource"

    def test_missing_letter(self, empty_board, make_hand, words):
        move = horizontal(4, 3, "CAT")
        result = validate_move(empty_board, move, make_hand("CAR"), words("CAT"))
        assert result.error == "Not enough letters: T"

    def test_reused_board_letter_not_charged(self, cat_board, make_hand, words):
        """Extending CAT only needs the new S."""
        move = horizontal(4, 3, "CATS")
        result = validate_move(cat_board, move, make_hand("S"), words("CATS"))
        assert result.valid is True

    def test_letter_conflict(self, cat_board, make_hand, words):
        move = horizontal(4, 3, "COT")
        result = validate_move(cat_board, move, make_hand("O"), words("COT"))
        assert result.code == "LETTER_CONFLICT"

    def test_invalid_character(self, empty_board, make_hand, words):
        move = Move(positions=[(4, 4), (4, 5)], word="A1")
        result = validate_move(empty_board, move, make_hand("A"), words())
        assert result.code == "INVALID_CHARACTER"

    def test_no_new_tiles(self, cat_board, make_hand, words):
        move = horizontal(4, 3, "CAT")
        result = validate_move(cat_board, move, make_hand("XYZ"), words("CAT"))
        assert result.code == "NO_NEW_TILES"


class TestDictionaryErrors:
    """Test cases for dictionary checks."""

    def test_invalid_primary_word(self, empty_board, make_hand, words):
        move = horizontal(4, 3, "TAC")
        result = validate_move(empty_board, move, make_hand("CAT"), words("CAT"))
        assert result.valid is False
        assert result.code == "INVALID_WORD"
        assert result.invalid_words == ["TAC"]
        assert result.error == (
            "Invalid word(s): TAC. All words (main + crosses) must be valid dictionary words."
        )

    def test_invalid_cross_word(self, empty_board, make_hand, words):
        board = empty_board.with_letters({
            Position(3, 4): make_letter("T"),
            Position(4, 4): make_letter("O"),
        })
        move = Move(positions=[(5, 4), (5, 5)], word="NE", direction="horizontal")
        result = validate_move(board, move, make_hand("NE"), words("NE"))
        assert result.invalid_words == ["TON"]

    def test_single_letter_forms_no_word(self, empty_board, make_hand, words):
        move = Move(positions=[(4, 4)], word="A")
        result = validate_move(empty_board, move, make_hand("A"), words("A"))
        assert result.code == "NO_WORD_FORMED"

    def test_oracle_exception_counts_as_invalid(self, empty_board, make_hand):
        def broken(word):
            raise RuntimeError("dictionary offline")

        result = validate_move(empty_board, horizontal(4, 4, "AT"), make_hand("AT"), broken)
        assert result.code == "INVALID_WORD"
        assert result.invalid_words == ["AT"]

    def test_async_oracle_rejected_by_sync_validator(self, empty_board, make_hand):
        async def oracle(word):
            return True

        with pytest.raises(TypeError):
            validate_move(empty_board, horizontal(4, 4, "AT"), make_hand("AT"), oracle)


class TestAsyncValidation:
    """Test cases for the awaitable validator."""

    def test_async_oracle(self, empty_board, make_hand):
        async def oracle(word):
            await asyncio.sleep(0)
            return word == "AT"

        result = asyncio.run(validate_move_async(empty_board, horizontal(4, 4, "AT"), make_hand("AT"), oracle))
        assert result.valid is True

    def test_sync_oracle_accepted(self, empty_board, make_hand, words):
        result = asyncio.run(
            validate_move_async(empty_board, horizontal(4, 4, "AT"), make_hand("AT"), words("AT"))
        )
        assert result.valid is True

    def test_timeout_counts_as_invalid(self, empty_board, make_hand):
        async def slow(word):
            await asyncio.sleep(5)
            return True

        result = asyncio.run(
            validate_move_async(empty_board, horizontal(4, 4, "AT"), make_hand("AT"), slow, timeout=0.01)
        )
        assert result.valid is False
        assert result.code == "INVALID_WORD"

    def test_oracle_error_counts_as_invalid(self, empty_board, make_hand):
        async def broken(word):
            raise ConnectionError("lookup failed")

        result = asyncio.run(
            validate_move_async(empty_board, horizontal(4, 4, "AT"), make_hand("AT"), broken)
        )
        assert result.code == "INVALID_WORD"

    def test_rule_failure_skips_oracle(self, empty_board, make_hand):
        calls = []

        async def oracle(word):
            calls.append(word)
            return True

        result = asyncio.run(
            validate_move_async(empty_board, horizontal(3, 1, "RACING"), make_hand("RACING"), oracle)
        )
        assert result.code == "MISSING_CENTER"
        assert calls == []


class TestProjection:
    """Test cases for hypothetical placement."""

    def test_project_move_is_pure(self, cat_board):
        move = horizontal(4, 3, "CATS")
        projected = project_move(cat_board, move)
        assert projected.letter_at(Position(4, 6)).char == "S"
        assert cat_board.letter_at(Position(4, 6)) is None

    def test_hook_on_starting_word(self, empty_board, make_hand, words):
        """The prefilled RACING is read again through the shared C."""
        board = place_starting_word(empty_board, "RACING")
        move = Move(positions=[(3, 3), (4, 3)], word="AC", direction="vertical")
        result = validate_move(board, move, make_hand("A"), words("AC"))
        assert result.code == "INVALID_WORD"
        assert result.invalid_words == ["RACING"]

        result = validate_move(board, move, make_hand("A"), words("AC", "RACING"))
        assert result.valid is True
        assert [w.word for w in result.words] == ["AC", "RACING"]
