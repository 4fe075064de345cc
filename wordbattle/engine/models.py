"""Data models for the board and move engine."""

from typing import List, Optional, Literal, NamedTuple, Tuple
from pydantic import BaseModel, Field, ConfigDict, field_validator


Direction = Literal["horizontal", "vertical"]
ErrorCategory = Literal["geometry", "placement", "resource", "dictionary"]


class Position(NamedTuple):
    """A (row, col) coordinate on the board."""
    row: int
    col: int


class Letter(BaseModel):
    """A letter tile. Only its face value and point value matter."""
    model_config = ConfigDict(frozen=True)

    char: str = Field(..., min_length=1, max_length=1)
    points: int = Field(default=0, ge=0)
    is_wildcard: bool = False

    @field_validator("char")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class Cell(BaseModel):
    """A single board square."""
    model_config = ConfigDict(frozen=True)

    letter: Optional[Letter] = None
    is_center: bool = False
    is_newly_placed: bool = False  # cosmetic, cleared after every applied move
    is_forbidden: bool = False


class Move(BaseModel):
    """
    A proposed or applied placement.

    ``word[i]`` is the character placed at (or reused from) ``positions[i]``.
    The model does not enforce equal lengths; the validator rejects
    mismatched moves so callers get a result instead of an exception.
    """
    model_config = ConfigDict(frozen=True)

    positions: Tuple[Position, ...] = ()
    word: str = ""
    direction: Optional[Direction] = None
    score: int = 0
    player_id: str = ""

    @field_validator("word")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class FormedWord(BaseModel):
    """A word read off the board, with the squares it covers."""
    model_config = ConfigDict(frozen=True)

    word: str
    positions: Tuple[Position, ...]


class ValidationResult(BaseModel):
    """Outcome of validating a move. Rule failures never raise."""
    valid: bool
    error: Optional[str] = None
    code: Optional[str] = None
    category: Optional[ErrorCategory] = None
    invalid_words: List[str] = Field(default_factory=list)
    words: List[FormedWord] = Field(default_factory=list)
