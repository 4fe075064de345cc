"""
Player state.

A player owns a hand of unplaced tiles, a running score and, in boss
battles, hit points. Players are replaced rather than edited while a turn is
being committed, so a failed turn leaves the previous player untouched.
"""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from ..engine.models import Letter


AIDifficulty = Literal["easy", "medium", "hard", "very_hard", "nightmare"]


class Player(BaseModel):
    """
    One side of a match.

    Attributes:
        id: Unique identifier for the player
        name: Display name
        hand: Tiles the player holds
        score: Accumulated points
        is_ai: Whether the move generator plays for this player
        ai_difficulty: Preset used when ``is_ai`` is set
        hp: Hit points, present only in boss battles
    """

    id: str
    name: str = ""
    hand: List[Letter] = Field(default_factory=list)
    score: int = 0
    is_ai: bool = False
    ai_difficulty: Optional[AIDifficulty] = None
    hp: Optional[int] = None

    def model_post_init(self, __context) -> None:
        """Set default name if not provided."""
        if not self.name:
            self.name = f"Player {self.id}"

    @property
    def tiles_in_hand(self) -> int:
        """Number of tiles currently in hand."""
        return len(self.hand)

    @property
    def hand_summary(self) -> Dict[str, int]:
        """Get a count of each letter in hand."""
        summary: Dict[str, int] = {}
        for tile in self.hand:
            summary[tile.char] = summary.get(tile.char, 0) + 1
        return dict(sorted(summary.items()))

    @property
    def hand_letters(self) -> str:
        return "".join(tile.char for tile in self.hand)

    def get_state(self) -> Dict:
        """
        Get the current player state as a dictionary.

        Returns:
            Dictionary containing player state
        """
        return {
            "id": self.id,
            "name": self.name,
            "is_ai": self.is_ai,
            "ai_difficulty": self.ai_difficulty,
            "score": self.score,
            "hp": self.hp,
            "tiles_in_hand": self.tiles_in_hand,
            "hand": self.hand_letters,
            "hand_summary": self.hand_summary,
        }
