import random
from typing import List, Dict, Optional, Sequence, Tuple, TypeVar
from pydantic import BaseModel, Field, ConfigDict

from ..engine.letters import VOWELS, create_letter_distribution, draw_letters, make_letter, shuffle_letters
from ..engine.models import Letter


T = TypeVar("T")

# Weighted vowel table used by the vowel exchange (percent)
VOWEL_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    ("E", 45),
    ("A", 15),
    ("I", 15),
    ("O", 15),
    ("U", 10),
)


class LetterPool(BaseModel):
    """
    Source of tiles for one match.

    By default every draw is taken from a freshly shuffled full distribution,
    so the pool never runs dry. With ``finite`` set the pool is a single
    shuffled bag that shrinks as tiles are dealt.

    Attributes:
        seed: Optional random seed for reproducibility
        finite: Whether tiles are dealt from one shrinking bag
        bag: The remaining tiles when ``finite`` is set
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    seed: Optional[int] = None
    finite: bool = False
    bag: List[Letter] = Field(default_factory=list)
    _rng: random.Random = None

    def model_post_init(self, __context) -> None:
        """Initialize the random generator after model creation."""
        self._rng = random.Random(self.seed)

    @classmethod
    def create(cls, seed: Optional[int] = None, finite: bool = False) -> "LetterPool":
        """
        Factory method to create a pool, shuffling the bag when it is finite.

        Args:
            seed: Optional random seed for reproducibility
            finite: Deal from a single bag instead of an endless supply

        Returns:
            A new LetterPool instance
        """
        pool = cls(seed=seed, finite=finite)
        if finite:
            pool.bag = shuffle_letters(create_letter_distribution(), pool._rng)
        return pool

    @property
    def tiles_remaining(self) -> Optional[int]:
        """Tiles left in the bag, or None for an endless pool."""
        return len(self.bag) if self.finite else None

    def draw(self, count: int) -> List[Letter]:
        """
        Draw up to ``count`` tiles.

        A finite bag hands out what it has left, which may be fewer tiles
        than asked for.
        """
        if count <= 0:
            return []
        if not self.finite:
            return draw_letters(count, create_letter_distribution(), self._rng)
        tiles = self.bag[:count]
        self.bag = self.bag[count:]
        return tiles

    def refill(self, hand: Sequence[Letter], hand_size: int) -> List[Letter]:
        """Return ``hand`` topped up to ``hand_size`` tiles."""
        return list(hand) + self.draw(hand_size - len(hand))

    def pick(self, items: Sequence[T], count: int) -> List[T]:
        """Choose ``count`` distinct items (fewer if there are not enough)."""
        return self._rng.sample(list(items), min(count, len(items)))

    def random_vowel(self) -> Letter:
        chars = [char for char, _ in VOWEL_WEIGHTS]
        weights = [weight for _, weight in VOWEL_WEIGHTS]
        return make_letter(self._rng.choices(chars, weights=weights)[0])

    def exchange_vowel(self, hand: Sequence[Letter]) -> List[Letter]:
        """
        Swap the first consonant in ``hand`` for a weighted-random vowel.

        Args:
            hand: Tiles to exchange from (not modified)

        Returns:
            The new hand, same size and order

        Raises:
            ValueError: If the hand holds no consonant
        """
        for i, tile in enumerate(hand):
            if not tile.is_wildcard and tile.char not in VOWELS:
                new_hand = list(hand)
                new_hand[i] = self.random_vowel()
                return new_hand
        raise ValueError("No consonant in hand to exchange")

    def get_state(self) -> Dict:
        return {
            "seed": self.seed,
            "finite": self.finite,
            "tiles_remaining": self.tiles_remaining,
        }
