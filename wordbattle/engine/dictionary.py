"""
Dictionary oracle.

The engine only ever asks one question of a dictionary: is this word legal?
Any callable ``is_valid_word(word) -> bool`` (or an async one) will do.
``Dictionary`` is the bundled word-list implementation; it also answers
prefix queries so the AI can prune its search.
"""

import asyncio
import inspect
import logging
from functools import lru_cache
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Set, Union

from .data import WORDS_FILE, read_word_list


logger = logging.getLogger(__name__)

WordOracle = Callable[[str], Union[bool, Awaitable[bool]]]

DEFAULT_ORACLE_TIMEOUT = 2.0


class Dictionary:
    """Case-insensitive word set with prefix lookup."""

    def __init__(self, words: Iterable[str] = ()):
        self._words: Set[str] = set()
        self._prefixes: Set[str] = set()
        for word in words:
            self.add(word)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Dictionary":
        """Load a word list with one word per line; '#' starts a comment line."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Word list not found: {path}")
        return cls(read_word_list(path))

    def add(self, word: str) -> None:
        word = word.strip().upper()
        if not word:
            return
        self._words.add(word)
        for i in range(1, len(word) + 1):
            self._prefixes.add(word[:i])

    def is_valid_word(self, word: str) -> bool:
        """Never raises: anything that is not a known word is False."""
        if not isinstance(word, str):
            return False
        return word.strip().upper() in self._words

    def is_prefix(self, prefix: str) -> bool:
        """Whether some word starts with ``prefix``."""
        if not isinstance(prefix, str):
            return False
        return prefix.strip().upper() in self._prefixes

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.is_valid_word(word)

    def __len__(self) -> int:
        return len(self._words)

    def __call__(self, word: str) -> bool:
        return self.is_valid_word(word)


@lru_cache(maxsize=1)
def default_dictionary() -> Dictionary:
    """The bundled word list, loaded once."""
    dictionary = Dictionary(read_word_list(WORDS_FILE))
    logger.debug("Loaded %d words from %s", len(dictionary), WORDS_FILE)
    return dictionary


def is_async_oracle(is_valid_word: WordOracle) -> bool:
    """Whether calling the oracle returns a coroutine."""
    return inspect.iscoroutinefunction(is_valid_word) or inspect.iscoroutinefunction(
        getattr(is_valid_word, "__call__", None)
    )


def check_word(word: str) -> bool:
    """Check ``word`` against the bundled word list."""
    return default_dictionary().is_valid_word(word)


async def check_word_async(
    is_valid_word: WordOracle,
    word: str,
    timeout: float = DEFAULT_ORACLE_TIMEOUT,
) -> bool:
    """
    Ask a sync or async oracle about ``word`` within ``timeout`` seconds.

    A timeout or an oracle exception is logged and treated as an invalid
    word, so an unreliable dictionary can only reject, never approve.
    """
    try:
        result = is_valid_word(word)
        if inspect.isawaitable(result):
            result = await asyncio.wait_for(result, timeout)
        return bool(result)
    except asyncio.TimeoutError:
        logger.warning("Dictionary lookup for %r timed out after %.2fs", word, timeout)
        return False
    except Exception:
        logger.exception("Dictionary lookup for %r failed", word)
        return False
