"""Bundled word list."""

from pathlib import Path
from typing import List


WORDS_FILE = Path(__file__).parent / "words.txt"


def read_word_list(path: Path) -> List[str]:
    words = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            words.extend(line.upper().split())
    return words
