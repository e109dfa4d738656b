from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator


def word_key(word: str) -> str:
    """Case-insensitive key of a word.

    Comparing keys with the usual string ordering gives the word order:
    characters compared case-folded, and a word that is a prefix of another
    sorts first.
    """
    return word.lower()


def compare_words(lhs: str, rhs: str) -> int:
    a, b = word_key(lhs), word_key(rhs)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


class WordSet:
    """Ordered set of words under case-insensitive comparison.

    The first casing added for a key is kept as the canonical form. Iteration
    yields canonical forms in key order.
    """

    def __init__(self, words: Iterable[str] = ()) -> None:
        self._keys: list[str] = []
        self._canon: dict[str, str] = {}
        for w in words:
            self.add(w)

    def add(self, word: str) -> str:
        key = word_key(word)
        existing = self._canon.get(key)
        if existing is not None:
            return existing
        self._canon[key] = word
        pos = bisect_left(self._keys, key)
        self._keys.insert(pos, key)
        return word

    def canonical(self, word: str) -> str | None:
        return self._canon.get(word_key(word))

    def keys(self) -> list[str]:
        return list(self._keys)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word_key(word) in self._canon

    def __iter__(self) -> Iterator[str]:
        return (self._canon[k] for k in self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"WordSet({list(self)!r})"
