from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np

from index.ordering import WordSet, word_key
from processing.text import extract_unique_words, extract_words, split_lines

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class LineIndex:
    """TF-IDF relevance of every vocabulary word on every line of a text.

    `relevance_table` has one row per vocabulary word (in vocabulary order) and one
    column per retained line. Ignored lines have an all-zero column.
    """

    lines: tuple[str, ...] = ()
    ignored: frozenset[int] = frozenset()
    vocabulary: WordSet = field(default_factory=WordSet)
    idf_values: np.ndarray = field(default_factory=lambda: np.zeros(0))
    relevance_table: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    rows: dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.lines)

    def idf(self, word: str) -> float:
        row = self.rows.get(word_key(word))
        if row is None:
            return 0.0
        return float(self.idf_values[row])

    def relevance(self, word: str) -> np.ndarray:
        row = self.rows.get(word_key(word))
        if row is None:
            return np.zeros(len(self.lines))
        return self.relevance_table[row]

    def scores(self, words: Iterable[str]) -> np.ndarray:
        total = np.zeros(len(self.lines))
        for w in words:
            row = self.rows.get(word_key(w))
            if row is not None:
                total += self.relevance_table[row]
        return total

    def stats(self) -> dict[str, int]:
        return {
            "lines": len(self.lines),
            "ignored": len(self.ignored),
            "vocabulary": len(self.vocabulary),
        }


def build_line_index(text: str) -> LineIndex:
    lines = split_lines(text)
    n = len(lines)
    vocab = extract_unique_words(text)
    rows = {key: i for i, key in enumerate(vocab.keys())}

    # term frequency: (words, lines)
    tf = np.zeros((len(vocab), n))
    ignored: set[int] = set()
    for i, line in enumerate(lines):
        tokens = extract_words(line)
        if not tokens:
            ignored.add(i)
            continue
        for tok in tokens:
            tf[rows[word_key(tok)], i] += 1.0
        tf[:, i] /= len(tokens)

    # ignored lines count towards n but never towards df
    df = np.count_nonzero(tf, axis=1)
    idf = np.zeros(len(vocab))
    present = df > 0
    idf[present] = np.log(n / df[present])

    relevance = tf * idf[:, None]
    # rows handed out by relevance() are views; keep them read-only
    idf.flags.writeable = False
    relevance.flags.writeable = False
    logger.debug(
        "built line index: %d lines, %d ignored, %d words", n, len(ignored), len(vocab)
    )
    return LineIndex(
        lines=tuple(lines),
        ignored=frozenset(ignored),
        vocabulary=vocab,
        idf_values=idf,
        relevance_table=relevance,
        rows=rows,
    )
