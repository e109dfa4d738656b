from __future__ import annotations

import threading
from dataclasses import dataclass
from functools import cmp_to_key

from index.tfidf import LineIndex, build_line_index
from processing.text import extract_unique_words

# scores closer than this are tied and fall back to line order
SCORE_TOLERANCE = 1e-9


@dataclass
class Hit:
    position: int
    line: str
    score: float


def _compare(a: tuple[int, float], b: tuple[int, float]) -> int:
    (pos_a, score_a), (pos_b, score_b) = a, b
    if abs(score_a - score_b) < SCORE_TOLERANCE:
        return pos_a - pos_b
    return -1 if score_a > score_b else 1


def rank_lines(index: LineIndex, query: str, top_k: int) -> list[Hit]:
    if top_k < 0:
        raise ValueError(f"top_k must be non-negative, got {top_k}")
    if top_k == 0 or not index.lines:
        return []

    words = extract_unique_words(query)
    if not words:
        return []

    totals = index.scores(words)
    scored = [
        (pos, float(totals[pos])) for pos in range(len(index.lines)) if pos not in index.ignored
    ]
    scored.sort(key=cmp_to_key(_compare))

    out: list[Hit] = []
    for pos, score in scored:
        if len(out) >= top_k or score == 0.0:
            break
        out.append(Hit(position=pos, line=index.lines[pos], score=score))
    return out


class SearchEngine:
    """Ranks the lines of a text against free-text queries.

    The built index is immutable; `build_index` replaces it wholesale, so
    searches running concurrently with a rebuild see either the old or the new
    index, never a mix.
    """

    def __init__(self, text: str | None = None) -> None:
        # serializes concurrent build_index calls; searches never take it
        self._lock = threading.Lock()
        self._index = LineIndex()
        if text is not None:
            self.build_index(text)

    @property
    def index(self) -> LineIndex:
        return self._index

    def build_index(self, text: str) -> None:
        with self._lock:
            self._index = build_line_index(text)

    def search(self, query: str, top_k: int = 5) -> list[str]:
        return [h.line for h in rank_lines(self._index, query, top_k)]

    def search_hits(self, query: str, top_k: int = 5) -> list[Hit]:
        return rank_lines(self._index, query, top_k)
