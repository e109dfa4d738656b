from __future__ import annotations

import threading

import numpy as np
import pytest

from index.ordering import WordSet
from index.tfidf import LineIndex
from search.engine import SearchEngine, rank_lines

TEXT = "cat sat\ndog ran\ncat cat cat"


def test_ranking_sanity():
    engine = SearchEngine(TEXT)
    assert engine.search("cat", top_k=2) == ["cat cat cat", "cat sat"]
    # "dog ran" scores 0 and is never returned
    assert engine.search("cat", top_k=10) == ["cat cat cat", "cat sat"]


def test_empty_text_returns_nothing():
    engine = SearchEngine()
    engine.build_index("")
    assert engine.search("anything", top_k=5) == []


def test_zero_top_k():
    engine = SearchEngine(TEXT)
    assert engine.search("cat", top_k=0) == []
    assert engine.search("", top_k=0) == []


def test_negative_top_k_raises():
    engine = SearchEngine(TEXT)
    with pytest.raises(ValueError):
        engine.search("cat", top_k=-1)


def test_query_without_words():
    engine = SearchEngine(TEXT)
    assert engine.search("123 ?!", top_k=3) == []


def test_case_insensitive_query():
    engine = SearchEngine("Apple pie\nbanana split\napple and banana")
    assert engine.search("Apple", top_k=3) == engine.search("apple", top_k=3)
    assert engine.search("APPLE", top_k=3) == ["Apple pie", "apple and banana"]


def test_duplicate_query_words_count_once():
    engine = SearchEngine(TEXT)
    assert engine.search_hits("cat CAT cat", 2) == engine.search_hits("cat", 2)


def test_tie_break_by_line_position():
    engine = SearchEngine("beta alpha\nalpha beta\ngamma\nalpha beta")
    hits = engine.search_hits("alpha", top_k=5)
    assert [h.position for h in hits] == [0, 1, 3]
    assert engine.search("alpha", top_k=2) == ["beta alpha", "alpha beta"]


def test_ignored_lines_never_returned():
    engine = SearchEngine("12-34!!\nfoo bar\n!!!\nbar baz")
    for q in ("foo", "bar", "baz", "foo bar baz", "12"):
        assert "12-34!!" not in engine.search(q, top_k=10)
        assert "!!!" not in engine.search(q, top_k=10)


def test_truncates_at_score_boundary():
    engine = SearchEngine("apple\nbanana\ncherry\ndate")
    assert engine.search("apple", top_k=4) == ["apple"]


def test_word_on_every_line_scores_zero():
    engine = SearchEngine("the cat\nthe dog")
    assert engine.search("the", top_k=2) == []


def test_ignored_line_before_match_keeps_alignment():
    engine = SearchEngine("...\nzebra\nlion")
    assert engine.search("lion", top_k=1) == ["lion"]
    assert engine.search("zebra", top_k=1) == ["zebra"]


def test_rebuild_is_idempotent():
    engine = SearchEngine(TEXT)
    first = engine.search_hits("cat dog", top_k=3)
    engine.build_index(TEXT)
    assert engine.search_hits("cat dog", top_k=3) == first


def test_rebuild_replaces_index():
    engine = SearchEngine(TEXT)
    old = engine.index
    engine.build_index("fresh text here")
    assert engine.index is not old
    assert engine.search("cat", top_k=3) == []
    assert engine.search("fresh", top_k=3) == ["fresh text here"]
    # the old snapshot is untouched
    assert [h.line for h in rank_lines(old, "cat", 1)] == ["cat cat cat"]


def test_hits_carry_scores():
    hits = SearchEngine(TEXT).search_hits("cat", top_k=2)
    assert [h.position for h in hits] == [2, 0]
    assert hits[0].score > hits[1].score > 0


def _single_word_index(scores: list[float]) -> LineIndex:
    return LineIndex(
        lines=tuple(f"line {i}" for i in range(len(scores))),
        vocabulary=WordSet(["x"]),
        idf_values=np.ones(1),
        relevance_table=np.array([scores]),
        rows={"x": 0},
    )


def test_scores_within_tolerance_keep_line_order():
    idx = _single_word_index([0.5, 0.5 + 1e-12])
    assert [h.position for h in rank_lines(idx, "x", 2)] == [0, 1]


def test_scores_beyond_tolerance_rank_by_score():
    idx = _single_word_index([0.5, 0.5 + 1e-6])
    assert [h.position for h in rank_lines(idx, "x", 2)] == [1, 0]


def test_mutating_a_relevance_row_cannot_change_results():
    engine = SearchEngine(TEXT)
    row = engine.index.relevance("cat")
    with pytest.raises(ValueError):
        row *= 0
    assert engine.search("cat", top_k=2) == ["cat cat cat", "cat sat"]


def test_rebuilds_are_serialized_but_searches_are_not():
    engine = SearchEngine(TEXT)
    with engine._lock:
        t = threading.Thread(target=engine.build_index, args=("fresh text",))
        t.start()
        t.join(timeout=0.1)
        assert t.is_alive()
        # searching does not wait for the pending rebuild
        assert engine.search("cat", top_k=1) == ["cat cat cat"]
    t.join()
    assert engine.search("fresh", top_k=1) == ["fresh text"]
