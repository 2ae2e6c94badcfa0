"""Tests for the stateless search function."""

from __future__ import annotations

from datetime import datetime

from chat_search.corpus import Corpus
from chat_search.engine import search
from chat_search.index import build_index
from chat_search.models import SearchOptions


# ---------------------------------------------------------------------------
# Basic behavior
# ---------------------------------------------------------------------------


class TestSearchBasics:
    """Tests for search function basics."""

    def test_empty_query(self, sample_corpus: Corpus, now: datetime) -> None:
        """Empty or whitespace query returns no results."""
        assert search(SearchOptions(query=""), sample_corpus, now=now) == []
        assert search(SearchOptions(query="   \t"), sample_corpus, now=now) == []

    def test_python_conversation_scenario(self, sample_corpus: Corpus, now: datetime) -> None:
        """Starred, active, busy conversation ranks with a high score."""
        options = SearchOptions(query="python", scope="conversation", limit=10)
        results = search(options, sample_corpus, now=now)
        assert [r.id for r in results] == ["c1"]
        assert results[0].kind == "conversation"
        assert results[0].relevance > 100
        assert results[0].highlights == ["python"]

    def test_message_results_carry_snippet(self, sample_corpus: Corpus, now: datetime) -> None:
        """Message hits carry title, location and snippet."""
        options = SearchOptions(query="groceries", scope="message")
        [result] = search(options, sample_corpus, now=now)
        assert result.kind == "message"
        assert result.id == "m4"
        assert result.conversation_id == "c2"
        assert result.message_index == 0
        assert result.title == "Random notes"
        assert result.snippet == "Groceries: milk, eggs, bread"
        assert result.target_conversation_id == "c2"

    def test_fuzzy_partial_match_ranked(self, sample_corpus: Corpus, now: datetime) -> None:
        """Out-of-order token match is found and scored."""
        options = SearchOptions(query="array methods", scope="message")
        [result] = search(options, sample_corpus, now=now)
        assert result.id == "m3"
        # 100 ratio + 15 recency (3 days) + 5 assistant
        assert result.relevance == 120

    def test_sorted_descending(self, sample_corpus: Corpus, now: datetime) -> None:
        """Results are sorted by relevance."""
        results = search(SearchOptions(query="python list"), sample_corpus, now=now)
        scores = [r.relevance for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_limit(self, sample_corpus: Corpus, now: datetime) -> None:
        """Limit caps the result count."""
        results = search(SearchOptions(query="list python", limit=1), sample_corpus, now=now)
        assert len(results) == 1

    def test_unknown_conversation_title(self, make_message, now: datetime) -> None:
        """Messages with no conversation get a placeholder title."""
        orphan = make_message(id="m9", conversation_id="ghost", content="orphaned python")
        corpus = Corpus.from_lists([], [orphan])
        [result] = search(SearchOptions(query="python"), corpus, now=now)
        assert result.title == "Unknown Chat"
        assert result.conversation_id == "ghost"


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestSearchProperties:
    """Tests for search invariants."""

    def test_deterministic(self, sample_corpus: Corpus, now: datetime) -> None:
        """Repeated calls give identical ordering."""
        options = SearchOptions(query="list array python")
        first = search(options, sample_corpus, now=now)
        for _ in range(3):
            assert search(options, sample_corpus, now=now) == first

    def test_index_does_not_change_results(self, sample_corpus: Corpus, now: datetime) -> None:
        """Index shortlisting returns the same results as a full scan."""
        index = build_index(sample_corpus.conversations, sample_corpus.messages)
        for query in ("python", "reverse list", "milk bread", "methods"):
            options = SearchOptions(query=query)
            assert search(options, sample_corpus, index=index, now=now) == search(
                options, sample_corpus, now=now
            )

    def test_regex_fallback_equals_exact(self, make_conversation, make_message, now) -> None:
        """Malformed regex returns the same results as exact mode."""
        corpus = Corpus.from_lists(
            [make_conversation(id="c1", title="Debugging foo(")],
            [make_message(id="m1", conversation_id="c1", content="then call foo( with args")],
        )
        regex = search(SearchOptions(query="foo(", regex=True), corpus, now=now)
        exact = search(SearchOptions(query="foo(", exact_phrase=True), corpus, now=now)
        assert regex == exact
        assert [r.id for r in regex] == ["c1", "m1"]

    def test_exact_snippet_contains_query(self, sample_corpus: Corpus, now: datetime) -> None:
        """Every exact-mode message snippet contains the query."""
        for query in ("list", "Python", "ARRAY", "milk"):
            options = SearchOptions(query=query, exact_phrase=True, scope="message")
            results = search(options, sample_corpus, now=now)
            assert results
            for result in results:
                assert result.snippet is not None
                assert query.lower() in result.snippet.lower()

    def test_starred_ranks_first_on_tie(self, make_conversation, now: datetime) -> None:
        """Starred conversation outranks an otherwise identical one."""
        corpus = Corpus.from_lists(
            [
                make_conversation(id="plain", title="Weekly plan", message_count=2),
                make_conversation(id="star", title="Weekly plan", starred=True, message_count=2),
            ]
        )
        results = search(SearchOptions(query="weekly"), corpus, now=now)
        assert [r.id for r in results] == ["star", "plain"]
        assert results[0].relevance >= results[1].relevance

    def test_ties_keep_corpus_order(self, make_conversation, now: datetime) -> None:
        """Equal scores keep corpus order."""
        corpus = Corpus.from_lists(
            [make_conversation(id=f"c{i}", title="same title") for i in range(4)]
        )
        results = search(SearchOptions(query="same"), corpus, now=now)
        assert [r.id for r in results] == ["c0", "c1", "c2", "c3"]

    def test_regex_highlights(self, sample_corpus: Corpus, now: datetime) -> None:
        """Regex results report the matched substrings."""
        options = SearchOptions(query=r"re\w+", regex=True, scope="message")
        results = {r.id: r for r in search(options, sample_corpus, now=now)}
        assert results["m1"].highlights == ["reverse"]
        assert results["m2"].highlights == ["returns", "reversed"]
