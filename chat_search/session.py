"""Search session controller.

This module provides:
- SessionState: Idle → Searching → Results | Errored lifecycle
- SearchSession: owns the index cache, result cache, history, filters and
  the current result set for one consumer (e.g. a view model)
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from .config import SearchConfig
from .corpus import Corpus
from .engine import search
from .filters import apply_filters
from .history import SearchHistory, generate_suggestions
from .index import CorpusFingerprint, SearchIndex, build_index, corpus_fingerprint
from .models import (
    Conversation,
    FilterOptions,
    SearchHistoryEntry,
    SearchOptions,
    SearchResult,
)

logger = logging.getLogger(__name__)

CorpusProvider = Callable[[], Corpus]


class SearchError(Exception):
    """Raised when a search fails for a reason other than a bad pattern."""


class SessionState(Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    RESULTS = "results"
    ERRORED = "errored"


class SearchSession:
    """Stateful front end to the search engine.

    The corpus is read through an injected provider on every call. The
    token index is rebuilt only when the provider hands back a different
    snapshot whose fingerprint changed. Results are cached per options
    until the next rebuild or until `config.cache_ttl_seconds` pass on
    the session clock.

    Not thread-safe: one caller drives a session.
    """

    def __init__(
        self,
        corpus_provider: CorpusProvider,
        config: SearchConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        on_select: Callable[[SearchResult], None] | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            corpus_provider: Returns the current corpus snapshot.
            config: Limits and timings. Defaults to SearchConfig().
            clock: Source of "now" for recency scoring. Defaults to UTC now.
            on_select: Called with the result passed to select_result().
        """
        self._corpus_provider = corpus_provider
        self.config = config or SearchConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._on_select = on_select

        self.state = SessionState.IDLE
        self.query = ""
        self.results: list[SearchResult] = []
        self.selected_result_id: str | None = None
        self.last_error: Exception | None = None
        self.filters = FilterOptions()

        self._history = SearchHistory(max_entries=self.config.history_limit)
        self._corpus: Corpus | None = None
        self._index: SearchIndex | None = None
        self._fingerprint: CorpusFingerprint | None = None
        # options -> (computed at, results)
        self._cache: OrderedDict[SearchOptions, tuple[datetime, list[SearchResult]]] = OrderedDict()

    # ------------------------------------------------------------------
    # Index management
    # ------------------------------------------------------------------

    @property
    def index(self) -> SearchIndex | None:
        return self._index

    def _ensure_index(self, corpus: Corpus) -> SearchIndex:
        # Snapshots are immutable, so the same object needs no check
        if self._index is not None and corpus is self._corpus:
            return self._index

        self._corpus = corpus
        fingerprint = corpus_fingerprint(corpus)
        if self._index is None or fingerprint != self._fingerprint:
            self._index = build_index(corpus.conversations, corpus.messages)
            self._fingerprint = fingerprint
            self._cache.clear()
            logger.debug("Search index rebuilt at %s (%s)", self._index.built_at, fingerprint)
        return self._index

    # ------------------------------------------------------------------
    # Result cache
    # ------------------------------------------------------------------

    def _cache_get(self, options: SearchOptions, now: datetime) -> list[SearchResult] | None:
        entry = self._cache.get(options)
        if entry is None:
            return None

        computed_at, results = entry
        age = abs((now - computed_at).total_seconds())
        if age >= self.config.cache_ttl_seconds:
            # Recency bonuses depend on the clock
            del self._cache[options]
            logger.debug("Result cache entry for %r expired after %.0fs", options.query, age)
            return None

        self._cache.move_to_end(options)
        logger.debug("Result cache hit for %r", options.query)
        return results

    def _cache_put(self, options: SearchOptions, now: datetime, results: list[SearchResult]) -> None:
        if self.config.cache_size <= 0:
            return
        self._cache[options] = (now, results)
        self._cache.move_to_end(options)
        while len(self._cache) > self.config.cache_size:
            self._cache.popitem(last=False)

    # ------------------------------------------------------------------
    # Searching
    # ------------------------------------------------------------------

    def perform_search(self, options: SearchOptions) -> list[SearchResult]:
        """Run a search and update session state.

        A blank query returns [] and leaves the session untouched. On
        success the state becomes RESULTS (even with zero hits) and the
        query is added to history when it found something.

        Raises:
            SearchError: On an unexpected failure. The state is ERRORED and
                the result list is cleared; call again to retry.
        """
        if not options.query or not options.query.strip():
            return []

        self.state = SessionState.SEARCHING
        self.query = options.query
        self.last_error = None

        try:
            corpus = self._corpus_provider()
            index = self._ensure_index(corpus)
            now = self._clock()
            results = self._cache_get(options, now)
            if results is None:
                results = search(
                    options,
                    corpus,
                    index=index,
                    now=now,
                    snippet_length=self.config.snippet_length,
                    snippet_context=self.config.snippet_context,
                )
                self._cache_put(options, now, results)
        except Exception as e:
            self.state = SessionState.ERRORED
            self.results = []
            self.last_error = e
            logger.exception("Search failed for %r", options.query)
            raise SearchError(f"Search failed: {e}") from e

        self.results = list(results)
        self.state = SessionState.RESULTS

        if self.results:
            self.add_to_history(options.query, len(self.results))

        return list(self.results)

    def search_text(self, query: str, **flags: object) -> list[SearchResult]:
        """Convenience wrapper building SearchOptions with the default limit."""
        flags.setdefault("limit", self.config.default_limit)
        return self.perform_search(SearchOptions(query=query, **flags))  # type: ignore[arg-type]

    def clear_search(self) -> None:
        """Reset to IDLE, dropping query, results and selection.

        History is kept.
        """
        self.state = SessionState.IDLE
        self.query = ""
        self.results = []
        self.selected_result_id = None
        self.last_error = None

    def select_result(self, result_id: str) -> str | None:
        """Mark a result as selected.

        Returns:
            The conversation id to navigate to, or None if the result is
            not in the current result set.
        """
        for result in self.results:
            if result.id == result_id:
                self.selected_result_id = result_id
                if self._on_select is not None:
                    self._on_select(result)
                return result.target_conversation_id
        return None

    # ------------------------------------------------------------------
    # History & suggestions
    # ------------------------------------------------------------------

    @property
    def history(self) -> list[SearchHistoryEntry]:
        return self._history.entries

    def add_to_history(self, query: str, result_count: int) -> None:
        self._history.add(query, result_count, timestamp=self._clock())

    def clear_history(self) -> None:
        self._history.clear()

    def suggestions(self, partial_query: str) -> list[str]:
        """Suggest completions from history and conversation titles."""
        corpus = self._corpus_provider()
        return generate_suggestions(
            partial_query,
            self._history,
            corpus.conversations.values(),
            limit=self.config.suggestion_limit,
        )

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def set_filters(self, **changes: object) -> FilterOptions:
        """Merge changes into the current filters and return them."""
        self.filters = replace(self.filters, **changes)  # type: ignore[arg-type]
        return self.filters

    def reset_filters(self) -> None:
        self.filters = FilterOptions()

    def filtered_conversations(self) -> list[Conversation]:
        """Apply the current filters to the corpus conversations."""
        corpus = self._corpus_provider()
        return apply_filters(corpus.conversations.values(), self.filters)
