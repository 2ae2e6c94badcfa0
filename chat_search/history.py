"""Search history and query suggestions.

This module provides:
- SearchHistory: bounded, de-duplicated, newest-first query history
- generate_suggestions: completions from history and conversation titles
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Iterator

from .models import Conversation, SearchHistoryEntry

DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_SUGGESTIONS = 3
MAX_TITLE_SUGGESTIONS = 3
DEFAULT_SUGGESTION_LIMIT = 5


class SearchHistory:
    """Remembers recent queries, one entry per literal query text."""

    def __init__(self, max_entries: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._entries: list[SearchHistoryEntry] = []
        self._max_entries = max_entries

    def add(
        self,
        query: str,
        result_count: int,
        timestamp: datetime | None = None,
    ) -> SearchHistoryEntry:
        """Record a query at the head of the history.

        Any previous entry with the same query text is replaced, and the
        list is truncated to the maximum size.
        """
        entry = SearchHistoryEntry(
            query=query,
            result_count=result_count,
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        self._entries = [e for e in self._entries if e.query != query]
        self._entries.insert(0, entry)
        del self._entries[self._max_entries :]
        return entry

    @property
    def entries(self) -> list[SearchHistoryEntry]:
        """Newest-first copy of the history."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SearchHistoryEntry]:
        return iter(list(self._entries))


def generate_suggestions(
    partial_query: str,
    history: Iterable[SearchHistoryEntry],
    conversations: Iterable[Conversation],
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[str]:
    """Suggest completions for a partially typed query.

    Up to three history queries containing the partial text come first,
    then up to three conversation titles containing it. Duplicates are
    dropped and the total is capped at `limit`.

    Args:
        partial_query: Text typed so far.
        history: Search history, newest first.
        conversations: Conversations whose titles may be suggested.
        limit: Maximum number of suggestions.

    Returns:
        Ordered, unique suggestion strings. Empty for a blank query.
    """
    if not partial_query or not partial_query.strip():
        return []

    needle = partial_query.lower()

    from_history = [
        entry.query
        for entry in history
        if needle in entry.query.lower() and entry.query != partial_query
    ][:MAX_HISTORY_SUGGESTIONS]

    from_titles = [
        conversation.title
        for conversation in conversations
        if needle in conversation.title.lower()
    ][:MAX_TITLE_SUGGESTIONS]

    # dict preserves first-seen order
    unique = dict.fromkeys(from_history + from_titles)
    return list(unique)[:limit]
