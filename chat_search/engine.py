"""Stateless search over a corpus snapshot.

Runs the selected match strategy, scores every candidate, builds snippets
for message hits and returns a sorted, limited result list.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .corpus import Corpus
from .index import SearchIndex
from .matching import Candidate, select_matcher
from .models import UNKNOWN_TITLE, SearchOptions, SearchResult
from .ranking import conversation_relevance, message_relevance, sort_results
from .snippet import create_snippet

logger = logging.getLogger(__name__)


def _to_result(
    candidate: Candidate,
    options: SearchOptions,
    corpus: Corpus,
    now: datetime,
    snippet_length: int,
    snippet_context: int,
) -> SearchResult:
    if candidate.kind == "conversation":
        conversation = corpus.conversations[candidate.id]
        return SearchResult(
            kind="conversation",
            id=conversation.id,
            title=conversation.title,
            relevance=conversation_relevance(
                conversation, options.query, candidate.match_ratio, now
            ),
            highlights=list(candidate.highlights),
        )

    conversation_id = candidate.conversation_id or ""
    offset = candidate.message_index or 0
    message = corpus.messages[conversation_id][offset]
    return SearchResult(
        kind="message",
        id=message.id,
        title=corpus.title_for(conversation_id, UNKNOWN_TITLE),
        relevance=message_relevance(message, options.query, candidate.match_ratio, now),
        highlights=list(candidate.highlights),
        conversation_id=conversation_id,
        message_index=offset,
        snippet=create_snippet(
            message.content,
            candidate.snippet_term,
            max_length=snippet_length,
            context=snippet_context,
        ),
    )


def search(
    options: SearchOptions,
    corpus: Corpus,
    index: SearchIndex | None = None,
    now: datetime | None = None,
    snippet_length: int = 150,
    snippet_context: int = 50,
) -> list[SearchResult]:
    """Search conversations and messages.

    Args:
        options: Query, scope, mode flags and limit.
        corpus: The snapshot to search.
        index: Optional token index used to shortlist fuzzy candidates.
        now: Reference time for recency scoring. Defaults to UTC now.
        snippet_length: Prefix length for snippets without a literal match.
        snippet_context: Characters kept either side of a snippet match.

    Returns:
        Results sorted by descending relevance, ties in corpus order.
        An empty or whitespace-only query returns an empty list.
    """
    if not options.query or not options.query.strip():
        return []

    if now is None:
        now = datetime.now(timezone.utc)

    matcher = select_matcher(options, index)
    candidates = matcher.match(options, corpus)

    results = [
        _to_result(candidate, options, corpus, now, snippet_length, snippet_context)
        for candidate in candidates
    ]

    logger.debug(
        "Search %r (%s, scope=%s): %d candidates",
        options.query,
        type(matcher).__name__,
        options.scope,
        len(results),
    )
    return sort_results(results, options.limit)
