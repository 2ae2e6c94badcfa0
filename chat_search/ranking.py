"""Relevance scoring for search candidates.

Scores blend textual confidence with engagement and freshness signals.
They are only comparable within a single search call.

Conversation weights:
- Match ratio: 0-100
- Title contains the whole query: +50
- Starred: +20
- Recency: +15 under 7 days, +10 under 30 days
- Message volume: +2 per message, capped at +20

Message weights:
- Match ratio: 0-100
- Content contains the whole query: +30
- Recency: +20 under 1 day, +15 under 7 days, +10 under 30 days
- Assistant role: +5
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from .models import Conversation, Message, SearchResult

TITLE_MATCH_BOOST = 50
CONTENT_MATCH_BOOST = 30
STARRED_BOOST = 20
MESSAGE_COUNT_WEIGHT = 2
MESSAGE_COUNT_CAP = 20
ASSISTANT_BOOST = 5

_SECONDS_PER_DAY = 60 * 60 * 24


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def days_since(timestamp: datetime, now: datetime) -> float:
    """Fractional days between a timestamp and now."""
    return (_aware(now) - _aware(timestamp)).total_seconds() / _SECONDS_PER_DAY


def _round_half_up(score: float) -> int:
    return int(math.floor(score + 0.5))


def conversation_recency_bonus(last_message_at: datetime | None, now: datetime) -> int:
    if last_message_at is None:
        return 0
    days = days_since(last_message_at, now)
    if days < 7:
        return 15
    if days < 30:
        return 10
    return 0


def message_recency_bonus(created_at: datetime, now: datetime) -> int:
    days = days_since(created_at, now)
    if days < 1:
        return 20
    if days < 7:
        return 15
    if days < 30:
        return 10
    return 0


def conversation_relevance(
    conversation: Conversation,
    query: str,
    match_ratio: float = 1.0,
    now: datetime | None = None,
) -> int:
    """Calculate relevance score for a conversation hit.

    Args:
        conversation: The matched conversation.
        query: The raw query string (for whole-query containment).
        match_ratio: Share of query tokens matched (1.0 for exact/regex).
        now: Current time. Defaults to UTC now.

    Returns:
        Integer relevance score.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    score = match_ratio * 100

    if query and query.lower() in conversation.title.lower():
        score += TITLE_MATCH_BOOST

    if conversation.starred:
        score += STARRED_BOOST

    score += conversation_recency_bonus(conversation.last_message_at, now)
    score += min(conversation.message_count * MESSAGE_COUNT_WEIGHT, MESSAGE_COUNT_CAP)

    return _round_half_up(score)


def message_relevance(
    message: Message,
    query: str,
    match_ratio: float = 1.0,
    now: datetime | None = None,
) -> int:
    """Calculate relevance score for a message hit.

    Args:
        message: The matched message.
        query: The raw query string (for whole-query containment).
        match_ratio: Share of query tokens matched (1.0 for exact/regex).
        now: Current time. Defaults to UTC now.

    Returns:
        Integer relevance score.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    score = match_ratio * 100

    if query and query.lower() in message.content.lower():
        score += CONTENT_MATCH_BOOST

    score += message_recency_bonus(message.created_at, now)

    if message.role == "assistant":
        score += ASSISTANT_BOOST

    return _round_half_up(score)


def sort_results(results: list[SearchResult], limit: int | None = None) -> list[SearchResult]:
    """Sort by relevance (descending) and apply the limit.

    The sort is stable, so equal scores keep corpus order. A limit of
    None, 0 or a negative value returns every result.
    """
    ordered = sorted(results, key=lambda r: r.relevance, reverse=True)
    if limit is not None and limit > 0:
        return ordered[:limit]
    return ordered
