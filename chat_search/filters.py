"""Facet filtering and sorting for the conversation list.

This module provides:
- apply_filters: AND-combined facet predicates plus a stable sort
- today_range / this_week_range / this_month_range: date-range presets
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone
from typing import Iterable

from .models import ROOT_FOLDER, Conversation, DateRange, FilterOptions


# ---------------------------------------------------------------------------
# Date-range presets
# ---------------------------------------------------------------------------


def _start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=23, minute=59, second=59, microsecond=999999)


def today_range(now: datetime | None = None) -> DateRange:
    """Range covering the whole current day."""
    now = now or datetime.now(timezone.utc)
    return DateRange(start=_start_of_day(now), end=_end_of_day(now))


def this_week_range(now: datetime | None = None) -> DateRange:
    """Range from Sunday through Saturday of the current week."""
    now = now or datetime.now(timezone.utc)
    # weekday(): Monday=0 ... Sunday=6
    days_since_sunday = (now.weekday() + 1) % 7
    start = _start_of_day(now - timedelta(days=days_since_sunday))
    end = _end_of_day(start + timedelta(days=6))
    return DateRange(start=start, end=end)


def this_month_range(now: datetime | None = None) -> DateRange:
    """Range from the first to the last day of the current month."""
    now = now or datetime.now(timezone.utc)
    last_day = calendar.monthrange(now.year, now.month)[1]
    start = _start_of_day(now.replace(day=1))
    end = _end_of_day(now.replace(day=last_day))
    return DateRange(start=start, end=end)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _matches(conversation: Conversation, filters: FilterOptions) -> bool:
    if filters.starred is not None and conversation.starred != filters.starred:
        return False

    if filters.chat_type == "incognito" and not conversation.incognito:
        return False
    if filters.chat_type == "regular" and conversation.incognito:
        return False

    if filters.date_range is not None:
        if conversation.last_message_at is None:
            return False
        if not filters.date_range.contains(conversation.last_message_at):
            return False

    if filters.folders:
        if (conversation.folder_id or ROOT_FOLDER) not in filters.folders:
            return False

    if filters.has_messages is not None:
        if (conversation.message_count > 0) != filters.has_messages:
            return False

    return True


def _activity_epoch(conversation: Conversation) -> float:
    if conversation.last_message_at is None:
        return 0.0
    return conversation.last_message_at.timestamp()


def _sort(conversations: list[Conversation], filters: FilterOptions) -> list[Conversation]:
    """Stable sort by the requested key.

    "desc" is the natural direction of each key: newest first, A→Z, most
    messages first. "asc" is the reverse. "relevance" has no meaning
    without a query and keeps order.
    """
    descending = filters.sort_order == "desc"
    if filters.sort_by == "date":
        return sorted(conversations, key=_activity_epoch, reverse=descending)
    if filters.sort_by == "title":
        return sorted(conversations, key=lambda c: c.title.casefold(), reverse=not descending)
    if filters.sort_by == "messageCount":
        return sorted(conversations, key=lambda c: c.message_count, reverse=descending)
    return conversations


def apply_filters(
    conversations: Iterable[Conversation],
    filters: FilterOptions,
) -> list[Conversation]:
    """Apply facet predicates and sort order to conversations.

    Predicates combine with logical AND. The input is never mutated.

    Args:
        conversations: Conversations to narrow.
        filters: Facets and sort descriptor.

    Returns:
        New list of matching conversations.
    """
    filtered = [c for c in conversations if _matches(c, filters)]
    return _sort(filtered, filters)
