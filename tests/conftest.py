"""Shared test fixtures for Chat Search."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from chat_search.corpus import Corpus
from chat_search.models import Conversation, Message

NOW = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for recency scoring."""
    return NOW


# ---------------------------------------------------------------------------
# Entity factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_conversation() -> Callable[..., Conversation]:
    """Factory for creating test conversations.

    Usage:
        conv = make_conversation()  # Default values
        conv = make_conversation(id="c2", title="Other", days_ago=40)
    """

    def _create(
        id: str = "c1",
        title: str = "Test conversation",
        starred: bool = False,
        incognito: bool = False,
        folder_id: str | None = None,
        days_ago: float | None = 0,
        message_count: int = 0,
    ) -> Conversation:
        last = None if days_ago is None else NOW - timedelta(days=days_ago)
        return Conversation(
            id=id,
            title=title,
            starred=starred,
            incognito=incognito,
            folder_id=folder_id,
            last_message_at=last,
            message_count=message_count,
        )

    return _create


@pytest.fixture
def make_message() -> Callable[..., Message]:
    """Factory for creating test messages."""

    def _create(
        id: str = "m1",
        conversation_id: str = "c1",
        content: str = "hello world",
        role: str = "user",
        days_ago: float = 0,
    ) -> Message:
        return Message(
            id=id,
            conversation_id=conversation_id,
            role=role,  # type: ignore[arg-type]
            content=content,
            created_at=NOW - timedelta(days=days_ago),
        )

    return _create


# ---------------------------------------------------------------------------
# Corpus fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_corpus(
    make_conversation: Callable[..., Conversation],
    make_message: Callable[..., Message],
) -> Corpus:
    """A small corpus with two conversations and four messages."""
    conversations = [
        make_conversation(
            id="c1",
            title="Python array tricks",
            starred=True,
            days_ago=0,
            message_count=10,
        ),
        make_conversation(
            id="c2",
            title="Random notes",
            days_ago=60,
            message_count=1,
        ),
    ]
    messages = [
        make_message(
            id="m1",
            conversation_id="c1",
            content="How do I reverse a Python list?",
            role="user",
            days_ago=0,
        ),
        make_message(
            id="m2",
            conversation_id="c1",
            content="Use slicing: items[::-1] returns a reversed copy of the list.",
            role="assistant",
            days_ago=0,
        ),
        make_message(
            id="m3",
            conversation_id="c1",
            content="JavaScript array iteration methods like map and filter",
            role="assistant",
            days_ago=3,
        ),
        make_message(
            id="m4",
            conversation_id="c2",
            content="Groceries: milk, eggs, bread",
            role="user",
            days_ago=60,
        ),
    ]
    return Corpus.from_lists(conversations, messages)
