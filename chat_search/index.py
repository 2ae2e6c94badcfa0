"""In-memory token index over a corpus snapshot.

This module provides:
- SearchIndex: token → posting set mapping with lookup helpers
- build_index: total rebuild from conversations and messages
- corpus_fingerprint: change detection for lazy rebuilds
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from .corpus import Corpus
from .models import Conversation, Message
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Posting keys
# ---------------------------------------------------------------------------


def conversation_key(conversation_id: str) -> str:
    return f"conversation:{conversation_id}"


def message_key(conversation_id: str, offset: int) -> str:
    return f"message:{conversation_id}:{offset}"


# ---------------------------------------------------------------------------
# Fingerprint
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CorpusFingerprint:
    """Summary of a corpus used to decide whether to rebuild."""

    conversation_count: int
    message_count: int
    last_modified: float
    content_hash: int


def corpus_fingerprint(corpus: Corpus) -> CorpusFingerprint:
    """Compute a fingerprint from counts, the newest timestamp and content.

    The content hash covers every conversation field and message, so a
    rename or a starred flag flip changes the fingerprint even though the
    counts and timestamps stay the same.

    Args:
        corpus: The corpus snapshot.

    Returns:
        CorpusFingerprint that changes whenever conversations or messages
        are added, removed or edited.
    """
    latest = 0.0
    for conversation in corpus.conversations.values():
        if conversation.last_message_at is not None:
            latest = max(latest, conversation.last_message_at.timestamp())
    for _, _, message in corpus.iter_messages():
        latest = max(latest, message.created_at.timestamp())
    content_hash = hash(
        (
            tuple(corpus.conversations.items()),
            tuple(corpus.messages.items()),
        )
    )
    return CorpusFingerprint(
        conversation_count=len(corpus.conversations),
        message_count=corpus.message_total,
        last_modified=latest,
        content_hash=content_hash,
    )


# ---------------------------------------------------------------------------
# SearchIndex
# ---------------------------------------------------------------------------


@dataclass
class SearchIndex:
    """Mapping from normalized token to the locations it occurs in."""

    postings: dict[str, set[str]] = field(default_factory=dict)
    built_at: datetime | None = None

    def add(self, token: str, location: str) -> None:
        self.postings.setdefault(token, set()).add(location)

    def lookup(self, tokens: Iterable[str]) -> set[str]:
        """Return the union of postings for all tokens."""
        found: set[str] = set()
        for token in tokens:
            found.update(self.postings.get(token, ()))
        return found

    def __len__(self) -> int:
        return len(self.postings)

    def __contains__(self, token: object) -> bool:
        return token in self.postings


def build_index(
    conversations: Mapping[str, Conversation],
    messages: Mapping[str, Sequence[Message]],
) -> SearchIndex:
    """Build a fresh index from every title and message body.

    Args:
        conversations: Conversations keyed by id.
        messages: Ordered messages keyed by conversation id.

    Returns:
        A new SearchIndex. Building twice from the same data yields equal
        postings.
    """
    index = SearchIndex()

    for conversation in conversations.values():
        location = conversation_key(conversation.id)
        for token in tokenize(conversation.title):
            index.add(token, location)

    for conversation_id, chat_messages in messages.items():
        for offset, message in enumerate(chat_messages):
            location = message_key(conversation_id, offset)
            for token in tokenize(message.content):
                index.add(token, location)

    index.built_at = datetime.now().astimezone()
    logger.debug(
        "Built search index: %d tokens from %d conversations",
        len(index),
        len(conversations),
    )
    return index
