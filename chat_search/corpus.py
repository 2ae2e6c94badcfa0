"""Corpus snapshots and JSON corpus loading.

This module provides:
- Corpus: read-only snapshot of conversations and their messages
- corpus_from_dict: builds a Corpus from plain JSON-compatible data
- load_corpus: reads a JSON corpus file from disk
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence

from .models import Conversation, Message

logger = logging.getLogger(__name__)

_ROLES = frozenset({"user", "assistant", "system"})


@dataclass(frozen=True)
class Corpus:
    """An immutable view over conversations and messages.

    Conversations keep insertion order, which is the tie-break order for
    ranking. Messages are grouped by conversation id in chat order.
    """

    conversations: Mapping[str, Conversation] = field(default_factory=dict)
    messages: Mapping[str, Sequence[Message]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "conversations", MappingProxyType(dict(self.conversations)))
        object.__setattr__(
            self,
            "messages",
            MappingProxyType({cid: tuple(msgs) for cid, msgs in self.messages.items()}),
        )

    @classmethod
    def from_lists(
        cls,
        conversations: Sequence[Conversation],
        messages: Sequence[Message] = (),
    ) -> Corpus:
        """Build a corpus from flat lists, grouping messages by conversation."""
        grouped: dict[str, list[Message]] = {}
        for message in messages:
            grouped.setdefault(message.conversation_id, []).append(message)
        return cls(
            conversations={c.id: c for c in conversations},
            messages=grouped,
        )

    def iter_messages(self) -> Iterator[tuple[str, int, Message]]:
        """Yield (conversation_id, offset, message) in corpus order."""
        for conversation_id, msgs in self.messages.items():
            for offset, message in enumerate(msgs):
                yield conversation_id, offset, message

    @property
    def message_total(self) -> int:
        return sum(len(msgs) for msgs in self.messages.values())

    def title_for(self, conversation_id: str, default: str) -> str:
        conversation = self.conversations.get(conversation_id)
        return conversation.title if conversation is not None else default


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _parse_datetime(value: Any, field_name: str) -> datetime | None:
    """Parse an ISO timestamp or epoch seconds into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError(f"Invalid {field_name}: {value!r}") from e
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    raise ValueError(f"Invalid {field_name}: {value!r}")


def _conversation_from_dict(data: dict, message_count: int) -> Conversation:
    if "id" not in data:
        raise ValueError("Conversation is missing 'id'")
    return Conversation(
        id=str(data["id"]),
        title=str(data.get("title", "")),
        starred=bool(data.get("starred", False)),
        incognito=bool(data.get("incognito", data.get("isIncognito", False))),
        folder_id=data.get("folder_id", data.get("folderId")),
        last_message_at=_parse_datetime(
            data.get("last_message_at", data.get("lastMessageAt")), "last_message_at"
        ),
        message_count=int(data.get("message_count", data.get("messageCount", message_count))),
    )


def _message_from_dict(data: dict, conversation_id: str) -> Message:
    if "id" not in data:
        raise ValueError(f"Message in conversation {conversation_id} is missing 'id'")
    role = data.get("role", "user")
    if role not in _ROLES:
        raise ValueError(f"Invalid message role: {role!r}")
    created_at = _parse_datetime(data.get("created_at", data.get("createdAt")), "created_at")
    return Message(
        id=str(data["id"]),
        conversation_id=conversation_id,
        role=role,
        content=str(data.get("content", "")),
        created_at=created_at or datetime.fromtimestamp(0, tz=timezone.utc),
    )


def corpus_from_dict(data: dict) -> Corpus:
    """Build a Corpus from JSON-compatible data.

    Expected shape:
        {"conversations": [{...}, ...],
         "messages": {"<conversation id>": [{...}, ...]}}

    Both camelCase and snake_case field names are accepted.

    Raises:
        ValueError: If the data is structurally invalid.
    """
    if not isinstance(data, dict):
        raise ValueError("Corpus must be a JSON object")

    raw_messages = data.get("messages") or {}
    if not isinstance(raw_messages, dict):
        raise ValueError("'messages' must map conversation ids to message lists")

    messages: dict[str, list[Message]] = {}
    for conversation_id, items in raw_messages.items():
        messages[str(conversation_id)] = [
            _message_from_dict(item, str(conversation_id)) for item in items
        ]

    raw_conversations = data.get("conversations") or []
    if isinstance(raw_conversations, dict):
        raw_conversations = list(raw_conversations.values())

    conversations: dict[str, Conversation] = {}
    for item in raw_conversations:
        conversation_id = str(item.get("id", ""))
        conversation = _conversation_from_dict(item, len(messages.get(conversation_id, [])))
        conversations[conversation.id] = conversation

    orphans = set(messages) - set(conversations)
    if orphans:
        logger.debug("Corpus has messages for %d unknown conversations", len(orphans))

    return Corpus(conversations=conversations, messages=messages)


def load_corpus(path: str | Path) -> Corpus:
    """Read a JSON corpus file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid corpus JSON.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse corpus JSON: {e}") from e

    corpus = corpus_from_dict(data)
    logger.debug(
        "Loaded corpus from %s: %d conversations, %d messages",
        path,
        len(corpus.conversations),
        corpus.message_total,
    )
    return corpus
