"""Data models for the chat search engine.

This module provides:
- Conversation / Message: immutable corpus snapshot entities
- SearchOptions / SearchResult: the request/response contract of a search
- SearchHistoryEntry: one remembered query
- DateRange / FilterOptions: facet descriptors for the filter engine
- HighlightSpan: a matched region of text for the presentation layer
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

Role = Literal["user", "assistant", "system"]
SearchScope = Literal["conversation", "message", "all"]
ResultKind = Literal["conversation", "message"]
ChatType = Literal["all", "regular", "incognito"]
SortKey = Literal["date", "title", "messageCount", "relevance"]
SortOrder = Literal["asc", "desc"]

# Folder id that stands for "not inside any folder"
ROOT_FOLDER = "root"

# Display title for messages whose conversation is missing from the corpus
UNKNOWN_TITLE = "Unknown Chat"


# ---------------------------------------------------------------------------
# Corpus entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Conversation:
    """A chat conversation as seen by the search engine."""

    id: str
    title: str
    starred: bool = False
    incognito: bool = False
    folder_id: str | None = None
    last_message_at: datetime | None = None
    message_count: int = 0


@dataclass(frozen=True)
class Message:
    """A single message inside a conversation."""

    id: str
    conversation_id: str
    role: Role
    content: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Search request / response
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchOptions:
    """Parameters for a single search call."""

    query: str
    scope: SearchScope = "all"
    regex: bool = False
    exact_phrase: bool = False
    case_sensitive: bool = False
    limit: int | None = 50

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be non-negative: {self.limit}")


@dataclass(frozen=True)
class HighlightSpan:
    """A matched region of text, as character offsets."""

    start: int
    end: int
    text: str


@dataclass
class SearchResult:
    """A ranked search hit.

    The `kind` field determines which other fields are relevant:
    - "conversation": id is the conversation id
    - "message": id is the message id, conversation_id and message_index
      locate it, snippet holds a preview excerpt
    """

    kind: ResultKind
    id: str
    title: str
    relevance: int
    highlights: list[str] = field(default_factory=list)
    conversation_id: str | None = None
    message_index: int | None = None
    snippet: str | None = None

    @property
    def target_conversation_id(self) -> str:
        """Conversation a UI should navigate to when this result is chosen."""
        if self.kind == "conversation":
            return self.id
        return self.conversation_id or ""


@dataclass(frozen=True)
class SearchHistoryEntry:
    """A remembered query with how many results it produced."""

    query: str
    result_count: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateRange:
    """Inclusive datetime range."""

    start: datetime
    end: datetime

    def contains(self, value: datetime) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True)
class FilterOptions:
    """Facet predicates and sort order for the conversation list.

    Unset fields (None) do not constrain the result.
    """

    starred: bool | None = None
    chat_type: ChatType = "all"
    date_range: DateRange | None = None
    folders: frozenset[str] | None = None
    has_messages: bool | None = None
    sort_by: SortKey | None = None
    sort_order: SortOrder = "desc"
