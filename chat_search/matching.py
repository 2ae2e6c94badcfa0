"""Match strategies that locate candidate hits for a query.

This module provides:
- Candidate: a raw hit before ranking
- ExactMatcher: substring containment
- RegexMatcher: regular-expression matching
- FuzzyMatcher: token-overlap matching, optionally shortlisted by the index
- select_matcher: picks a strategy from the option flags
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, Protocol

from .corpus import Corpus
from .index import SearchIndex, conversation_key, message_key
from .models import ResultKind, SearchOptions
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

# Maximum number of distinct regex matches reported as highlights
MAX_REGEX_HIGHLIGHTS = 3


class InvalidPatternError(ValueError):
    """Raised when a regex query cannot be compiled."""


@dataclass
class Candidate:
    """A hit produced by a matcher, not yet scored."""

    kind: ResultKind
    id: str
    highlights: list[str] = field(default_factory=list)
    match_ratio: float = 1.0
    snippet_term: str = ""
    conversation_id: str | None = None
    message_index: int | None = None


class Matcher(Protocol):
    def match(self, options: SearchOptions, corpus: Corpus) -> list[Candidate]: ...


# ---------------------------------------------------------------------------
# Shared traversal
# ---------------------------------------------------------------------------


def _iter_targets(
    options: SearchOptions, corpus: Corpus
) -> Iterator[tuple[ResultKind, str, str, str | None, int | None]]:
    """Yield (kind, id, text, conversation_id, message_index) within scope.

    Conversations come first in corpus order, then messages grouped by
    conversation.
    """
    if options.scope in ("conversation", "all"):
        for conversation in corpus.conversations.values():
            yield "conversation", conversation.id, conversation.title, None, None

    if options.scope in ("message", "all"):
        for conversation_id, offset, message in corpus.iter_messages():
            yield "message", message.id, message.content, conversation_id, offset


# ---------------------------------------------------------------------------
# Exact
# ---------------------------------------------------------------------------


class ExactMatcher:
    """Case-sensitivity-aware substring containment."""

    def match(self, options: SearchOptions, corpus: Corpus) -> list[Candidate]:
        query = options.query if options.case_sensitive else options.query.lower()
        candidates: list[Candidate] = []

        for kind, target_id, text, conversation_id, offset in _iter_targets(options, corpus):
            haystack = text if options.case_sensitive else text.lower()
            if query in haystack:
                candidates.append(
                    Candidate(
                        kind=kind,
                        id=target_id,
                        highlights=[options.query],
                        snippet_term=options.query,
                        conversation_id=conversation_id,
                        message_index=offset,
                    )
                )

        return candidates


# ---------------------------------------------------------------------------
# Regex
# ---------------------------------------------------------------------------


class RegexMatcher:
    """Regular-expression matching, case-insensitive unless requested."""

    def __init__(self, pattern: re.Pattern[str]) -> None:
        self.pattern = pattern

    @classmethod
    def compile(cls, options: SearchOptions) -> RegexMatcher:
        """Compile the query into a matcher.

        Raises:
            InvalidPatternError: If the query is not a valid pattern.
        """
        flags = 0 if options.case_sensitive else re.IGNORECASE
        try:
            pattern = re.compile(options.query, flags)
        except re.error as e:
            raise InvalidPatternError(f"Invalid regex {options.query!r}: {e}") from e
        return cls(pattern)

    def _distinct_matches(self, text: str) -> list[str]:
        found: list[str] = []
        for m in self.pattern.finditer(text):
            value = m.group(0)
            # Zero-width matches carry nothing to highlight
            if value and value not in found:
                found.append(value)
                if len(found) >= MAX_REGEX_HIGHLIGHTS:
                    break
        return found

    def match(self, options: SearchOptions, corpus: Corpus) -> list[Candidate]:
        candidates: list[Candidate] = []

        for kind, target_id, text, conversation_id, offset in _iter_targets(options, corpus):
            matches = self._distinct_matches(text)
            if matches:
                candidates.append(
                    Candidate(
                        kind=kind,
                        id=target_id,
                        highlights=matches,
                        snippet_term=matches[0],
                        conversation_id=conversation_id,
                        message_index=offset,
                    )
                )

        return candidates


# ---------------------------------------------------------------------------
# Fuzzy
# ---------------------------------------------------------------------------


class FuzzyMatcher:
    """Token-overlap matching.

    The match ratio is the share of distinct query tokens found in the
    target's tokens. Any ratio above zero qualifies. When an index is
    supplied, only locations sharing at least one token with the query are
    examined.
    """

    def __init__(self, index: SearchIndex | None = None) -> None:
        self.index = index

    def match(self, options: SearchOptions, corpus: Corpus) -> list[Candidate]:
        query_tokens = list(dict.fromkeys(tokenize(options.query)))
        if not query_tokens:
            return []

        shortlist = self.index.lookup(query_tokens) if self.index is not None else None
        if shortlist is not None and not shortlist:
            return []

        candidates: list[Candidate] = []
        for kind, target_id, text, conversation_id, offset in _iter_targets(options, corpus):
            if shortlist is not None:
                if kind == "conversation":
                    location = conversation_key(target_id)
                else:
                    location = message_key(conversation_id or "", offset or 0)
                if location not in shortlist:
                    continue

            target_tokens = set(tokenize(text))
            matched = [token for token in query_tokens if token in target_tokens]
            if not matched:
                continue

            candidates.append(
                Candidate(
                    kind=kind,
                    id=target_id,
                    highlights=matched,
                    match_ratio=len(matched) / len(query_tokens),
                    snippet_term=matched[0],
                    conversation_id=conversation_id,
                    message_index=offset,
                )
            )

        return candidates


# ---------------------------------------------------------------------------
# Strategy selection
# ---------------------------------------------------------------------------


def select_matcher(options: SearchOptions, index: SearchIndex | None = None) -> Matcher:
    """Pick the match strategy for the given options.

    Regex wins over exact phrase. A malformed regex falls back to exact
    matching instead of failing the search.
    """
    if options.regex:
        try:
            return RegexMatcher.compile(options)
        except InvalidPatternError as e:
            logger.warning("%s; falling back to exact matching", e)
            return ExactMatcher()
    if options.exact_phrase:
        return ExactMatcher()
    return FuzzyMatcher(index)
