"""Chat Search: in-process search and ranking over chat conversations."""

from chat_search.config import ConfigManager, SearchConfig
from chat_search.corpus import Corpus, corpus_from_dict, load_corpus
from chat_search.debouncer import SearchDebouncer
from chat_search.engine import search
from chat_search.filters import (
    apply_filters,
    this_month_range,
    this_week_range,
    today_range,
)
from chat_search.history import SearchHistory, generate_suggestions
from chat_search.index import SearchIndex, build_index, corpus_fingerprint
from chat_search.matching import (
    ExactMatcher,
    FuzzyMatcher,
    InvalidPatternError,
    RegexMatcher,
    select_matcher,
)
from chat_search.models import (
    Conversation,
    DateRange,
    FilterOptions,
    HighlightSpan,
    Message,
    SearchHistoryEntry,
    SearchOptions,
    SearchResult,
)
from chat_search.session import SearchError, SearchSession, SessionState
from chat_search.snippet import create_snippet, find_highlight_spans, render_highlights
from chat_search.tokenizer import tokenize

__version__ = "0.1.0"

__all__ = [
    # Models
    "Conversation",
    "Message",
    "SearchOptions",
    "SearchResult",
    "SearchHistoryEntry",
    "DateRange",
    "FilterOptions",
    "HighlightSpan",
    # Corpus
    "Corpus",
    "corpus_from_dict",
    "load_corpus",
    # Engine
    "tokenize",
    "SearchIndex",
    "build_index",
    "corpus_fingerprint",
    "ExactMatcher",
    "RegexMatcher",
    "FuzzyMatcher",
    "InvalidPatternError",
    "select_matcher",
    "search",
    "create_snippet",
    "find_highlight_spans",
    "render_highlights",
    # Filters, history
    "apply_filters",
    "today_range",
    "this_week_range",
    "this_month_range",
    "SearchHistory",
    "generate_suggestions",
    # Session
    "SearchSession",
    "SessionState",
    "SearchError",
    "SearchDebouncer",
    # Config
    "SearchConfig",
    "ConfigManager",
]
