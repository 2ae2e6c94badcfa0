#!/usr/bin/env python3
"""CLI entry point for Chat Search.

Runs searches, facet filters and suggestions against a JSON corpus
snapshot. Intended for debugging rankings and inspecting a corpus.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from .config import ConfigManager, SearchConfig
from .corpus import Corpus, load_corpus
from .filters import apply_filters, this_month_range, this_week_range, today_range
from .models import DateRange, FilterOptions, SearchOptions, SearchResult
from .session import SearchError, SearchSession

logger = logging.getLogger(__name__)

_DATE_PRESETS = {
    "today": today_range,
    "week": this_week_range,
    "month": this_month_range,
}


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------


def setup_logging(level: str) -> None:
    """Configure logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _format_datetime(dt: datetime | None) -> str:
    if dt is None:
        return "Never"
    return dt.strftime("%Y-%m-%d %H:%M")


def _load_config(path: Path | None) -> SearchConfig:
    if path is None:
        return SearchConfig()
    return ConfigManager(path).load()


def _print_result(position: int, result: SearchResult) -> None:
    label = "Chat" if result.kind == "conversation" else "Message"
    print(f"{position}. [{label}] {result.title}")
    if result.snippet:
        print(f"   {result.snippet}")
    if result.highlights:
        print(f"   Matches: {', '.join(result.highlights)}")
    print(f"   Score: {result.relevance}")
    print()


# ---------------------------------------------------------------------------
# Command Implementations
# ---------------------------------------------------------------------------


def _search(args: argparse.Namespace, corpus: Corpus, config: SearchConfig) -> int:
    session = SearchSession(lambda: corpus, config=config)
    try:
        options = SearchOptions(
            query=args.query,
            scope=args.scope,
            regex=args.regex,
            exact_phrase=args.exact,
            case_sensitive=args.case_sensitive,
            limit=args.limit if args.limit is not None else config.default_limit,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        results = session.perform_search(options)
    except SearchError as e:
        print(f"Error searching: {e}", file=sys.stderr)
        return 1

    if not results:
        print(f'No results found for "{args.query}"')
        return 0

    print(f'Search results for "{args.query}" ({len(results)} matches)')
    print()
    for i, result in enumerate(results, 1):
        _print_result(i, result)
    return 0


def _filter(args: argparse.Namespace, corpus: Corpus) -> int:
    date_range: DateRange | None = None
    if args.date:
        date_range = _DATE_PRESETS[args.date]()

    starred: bool | None = None
    if args.starred:
        starred = True
    elif args.unstarred:
        starred = False

    filters = FilterOptions(
        starred=starred,
        chat_type=args.type,
        date_range=date_range,
        folders=frozenset(args.folder) if args.folder else None,
        has_messages=True if args.has_messages else None,
        sort_by=args.sort,
        sort_order=args.order,
    )

    conversations = apply_filters(corpus.conversations.values(), filters)
    if not conversations:
        print("No conversations match the filters")
        return 0

    for conversation in conversations:
        star = "*" if conversation.starred else " "
        print(
            f"{star} {conversation.title} "
            f"({conversation.message_count} messages, "
            f"last active {_format_datetime(conversation.last_message_at)})"
        )
    return 0


def _suggest(args: argparse.Namespace, corpus: Corpus, config: SearchConfig) -> int:
    session = SearchSession(lambda: corpus, config=config)
    for previous in args.history or []:
        session.add_to_history(previous, 1)
    for suggestion in session.suggestions(args.partial):
        print(suggestion)
    return 0


# ---------------------------------------------------------------------------
# CLI Argument Parsing
# ---------------------------------------------------------------------------


def _create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="chat-search",
        description="Search, filter and suggest over a chat corpus snapshot.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yaml (default: built-in defaults)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    def add_corpus_argument(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "corpus",
            type=Path,
            help="Path to corpus JSON file",
        )

    # search
    search_parser = subparsers.add_parser(
        "search",
        help="Search conversations and messages",
    )
    add_corpus_argument(search_parser)
    search_parser.add_argument("query", type=str, help="Search query")
    search_parser.add_argument(
        "--scope",
        choices=["conversation", "message", "all"],
        default="all",
        help="What to search (default: all)",
    )
    mode = search_parser.add_mutually_exclusive_group()
    mode.add_argument("-r", "--regex", action="store_true", help="Treat query as a regex")
    mode.add_argument("-e", "--exact", action="store_true", help="Match the exact phrase")
    search_parser.add_argument(
        "-c",
        "--case-sensitive",
        action="store_true",
        help="Case-sensitive exact/regex matching",
    )
    search_parser.add_argument(
        "-l",
        "--limit",
        type=int,
        default=None,
        help="Max results (default: from config)",
    )

    # filter
    filter_parser = subparsers.add_parser(
        "filter",
        help="List conversations matching facet filters",
    )
    add_corpus_argument(filter_parser)
    starred = filter_parser.add_mutually_exclusive_group()
    starred.add_argument("--starred", action="store_true", help="Only starred")
    starred.add_argument("--unstarred", action="store_true", help="Only unstarred")
    filter_parser.add_argument(
        "--type",
        choices=["all", "regular", "incognito"],
        default="all",
        help="Chat type (default: all)",
    )
    filter_parser.add_argument(
        "--date",
        choices=sorted(_DATE_PRESETS),
        default=None,
        help="Limit to recent activity",
    )
    filter_parser.add_argument(
        "--folder",
        action="append",
        default=None,
        help="Folder id to include (repeatable; 'root' for no folder)",
    )
    filter_parser.add_argument(
        "--has-messages",
        action="store_true",
        help="Only conversations with messages",
    )
    filter_parser.add_argument(
        "--sort",
        choices=["date", "title", "messageCount"],
        default=None,
        help="Sort key",
    )
    filter_parser.add_argument(
        "--order",
        choices=["asc", "desc"],
        default="desc",
        help="Sort direction (default: desc)",
    )

    # suggest
    suggest_parser = subparsers.add_parser(
        "suggest",
        help="Suggest completions for a partial query",
    )
    add_corpus_argument(suggest_parser)
    suggest_parser.add_argument("partial", type=str, help="Partial query")
    suggest_parser.add_argument(
        "--history",
        action="append",
        default=None,
        help="Previous query to seed history with (repeatable, newest last)",
    )

    return parser


# ---------------------------------------------------------------------------
# Main Entry Point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Run the Chat Search CLI.

    Usage:
        chat-search search <corpus.json> <query> [--regex|--exact]
        chat-search filter <corpus.json> [--starred] [--sort date]
        chat-search suggest <corpus.json> <partial>

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = _create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = _load_config(args.config)
        corpus = load_corpus(args.corpus)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "search":
        return _search(args, corpus, config)
    elif args.command == "filter":
        return _filter(args, corpus)
    elif args.command == "suggest":
        return _suggest(args, corpus, config)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
