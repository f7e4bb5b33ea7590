"""CLI entrypoint for chapter-resolver."""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Iterable, Sequence

from tqdm import tqdm

from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
    DEFAULT_WORKERS,
    ResolverConfig,
)
from .engine import ResolutionEngine
from .errors import ConfigError
from .fetchers import RequestsFetcher, make_session
from .formatting import chapters_to_payload, format_chapter_row, format_result_row
from .logging_utils import configure_logging, get_logger
from .models import ChapterResult, Completed, Fetcher
from .naming import search_term_from_filename
from .validation import parse_duration_arg


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Chapter Resolver - look up chapter markers on ChapterDB."
    )
    parser.add_argument("title", help="Title to search for (or a media file name with --filename).")
    parser.add_argument(
        "--filename",
        action="store_true",
        help="Treat TITLE as a media file name and derive the search term from it.",
    )
    parser.add_argument(
        "--duration",
        default="0",
        help="Media duration in ms or [H:]MM:SS[.mmm]; 0 disables the duration filter.",
    )
    parser.add_argument(
        "--pick", type=int, default=1, help="1-based result to select (default: first)."
    )
    parser.add_argument(
        "--load-all",
        action="store_true",
        help="Load chapters for every result so the listing shows chapter counts.",
    )
    parser.add_argument("--json", action="store_true", help="Print the chapters as JSON.")
    parser.add_argument("--base-url", help="ChapterDB base URL (or set CHAPTERDB_BASE_URL).")
    parser.add_argument("--user-agent", help="User-Agent header (or set CHAPTERDB_USER_AGENT).")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help="Request timeout in seconds.",
    )
    parser.add_argument(
        "--workers", type=int, default=DEFAULT_WORKERS, help="Number of fetch threads."
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable tqdm progress bars.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse and pre-validate CLI input."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.title.strip():
        parser.error("TITLE cannot be empty.")
    if args.pick < 1:
        parser.error("--pick must be >= 1.")
    return args


def namespace_to_config(args: argparse.Namespace) -> ResolverConfig:
    """Convert CLI args to validated ResolverConfig."""
    return ResolverConfig(
        base_url=args.base_url or os.getenv("CHAPTERDB_BASE_URL") or DEFAULT_BASE_URL,
        user_agent=args.user_agent or os.getenv("CHAPTERDB_USER_AGENT") or DEFAULT_USER_AGENT,
        request_timeout=args.timeout,
        workers=args.workers,
        show_progress=not args.no_progress,
    )


def build_fetcher(config: ResolverConfig) -> Fetcher:
    return RequestsFetcher(
        session=make_session(config.user_agent),
        timeout=config.request_timeout,
        logger=get_logger("fetch"),
    )


def _load_all(engine: ResolutionEngine, state: Completed, show_progress: bool) -> None:
    for result in state.results:
        engine.load_chapters(result)
    iterator: Iterable[ChapterResult] = state.results
    if show_progress:
        iterator = tqdm(state.results, desc="loading chapters")
    for result in iterator:
        engine.wait_for_chapters(result.id)


def _print_results(engine: ResolutionEngine, state: Completed) -> None:
    print("    #  duration      conf  chap  title")
    for index, result in enumerate(state.results, start=1):
        cached = engine.cached_chapters(result.id)
        shown = result if cached is None else result.with_chapters(cached)
        print(format_result_row(index, shown, selected=result.id == state.selected.id))


def resolve(
    args: argparse.Namespace, config: ResolverConfig, fetcher: Fetcher, duration_ms: int
) -> int:
    """Search, select and print the chosen chapter list. Returns an exit code."""
    logger = get_logger()
    title = search_term_from_filename(args.title) if args.filename else args.title.strip()

    with ResolutionEngine(config, fetcher=fetcher, logger=logger) as engine:
        engine.search(title, duration_ms).wait()
        state = engine.state
        if not isinstance(state, Completed):
            logger.error("No chapter information found for %r", title)
            return 1

        if args.pick > len(state.results):
            logger.error("--pick %d is out of range (%d results)", args.pick, len(state.results))
            return 2
        engine.select_result(state.results[args.pick - 1].id)
        if args.load_all:
            _load_all(engine, state, config.show_progress)

        selected = state.results[args.pick - 1]
        engine.wait_for_chapters(selected.id)
        current = engine.state
        if isinstance(current, Completed) and not args.json:
            _print_results(engine, current)

        chapters = engine.export_chapters()
        if not chapters:
            logger.error("No chapters could be loaded for %r", selected.title)
            return 1
        if args.json:
            json.dump(chapters_to_payload(chapters), sys.stdout, indent=2)
            sys.stdout.write("\n")
        else:
            print()
            for chapter in chapters:
                print(format_chapter_row(chapter))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose)
    logger = get_logger()
    try:
        config = namespace_to_config(args)
        duration_ms = parse_duration_arg(args.duration)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    return resolve(args, config, build_fetcher(config), duration_ms)


if __name__ == "__main__":
    raise SystemExit(main())
