#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import shlex
import sys

from movie_alert.config import ANIMATION_GENRE_ID, ANIMATION_GENRE_NAME, DEFAULT_WINDOW_DAYS, AppConfig
from movie_alert.errors import MovieAlertError, RemoteError
from movie_alert.ingestion.upcoming_animation import RunReport, UpcomingAnimationFetcher
from movie_alert.integrations.browser import BrowserOpener, CommandOpener, WebBrowserOpener
from movie_alert.utils.env import load_env


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="open_upcoming_animation",
        description="Open TMDb pages for upcoming animated movies in the default browser.",
    )
    parser.add_argument(
        "--window-days",
        type=int,
        default=DEFAULT_WINDOW_DAYS,
        help=f"Days ahead of today that count as upcoming (default: {DEFAULT_WINDOW_DAYS}).",
    )
    parser.add_argument(
        "--genre",
        default=None,
        help=f"Genre name to look up via TMDb's genre list (default: {ANIMATION_GENRE_NAME} by id).",
    )
    parser.add_argument(
        "--genre-id",
        type=int,
        default=None,
        help=f"TMDb genre id to filter on (default: {ANIMATION_GENRE_ID}).",
    )
    parser.add_argument("--region", type=str, default="US", help="Release region (default: US).")
    parser.add_argument("--language", type=str, default="en-US", help="Response language (default: en-US).")
    parser.add_argument("--max-pages", type=int, default=1, help="Max discover pages to fetch (default: 1).")
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds (default: none).")
    parser.add_argument(
        "--browser-command",
        default=None,
        help="Open URLs with this command instead of the webbrowser module (e.g. 'xdg-open').",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print movies without opening the browser.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _build_config(args: argparse.Namespace) -> AppConfig:
    genre_name = (args.genre or "").strip()
    genre_id = args.genre_id
    if genre_id is None and not genre_name:
        genre_id = ANIMATION_GENRE_ID
    if not genre_name:
        genre_name = ANIMATION_GENRE_NAME if genre_id == ANIMATION_GENRE_ID else f"genre id {genre_id}"
    return AppConfig.from_env(
        window_days=args.window_days,
        genre_id=genre_id,
        genre_name=genre_name,
        language=args.language,
        region=(args.region or "").strip() or None,
        max_pages=args.max_pages,
        timeout_seconds=args.timeout,
        dry_run=args.dry_run,
    )


def _build_opener(args: argparse.Namespace) -> BrowserOpener:
    if args.browser_command:
        return CommandOpener(shlex.split(args.browser_command))
    return WebBrowserOpener()


def _report_error(exc: MovieAlertError) -> None:
    print(f"ERROR: {exc.stage} failed: {exc}", file=sys.stderr)
    if isinstance(exc, RemoteError) and exc.body_snippet and not exc.status_message:
        print(f"    {exc.body_snippet}", file=sys.stderr)


def _print_summary(report: RunReport) -> None:
    for failure in report.failures:
        print(f"FAILED to open tmdb_id={failure.movie.tmdb_id} url={failure.error.url} error={failure.error}")
    print(
        "open_upcoming_animation: "
        f"movies={len(report.movies)} opened={len(report.opened)} "
        f"failed={len(report.failures)} skipped={report.skipped}"
    )


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    _configure_logging(args.verbose)
    load_env()

    try:
        config = _build_config(args)
        fetcher = UpcomingAnimationFetcher(config, opener=_build_opener(args), echo=print)
        report = fetcher.run()
    except MovieAlertError as exc:
        _report_error(exc)
        return 1

    _print_summary(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
