"""
Find upcoming animated movies on TMDb and open each one's page in the browser.

A run is strictly sequential:
1. check the credential (nothing touches the network without it)
2. resolve the genre id (configured, or looked up by name)
3. fetch `/discover/movie` for the release window, page by page up to `max_pages`
4. open `https://www.themoviedb.org/movie/{id}` once per movie, in response order

Steps 1-3 raise on failure before anything is opened. A failed browser open only
affects that movie: it is recorded in the report and the loop moves on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Mapping

import requests

from movie_alert.config import AppConfig
from movie_alert.errors import ConfigurationError, SideEffectError
from movie_alert.integrations.browser import BrowserOpener, WebBrowserOpener
from movie_alert.integrations.tmdb.client import SessionLike, discover_movies, fetch_movie_genres, find_genre_id
from movie_alert.models.movies import MovieSummary, ReleaseWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenFailure:
    movie: MovieSummary
    error: SideEffectError


@dataclass
class RunReport:
    window: ReleaseWindow
    genre_id: int
    genre_name: str
    movies: list[MovieSummary] = field(default_factory=list)
    opened: list[str] = field(default_factory=list)
    failures: list[OpenFailure] = field(default_factory=list)
    dry_run: bool = False

    @property
    def skipped(self) -> int:
        return len(self.movies) - len(self.opened) - len(self.failures)


def format_movie_genres(genre_ids: tuple[int, ...], genre_names: Mapping[int, str] | None = None) -> str:
    names = genre_names or {}
    return ", ".join(names.get(genre_id, str(genre_id)) for genre_id in genre_ids)


def format_movie_block(movie: MovieSummary, genre_names: Mapping[int, str] | None = None) -> str:
    lines = [
        "***",
        f"Title: {movie.title}",
    ]
    if movie.genre_ids:
        lines.append(f"Genres: {format_movie_genres(movie.genre_ids, genre_names)}")
    lines += [
        f"Release date: {movie.release_date.isoformat()}",
        f"URL: {movie.detail_url}",
    ]
    return "\n".join(lines)


class UpcomingAnimationFetcher:
    """
    Orchestrates one run against TMDb.

    `session` and `opener` are injectable so tests can substitute canned HTTP
    responses and record browser opens. When no session is given, one
    `requests.Session` is created for the run and closed afterwards.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        session: SessionLike | None = None,
        opener: BrowserOpener | None = None,
        today: date | None = None,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self.config = config
        self._session = session
        self._opener = opener or WebBrowserOpener()
        self._today = today
        self._echo = echo
        self._genre_names: dict[int, str] = {}

    def release_window(self) -> ReleaseWindow:
        return ReleaseWindow.upcoming(self._today or date.today(), self.config.window_days)

    def run(self) -> RunReport:
        api_key = self.config.require_api_key()
        logger.debug("API key is found in config.")

        window = self.release_window()
        session = self._session
        owns_session = session is None
        if session is None:
            session = requests.Session()
        try:
            genre_id = self._resolve_genre_id(api_key, session)
            logger.debug("%s genre id is: %s", self.config.genre_name, genre_id)
            movies = self._discover_all(api_key, session, genre_id=genre_id, window=window)
        finally:
            if owns_session:
                session.close()

        report = RunReport(
            window=window,
            genre_id=genre_id,
            genre_name=self.config.genre_name,
            movies=movies,
            dry_run=self.config.dry_run,
        )
        self._say(
            f"Upcoming {self.config.genre_name.lower()} movies "
            f"(from {window.start.isoformat()} to {window.end.isoformat()}): {len(movies)}"
        )
        for movie in movies:
            self._open_movie(movie, report)
        return report

    def _resolve_genre_id(self, api_key: str, session: SessionLike) -> int:
        if self.config.genre_id is not None:
            return int(self.config.genre_id)

        genres = fetch_movie_genres(
            api_key=api_key,
            session=session,
            language=self.config.language,
            timeout_seconds=self.config.timeout_seconds,
        )
        self._genre_names = {genre.id: genre.name for genre in genres}
        genre_id = find_genre_id(genres, self.config.genre_name)
        if genre_id is None:
            raise ConfigurationError(f"id cannot be found for genre name: {self.config.genre_name}")
        return genre_id

    def _discover_all(
        self,
        api_key: str,
        session: SessionLike,
        *,
        genre_id: int,
        window: ReleaseWindow,
    ) -> list[MovieSummary]:
        movies: list[MovieSummary] = []
        page = 1
        while True:
            discover_page = discover_movies(
                api_key=api_key,
                genre_id=genre_id,
                genre_name=self.config.genre_name,
                window=window,
                session=session,
                language=self.config.language,
                region=self.config.region,
                sort_by=self.config.sort_by,
                page=page,
                timeout_seconds=self.config.timeout_seconds,
            )
            movies.extend(discover_page.movies)
            if not discover_page.movies:
                break
            if page >= discover_page.total_pages or page >= self.config.max_pages:
                break
            page += 1

        logger.debug("Total # of upcoming movies fetched: %s (pages=%s)", len(movies), page)
        return movies

    def _open_movie(self, movie: MovieSummary, report: RunReport) -> None:
        url = movie.detail_url
        self._say(format_movie_block(movie, self._genre_names))
        if self.config.dry_run:
            logger.info("Dry run: not opening %s", url)
            return

        try:
            self._opener.open(url)
        except SideEffectError as exc:
            report.failures.append(OpenFailure(movie=movie, error=exc))
            logger.warning("Failed to open tmdb_id=%s url=%s: %s", movie.tmdb_id, url, exc)
            return
        except Exception as exc:
            error = SideEffectError(f"Failed to open {url}: {exc}", url=url, tmdb_id=movie.tmdb_id)
            report.failures.append(OpenFailure(movie=movie, error=error))
            logger.warning("Failed to open tmdb_id=%s url=%s: %s", movie.tmdb_id, url, exc)
            return
        report.opened.append(url)

    def _say(self, message: str) -> None:
        if self._echo is not None:
            self._echo(message)
        else:
            logger.info("%s", message)
