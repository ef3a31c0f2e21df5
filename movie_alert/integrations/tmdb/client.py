from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Protocol

import requests

from movie_alert.errors import ParseError, RemoteError, TransportError
from movie_alert.models.movies import DiscoverPage, Genre, MovieSummary, ReleaseWindow

logger = logging.getLogger(__name__)

TMDB_API_BASE_URL = "https://api.themoviedb.org/3"
TMDB_DISCOVER_MOVIE_URL = f"{TMDB_API_BASE_URL}/discover/movie"
TMDB_GENRE_MOVIE_LIST_URL = f"{TMDB_API_BASE_URL}/genre/movie/list"
TMDB_API_KEY_QUERY_PARAM = "api_key"


class SessionLike(Protocol):
    """The part of `requests.Session` the client relies on."""

    def get(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any: ...


def _redact_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    redacted = dict(params or {})
    if TMDB_API_KEY_QUERY_PARAM in redacted:
        redacted[TMDB_API_KEY_QUERY_PARAM] = "***"
    return redacted


def _extract_status_message(resp: Any) -> str | None:
    # TMDb error bodies look like {"status_code": 7, "status_message": "Invalid API key: ..."}
    try:
        payload = resp.json()
    except ValueError:
        return None
    if isinstance(payload, Mapping):
        message = payload.get("status_message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def _request_json(
    session: SessionLike,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    timeout_seconds: float | None = None,
) -> dict[str, Any]:
    """
    Issue one GET and return the decoded JSON object.

    No retries: transport failures, non-2xx statuses and undecodable bodies are
    raised as `TransportError`, `RemoteError` and `ParseError` respectively.
    """

    headers = {"accept": "application/json"}
    logger.debug("GET %s params=%s", url, _redact_params(params))
    try:
        resp = session.get(url, params=params, headers=headers, timeout=timeout_seconds)
    except requests.RequestException as exc:
        raise TransportError(f"TMDb request failed: {exc}") from exc

    status = int(resp.status_code)
    if not 200 <= status < 300:
        status_message = _extract_status_message(resp)
        detail = f": {status_message}" if status_message else "."
        raise RemoteError(
            f"TMDb request failed with HTTP {status}{detail}",
            status_code=status,
            body_snippet=(resp.text or "")[:400],
            status_message=status_message,
        )

    try:
        payload = resp.json()
    except ValueError as exc:
        raise ParseError(
            "TMDb returned non-JSON response.",
            status_code=status,
            body_snippet=(resp.text or "")[:400],
        ) from exc

    if not isinstance(payload, dict):
        raise ParseError("TMDb returned unexpected JSON shape (not an object).", status_code=status)
    return payload


def _coerce_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def _coerce_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _parse_release_date(value: Any, *, tmdb_id: int) -> date:
    if not isinstance(value, str) or not value.strip():
        raise ParseError(f"TMDb result id={tmdb_id} is missing release_date.")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ParseError(f"TMDb result id={tmdb_id} has invalid release_date {value!r}.") from exc


def parse_movie_summary(entry: Any, *, genre: str) -> MovieSummary:
    if not isinstance(entry, Mapping):
        raise ParseError("TMDb result entry is not an object.")

    tmdb_id = _coerce_int(entry.get("id"))
    if tmdb_id is None:
        raise ParseError(f"TMDb result is missing a numeric id (keys={sorted(map(str, entry))}).")

    title = entry.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ParseError(f"TMDb result id={tmdb_id} is missing title.")

    release_date = _parse_release_date(entry.get("release_date"), tmdb_id=tmdb_id)

    raw_genre_ids = entry.get("genre_ids")
    genre_ids: tuple[int, ...] = ()
    if isinstance(raw_genre_ids, list):
        genre_ids = tuple(i for i in (_coerce_int(g) for g in raw_genre_ids) if i is not None)

    overview = entry.get("overview")
    return MovieSummary(
        tmdb_id=tmdb_id,
        title=title.strip(),
        release_date=release_date,
        genre=genre,
        genre_ids=genre_ids,
        overview=overview if isinstance(overview, str) and overview else None,
        popularity=_coerce_float(entry.get("popularity")),
    )


def parse_discover_page(payload: Mapping[str, Any], *, genre: str) -> DiscoverPage:
    results = payload.get("results")
    if not isinstance(results, list):
        raise ParseError("TMDb discover response is missing the results list.")

    movies = [parse_movie_summary(entry, genre=genre) for entry in results]

    # Pagination fields are optional; a response without them is a single page.
    page = _coerce_int(payload.get("page")) or 1
    total_pages = _coerce_int(payload.get("total_pages")) or page
    total_results = _coerce_int(payload.get("total_results"))
    if total_results is None:
        total_results = len(movies)
    return DiscoverPage(page=page, total_pages=total_pages, total_results=total_results, movies=movies)


def parse_genres(payload: Mapping[str, Any]) -> list[Genre]:
    rows = payload.get("genres")
    if not isinstance(rows, list):
        raise ParseError("TMDb genre response is missing the genres list.")

    genres: list[Genre] = []
    for row in rows:
        if not isinstance(row, Mapping):
            raise ParseError("TMDb genre entry is not an object.")
        genre_id = _coerce_int(row.get("id"))
        name = row.get("name")
        if genre_id is None or not isinstance(name, str):
            raise ParseError(f"TMDb genre entry is malformed: {dict(row)!r}")
        genres.append(Genre(id=genre_id, name=name))
    return genres


def find_genre_id(genres: list[Genre], name: str) -> int | None:
    wanted = name.strip().casefold()
    for genre in genres:
        if genre.name.strip().casefold() == wanted:
            return genre.id
    return None


def build_discover_params(
    *,
    api_key: str,
    genre_id: int,
    window: ReleaseWindow,
    language: str = "en-US",
    region: str | None = "US",
    sort_by: str = "popularity.desc",
    page: int = 1,
) -> dict[str, Any]:
    params: dict[str, Any] = {
        TMDB_API_KEY_QUERY_PARAM: api_key,
        "with_genres": str(int(genre_id)),
        "primary_release_date.gte": window.start.isoformat(),
        "primary_release_date.lte": window.end.isoformat(),
        "language": language,
        "sort_by": sort_by,
        "include_adult": "false",
        "page": int(page),
    }
    if region:
        params["region"] = region
    return params


def fetch_movie_genres(
    *,
    api_key: str,
    session: SessionLike | None = None,
    language: str = "en-US",
    timeout_seconds: float | None = None,
) -> list[Genre]:
    """Fetch TMDb's movie genre list (`/3/genre/movie/list`)."""

    owned_session = requests.Session() if session is None else None
    try:
        payload = _request_json(
            session if session is not None else owned_session,
            TMDB_GENRE_MOVIE_LIST_URL,
            params={TMDB_API_KEY_QUERY_PARAM: api_key, "language": language},
            timeout_seconds=timeout_seconds,
        )
    finally:
        if owned_session is not None:
            owned_session.close()
    return parse_genres(payload)


def discover_movies(
    *,
    api_key: str,
    genre_id: int,
    genre_name: str,
    window: ReleaseWindow,
    session: SessionLike | None = None,
    language: str = "en-US",
    region: str | None = "US",
    sort_by: str = "popularity.desc",
    page: int = 1,
    timeout_seconds: float | None = None,
) -> DiscoverPage:
    """
    Fetch one page of `/3/discover/movie` restricted to a genre and a release window.

    Results keep the order TMDb returns them in.
    """

    params = build_discover_params(
        api_key=api_key,
        genre_id=genre_id,
        window=window,
        language=language,
        region=region,
        sort_by=sort_by,
        page=page,
    )
    owned_session = requests.Session() if session is None else None
    try:
        payload = _request_json(
            session if session is not None else owned_session,
            TMDB_DISCOVER_MOVIE_URL,
            params=params,
            timeout_seconds=timeout_seconds,
        )
    finally:
        if owned_session is not None:
            owned_session.close()
    discover_page = parse_discover_page(payload, genre=genre_name)
    logger.debug(
        "Discover page %s/%s returned %s movies (total_results=%s)",
        discover_page.page,
        discover_page.total_pages,
        len(discover_page.movies),
        discover_page.total_results,
    )
    return discover_page
