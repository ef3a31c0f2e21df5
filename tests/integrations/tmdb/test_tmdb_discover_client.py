from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from movie_alert.errors import ParseError, RemoteError, TransportError
from movie_alert.integrations.tmdb import client as mod
from movie_alert.models.movies import ReleaseWindow

_NO_JSON = object()


class _FakeResponse:
    def __init__(self, *, status_code: int = 200, payload=None, text: str = "") -> None:  # noqa: ANN001
        self.status_code = status_code
        self._payload = payload
        self.text = text or (json.dumps(payload) if payload is not _NO_JSON else "")

    def json(self):  # noqa: ANN201
        if self._payload is _NO_JSON:
            raise ValueError("not json")
        return self._payload


class _FakeSession:
    def __init__(self, responses: list) -> None:  # noqa: ANN001
        self._responses = list(responses)
        self.calls: list[dict] = []

    def get(self, url, *, params=None, headers=None, timeout=None):  # noqa: ANN001, ANN201
        self.calls.append({"url": url, "params": dict(params or {}), "headers": headers, "timeout": timeout})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _fixture(name: str) -> dict:
    repo_root = Path(__file__).resolve().parents[3]
    return json.loads((repo_root / "tests" / "fixtures" / "tmdb" / name).read_text(encoding="utf-8"))


_WINDOW = ReleaseWindow(start=date(2024, 5, 1), end=date(2024, 7, 30))


def test_discover_movies_builds_request_and_parses_in_order() -> None:
    session = _FakeSession([_FakeResponse(payload=_fixture("discover_movie_animation_sample.json"))])

    page = mod.discover_movies(
        api_key="secret",
        genre_id=16,
        genre_name="Animation",
        window=_WINDOW,
        session=session,
    )

    assert [m.tmdb_id for m in page.movies] == [101, 202]
    assert [m.title for m in page.movies] == ["Sample Animation", "Second Film"]
    assert page.movies[0].release_date == date(2024, 6, 1)
    assert page.movies[0].genre == "Animation"
    assert page.movies[0].genre_ids == (16, 10751, 35)
    assert page.movies[0].popularity == 88.5
    assert page.movies[1].overview is None
    assert page.total_pages == 1
    assert page.total_results == 2

    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://api.themoviedb.org/3/discover/movie"
    assert call["headers"] == {"accept": "application/json"}
    assert call["params"]["api_key"] == "secret"
    assert call["params"]["with_genres"] == "16"
    assert call["params"]["primary_release_date.gte"] == "2024-05-01"
    assert call["params"]["primary_release_date.lte"] == "2024-07-30"
    assert call["params"]["region"] == "US"
    assert call["params"]["page"] == 1
    assert call["timeout"] is None


def test_build_discover_params_omits_blank_region() -> None:
    params = mod.build_discover_params(api_key="k", genre_id=16, window=_WINDOW, region=None, page=3)
    assert "region" not in params
    assert params["page"] == 3
    assert params["include_adult"] == "false"


def test_request_json_wraps_transport_failures() -> None:
    session = _FakeSession([requests.ConnectionError("connection refused")])
    with pytest.raises(TransportError) as excinfo:
        mod.discover_movies(api_key="k", genre_id=16, genre_name="Animation", window=_WINDOW, session=session)
    assert excinfo.value.stage == "network call"
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_request_json_passes_timeout_through() -> None:
    session = _FakeSession([_FakeResponse(payload={"results": []})])
    mod.discover_movies(
        api_key="k", genre_id=16, genre_name="Animation", window=_WINDOW, session=session, timeout_seconds=4.5
    )
    assert session.calls[0]["timeout"] == 4.5


def test_request_json_surfaces_provider_status_message() -> None:
    body = {"status_code": 7, "status_message": "Invalid API key: You must be granted a valid key.", "success": False}
    session = _FakeSession([_FakeResponse(status_code=401, payload=body)])

    with pytest.raises(RemoteError) as excinfo:
        mod.discover_movies(api_key="bad", genre_id=16, genre_name="Animation", window=_WINDOW, session=session)

    err = excinfo.value
    assert err.status_code == 401
    assert err.status_message == "Invalid API key: You must be granted a valid key."
    assert "Invalid API key" in str(err)
    assert "status_code" in (err.body_snippet or "")


def test_request_json_rejects_non_json_body() -> None:
    session = _FakeSession([_FakeResponse(payload=_NO_JSON, text="<html>oops</html>")])
    with pytest.raises(ParseError) as excinfo:
        mod.discover_movies(api_key="k", genre_id=16, genre_name="Animation", window=_WINDOW, session=session)
    assert excinfo.value.body_snippet == "<html>oops</html>"


def test_request_json_rejects_non_object_payload() -> None:
    session = _FakeSession([_FakeResponse(payload=[1, 2, 3])])
    with pytest.raises(ParseError):
        mod.discover_movies(api_key="k", genre_id=16, genre_name="Animation", window=_WINDOW, session=session)


def test_parse_discover_page_requires_results_list() -> None:
    with pytest.raises(ParseError, match="results"):
        mod.parse_discover_page({"page": 1, "total_pages": 1}, genre="Animation")


@pytest.mark.parametrize(
    "entry",
    [
        {"title": "No Id", "release_date": "2024-06-01"},
        {"id": "101", "title": "String Id", "release_date": "2024-06-01"},
        {"id": 101, "release_date": "2024-06-01"},
        {"id": 101, "title": "No Date"},
        {"id": 101, "title": "Bad Date", "release_date": "June 1st"},
        {"id": 101, "title": "Empty Date", "release_date": ""},
        "not-an-object",
    ],
)
def test_parse_discover_page_rejects_malformed_entries(entry) -> None:  # noqa: ANN001
    payload = {"results": [{"id": 1, "title": "Fine", "release_date": "2024-06-01"}, entry]}
    with pytest.raises(ParseError):
        mod.parse_discover_page(payload, genre="Animation")


def test_parse_discover_page_defaults_pagination_to_single_page() -> None:
    page = mod.parse_discover_page(
        {"results": [{"id": 7, "title": "Only", "release_date": "2024-06-01"}]},
        genre="Animation",
    )
    assert page.page == 1
    assert page.total_pages == 1
    assert page.total_results == 1


def test_fetch_movie_genres_and_find_genre_id() -> None:
    session = _FakeSession([_FakeResponse(payload=_fixture("genre_movie_list_sample.json"))])

    genres = mod.fetch_movie_genres(api_key="k", session=session, language="en-US")

    assert session.calls[0]["url"] == "https://api.themoviedb.org/3/genre/movie/list"
    assert session.calls[0]["params"] == {"api_key": "k", "language": "en-US"}
    assert mod.find_genre_id(genres, "Animation") == 16
    assert mod.find_genre_id(genres, "  animation ") == 16
    assert mod.find_genre_id(genres, "Documentary") is None


def test_parse_genres_rejects_missing_list() -> None:
    with pytest.raises(ParseError):
        mod.parse_genres({"status_message": "nope"})


def test_redact_params_hides_api_key() -> None:
    assert mod._redact_params({"api_key": "secret", "page": 1}) == {"api_key": "***", "page": 1}


def test_package_exports_resolve_lazily() -> None:
    from movie_alert.integrations import tmdb

    assert tmdb.discover_movies is mod.discover_movies
    with pytest.raises(AttributeError):
        tmdb.not_a_client_function  # noqa: B018


def test_calls_without_session_close_the_session_they_create(monkeypatch: pytest.MonkeyPatch) -> None:
    created = MagicMock()
    created.get.side_effect = [
        _FakeResponse(payload=_fixture("genre_movie_list_sample.json")),
        _FakeResponse(payload=_fixture("discover_movie_animation_sample.json")),
    ]
    monkeypatch.setattr(mod.requests, "Session", MagicMock(return_value=created))

    mod.fetch_movie_genres(api_key="k")
    assert created.close.call_count == 1

    mod.discover_movies(api_key="k", genre_id=16, genre_name="Animation", window=_WINDOW)
    assert created.close.call_count == 2


def test_created_session_is_closed_when_request_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    created = MagicMock()
    created.get.side_effect = requests.ConnectionError("connection refused")
    monkeypatch.setattr(mod.requests, "Session", MagicMock(return_value=created))

    with pytest.raises(TransportError):
        mod.discover_movies(api_key="k", genre_id=16, genre_name="Animation", window=_WINDOW)

    created.close.assert_called_once()


def test_caller_session_is_left_open() -> None:
    session = MagicMock()
    session.get.return_value = _FakeResponse(payload={"results": []})

    mod.discover_movies(api_key="k", genre_id=16, genre_name="Animation", window=_WINDOW, session=session)

    session.close.assert_not_called()
