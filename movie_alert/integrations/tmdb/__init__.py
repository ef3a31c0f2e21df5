"""
TMDb integration client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from movie_alert.integrations.tmdb.client import (
        discover_movies,
        fetch_movie_genres,
        find_genre_id,
        parse_discover_page,
    )

__all__ = [
    "discover_movies",
    "fetch_movie_genres",
    "find_genre_id",
    "parse_discover_page",
]


def __getattr__(name: str):
    if name in __all__:
        from movie_alert.integrations.tmdb import client

        return getattr(client, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
