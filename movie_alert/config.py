"""
Run configuration.

The fetcher never reads `os.environ` itself: callers build an `AppConfig`
(usually via `AppConfig.from_env`) and pass it in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from movie_alert.errors import ConfigurationError, MissingCredentialError
from movie_alert.utils.env import getenv_stripped

TMDB_API_KEY_ENV = "TMD_API_V3"
TMDB_API_KEY_HELP_URL = "https://developers.themoviedb.org/3/getting-started"

ANIMATION_GENRE_ID = 16
ANIMATION_GENRE_NAME = "Animation"
DEFAULT_WINDOW_DAYS = 90


@dataclass(frozen=True)
class AppConfig:
    """
    Everything one run needs.

    `window_days` defines "upcoming": primary release dates from today through
    today + `window_days`, both inclusive. When `genre_id` is None the id is
    looked up by `genre_name` through TMDb's genre list.
    """

    api_key: str | None = field(default=None, repr=False)
    window_days: int = DEFAULT_WINDOW_DAYS
    genre_id: int | None = ANIMATION_GENRE_ID
    genre_name: str = ANIMATION_GENRE_NAME
    language: str = "en-US"
    region: str | None = "US"
    sort_by: str = "popularity.desc"
    max_pages: int = 1
    timeout_seconds: float | None = None
    dry_run: bool = False

    def __post_init__(self) -> None:
        if self.window_days < 0:
            raise ConfigurationError(f"window_days must be >= 0 (got {self.window_days}).")
        if self.max_pages < 1:
            raise ConfigurationError(f"max_pages must be >= 1 (got {self.max_pages}).")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError(f"timeout_seconds must be > 0 (got {self.timeout_seconds}).")
        if self.genre_id is None and not self.genre_name.strip():
            raise ConfigurationError("Either genre_id or genre_name must be set.")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> AppConfig:
        api_key = getenv_stripped(TMDB_API_KEY_ENV, environ)
        return cls(api_key=api_key, **overrides)

    def require_api_key(self) -> str:
        resolved = (self.api_key or "").strip()
        if not resolved:
            raise MissingCredentialError(
                f"TMDb API key {TMDB_API_KEY_ENV} is not set in env. "
                f"A key can be obtained at {TMDB_API_KEY_HELP_URL}"
            )
        return resolved
