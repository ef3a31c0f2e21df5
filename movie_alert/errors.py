"""
Failure kinds of a movie-alert run.

Every error carries the `stage` of the run that failed so the CLI can name it
in its diagnostic. `SideEffectError` is the only one the run recovers from.
"""

from __future__ import annotations


class MovieAlertError(RuntimeError):
    stage = "run"


class ConfigurationError(MovieAlertError):
    stage = "configuration"


class MissingCredentialError(ConfigurationError):
    stage = "credential lookup"


class TmdbClientError(MovieAlertError):
    stage = "network call"

    def __init__(self, message: str, *, status_code: int | None = None, body_snippet: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


class TransportError(TmdbClientError):
    pass


class RemoteError(TmdbClientError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body_snippet: str | None = None,
        status_message: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, body_snippet=body_snippet)
        self.status_message = status_message


class ParseError(TmdbClientError):
    stage = "response parsing"


class SideEffectError(MovieAlertError):
    stage = "browser open"

    def __init__(self, message: str, *, url: str, tmdb_id: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.tmdb_id = tmdb_id
