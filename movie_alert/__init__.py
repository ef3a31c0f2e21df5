"""
Shared movie-alert library code.

This package holds the code reused by the CLI entrypoint in `scripts/`:
- configuration and environment loading
- the TMDb and browser integrations
- the upcoming-animation run itself

Entrypoints should live outside this package and import from `movie_alert`
rather than the other way around.
"""
