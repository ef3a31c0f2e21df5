"""
External system integrations (TMDb, the host browser).

Collaborators outside this program's control live under this namespace so they
stay decoupled from the run orchestration in `movie_alert.ingestion`.
"""
