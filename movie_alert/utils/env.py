from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def load_env(*, override: bool = False) -> Path | None:
    """
    Load the first `.env` found (repo root, then cwd) into `os.environ`.

    Variables already set in the process environment win unless `override=True`.
    """

    repo_root = Path(__file__).resolve().parents[2]
    for path in (repo_root / ".env", Path.cwd() / ".env"):
        if path.is_file():
            load_dotenv(dotenv_path=path, override=override)
            logger.debug("Loaded environment from %s", path)
            return path
    logger.debug("No .env file found; using process environment only")
    return None


def getenv_stripped(name: str, environ: Mapping[str, str] | None = None) -> str | None:
    source = os.environ if environ is None else environ
    value = (source.get(name) or "").strip()
    return value or None
