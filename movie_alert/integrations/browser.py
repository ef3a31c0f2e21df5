"""Host browser integration: open a URL in the user's default browser."""
from __future__ import annotations

import logging
import subprocess
import sys
import webbrowser
from typing import Protocol, Sequence

from movie_alert.errors import SideEffectError

logger = logging.getLogger(__name__)


class BrowserOpener(Protocol):
    def open(self, url: str) -> None: ...


def default_open_command(platform: str | None = None) -> list[str]:
    """Host command that opens a URL with the default handler."""
    platform = platform or sys.platform
    if platform == "darwin":
        return ["open"]
    if platform.startswith("win"):
        # `start` is a cmd.exe builtin; the empty string is the window title.
        return ["cmd", "/c", "start", ""]
    return ["xdg-open"]


class WebBrowserOpener:
    """Opens each URL as a new tab through the stdlib `webbrowser` registry."""

    def open(self, url: str) -> None:
        try:
            opened = webbrowser.open(url, new=2)
        except webbrowser.Error as exc:
            raise SideEffectError(f"Browser failed to open {url}: {exc}", url=url) from exc
        if not opened:
            raise SideEffectError(f"No runnable browser found to open {url}.", url=url)
        logger.debug("Opened %s via webbrowser", url)


class CommandOpener:
    """Runs a host command (`open`, `xdg-open`, ...) with the URL as its last argument."""

    def __init__(self, command: Sequence[str] | None = None, *, timeout_seconds: float | None = 30.0) -> None:
        self.command = list(command) if command else default_open_command()
        self.timeout_seconds = timeout_seconds

    def open(self, url: str) -> None:
        cmd = [*self.command, url]
        try:
            result = subprocess.run(
                cmd,
                check=False,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout_seconds,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as exc:
            raise SideEffectError(f"Command {self.command[0]!r} failed to open {url}: {exc}", url=url) from exc
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()[:200]
            raise SideEffectError(
                f"Command {self.command[0]!r} exited {result.returncode} opening {url}"
                + (f": {stderr}" if stderr else "."),
                url=url,
            )
        logger.debug("Opened %s via %s", url, self.command[0])
