from __future__ import annotations

import subprocess
import sys
import time
from pathlib import Path
from typing import Protocol, Sequence

from .config import DEFAULT_PREVIEW_DELAY
from .errors import LaunchError

OPEN_COMMANDS = {
    "darwin": ("open",),
    "linux": ("xdg-open",),
}


class Launcher(Protocol):
    def open(self, path: Path) -> None:
        ...


class SystemOpenLauncher:
    """Hand a file to the OS's default application for its type.

    The command returns once the viewer got the file, not when it exits.
    """

    def __init__(self, command: Sequence[str]):
        self.command = tuple(command)

    def open(self, path: Path) -> None:
        try:
            subprocess.run([*self.command, str(path)], check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise LaunchError(f"error opening OS's default web page viewer: {exc}") from exc


def get_launcher(platform: str | None = None) -> Launcher:
    platform = platform or sys.platform
    for prefix, command in OPEN_COMMANDS.items():
        if platform.startswith(prefix):
            return SystemOpenLauncher(command)
    raise LaunchError(f"preview is not supported on platform {platform!r}")


def preview(path: Path, launcher: Launcher, delay: float = DEFAULT_PREVIEW_DELAY) -> None:
    try:
        launcher.open(path)
    finally:
        # NOTE gives the viewer time to read the file before cleanup; still racy
        time.sleep(delay)
