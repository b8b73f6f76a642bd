from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default

logger = logging.getLogger(__name__)


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    The file gets every record with timestamps; stdout gets plain messages
    so stage banners read like a progress report.

    If the requested log file cannot be opened (read-only home, sandboxed
    runner) we fall back to a file in the working directory.

    Returns the actual file path being used.
    """

    root = logging.getLogger()
    root.setLevel(min(level, logging.DEBUG))

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(root, "_dotfiles_configured", False):
        return getattr(root, "_dotfiles_log_path", log_path)

    requested = os.path.expanduser(log_path)
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(requested) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(requested)
        chosen_path = requested
    except OSError:
        chosen_path = str(Path.cwd() / "dotfiles-installer.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    # The file always keeps command output for support.
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(logging.Formatter("%(message)s"))
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        root.addHandler(h)

    setattr(root, "_dotfiles_configured", True)
    setattr(root, "_dotfiles_log_path", chosen_path)

    logger.debug("Logging initialized (requested=%s, actual=%s)", requested, chosen_path)
    return chosen_path


def banner(title: str) -> None:
    logger.info("=== %s ===", title)
