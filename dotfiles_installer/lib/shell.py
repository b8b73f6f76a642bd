from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def manual_remedy(shell_path: str) -> str:
    return f"chsh -s {shell_path}"


def is_allowed_shell(shell_path: str, *, etc_shells: str) -> bool:
    p = Path(etc_shells)
    if not p.exists():
        return False
    lines = [ln.strip() for ln in p.read_text(encoding="utf-8").splitlines()]
    return shell_path in lines


def ensure_allowed_shell(shell_path: str, *, etc_shells: str, dry_run: bool = False) -> bool:
    """Register shell_path in the login-shell list. Returns True if it was appended."""

    if is_allowed_shell(shell_path, etc_shells=etc_shells):
        return False
    logger.info("Adding %s to %s...", shell_path, etc_shells)
    run_cmd(["sudo", "tee", "-a", etc_shells], input_text=shell_path + "\n", dry_run=dry_run)
    return True


def change_login_shell(shell_path: str, *, current_shell: str, dry_run: bool = False) -> bool:
    if current_shell == shell_path:
        logger.info("%s is already the default shell.", shell_path)
        return True
    r = run_cmd(["chsh", "-s", shell_path], check=False, capture=False, dry_run=dry_run)
    return r.returncode == 0
