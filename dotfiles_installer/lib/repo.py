from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def update_checkout(
    repo_root: Path,
    *,
    remote: str = "origin",
    branch: str = "main",
    dry_run: bool = False,
) -> bool:
    """Best-effort `git pull`; the local tree is used as-is when it fails."""

    try:
        r = run_cmd(["git", "-C", str(repo_root), "pull", remote, branch], check=False, dry_run=dry_run)
    except Exception as e:
        logger.warning("Could not run git (%s). Continuing with local version.", e)
        return False
    if r.returncode != 0:
        logger.warning("Could not update repository. Continuing with local version.")
        return False
    logger.info("Repository updated successfully.")
    return True
