from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

SUBLIME_HELPER = "Sublime Text.app/Contents/SharedSupport/bin/subl"
VIM_DIRS = ("swaps", "backups", "undo")


def link_editor_helper(home: Path, *, applications_dir: str, dry_run: bool = False) -> str:
    """Expose Sublime Text's `subl` in ~/bin. Returns what happened."""

    helper = Path(applications_dir) / SUBLIME_HELPER
    link = home / "bin" / "subl"

    if not helper.is_file():
        logger.info("Sublime Text not found, skipping symlink.")
        return "missing"
    if link.is_symlink():
        logger.info("Sublime Text command-line helper already symlinked.")
        return "exists"
    if dry_run:
        logger.info("Would symlink %s -> %s", link, helper)
        return "linked"

    link.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(helper, link)
    logger.info("Symlinked Sublime Text command-line helper to %s", link)
    return "linked"


def create_vim_dirs(home: Path, *, dry_run: bool = False) -> List[Path]:
    dirs = [home / ".vim" / name for name in VIM_DIRS]
    for d in dirs:
        if dry_run:
            logger.info("Would create %s", d)
            continue
        d.mkdir(parents=True, exist_ok=True)
    return dirs
