from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..lib.env import RunContext
from ..lib.repo import update_checkout
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class UpdateRepositoryStep:
    stage = Stage.UPDATE_REPOSITORY
    title = "Updating repository from git"
    fatal = False

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    def run(self, ctx: RunContext, state: Dict[str, Any]) -> Dict[str, Any]:
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        if not ctx.update_repo:
            logger.info("Repository update disabled (--no-update).")
            decisions["repo_updated"] = False
            return state
        if not (self.repo_root / ".git").exists():
            logger.info("%s is not a git checkout, skipping update.", self.repo_root)
            decisions["repo_updated"] = False
            return state

        decisions["repo_updated"] = update_checkout(self.repo_root, dry_run=ctx.dry_run)
        return state
