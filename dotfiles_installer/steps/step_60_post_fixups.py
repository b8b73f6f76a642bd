from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.env import PATHS, Paths, RunContext
from ..lib.fixups import create_vim_dirs, link_editor_helper
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class PostFixupsStep:
    stage = Stage.POST_FIXUPS
    title = "Post-install fixups"
    fatal = False

    def __init__(self, paths: Paths = PATHS) -> None:
        self.paths = paths

    def run(self, ctx: RunContext, state: Dict[str, Any]) -> Dict[str, Any]:
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})

        try:
            decisions["editor_helper"] = link_editor_helper(
                ctx.home, applications_dir=self.paths.applications_dir, dry_run=ctx.dry_run
            )
        except OSError as e:
            logger.warning("Could not link editor helper: %s", e)
            decisions["editor_helper"] = "failed"

        try:
            create_vim_dirs(ctx.home, dry_run=ctx.dry_run)
            decisions["vim_dirs"] = True
        except OSError as e:
            logger.warning("Could not create Vim directories: %s", e)
            decisions["vim_dirs"] = False
        return state
