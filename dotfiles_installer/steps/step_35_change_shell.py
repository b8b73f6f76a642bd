from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.env import PATHS, Paths, RunContext
from ..lib.platform_probe import PlatformProfile
from ..lib.shell import change_login_shell, ensure_allowed_shell, manual_remedy
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class ChangeShellStep:
    stage = Stage.CHANGE_SHELL
    title = "Default shell"
    fatal = False

    def __init__(self, paths: Paths = PATHS) -> None:
        self.paths = paths

    def run(self, ctx: RunContext, state: Dict[str, Any]) -> Dict[str, Any]:
        profile = state.get("platform")
        if not isinstance(profile, PlatformProfile):
            raise RuntimeError("platform missing; probe stage must run first")

        brew_bash = str(profile.bin_dir / "bash")
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        decisions["shell_changed"] = False

        if not ctx.change_shell_requested:
            logger.info("To change your default shell to Homebrew Bash, re-run with --change-shell.")
            return state
        if not ctx.interactive:
            logger.warning("Cannot change shell non-interactively.")
            logger.warning("Please run the following command manually:\n  %s", manual_remedy(brew_bash))
            return state

        try:
            ensure_allowed_shell(brew_bash, etc_shells=self.paths.etc_shells, dry_run=ctx.dry_run)
            changed = change_login_shell(brew_bash, current_shell=ctx.shell, dry_run=ctx.dry_run)
        except Exception as e:
            logger.warning("Shell registration failed: %s", e)
            changed = False

        if changed:
            logger.info("Shell is %s. Please open a new terminal.", brew_bash)
        else:
            logger.warning("Failed to change shell. Please run '%s' manually.", manual_remedy(brew_bash))
        decisions["shell_changed"] = changed
        return state
