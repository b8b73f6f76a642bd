from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Any, Dict, Iterable, Optional, Sequence

from ..lib.env import PATHS, Paths, RunContext
from ..lib.manifests import load_settings_manifest
from ..lib.post_actions import (
    RESTART_APPS,
    launch_services_rebuild_action,
    quit_system_settings_action,
    restart_actions,
    run_best_effort,
)
from ..lib.settings import apply_commands, apply_settings, needs_sudo
from ..lib.sudo import SudoKeepAlive, sudo_validate
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class ApplySettingsStep:
    stage = Stage.APPLY_SETTINGS
    title = "Applying macOS settings"
    fatal = False

    def __init__(
        self,
        settings_path: Optional[str] = None,
        *,
        reenabled: Iterable[str] = (),
        restart_apps: Sequence[str] = RESTART_APPS,
        paths: Paths = PATHS,
        keepalive_interval_s: float = 60.0,
    ) -> None:
        self.settings_path = settings_path
        self.reenabled = frozenset(reenabled)
        self.restart_apps = list(restart_apps)
        self.paths = paths
        self.keepalive_interval_s = keepalive_interval_s

    def run(self, ctx: RunContext, state: Dict[str, Any]) -> Dict[str, Any]:
        entries, commands = load_settings_manifest(self.settings_path)

        run_best_effort([quit_system_settings_action()], dry_run=ctx.dry_run)

        with ExitStack() as stack:
            if needs_sudo(entries, commands, reenabled=self.reenabled) and not ctx.dry_run:
                logger.info("Requesting administrator privileges for system-wide settings...")
                if sudo_validate():
                    stack.enter_context(SudoKeepAlive(interval_s=self.keepalive_interval_s))

            report = apply_settings(entries, home=ctx.home, reenabled=self.reenabled, dry_run=ctx.dry_run)
            report.merge(apply_commands(commands, home=ctx.home, dry_run=ctx.dry_run))

        run_best_effort([launch_services_rebuild_action(self.paths.lsregister)], dry_run=ctx.dry_run)

        logger.info("Restarting applications to apply settings...")
        run_best_effort(restart_actions(self.restart_apps), dry_run=ctx.dry_run)

        state.setdefault("execution", {}).setdefault("decisions", {})["settings"] = {
            "applied": len(report.applied),
            "skipped": len(report.skipped),
            "failed": report.failed,
        }
        logger.info(
            "Settings: %s applied, %s skipped, %s rejected. Some changes may require a logout or restart.",
            len(report.applied),
            len(report.skipped),
            len(report.failed),
        )
        return state
