from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .command import run_cmd

logger = logging.getLogger(__name__)

# Long-running desktop processes that cache preferences.
RESTART_APPS = (
    "Activity Monitor",
    "cfprefsd",
    "Dock",
    "Finder",
    "SystemUIServer",
    "Safari",
    "Terminal",
)


@dataclass(frozen=True)
class BestEffortAction:
    """An external command whose failure is logged and never propagated.

    `requires` names an executable that must exist for the action to run.
    """

    label: str
    argv: Tuple[str, ...]
    requires: Optional[str] = None


def run_best_effort(actions: Iterable[BestEffortAction], *, dry_run: bool = False) -> List[str]:
    """Run each action independently. Returns labels of the actions that succeeded."""

    done: List[str] = []
    for action in actions:
        if action.requires and not Path(action.requires).exists():
            logger.info("Skipping %s (%s not found)", action.label, action.requires)
            continue
        try:
            r = run_cmd(action.argv, check=False, dry_run=dry_run)
        except Exception as e:
            logger.debug("%s could not run: %s", action.label, e)
            continue
        if r.returncode == 0:
            done.append(action.label)
        else:
            logger.debug("%s exited %s (ignored)", action.label, r.returncode)
    return done


def quit_system_settings_action() -> BestEffortAction:
    # An open System Settings window would write its own values back.
    return BestEffortAction(
        label="quit System Settings",
        argv=("osascript", "-e", 'tell application "System Settings" to quit'),
    )


def launch_services_rebuild_action(lsregister: str) -> BestEffortAction:
    return BestEffortAction(
        label="rebuild Launch Services database",
        argv=(lsregister, "-kill", "-r", "-domain", "local", "-domain", "system", "-domain", "user"),
        requires=lsregister,
    )


def restart_actions(names: Sequence[str] = RESTART_APPS) -> List[BestEffortAction]:
    return [BestEffortAction(label=f"restart {n}", argv=("killall", n)) for n in names]
