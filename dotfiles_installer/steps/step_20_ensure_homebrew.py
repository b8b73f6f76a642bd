from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.brew import ensure_homebrew
from ..lib.env import PATHS, RunContext
from ..lib.platform_probe import PlatformProfile
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class EnsureHomebrewStep:
    stage = Stage.ENSURE_PACKAGE_MANAGER
    title = "Setting up Homebrew"
    fatal = True

    def __init__(self, install_url: str = PATHS.homebrew_install_url) -> None:
        self.install_url = install_url

    def run(self, ctx: RunContext, state: Dict[str, Any]) -> Dict[str, Any]:
        profile = state.get("platform")
        if not isinstance(profile, PlatformProfile):
            raise RuntimeError("platform missing; probe stage must run first")

        bootstrapped = ensure_homebrew(
            profile,
            install_url=self.install_url,
            interactive=ctx.interactive,
            dry_run=ctx.dry_run,
        )
        state.setdefault("execution", {}).setdefault("decisions", {})["homebrew_bootstrapped"] = bootstrapped
        return state
