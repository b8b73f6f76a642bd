from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..lib.brew import install_packages
from ..lib.env import RunContext
from ..lib.manifests import load_package_manifest
from ..lib.platform_probe import PlatformProfile
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    stage = Stage.INSTALL_PACKAGES
    title = "Installing Homebrew packages"
    fatal = True

    def __init__(self, manifest_path: Optional[str] = None) -> None:
        self.manifest_path = manifest_path

    def run(self, ctx: RunContext, state: Dict[str, Any]) -> Dict[str, Any]:
        profile = state.get("platform")
        if not isinstance(profile, PlatformProfile):
            raise RuntimeError("platform missing; probe stage must run first")

        if ctx.passthrough:
            logger.info("Installer arguments: %s", " ".join(ctx.passthrough))

        manifest = load_package_manifest(self.manifest_path)
        count = install_packages(profile, manifest, dry_run=ctx.dry_run)

        state.setdefault("execution", {}).setdefault("decisions", {})["packages_requested"] = count
        logger.info("Homebrew packages done (%s requested, %s taps)", count, len(manifest.taps))
        return state
