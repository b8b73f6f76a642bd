from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

logger = logging.getLogger(__name__)

APPLE_SILICON_ROOT = Path("/opt/homebrew")
INTEL_ROOT = Path("/usr/local")


@dataclass(frozen=True)
class PlatformProfile:
    architecture: Literal["arm64", "x86_64"]
    package_root: Path
    machine: str = ""

    @property
    def bin_dir(self) -> Path:
        return self.package_root / "bin"

    @property
    def brew_bin(self) -> Path:
        return self.bin_dir / "brew"


def resolve_platform(machine: Optional[str] = None) -> PlatformProfile:
    """Pick the Homebrew root for this CPU.

    Only the exact Apple Silicon identifier selects /opt/homebrew; anything
    else (including unrecognized strings) gets the Intel root.
    """

    raw = platform.machine() if machine is None else machine
    if raw == "arm64":
        profile = PlatformProfile(architecture="arm64", package_root=APPLE_SILICON_ROOT, machine=raw)
    else:
        profile = PlatformProfile(architecture="x86_64", package_root=INTEL_ROOT, machine=raw)

    logger.info("Detected architecture: %s (machine=%s)", profile.architecture, raw or "unknown")
    logger.info("Homebrew prefix set to: %s", profile.package_root)
    return profile
