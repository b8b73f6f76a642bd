from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from itertools import groupby
from typing import List

from .command import run_cmd
from .platform_probe import PlatformProfile

logger = logging.getLogger(__name__)


class PackageManagerError(RuntimeError):
    pass


@dataclass(frozen=True)
class PackageSpec:
    name: str
    category: str = "misc"


@dataclass(frozen=True)
class PackageManifest:
    packages: List[PackageSpec] = field(default_factory=list)
    taps: List[str] = field(default_factory=list)


def ensure_homebrew(
    profile: PlatformProfile,
    *,
    install_url: str,
    interactive: bool,
    dry_run: bool = False,
) -> bool:
    """Install Homebrew if its binary is missing at the resolved root.

    Returns True when a bootstrap was performed.
    """

    if profile.brew_bin.exists():
        logger.info("Homebrew is already installed (%s)", profile.brew_bin)
        return False

    logger.info("Homebrew not found at %s. Installing...", profile.brew_bin)
    script = run_cmd(["curl", "-fsSL", install_url], dry_run=dry_run).stdout
    env = None if interactive else {"NONINTERACTIVE": "1"}
    run_cmd(["/bin/bash", "-c", script], env=env, capture=False, dry_run=dry_run)

    if not dry_run and not profile.brew_bin.exists():
        raise PackageManagerError(f"Homebrew installer finished but {profile.brew_bin} is missing")
    return True


def brew(profile: PlatformProfile, *args: str, dry_run: bool = False) -> None:
    run_cmd([str(profile.brew_bin), *args], capture=False, dry_run=dry_run)


def ensure_sha256sum_link(profile: PlatformProfile, *, dry_run: bool = False) -> bool:
    """Expose GNU sha256sum under its conventional name.

    Returns True when the link was created.
    """

    link = profile.bin_dir / "sha256sum"
    target = profile.bin_dir / "gsha256sum"
    if link.is_symlink():
        return False
    if link.exists():
        logger.warning("%s exists and is not a symlink; leaving it alone", link)
        return False
    if dry_run:
        logger.info("Would link %s -> %s", link, target)
        return True
    os.symlink(target, link)
    logger.info("Linked %s -> %s", link, target)
    return True


def install_packages(
    profile: PlatformProfile,
    manifest: PackageManifest,
    *,
    dry_run: bool = False,
) -> int:
    """Update Homebrew and install every manifest entry.

    Already-installed packages are Homebrew's problem (it no-ops). Any failing
    brew call propagates as CommandFailed and aborts the whole installer.
    """

    logger.info("Updating Homebrew and installing packages...")
    brew(profile, "update", dry_run=dry_run)
    brew(profile, "upgrade", dry_run=dry_run)

    for tap in manifest.taps:
        brew(profile, "tap", tap, dry_run=dry_run)

    for category, group in groupby(manifest.packages, key=lambda p: p.category):
        names = [p.name for p in group]
        logger.info("Installing %s: %s", category, " ".join(names))
        brew(profile, "install", *names, dry_run=dry_run)
        if "coreutils" in names:
            ensure_sha256sum_link(profile, dry_run=dry_run)

    logger.info("Cleaning up outdated versions...")
    brew(profile, "cleanup", dry_run=dry_run)
    return len(manifest.packages)
