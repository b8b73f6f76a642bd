from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class Paths:
    etc_shells: str = "/etc/shells"
    applications_dir: str = "/Applications"
    lsregister: str = (
        "/System/Library/Frameworks/CoreServices.framework/Frameworks/"
        "LaunchServices.framework/Support/lsregister"
    )
    log_default: str = "~/Library/Logs/dotfiles-installer.log"
    homebrew_install_url: str = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"


PATHS = Paths()


@dataclass(frozen=True)
class RunContext:
    """Per-run options, computed once from argv/environment and read-only after."""

    interactive: bool
    force: bool = False
    change_shell_requested: bool = False
    dry_run: bool = False
    update_repo: bool = True
    home: Path = field(default_factory=Path.home)
    shell: str = ""
    # Arguments the orchestrator does not understand; handed to the package stage.
    passthrough: Tuple[str, ...] = ()
