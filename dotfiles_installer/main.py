from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence

from .config import InstallerConfig, load_installer_config
from .lib.env import RunContext
from .logging_utils import DEFAULT_LOG_PATH, banner, configure_logging
from .pipeline import PipelineResult, Step, run_pipeline
from .steps import (
    ApplySettingsStep,
    ChangeShellStep,
    EnsureHomebrewStep,
    InstallPackagesStep,
    PostFixupsStep,
    ProbePlatformStep,
    SyncDotfilesStep,
    UpdateRepositoryStep,
)

logger = logging.getLogger(__name__)

RELOAD_HINT = "Please restart your shell or run 'source ~/.bash_profile' for changes to take effect."


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dotfiles-install",
        description="Provision this Mac: Homebrew packages, dotfiles, macOS settings.",
        allow_abbrev=False,
    )
    p.add_argument("-f", "--force", action="store_true", help="Sync dotfiles without asking")
    p.add_argument("--change-shell", action="store_true", help="Make Homebrew bash the login shell")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("--no-update", action="store_true", help="Do not git pull before installing")
    p.add_argument("--config", default=None, help="Installer config (yaml)")
    p.add_argument("--packages", default=None, help="Package manifest (yaml)")
    p.add_argument("--settings", default=None, help="Settings manifest (yaml)")
    p.add_argument("--source", default=None, help="Dotfiles tree to sync into $HOME")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("-v", "--verbose", action="store_true", help="Show command output on the console")
    return p


def build_run_context(
    args: argparse.Namespace,
    passthrough: Sequence[str] = (),
    *,
    environ: Mapping[str, str] = os.environ,
    isatty: Optional[Callable[[], bool]] = None,
) -> RunContext:
    home = environ.get("HOME")
    return RunContext(
        interactive=bool((isatty or sys.stdout.isatty)()),
        force=bool(args.force),
        change_shell_requested=bool(args.change_shell),
        dry_run=bool(args.dry_run),
        update_repo=not bool(args.no_update),
        home=Path(home) if home else Path.home(),
        shell=environ.get("SHELL", ""),
        passthrough=tuple(passthrough),
    )


def build_steps(cfg: InstallerConfig, args: argparse.Namespace) -> List[Step]:
    source_root = Path(args.source).expanduser() if args.source else cfg.source_root
    return [
        ProbePlatformStep(),
        UpdateRepositoryStep(source_root),
        EnsureHomebrewStep(cfg.homebrew_install_url),
        InstallPackagesStep(args.packages or cfg.packages_manifest),
        ChangeShellStep(),
        SyncDotfilesStep(source_root, extra_excludes=cfg.sync_excludes),
        ApplySettingsStep(
            args.settings or cfg.settings_manifest,
            reenabled=cfg.enable_insecure,
            restart_apps=cfg.restart_apps,
        ),
        PostFixupsStep(),
    ]


def run(
    *,
    ctx: RunContext,
    steps: Sequence[Step],
    log_path: str = DEFAULT_LOG_PATH,
    verbose: bool = False,
    finished: str = "Installation script finished.",
) -> PipelineResult:
    """Run the stages once. No state is kept between runs."""

    actual_log_path = configure_logging(log_path=log_path, level=logging.DEBUG if verbose else logging.INFO)
    banner("Starting dotfiles installation")
    if ctx.dry_run:
        logger.info("Dry run: commands are logged, not executed.")

    result = run_pipeline(ctx=ctx, steps=steps)
    decisions = (result.state.get("execution") or {}).get("decisions") or {}
    logger.debug("Run summary: %s", decisions)

    if result.ok:
        banner(finished)
        logger.info(RELOAD_HINT)
    else:
        logger.error(
            "Installation failed (exit %s). See %s for details.",
            result.exit_code,
            actual_log_path,
        )
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = build_parser()
    args, passthrough = p.parse_known_args(argv)

    try:
        cfg = load_installer_config(args.config)
    except (OSError, ValueError) as e:
        p.error(f"cannot load config: {e}")

    ctx = build_run_context(args, passthrough)
    result = run(ctx=ctx, steps=build_steps(cfg, args), log_path=args.log, verbose=args.verbose)
    return result.exit_code


def setup_main(argv: Optional[list[str]] = None, *, environ: Mapping[str, str] = os.environ) -> int:
    """Non-interactive wrapper: always sync, install packages only with RUN_BREW=1."""

    p = argparse.ArgumentParser(prog="dotfiles-setup", allow_abbrev=False)
    p.add_argument("--config", default=None)
    p.add_argument("--packages", default=None)
    p.add_argument("--source", default=None)
    p.add_argument("--log", default=DEFAULT_LOG_PATH)
    p.add_argument("--dry-run", action="store_true")
    args = p.parse_args(argv)

    try:
        cfg = load_installer_config(args.config)
    except (OSError, ValueError) as e:
        p.error(f"cannot load config: {e}")

    home = environ.get("HOME")
    ctx = RunContext(
        interactive=False,
        force=True,
        dry_run=bool(args.dry_run),
        update_repo=False,
        home=Path(home) if home else Path.home(),
        shell=environ.get("SHELL", ""),
    )

    source_root = Path(args.source).expanduser() if args.source else cfg.source_root
    steps: List[Step] = [
        ProbePlatformStep(),
        SyncDotfilesStep(source_root, extra_excludes=cfg.sync_excludes),
    ]

    configure_logging(log_path=args.log)
    if environ.get("RUN_BREW", "0") != "1":
        logger.info("Skipping Homebrew packages (set RUN_BREW=1 to enable).")
    elif shutil.which("brew", path=environ.get("PATH")) is None:
        logger.info("Homebrew not found; skipping packages. Install Homebrew or unset RUN_BREW.")
    else:
        steps.append(InstallPackagesStep(args.packages or cfg.packages_manifest))

    result = run(ctx=ctx, steps=steps, log_path=args.log, finished="Dotfiles setup complete.")
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
