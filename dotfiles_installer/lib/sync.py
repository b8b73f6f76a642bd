from __future__ import annotations

import contextlib
import filecmp
import fnmatch
import logging
import os
import shutil
import stat
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, FrozenSet, Iterable, List, Optional

from .env import RunContext

logger = logging.getLogger(__name__)

# Repository machinery that must never land in $HOME.
DEFAULT_EXCLUDES: FrozenSet[str] = frozenset(
    {
        # version control / OS clutter
        ".git/",
        ".DS_Store",
        # scripts
        "*.sh",
        "*.py",
        # docs, license, packaging metadata
        "*.md",
        "*.txt",
        "LICENSE*",
        "pyproject.toml",
        # internal tooling
        "init/",
        ".vim/",
        "manifests/",
        "dotfiles_installer/",
        "tests/",
        "__pycache__/",
        "*.egg-info/",
        ".pytest_cache/",
    }
)

CONFIRM_PROMPT = "This may overwrite existing files in your home directory. Are you sure? (y/n) "


class SyncOutcome(str, Enum):
    SYNCED = "synced"
    DECLINED = "declined"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SyncRule:
    source_root: Path
    dest_root: Path
    exclude_patterns: FrozenSet[str] = field(default_factory=lambda: DEFAULT_EXCLUDES)


@dataclass
class SyncStats:
    copied: int = 0
    unchanged: int = 0
    # Relative paths left as they were because a non-empty directory was in the way.
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def is_excluded(rel_path: str, *, is_dir: bool, patterns: Iterable[str]) -> bool:
    """rsync-style matching.

    - trailing "/" matches directories only
    - no "/" matches the base name at any depth
    - otherwise matches the path relative to the source root
    """

    name = rel_path.rsplit("/", 1)[-1]
    for pat in patterns:
        dir_only = pat.endswith("/")
        p = pat.rstrip("/")
        if dir_only and not is_dir:
            continue
        if "/" in p:
            if fnmatch.fnmatchcase(rel_path, p.lstrip("/")):
                return True
        elif fnmatch.fnmatchcase(name, p):
            return True
    return False


def _ensure_dir(path: Path) -> None:
    # A link to a directory is followed, not replaced.
    if path.is_dir():
        return
    if path.is_symlink() or path.exists():
        logger.info("Replacing %s with a directory", path)
        path.unlink()
    path.mkdir(parents=True, exist_ok=True)


def _clear_for_entry(dst: Path) -> bool:
    """Make room for a file or link at dst. False if a non-empty directory is there."""

    if dst.is_symlink() or dst.is_file():
        dst.unlink()
    elif dst.is_dir():
        if any(dst.iterdir()):
            return False
        dst.rmdir()
    return True


def _replace_file(src: Path, dst: Path, mode: int) -> None:
    """Write src's content next to dst, then rename it over dst.

    Only the directory has to be writable, so read-only files are updated too.
    """

    fd, tmp = tempfile.mkstemp(prefix=f".{dst.name}.", dir=dst.parent)
    os.close(fd)
    try:
        shutil.copyfile(src, tmp)
        os.chmod(tmp, mode)
        os.replace(tmp, dst)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp)
        raise


def _copy_file(src: Path, dst: Path) -> Optional[bool]:
    """Copy one entry.

    Returns True when dst changed, False when it already matched and None when
    a non-empty directory occupies dst.
    """

    if src.is_symlink():
        target = os.readlink(src)
        if dst.is_symlink() and os.readlink(dst) == target:
            return False
        if not _clear_for_entry(dst):
            return None
        os.symlink(target, dst)
        return True

    if dst.is_file() and not dst.is_symlink():
        if filecmp.cmp(src, dst, shallow=False):
            return False
        # Content only: the existing file keeps its mode bits.
        _replace_file(src, dst, stat.S_IMODE(dst.stat().st_mode))
        return True

    if not _clear_for_entry(dst):
        return None
    _replace_file(src, dst, stat.S_IMODE(src.stat().st_mode))
    return True


def copy_tree(rule: SyncRule, *, dry_run: bool = False) -> SyncStats:
    """Copy the source tree into the destination like `rsync -a --no-perms`.

    A conflict or error on one entry is logged and recorded in the stats; the
    walk carries on with the rest of the tree.
    """

    src_root = rule.source_root
    if not src_root.is_dir():
        raise FileNotFoundError(str(src_root))

    stats = SyncStats()
    for dirpath, dirnames, filenames in os.walk(src_root):
        here = Path(dirpath)
        rel_dir = here.relative_to(src_root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir + "/"

        kept = []
        for d in sorted(dirnames):
            rel = rel_dir + d
            if is_excluded(rel, is_dir=True, patterns=rule.exclude_patterns):
                continue
            if (here / d).is_symlink():
                # os.walk does not descend into links; copy them as links.
                filenames.append(d)
                continue
            kept.append(d)
        dirnames[:] = kept

        out_dir = rule.dest_root / rel_dir
        if not dry_run:
            try:
                _ensure_dir(out_dir)
            except OSError as e:
                logger.warning("Cannot create %s (%s); skipping its contents", out_dir, e)
                stats.failed.append(rel_dir or ".")
                dirnames[:] = []
                continue

        for f in sorted(filenames):
            rel = rel_dir + f
            if is_excluded(rel, is_dir=False, patterns=rule.exclude_patterns):
                continue
            if dry_run:
                logger.info("Would copy %s", rel)
                stats.copied += 1
                continue
            try:
                changed = _copy_file(here / f, out_dir / f)
            except OSError as e:
                logger.warning("Failed to copy %s: %s", rel, e)
                stats.failed.append(rel)
                continue
            if changed is None:
                logger.warning("Skipping %s: a non-empty directory is in the way", rel)
                stats.skipped.append(rel)
            elif changed:
                logger.debug("Copied %s", rel)
                stats.copied += 1
            else:
                stats.unchanged += 1
    return stats


def confirm(prompt: Callable[[str], str] = input) -> bool:
    try:
        reply = prompt(CONFIRM_PROMPT)
    except EOFError:
        reply = ""
    return reply.strip()[:1] in ("y", "Y")


def sync_dotfiles(
    rule: SyncRule,
    ctx: RunContext,
    *,
    prompt: Callable[[str], str] = input,
) -> SyncOutcome:
    """Copy the dotfiles tree into the home directory, gated by --force or a prompt.

    Without --force and without a terminal the stage never waits for input.
    """

    if not ctx.force:
        if not ctx.interactive:
            logger.info("Running non-interactively. Use --force to sync dotfiles.")
            return SyncOutcome.SKIPPED
        if not confirm(prompt):
            logger.info("Skipping dotfiles sync.")
            return SyncOutcome.DECLINED

    logger.info("Syncing dotfiles from %s to %s", rule.source_root, rule.dest_root)
    stats = copy_tree(rule, dry_run=ctx.dry_run)
    logger.info("Dotfiles sync complete (copied=%s unchanged=%s)", stats.copied, stats.unchanged)
    if stats.skipped:
        logger.warning("Left in place (directory in the way): %s", ", ".join(stats.skipped))
    if stats.failed:
        logger.warning("Not synced: %s", ", ".join(stats.failed))
    return SyncOutcome.SYNCED
