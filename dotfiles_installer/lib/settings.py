"""Preference writes (`defaults write`) and the few system commands that go with them.

Every entry is applied on its own: a rejected write is logged and recorded,
and the next entry still runs. Entries carrying a skip policy are never
executed, only reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from string import Template
from typing import Any, Collection, List, Optional, Sequence, Tuple

from .command import run_cmd

logger = logging.getLogger(__name__)


class Policy(str, Enum):
    APPLY = "apply"
    SKIP_DEPRECATED = "skip-deprecated"
    SKIP_BLOCKED = "skip-blocked-by-platform-security"
    SKIP_INSECURE = "skip-insecure-default"


_SKIP_REASONS = {
    Policy.SKIP_DEPRECATED: "deprecated, no effect on current macOS",
    Policy.SKIP_BLOCKED: "blocked by System Integrity Protection",
    Policy.SKIP_INSECURE: "weakens security, disabled by default",
}

VALUE_TYPES = ("bool", "int", "float", "string", "array")


@dataclass(frozen=True)
class SettingEntry:
    domain: str
    key: str
    value: Any
    policy: Policy = Policy.APPLY
    value_type: Optional[str] = None
    sudo: bool = False
    current_host: bool = False
    note: str = ""

    @property
    def label(self) -> str:
        return f"{self.domain} {self.key}"


@dataclass(frozen=True)
class CommandEntry:
    description: str
    argv: Tuple[str, ...]
    policy: Policy = Policy.APPLY
    sudo: bool = False

    @property
    def label(self) -> str:
        return self.description


@dataclass
class AppliedReport:
    applied: List[str] = field(default_factory=list)
    skipped: List[Tuple[str, str]] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def merge(self, other: "AppliedReport") -> "AppliedReport":
        self.applied.extend(other.applied)
        self.skipped.extend(other.skipped)
        self.failed.extend(other.failed)
        return self


def infer_type(value: Any) -> str:
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, (list, tuple)):
        return "array"
    return "string"


def _expand(text: str, home: Path) -> str:
    return Template(text).safe_substitute(HOME=str(home))


def _render_scalar(value: Any, home: Path) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return _expand(str(value), home)


def defaults_argv(entry: SettingEntry, *, home: Path) -> List[str]:
    """Build the `defaults write` argument vector for one entry."""

    value_type = entry.value_type or infer_type(entry.value)
    if value_type not in VALUE_TYPES:
        raise ValueError(f"Unsupported value type {value_type!r} for {entry.label}")

    argv: List[str] = ["sudo"] if entry.sudo else []
    argv.append("defaults")
    if entry.current_host:
        argv.append("-currentHost")
    argv += ["write", _expand(entry.domain, home), entry.key, f"-{value_type}"]

    if value_type == "array":
        values = entry.value if isinstance(entry.value, (list, tuple)) else [entry.value]
        argv += [_render_scalar(v, home) for v in values]
    elif value_type == "bool":
        argv.append(_render_scalar(bool(entry.value), home))
    else:
        argv.append(_render_scalar(entry.value, home))
    return argv


def command_argv(entry: CommandEntry, *, home: Path) -> List[str]:
    argv = [_expand(a, home) for a in entry.argv]
    return ["sudo", *argv] if entry.sudo else argv


def _effective_policy(policy: Policy, label: str, reenabled: Collection[str]) -> Policy:
    if policy is Policy.SKIP_INSECURE and label in reenabled:
        logger.warning("Re-enabled by operator (weakens security): %s", label)
        return Policy.APPLY
    return policy


def apply_settings(
    entries: Sequence[SettingEntry],
    *,
    home: Path,
    reenabled: Collection[str] = (),
    dry_run: bool = False,
) -> AppliedReport:
    report = AppliedReport()
    for entry in entries:
        policy = _effective_policy(entry.policy, entry.label, reenabled)
        if policy is not Policy.APPLY:
            reason = _SKIP_REASONS[policy]
            logger.info("Skipping %s (%s)", entry.label, reason)
            report.skipped.append((entry.label, reason))
            continue
        try:
            run_cmd(defaults_argv(entry, home=home), dry_run=dry_run)
        except Exception as e:
            logger.warning("Setting %s was rejected, continuing: %s", entry.label, e)
            report.failed.append(entry.label)
            continue
        report.applied.append(entry.label)
    return report


def apply_commands(
    commands: Sequence[CommandEntry],
    *,
    home: Path,
    dry_run: bool = False,
) -> AppliedReport:
    report = AppliedReport()
    for entry in commands:
        if entry.policy is not Policy.APPLY:
            reason = _SKIP_REASONS[entry.policy]
            logger.info("Skipping %s (%s)", entry.label, reason)
            report.skipped.append((entry.label, reason))
            continue
        try:
            run_cmd(command_argv(entry, home=home), dry_run=dry_run)
        except Exception as e:
            logger.warning("Command %r failed, continuing: %s", entry.label, e)
            report.failed.append(entry.label)
            continue
        report.applied.append(entry.label)
    return report


def needs_sudo(
    entries: Sequence[SettingEntry],
    commands: Sequence[CommandEntry],
    *,
    reenabled: Collection[str] = (),
) -> bool:
    for e in entries:
        if not e.sudo:
            continue
        if e.policy is Policy.APPLY or (e.policy is Policy.SKIP_INSECURE and e.label in reenabled):
            return True
    return any(c.sudo and c.policy is Policy.APPLY for c in commands)
