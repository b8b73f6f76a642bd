from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from dotfiles_installer.lib import brew, post_actions, repo, settings, shell, sudo
from dotfiles_installer.lib.command import CmdResult, CommandFailed
from dotfiles_installer.lib.env import RunContext
from dotfiles_installer.lib.platform_probe import PlatformProfile

# Every module that calls run_cmd directly.
_CMD_MODULES = (brew, post_actions, repo, settings, shell, sudo)


class FakeRunner:
    """Stands in for run_cmd: records argv, fails on request."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.inputs: List[str] = []
        self._failures: List[Tuple[Tuple[str, ...], int]] = []
        self._stdout: Dict[Tuple[str, ...], str] = {}
        self.on_call = None

    def fail(self, *prefix: str, returncode: int = 1) -> None:
        self._failures.append((tuple(prefix), returncode))

    def stdout_for(self, *prefix: str, text: str) -> None:
        self._stdout[tuple(prefix)] = text

    def _match(self, argv: List[str], prefix: Tuple[str, ...]) -> bool:
        return tuple(argv[: len(prefix)]) == prefix

    def __call__(self, argv, *, check=True, env=None, cwd=None, input_text=None, dry_run=False, capture=True):
        argv = list(argv)
        self.calls.append(argv)
        if input_text is not None:
            self.inputs.append(input_text)
        if self.on_call is not None:
            self.on_call(argv)

        rc = 0
        for prefix, code in self._failures:
            if self._match(argv, prefix):
                rc = code
        stdout = ""
        for prefix, text in self._stdout.items():
            if self._match(argv, prefix):
                stdout = text
        if check and rc != 0:
            raise CommandFailed(argv, rc, "simulated failure")
        return CmdResult(argv=argv, returncode=rc, stdout=stdout, stderr="")

    def calls_starting(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if self._match(c, prefix)]


@pytest.fixture
def fake_cmd(monkeypatch) -> FakeRunner:
    runner = FakeRunner()
    for module in _CMD_MODULES:
        monkeypatch.setattr(module, "run_cmd", runner)
    return runner


@pytest.fixture
def home(tmp_path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def make_ctx(home):
    def _make(**kw) -> RunContext:
        kw.setdefault("interactive", False)
        kw.setdefault("home", home)
        kw.setdefault("update_repo", False)
        return RunContext(**kw)

    return _make


@pytest.fixture
def profile(tmp_path) -> PlatformProfile:
    root = tmp_path / "opt" / "homebrew"
    (root / "bin").mkdir(parents=True)
    return PlatformProfile(architecture="arm64", package_root=root, machine="arm64")


def install_fake_brew(profile: PlatformProfile) -> Path:
    brew_bin = profile.brew_bin
    brew_bin.write_text("#!/bin/sh\n", encoding="utf-8")
    brew_bin.chmod(0o755)
    return brew_bin
