from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandFailed(RuntimeError):
    """An external command exited non-zero while check=True."""

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {fmt_argv(self.argv)}\n{stderr}".rstrip())


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    dry_run: bool = False,
    capture: bool = True,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - capture=False hands the terminal to the child (installers, password
      prompts); stdout/stderr are then empty in the result.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    p = subprocess.run(
        argv_list,
        input=input_text,
        text=True,
        stdout=subprocess.PIPE if capture else None,
        stderr=subprocess.PIPE if capture else None,
        cwd=cwd,
        env=dict(os.environ, **(env or {})),
    )

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise CommandFailed(argv_list, p.returncode, stderr)

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
