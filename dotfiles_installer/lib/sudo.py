from __future__ import annotations

import logging
import os
import threading
from typing import Callable, Optional

from .command import run_cmd

logger = logging.getLogger(__name__)


def sudo_validate(*, dry_run: bool = False) -> bool:
    """Ask for the administrator password upfront (refreshes the sudo timestamp)."""

    r = run_cmd(["sudo", "-v"], check=False, capture=False, dry_run=dry_run)
    if r.returncode != 0:
        logger.warning("sudo validation failed; privileged settings will likely be rejected")
        return False
    return True


def _pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


class SudoKeepAlive:
    """Background refresh of the sudo timestamp while a long stage runs.

    The loop ends on stop(), or on its own once the main thread has exited.
    A parent_pid can be given to also tie it to another process. Use as a
    context manager around the stage.
    """

    def __init__(
        self,
        *,
        interval_s: float = 60.0,
        parent_pid: Optional[int] = None,
        is_parent_alive: Optional[Callable[[], bool]] = None,
        dry_run: bool = False,
    ) -> None:
        self.interval_s = interval_s
        self.parent_pid = parent_pid
        self._is_parent_alive = is_parent_alive
        self.dry_run = dry_run
        self.refreshes = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def parent_alive(self) -> bool:
        if self._is_parent_alive is not None:
            return self._is_parent_alive()
        if not threading.main_thread().is_alive():
            return False
        return self.parent_pid is None or _pid_alive(self.parent_pid)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_s):
            if not self.parent_alive():
                logger.debug("sudo keep-alive: owner gone, exiting")
                return
            try:
                run_cmd(["sudo", "-n", "true"], check=False, dry_run=self.dry_run)
                self.refreshes += 1
            except Exception as e:
                logger.debug("sudo keep-alive refresh failed: %s", e)

    def start(self) -> "SudoKeepAlive":
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="sudo-keepalive", daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def __enter__(self) -> "SudoKeepAlive":
        return self.start()

    def __exit__(self, *exc: object) -> None:
        self.stop()
