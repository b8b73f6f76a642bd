from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .lib.env import RunContext
from .logging_utils import banner

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    START = "start"
    PROBE_PLATFORM = "probe_platform"
    UPDATE_REPOSITORY = "update_repository"
    ENSURE_PACKAGE_MANAGER = "ensure_package_manager"
    INSTALL_PACKAGES = "install_packages"
    CHANGE_SHELL = "change_shell"
    SYNC_DOTFILES = "sync_dotfiles"
    APPLY_SETTINGS = "apply_settings"
    POST_FIXUPS = "post_fixups"
    DONE = "done"
    FAILED = "failed"


class Step(Protocol):
    """A single idempotent stage.

    fatal steps stop the run on any exception; the others are logged and the
    run moves on.
    """

    stage: Stage
    title: str
    fatal: bool

    def run(self, ctx: RunContext, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass
class PipelineResult:
    state: Dict[str, Any]
    final_stage: Stage
    ran_steps: List[str] = field(default_factory=list)
    failed_steps: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.final_stage is Stage.DONE

    @property
    def exit_code(self) -> int:
        if self.ok:
            return 0
        code = getattr(self.error, "returncode", None)
        return code if isinstance(code, int) and code != 0 else 1


def run_pipeline(
    *,
    ctx: RunContext,
    steps: Sequence[Step],
    state: Optional[Dict[str, Any]] = None,
) -> PipelineResult:
    """Run steps in order: fail fast on fatal stages, continue past the rest."""

    state = {} if state is None else state
    exe = state.setdefault("execution", {})
    exe["current_stage"] = Stage.START.value

    result = PipelineResult(state=state, final_stage=Stage.DONE)

    for step in steps:
        exe["current_stage"] = step.stage.value
        banner(step.title)
        try:
            state = step.run(ctx, state)
        except Exception as e:
            if step.fatal:
                logger.exception("Stage %s failed; stopping", step.stage.value)
                exe.setdefault("errors", []).append({"stage": step.stage.value, "error": str(e)})
                result.final_stage = Stage.FAILED
                result.error = e
                break
            logger.warning("Stage %s failed, continuing: %s", step.stage.value, e)
            exe.setdefault("warnings", []).append({"stage": step.stage.value, "error": str(e)})
            result.failed_steps.append(step.stage.value)
            continue
        result.ran_steps.append(step.stage.value)

    exe["current_stage"] = result.final_stage.value
    result.state = state
    return result
