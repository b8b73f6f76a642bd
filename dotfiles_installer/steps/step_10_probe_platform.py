from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..lib.env import RunContext
from ..lib.platform_probe import resolve_platform
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class ProbePlatformStep:
    stage = Stage.PROBE_PLATFORM
    title = "Detecting platform"
    fatal = False

    def __init__(self, machine: Optional[str] = None) -> None:
        self.machine = machine

    def run(self, ctx: RunContext, state: Dict[str, Any]) -> Dict[str, Any]:
        # Resolved once; every later stage reads this value instead of re-probing.
        profile = resolve_platform(self.machine)
        state["platform"] = profile
        state.setdefault("execution", {}).setdefault("decisions", {})["architecture"] = profile.architecture
        return state
