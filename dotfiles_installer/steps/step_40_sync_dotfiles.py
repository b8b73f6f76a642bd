from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable

from ..lib.env import RunContext
from ..lib.manifests import repo_root
from ..lib.sync import DEFAULT_EXCLUDES, SyncRule, sync_dotfiles
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class SyncDotfilesStep:
    stage = Stage.SYNC_DOTFILES
    title = "Syncing dotfiles to home directory"
    fatal = False

    def __init__(
        self,
        source_root: Path,
        *,
        extra_excludes: Iterable[str] = (),
        prompt: Callable[[str], str] = input,
    ) -> None:
        self.source_root = source_root
        self.excludes = DEFAULT_EXCLUDES | frozenset(extra_excludes)
        self.prompt = prompt

    def run(self, ctx: RunContext, state: Dict[str, Any]) -> Dict[str, Any]:
        # An installed (non-checkout) package has no dotfiles tree next to it.
        if self.source_root == repo_root() and not (self.source_root / "manifests").is_dir():
            raise RuntimeError(f"{self.source_root} is not a dotfiles checkout; pass --source")

        rule = SyncRule(source_root=self.source_root, dest_root=ctx.home, exclude_patterns=self.excludes)
        outcome = sync_dotfiles(rule, ctx, prompt=self.prompt)
        # Declined or skipped is not a failure; the run moves on to settings.
        state.setdefault("execution", {}).setdefault("decisions", {})["dotfiles_sync"] = outcome.value
        return state
