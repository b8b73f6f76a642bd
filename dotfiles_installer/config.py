from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .lib.env import PATHS
from .lib.manifests import load_yaml, repo_root
from .lib.post_actions import RESTART_APPS


@dataclass(frozen=True)
class InstallerConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def source_root(self) -> Path:
        configured = self._section("paths").get("source_root")
        return Path(str(configured)).expanduser() if configured else repo_root()

    @property
    def packages_manifest(self) -> Optional[str]:
        return self._section("manifests").get("packages")

    @property
    def settings_manifest(self) -> Optional[str]:
        return self._section("manifests").get("settings")

    @property
    def sync_excludes(self) -> List[str]:
        return [str(p) for p in (self._section("sync").get("exclude") or [])]

    @property
    def homebrew_install_url(self) -> str:
        return str(self._section("homebrew").get("install_url") or PATHS.homebrew_install_url)

    @property
    def enable_insecure(self) -> List[str]:
        return [str(s) for s in (self._section("settings").get("enable_insecure") or [])]

    @property
    def restart_apps(self) -> List[str]:
        apps = self._section("settings").get("restart_apps")
        return [str(a) for a in apps] if apps is not None else list(RESTART_APPS)


def load_installer_config(path: Optional[str] = None) -> InstallerConfig:
    """Read the optional YAML config; no path means built-in defaults."""

    if not path:
        return InstallerConfig()

    p = Path(path).expanduser()
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("installer config must be YAML")

    raw = load_yaml(p)
    for section in ("paths", "manifests", "sync", "homebrew", "settings"):
        if not isinstance(raw.get(section) or {}, dict):
            raise ValueError(f"{p}: {section} must be a mapping")
    return InstallerConfig(raw=raw)
