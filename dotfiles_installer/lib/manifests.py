from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .brew import PackageManifest, PackageSpec
from .settings import VALUE_TYPES, CommandEntry, Policy, SettingEntry


def repo_root() -> Path:
    # dotfiles_installer/lib/manifests.py -> dotfiles_installer -> repo root
    return Path(__file__).resolve().parents[2]


DEFAULT_PACKAGES = "manifests/packages.yaml"
DEFAULT_SETTINGS = "manifests/settings.yaml"


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML required to load manifests") from e

    if not path.exists():
        raise FileNotFoundError(str(path))
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {path}")
    return data


def _resolve(path: Optional[str], default_rel: str) -> Path:
    if path:
        return Path(path).expanduser()
    return repo_root() / default_rel


def _policy(raw: Any, where: str) -> Policy:
    try:
        return Policy(str(raw or "apply"))
    except ValueError:
        allowed = ", ".join(p.value for p in Policy)
        raise ValueError(f"{where}: unknown policy {raw!r} (expected one of {allowed})") from None


def parse_package_manifest(data: Dict[str, Any], *, source: str = "<manifest>") -> PackageManifest:
    taps = data.get("taps") or []
    groups = data.get("packages") or {}
    if not isinstance(taps, list):
        raise ValueError(f"{source}: taps must be a list")
    if not isinstance(groups, dict):
        raise ValueError(f"{source}: packages must map category -> list of names")

    specs: List[PackageSpec] = []
    for category, names in groups.items():
        if not isinstance(names, list):
            raise ValueError(f"{source}: packages.{category} must be a list")
        specs.extend(PackageSpec(name=str(n).strip(), category=str(category)) for n in names if str(n).strip())
    return PackageManifest(packages=specs, taps=[str(t) for t in taps])


def parse_settings_manifest(
    data: Dict[str, Any], *, source: str = "<manifest>"
) -> Tuple[List[SettingEntry], List[CommandEntry]]:
    raw_defaults = data.get("defaults") or []
    raw_commands = data.get("commands") or []
    if not isinstance(raw_defaults, list) or not isinstance(raw_commands, list):
        raise ValueError(f"{source}: defaults and commands must be lists")

    entries: List[SettingEntry] = []
    for i, item in enumerate(raw_defaults):
        where = f"{source}: defaults[{i}]"
        if not isinstance(item, dict):
            raise ValueError(f"{where} must be a mapping")
        missing = [k for k in ("domain", "key", "value") if k not in item]
        if missing:
            raise ValueError(f"{where} missing {', '.join(missing)}")
        value_type = item.get("type")
        if value_type is not None and value_type not in VALUE_TYPES:
            raise ValueError(f"{where}: unsupported type {value_type!r}")
        entries.append(
            SettingEntry(
                domain=str(item["domain"]),
                key=str(item["key"]),
                value=item["value"],
                policy=_policy(item.get("policy"), where),
                value_type=value_type,
                sudo=bool(item.get("sudo", False)),
                current_host=bool(item.get("current_host", False)),
                note=str(item.get("note") or ""),
            )
        )

    commands: List[CommandEntry] = []
    for i, item in enumerate(raw_commands):
        where = f"{source}: commands[{i}]"
        if not isinstance(item, dict) or not isinstance(item.get("argv"), list) or not item["argv"]:
            raise ValueError(f"{where} must be a mapping with a non-empty argv list")
        commands.append(
            CommandEntry(
                description=str(item.get("description") or " ".join(map(str, item["argv"]))),
                argv=tuple(str(a) for a in item["argv"]),
                policy=_policy(item.get("policy"), where),
                sudo=bool(item.get("sudo", False)),
            )
        )
    return entries, commands


def load_package_manifest(path: Optional[str] = None) -> PackageManifest:
    p = _resolve(path, DEFAULT_PACKAGES)
    return parse_package_manifest(load_yaml(p), source=str(p))


def load_settings_manifest(path: Optional[str] = None) -> Tuple[List[SettingEntry], List[CommandEntry]]:
    p = _resolve(path, DEFAULT_SETTINGS)
    return parse_settings_manifest(load_yaml(p), source=str(p))
