import importlib
from pathlib import Path

PYPROJECT = Path(__file__).resolve().parents[1] / "pyproject.toml"


def _table(name):
    """Key/value lines of one top-level pyproject table."""

    entries = {}
    current = None
    for line in PYPROJECT.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("["):
            current = line.strip("[]")
            continue
        if current == name and "=" in line:
            key, value = line.split("=", 1)
            entries[key.strip()] = value.strip().strip('"')
    return entries


def test_project_metadata_does_not_ship_the_design_ledger():
    project = _table("project")
    assert project["name"] == "dotfiles-installer"
    assert "readme" not in project


def test_console_scripts_resolve():
    scripts = _table("project.scripts")
    assert set(scripts) == {"dotfiles-install", "dotfiles-setup"}
    for target in scripts.values():
        module, func = target.split(":")
        assert callable(getattr(importlib.import_module(module), func))
