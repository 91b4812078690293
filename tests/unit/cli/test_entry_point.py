"""Tests for the console script entry point definition."""
from importlib import import_module
from pathlib import Path
from typing import Any

import tomllib


def _load_entry_point(entry: str) -> Any:
    module_path, _, attr_path = entry.partition(":")
    if not module_path or not attr_path:
        raise AssertionError("Invalid entry point definition")

    target: Any = import_module(module_path)
    for part in attr_path.split("."):
        target = getattr(target, part)
    return target


def test_console_script_entry_point_is_callable() -> None:
    project_root = Path(__file__).resolve().parents[3]
    pyproject = tomllib.loads((project_root / "pyproject.toml").read_text())
    entry_point = pyproject["project"]["scripts"]["mztab-validator"]

    loaded = _load_entry_point(entry_point)
    assert callable(loaded)
