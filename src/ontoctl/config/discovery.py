"""Locate and read the ontoctl configuration.

Settings live either in a dedicated ``ontoctl.toml`` or in the
``[tool.ontoctl]`` table of a project's ``pyproject.toml``. Discovery walks
up from the start directory; in each directory ``ontoctl.toml`` wins over
``pyproject.toml``, and a ``pyproject.toml`` without the table is skipped.
``ONTOCTL_CONFIG`` names a file directly and disables the walk.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "ontoctl.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "ONTOCTL_CONFIG"
PYPROJECT_TABLE = ("tool", "ontoctl")


def _pyproject_table(data: dict[str, Any]) -> dict[str, Any] | None:
    table: Any = data
    for key in PYPROJECT_TABLE:
        if not isinstance(table, dict) or key not in table:
            return None
        table = table[key]
    return table if isinstance(table, dict) else None


def _has_ontoctl_table(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return _pyproject_table(data) is not None


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _has_ontoctl_table(pyproject):
            return pyproject
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Settings table in *path*: the whole file, or ``[tool.ontoctl]`` of a pyproject.

    Raises ``tomllib.TOMLDecodeError`` for malformed files.
    """
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == PYPROJECT_FILENAME:
        return _pyproject_table(data) or {}
    return data
