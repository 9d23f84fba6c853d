"""Identifier rules shared by extraction and code generation."""

from __future__ import annotations

import keyword
import re

CLI_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_\-]*$")

# Module-level names every generated CLI defines.
RESERVED = frozenset({"cli", "main", "click", "json", "asyncio", "pathlib", "re", "urlparse"})

# Options click adds to every generated command.
RESERVED_OPTIONS = frozenset({"help"})


def is_cli_name(name: str) -> bool:
    return bool(CLI_NAME.match(name))


def py_ident(name: str) -> str:
    """Python identifier for a CLI name: dashes become underscores, keywords get a ``_`` suffix."""
    ident = name.replace("-", "_")
    if keyword.iskeyword(ident) or keyword.issoftkeyword(ident):
        ident += "_"
    return ident


def group_ident(noun: str) -> str:
    return f"{py_ident(noun)}_group"


def handler_ident(noun: str, verb: str) -> str:
    return f"{py_ident(noun)}_{py_ident(verb)}"


def validator_ident(noun: str, verb: str, argument: str) -> str:
    return f"_check_{handler_ident(noun, verb)}_{py_ident(argument)}"
