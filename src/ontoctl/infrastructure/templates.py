"""Shared Jinja2 template loading with per-workspace override support."""

from __future__ import annotations

from pathlib import Path

from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, PackageLoader, StrictUndefined


def pyrepr(value: object) -> str:
    """Python literal for *value*; used to embed model data in generated code."""
    return repr(value)


def docstring(text: str) -> str:
    """Make *text* safe inside a triple-quoted docstring."""
    lines = [line.rstrip() for line in text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"').splitlines()]
    body = "\n".join(lines).strip()
    if body.endswith('"'):
        body = body[:-1] + '\\"'
    return body


def build_template_environment(group: str, *, workspace_root: Path | None = None) -> Environment:
    """Build a Jinja2 environment with user overrides before packaged defaults.

    User overrides are loaded from ``.ontoctl/templates/`` inside the
    workspace. Both a namespaced directory (for example
    ``.ontoctl/templates/python/``) and the shared root are supported so
    templates can be organized without breaking the simpler flat override
    layout.
    """

    loaders: list[BaseLoader] = []
    if workspace_root is not None:
        template_root = workspace_root / ".ontoctl" / "templates"
        loaders.append(FileSystemLoader([str(template_root / group), str(template_root)]))

    loaders.append(PackageLoader("ontoctl", f"templates/{group}"))
    env = Environment(
        loader=ChoiceLoader(loaders),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
        autoescape=False,
    )
    env.filters["pyrepr"] = pyrepr
    env.filters["docstring"] = docstring
    return env
