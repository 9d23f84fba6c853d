"""Tests for template loading and filters."""

from __future__ import annotations

import ast
from pathlib import Path

import pytest
from jinja2 import UndefinedError

from ontoctl.infrastructure.templates import build_template_environment, docstring, pyrepr


class TestFilters:
    @pytest.mark.parametrize("value", ["it's", 'say "hi"', 3, 2.5, None, ("a", "b"), "back\\slash"])
    def test_pyrepr_round_trips(self, value: object) -> None:
        assert ast.literal_eval(pyrepr(value)) == value

    @pytest.mark.parametrize(
        "text",
        [
            "plain text",
            'ends with "',
            'has """ inside',
            "back\\slash",
            "  padded  \nsecond line   ",
        ],
    )
    def test_docstring_stays_inside_quotes(self, text: str) -> None:
        source = f'"""{docstring(text)}"""'
        value = ast.literal_eval(source)
        assert value.split() == text.split()

    def test_docstring_trims_trailing_whitespace(self) -> None:
        assert docstring("first   \nsecond\n\n") == "first\nsecond"


class TestBuildTemplateEnvironment:
    def test_packaged_templates(self) -> None:
        env = build_template_environment("python")
        assert set(env.list_templates()) >= {"module.py.j2", "noun.py.j2", "verb.py.j2", "validator.py.j2"}

    def test_strict_undefined(self) -> None:
        env = build_template_environment("python")
        with pytest.raises(UndefinedError):
            env.from_string("{{ missing }}").render()

    def test_namespaced_override_wins(self, tmp_path: Path) -> None:
        (tmp_path / ".ontoctl" / "templates" / "python").mkdir(parents=True)
        (tmp_path / ".ontoctl" / "templates" / "python" / "noun.py.j2").write_text("namespaced\n")
        (tmp_path / ".ontoctl" / "templates" / "noun.py.j2").write_text("flat\n")
        env = build_template_environment("python", workspace_root=tmp_path)
        assert env.get_template("noun.py.j2").render() == "namespaced\n"

    def test_flat_override(self, tmp_path: Path) -> None:
        (tmp_path / ".ontoctl" / "templates").mkdir(parents=True)
        (tmp_path / ".ontoctl" / "templates" / "noun.py.j2").write_text("flat\n")
        env = build_template_environment("python", workspace_root=tmp_path)
        assert env.get_template("noun.py.j2").render() == "flat\n"

    def test_missing_override_falls_back(self, tmp_path: Path) -> None:
        env = build_template_environment("python", workspace_root=tmp_path)
        assert "def {{ fn }}" in env.loader.get_source(env, "validator.py.j2")[0]  # type: ignore[union-attr]
