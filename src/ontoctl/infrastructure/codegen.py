"""Code generation — CommandModel → Python/click source.

Rendering is bottom-up: each argument becomes a ``click.option`` declaration
plus an optional validator callback, each verb a handler skeleton, each noun
a ``click.group``, and the module template assembles the result together
with the feature fragments selected by the :class:`FeatureMask`. A disabled
feature's fragment is never rendered, so none of its text (imports included)
reaches the output.

The rendered text is normalized, checked against the target-language
parser, and returned as a :class:`GeneratedSource`. Output is a pure
function of the model and mask: no timestamps or environment data are
embedded in the code.
"""

from __future__ import annotations

import ast
import hashlib
import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from jinja2 import Environment, TemplateError
from pydantic import BaseModel, ConfigDict

from ontoctl.domain.errors import FileWriteFailed, FormattingFailed, InvalidOutputPath, TemplateRenderFailed
from ontoctl.domain.model import (
    Argument,
    CommandModel,
    CustomValidator,
    LengthValidator,
    OneOfValidator,
    PrimitiveType,
    RangeValidator,
    RegexValidator,
    Verb,
)
from ontoctl.domain.naming import group_ident, handler_ident, py_ident, validator_ident
from ontoctl.infrastructure.syntax import PythonSyntaxChecker, SyntaxChecker
from ontoctl.infrastructure.templates import build_template_environment

logger = logging.getLogger(__name__)

_PY_TYPES = {
    PrimitiveType.STRING: "str",
    PrimitiveType.INTEGER: "int",
    PrimitiveType.FLOAT: "float",
    PrimitiveType.BOOLEAN: "bool",
    PrimitiveType.PATH: "pathlib.Path",
    PrimitiveType.URL: "str",
}
_CLICK_TYPES = {
    PrimitiveType.STRING: "str",
    PrimitiveType.INTEGER: "int",
    PrimitiveType.FLOAT: "float",
    PrimitiveType.PATH: "click.Path(path_type=pathlib.Path)",
    PrimitiveType.URL: "str",
}
_METAVARS = {
    PrimitiveType.STRING: "TEXT",
    PrimitiveType.INTEGER: "INTEGER",
    PrimitiveType.FLOAT: "FLOAT",
    PrimitiveType.PATH: "PATH",
    PrimitiveType.URL: "URL",
}
# Commands the feature fragments add to the root group.
_FEATURE_COMMANDS = {"completions": "completion", "man_page": "man"}


class Feature(StrEnum):
    ASYNC_HANDLERS = "async_handlers"
    COMPLETIONS = "completions"
    MAN_PAGE = "man_page"
    COLORED_HELP = "colored_help"


class FeatureMask(BaseModel):
    """Independently selectable generation toggles."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    async_handlers: bool = False
    completions: bool = False
    man_page: bool = False
    colored_help: bool = False

    @classmethod
    def from_names(cls, names: list[str] | tuple[str, ...]) -> FeatureMask:
        """Build a mask enabling exactly *names*; unknown names raise ValueError."""
        return cls(**{Feature(name).value: True for name in names})

    def enabled(self) -> list[str]:
        return [feature.value for feature in Feature if getattr(self, feature.value)]


@dataclass(frozen=True)
class GeneratedSource:
    code: str
    model: CommandModel
    features: FeatureMask
    warnings: list[str] = field(default_factory=list)

    @property
    def content_hash(self) -> str:
        return hashlib.sha256(self.code.encode("utf-8")).hexdigest()

    @property
    def line_count(self) -> int:
        return self.code.count("\n")


# ── View models ──────────────────────────────────────────────────────


def _check_specs(model: CommandModel, argument: Argument) -> list[dict[str, Any]]:
    checks: list[dict[str, Any]] = []
    if model.primitive_of(argument.type) is PrimitiveType.URL:
        checks.append({"kind": "url"})
    for spec in model.validators_for(argument):
        if isinstance(spec, RegexValidator):
            checks.append({"kind": "regex", "pattern": spec.pattern})
        elif isinstance(spec, RangeValidator):
            checks.append({"kind": "range", "min": spec.min, "max": spec.max})
        elif isinstance(spec, LengthValidator):
            checks.append({"kind": "length", "min": spec.min, "max": spec.max})
        elif isinstance(spec, OneOfValidator):
            checks.append({"kind": "one_of", "values": tuple(spec.values)})
        elif isinstance(spec, CustomValidator):
            checks.append({"kind": "custom", "expression": spec.expression})
    return checks


class _Renderer:
    def __init__(self, model: CommandModel, features: FeatureMask, env: Environment) -> None:
        self.model = model
        self.features = features
        self.env = env
        self.imports: set[str] = set()
        self.warnings: list[str] = []

    def render(self, template: str, **context: Any) -> str:
        try:
            return self.env.get_template(template).render(**context)
        except TemplateError as exc:
            raise TemplateRenderFailed(template, str(exc)) from exc

    # argument level

    def argument(self, noun: str, verb: str, argument: Argument) -> dict[str, Any]:
        primitive = self.model.primitive_of(argument.type)
        param = py_ident(argument.name)
        checks = _check_specs(self.model, argument)
        validator_code = ""
        validator_fn = None
        if checks:
            validator_fn = validator_ident(noun, verb, argument.name)
            kinds = {check["kind"] for check in checks}
            if "regex" in kinds:
                self.imports.add("re")
            if "url" in kinds:
                self.imports.add("urlparse")
            validator_code = self.render(
                "validator.py.j2",
                fn=validator_fn,
                argument=argument,
                param=param,
                annotation=_PY_TYPES[primitive],
                binds_name=param != "value" and "custom" in kinds,
                checks=checks,
            )
        if primitive is PrimitiveType.PATH:
            self.imports.add("pathlib")

        is_flag = primitive is PrimitiveType.BOOLEAN
        has_default = argument.default is not None
        decl = [repr(f"--{argument.name}/--no-{argument.name}" if is_flag else f"--{argument.name}"), repr(param)]
        if is_flag:
            decl.append(f"default={bool(argument.default)!r}")
        else:
            decl.append(f"type={_CLICK_TYPES[primitive]}")
            if argument.required and not has_default:
                decl.append("required=True")
            if has_default:
                decl.append(f"default={argument.default!r}")
                decl.append("show_default=True")
            if primitive is PrimitiveType.URL:
                decl.append("metavar='URL'")
        if validator_fn is not None:
            decl.append(f"callback={validator_fn}")
        choices = [c for c in checks if c["kind"] == "one_of"]
        if self.features.completions and choices:
            decl.append(f"shell_complete=_complete_choices({choices[-1]['values']!r})")
        if argument.description:
            decl.append(f"help={argument.description!r}")

        annotation = _PY_TYPES[primitive]
        if not (is_flag or argument.required or has_default):
            annotation += " | None"
        return {
            "name": argument.name,
            "param": param,
            "option": ", ".join(decl),
            "annotation": annotation,
            "validator": validator_code,
            "usage": f"--{argument.name}" if is_flag else f"--{argument.name} {_METAVARS[primitive]}",
            "required": argument.required and not has_default and not is_flag,
        }

    # verb level

    def verb(self, noun: str, verb: Verb) -> str:
        arguments = [self.argument(noun, verb.name, argument) for argument in verb.arguments]
        handler = handler_ident(noun, verb.name)
        async_impl = verb.is_async and self.features.async_handlers
        if verb.is_async and not self.features.async_handlers:
            self.warnings.append(f"verb '{noun} {verb.name}' is async but async_handlers is disabled")
        if async_impl:
            self.imports.add("asyncio")
        return self.render(
            "verb.py.j2",
            noun=noun,
            verb=verb,
            group=group_ident(noun),
            handler=handler,
            impl=f"_{handler}_async",
            async_impl=async_impl,
            arguments=arguments,
            signature=", ".join(f"{a['param']}: {a['annotation']}" for a in arguments),
            params="{" + ", ".join(f"{a['param']!r}: {a['param']}" for a in arguments) + "}",
            call_kwargs=", ".join(f"{a['param']}={a['param']}" for a in arguments),
        )

    # noun level

    def noun(self, command: Any) -> str:
        verbs = [self.verb(command.noun, verb) for verb in command.verbs]
        return self.render(
            "noun.py.j2",
            noun=command.noun,
            description=command.description or command.noun,
            group=group_ident(command.noun),
            verbs=verbs,
        )

    # module level

    def module(self) -> str:
        for feature, command_name in _FEATURE_COMMANDS.items():
            if getattr(self.features, feature) and any(c.noun == command_name for c in self.model.commands):
                raise TemplateRenderFailed(
                    "module.py.j2", f"noun '{command_name}' clashes with the {feature} command"
                )
        nouns = [self.noun(command) for command in self.model.commands]
        man_entries = [
            {
                "usage": " ".join(
                    [self.model.name, command.noun, verb.name]
                    + [self._usage(a) for a in verb.arguments]
                ),
                "description": verb.description or verb.name,
            }
            for command in self.model.commands
            for verb in command.verbs
        ]
        return self.render(
            "module.py.j2",
            model=self.model,
            features=self.features,
            imports=self.imports,
            nouns=nouns,
            description=self.model.description or f"{self.model.name} command-line interface.",
            complete_var="_" + re.sub(r"[^A-Za-z0-9]", "_", self.model.name).upper() + "_COMPLETE",
            man_entries=man_entries,
        )

    def _usage(self, argument: Argument) -> str:
        primitive = self.model.primitive_of(argument.type)
        if primitive is PrimitiveType.BOOLEAN:
            return f"[--{argument.name}]"
        text = f"--{argument.name} {_METAVARS[primitive]}"
        return text if argument.required and argument.default is None else f"[{text}]"


# ── Formatting ───────────────────────────────────────────────────────

_BLANK_RUN = re.compile(r"\n{4,}")


def format_source(code: str) -> str:
    """Normalize whitespace without changing the program.

    Strips trailing whitespace, collapses runs of more than two blank
    lines, and ends the text with exactly one newline. If the input parses,
    the normalized text must parse to the same AST.
    """
    lines = [line.rstrip() for line in code.splitlines()]
    normalized = _BLANK_RUN.sub("\n\n\n", "\n".join(lines)).strip("\n") + "\n"
    try:
        before = ast.dump(ast.parse(code))
    except SyntaxError:
        return normalized
    try:
        after = ast.dump(ast.parse(normalized))
    except SyntaxError as exc:
        raise FormattingFailed(f"normalized text no longer parses: {exc.msg}") from exc
    if before != after:
        raise FormattingFailed("normalizing whitespace changed the program")
    return normalized


# ── Public API ───────────────────────────────────────────────────────


def generate(
    model: CommandModel,
    features: FeatureMask | None = None,
    *,
    checker: SyntaxChecker | None = None,
    env: Environment | None = None,
) -> GeneratedSource:
    """Render *model* into Python/click source.

    Raises:
        TemplateRenderFailed: a template is missing or fails to render.
        FormattingFailed: normalization would alter the program.
        GeneratedSyntaxInvalid: the output does not parse.
    """
    features = features or FeatureMask()
    renderer = _Renderer(model, features, env or build_template_environment("python"))
    code = format_source(renderer.module())
    (checker or PythonSyntaxChecker()).check(code)
    logger.debug("Generated %d lines for %s (features=%s)", code.count("\n"), model.name, features.enabled())
    return GeneratedSource(code=code, model=model, features=features, warnings=renderer.warnings)


def write_generated(source: GeneratedSource, path: Path, *, root: Path) -> Path:
    """Write generated code to *path*, which must be a ``.py`` file under *root*."""
    target = (root / path).resolve() if not path.is_absolute() else path.resolve()
    root = root.resolve()
    if target.suffix != ".py":
        raise InvalidOutputPath(str(path), "generated code must be written to a .py file")
    if not target.is_relative_to(root):
        raise InvalidOutputPath(str(path), f"path escapes the working directory {root}")
    if target.is_dir():
        raise InvalidOutputPath(str(path), "path is a directory")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(source.code, encoding="utf-8")
    except OSError as exc:
        raise FileWriteFailed(str(path), exc.strerror or str(exc)) from exc
    logger.debug("Wrote generated code to %s", target)
    return target
