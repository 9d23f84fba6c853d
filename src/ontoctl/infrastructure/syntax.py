"""Target-language syntax checking for generated source."""

from __future__ import annotations

import ast
from typing import Protocol, runtime_checkable

from ontoctl.domain.errors import GeneratedSyntaxInvalid


@runtime_checkable
class SyntaxChecker(Protocol):
    language: str

    def check(self, source: str) -> None:
        """Raise GeneratedSyntaxInvalid if *source* does not parse."""
        ...


class PythonSyntaxChecker:
    """Checks generated code with the Python parser (no execution)."""

    language = "python"

    def check(self, source: str) -> None:
        try:
            ast.parse(source, filename="<generated>", mode="exec")
        except SyntaxError as exc:
            raise GeneratedSyntaxInvalid(exc.lineno or 0, exc.msg) from exc
