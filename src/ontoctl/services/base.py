"""BaseService: foundation for the ontoctl services.

Every service receives a :class:`Workspace` at construction time. The
workspace provides the source loader, the ontology cache, and the
configured storage backend. Services never raise pipeline errors to their
callers; :func:`failure` turns them into ``ServiceResult(ok=False)``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pydantic

from ontoctl.domain.errors import PipelineError
from ontoctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from ontoctl.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)


def failure(op: str, exc: PipelineError, *, warnings: list[str] | None = None) -> ServiceResult:
    """Map a pipeline error to a failed result, keeping its message text unchanged."""
    logger.debug("%s failed with %s: %s", op, exc.code, exc.message)
    return ServiceResult(
        ok=False,
        op=op,
        warnings=warnings or [],
        error=ServiceError(code=exc.code, message=exc.message, detail=exc.detail, hint=exc.hint),
    )


def invalid_input(op: str, exc: pydantic.ValidationError) -> ServiceResult:
    """Failed result for a payload that does not match the operation's input contract."""
    problems = [
        {"field": ".".join(str(part) for part in error["loc"]) or "<root>", "message": error["msg"]}
        for error in exc.errors()
    ]
    message = "; ".join(f"{p['field']}: {p['message']}" for p in problems)
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code="INVALID_INPUT",
            message=f"Invalid input: {message}",
            detail={"errors": problems},
            hint="Check field names and types against the operation's input schema.",
        ),
    )


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class CheckService(BaseService):
            def check(self, source: SourceSpec) -> ServiceResult:
                loaded = self._workspace.load_validated(...)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace
