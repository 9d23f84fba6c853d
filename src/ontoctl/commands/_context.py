"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Provides lazy Workspace construction and
centralized result emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ontoctl.output.formatters import OutputSettings, format_result
from ontoctl.services.contracts import SourceSpec

if TYPE_CHECKING:
    from ontoctl.config.settings import OntoSettings
    from ontoctl.infrastructure.workspace import Workspace
    from ontoctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is built on first use so ``--help`` and ``--version``
    never construct loaders or caches.
    """

    def __init__(self, settings: OntoSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None

        from ontoctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from ontoctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def workspace(self) -> Workspace:
        if self._workspace is None:
            from ontoctl.infrastructure.workspace import Workspace

            self._workspace = Workspace(self.settings)
        return self._workspace

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr so they don't
          pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)


def source_spec(source: str | None, text: str | None) -> SourceSpec:
    """Build a SourceSpec from the SOURCE argument or ``--text``.

    SOURCE is a URL when it starts with ``http://`` or ``https://``,
    ``-`` for stdin, and a file path otherwise.
    """
    if text is not None and source is not None:
        msg = "Pass either SOURCE or --text, not both."
        raise click.UsageError(msg)
    if text is not None:
        return SourceSpec(text=text)
    if source is None:
        msg = "Missing SOURCE (a file path, URL, or '-' for stdin)."
        raise click.UsageError(msg)
    if source == "-":
        return SourceSpec(text=click.get_text_stream("stdin").read())
    if source.startswith(("http://", "https://")):
        return SourceSpec(url=source)
    return SourceSpec(path=source)
