"""Click base classes for pipeline commands.

``OntoCommand`` takes two extra keywords:

``examples``
    Text printed by an eager ``--examples`` flag, keeping ``--help`` short.
``source``
    How the command reads its ontology. ``"inline"`` adds an optional SOURCE
    argument plus ``--text``; ``"required"`` adds a mandatory SOURCE. The
    callback receives ``source`` (and ``text``) and hands them to
    :func:`ontoctl.commands._context.source_spec`.
"""

from __future__ import annotations

from typing import Any, Literal

import click

type SourceMode = Literal["inline", "required"]

SOURCE_HELP = "SOURCE is a Turtle file, an http(s) URL, or '-' for stdin."


def _examples_option(examples: str, *, reads_source: bool) -> click.Option:
    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        if reads_source:
            click.echo(f"\n{SOURCE_HELP}")
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show_examples,
        help="Show usage examples.",
    )


def _source_params(mode: SourceMode) -> list[click.Parameter]:
    params: list[click.Parameter] = [click.Argument(["source"], required=mode == "required")]
    if mode == "inline":
        params.append(click.Option(["--text"], default=None, help="Inline Turtle instead of SOURCE."))
    return params


class OntoCommand(click.Command):
    """Command with ``--examples`` and an optional shared ontology SOURCE."""

    def __init__(
        self,
        *args: Any,
        examples: str | None = None,
        source: SourceMode | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        self.source = source
        if source is not None:
            # SOURCE is always the first positional argument.
            self.params[:0] = _source_params(source)
            self.epilog = self.epilog or SOURCE_HELP
        if examples:
            self.params.append(_examples_option(examples, reads_source=source is not None))


class OntoGroup(click.Group):
    """Root group: ``--examples`` support, and ``OntoCommand`` for subcommands."""

    command_class = OntoCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples, reads_source=False))
