"""Subcommand modules for ontoctl.

register_commands() uses deferred imports to keep ``ontoctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every command on the root CLI group."""
    from ontoctl.commands.check import check
    from ontoctl.commands.export import export
    from ontoctl.commands.generate import generate
    from ontoctl.commands.query import query
    from ontoctl.commands.serve import serve

    cli.add_command(generate)
    cli.add_command(query)
    cli.add_command(check)
    cli.add_command(export)
    cli.add_command(serve)
