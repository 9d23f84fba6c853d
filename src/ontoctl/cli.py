"""Root CLI group for ontoctl with global flags and command registration."""

from __future__ import annotations

import click

from ontoctl import __version__
from ontoctl.commands import register_commands
from ontoctl.commands._base import OntoGroup
from ontoctl.commands._context import AppContext
from ontoctl.config.settings import OntoSettings


@click.group(
    cls=OntoGroup,
    invoke_without_command=True,
    examples="""\
  ontoctl check services.ttl
  ontoctl generate services.ttl -o services_cli.py
  ontoctl query services.ttl 'SELECT ?n WHERE { ?n a cnv:Noun }'
  ontoctl serve""",
)
@click.version_option(version=__version__, prog_name="ontoctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info and timings.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """ontoctl: turn command ontologies into command-line programs."""
    ctx.ensure_object(dict)
    settings = OntoSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
