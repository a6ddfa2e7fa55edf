"""Root CLI group for uniqctl with global flags and command registration."""

from __future__ import annotations

from typing import Any

import click

from uniqctl import __version__
from uniqctl.commands import register_commands
from uniqctl.commands._context import AppContext
from uniqctl.config.settings import UniqSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="uniqctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--database-url", default=None, help="Override [database] url.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    database_url: str | None,
) -> None:
    """uniqctl — application-level uniqueness checks."""
    ctx.ensure_object(dict)
    overrides: dict[str, Any] = {}
    if database_url is not None:
        overrides["database_url"] = database_url
    settings = UniqSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        **overrides,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
