"""Commands: inspect and lint configured uniqueness rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from uniqctl.commands._base import UniqGroup

if TYPE_CHECKING:
    from uniqctl.commands._context import AppContext


@click.group(
    cls=UniqGroup,
    examples="""\
  uniqctl rules list
  uniqctl rules lint
  uniqctl --json rules lint""",
)
def rules() -> None:
    """Inspect uniqueness rules from uniqctl.toml."""


@rules.command("list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List configured rules."""
    app.emit(app.service().list_rules())


@rules.command()
@click.pass_obj
def lint(app: AppContext) -> None:
    """Validate every rule against the database schema.

    Exits 1 when any rule is invalid.
    """
    result = app.service().lint_rules()
    app.emit(result, exit_code=0 if result.data.get("healthy", True) else 1)
