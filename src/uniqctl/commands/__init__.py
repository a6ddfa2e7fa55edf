"""Subcommand modules for uniqctl.

Provides register_commands() which uses deferred imports to keep
``uniqctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root CLI group."""
    from uniqctl.commands.check import check
    from uniqctl.commands.rules import rules

    cli.add_command(check)
    cli.add_command(rules)
