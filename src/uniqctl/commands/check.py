"""Command: check one candidate record against a named uniqueness rule."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import click

from uniqctl.commands._base import UniqCommand

if TYPE_CHECKING:
    from uniqctl.commands._context import AppContext


def _parse_assignments(
    _ctx: click.Context, _param: click.Parameter, value: tuple[str, ...]
) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in value:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            msg = f"{item!r} is not in field=value form"
            raise click.BadParameter(msg)
        values[name.strip()] = raw
    return values


@click.command(
    cls=UniqCommand,
    examples="""\
  uniqctl check user_email --set email=a@x.com
  uniqctl check user_email --record '{"email": "a@x.com", "name": "Ann"}'
  uniqctl check user_email --id 3
  uniqctl check user_email --id 3 --set email=b@x.com
  uniqctl --json check post_slug --set slug=hello --set author=1""",
)
@click.argument("rule_name")
@click.option(
    "-s",
    "--set",
    "assignments",
    multiple=True,
    callback=_parse_assignments,
    help="Candidate field value as field=value (repeatable).",
)
@click.option("--record", "record_json", default=None, help="Candidate fields as a JSON object.")
@click.option("--id", "record_id", default=None, help="Re-check the stored record with this key.")
@click.pass_obj
def check(
    app: AppContext,
    rule_name: str,
    assignments: dict[str, str],
    record_json: str | None,
    record_id: str | None,
) -> None:
    """Check whether a record would be unique under RULE_NAME.

    Exits 1 when a conflicting record exists.
    """
    values: dict[str, Any] = {}
    if record_json is not None:
        try:
            parsed = json.loads(record_json)
        except json.JSONDecodeError as exc:
            msg = f"invalid JSON: {exc}"
            raise click.BadParameter(msg, param_hint="--record") from exc
        if not isinstance(parsed, dict):
            msg = "expected a JSON object"
            raise click.BadParameter(msg, param_hint="--record")
        values.update(parsed)
    values.update(assignments)

    if not values and record_id is None:
        click.echo("No candidate given. Use --set, --record, or --id.", err=True)
        raise SystemExit(1)

    result = app.service().check(rule_name, values, record_id=record_id)
    unique = result.data.get("unique", True)
    app.emit(result, exit_code=0 if unique else 1)
