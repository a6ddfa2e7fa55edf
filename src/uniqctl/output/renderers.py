"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from uniqctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from uniqctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "check":
        return "unique" if result.data.get("unique") else "not unique"
    if result.op == "list_rules":
        return "\n".join(str(item["name"]) for item in result.data.get("items", []))
    if result.op == "lint_rules":
        issues = result.data.get("issues", [])
        if issues:
            return "\n".join(str(issue["rule"]) for issue in issues)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="uniq.ok")
    op = Text(f"  {result.op}", style="uniq.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="uniq.key")
    if isinstance(value, (dict, list)):
        value = _json.dumps(value, separators=(",", ":"), default=str)
    if key == "rule":
        v = Text(str(value), style="uniq.rule")
    elif key == "path":
        v = Text(str(value), style="uniq.field")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="uniq.error")
    op = Text(f"  {result.op}", style="uniq.op")
    sep = Text(" — ")
    console.print(label, op, sep, Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a uniqueness verdict."""
    data = result.data
    if data.get("unique"):
        _status_line(console, result)
        _field(console, "rule", data.get("rule"))
        _field(console, "unique", True)
        return

    violation = data.get("violation", {})
    label = Text("NOT UNIQUE", style="uniq.warning")
    console.print(label, Text(f"  {violation.get('message', '')}"))
    _field(console, "rule", data.get("rule"))
    _field(console, "path", violation.get("path"))
    _field(console, "value", violation.get("invalid_value"))
    conflicts = violation.get("conflicts", [])
    _field(console, "conflicts", len(conflicts))
    if verbose:
        for conflict in conflicts:
            console.print(Text(f"    - {_json.dumps(conflict, default=str)}"))
        _field(console, "code", violation.get("code"))


def _render_rule_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render configured rules as a table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Rule", style="uniq.rule", no_wrap=True)
    table.add_column("Record type")
    table.add_column("Fields", style="uniq.field")
    table.add_column("Error path")
    if verbose:
        table.add_column("Lookup", style="dim")
        table.add_column("Ignore null", style="dim")

    for item in items:
        fields = list(item.get("fields", []))
        error_path = item.get("error_path") or (fields[0] if fields else "")
        row: list[Any] = [
            str(item.get("name", "")),
            str(item.get("record_type", "")),
            ", ".join(fields),
            str(error_path),
        ]
        if verbose:
            row.append(str(item.get("lookup_method", "")))
            row.append(str(item.get("ignore_null", "")))
        table.add_row(*row)

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} rules")


def _render_lint(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render rule lint issues."""
    issues = result.data.get("issues", [])
    count = result.data.get("count", 0)

    if not issues:
        console.print(Text("OK", style="uniq.ok"), Text(f"  {count} rules valid."))
        return

    for issue in issues:
        prefix = Text("invalid", style="uniq.error")
        rule = Text(f" [{issue.get('rule')}]", style="uniq.rule")
        console.print(prefix, rule, Text(f": {issue.get('message', '')}"))
        if verbose and issue.get("record_type"):
            console.print(Text(f"    record_type: {issue['record_type']}", style="dim"))

    console.print(f"\n{len(issues)} of {count} rules invalid")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "check": _render_check,
    "list_rules": _render_rule_table,
    "lint_rules": _render_lint,
}
