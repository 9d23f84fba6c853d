"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer. ``generate``
and ``export`` print the produced source text itself so human-mode
output can be redirected straight into a file.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from ontoctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from ontoctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    if result.ok and result.op in _RAW_OPS:
        raw = _RAW_OPS[result.op](result)
        if raw is not None:
            return raw.rstrip("\n")

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
    if result.op in _RAW_OPS:
        raw = _RAW_OPS[result.op](result)
        if raw is not None:
            return raw.rstrip("\n")
    if result.op == "query":
        rows = result.data.get("rows", [])
        return "\n".join("\t".join(str(v or "") for v in row.values()) for row in rows)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text("OK", style="onto.ok"), Text(f"  {result.op}", style="onto.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="onto.key")
    v = Text(str(value), style="onto.path" if key.endswith("path") else "")
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _command_tree(summary: dict[str, Any]) -> Tree:
    tree = Tree(Text(f"{summary.get('name', 'cli')} {summary.get('version', '')}".rstrip(), style="bold"))
    for command in summary.get("commands", []):
        noun = tree.add(Text(command["noun"], style="onto.noun"))
        for verb in command.get("verbs", []):
            label = Text(verb["name"], style="onto.verb")
            if verb.get("async"):
                label.append("  async", style="dim")
            arguments = verb.get("arguments", [])
            if arguments:
                label.append("  " + " ".join(f"--{a}" for a in arguments), style="onto.arg")
            noun.add(label)
    return tree


def _counts_line(console: Console, summary: dict[str, Any]) -> None:
    console.print(
        f"\n{summary.get('noun_count', 0)} nouns, "
        f"{summary.get('verb_count', 0)} verbs, "
        f"{summary.get('argument_count', 0)} arguments"
    )


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    label = Text("ERROR", style="onto.error")
    op = Text(f"  {result.op}{code}", style="onto.op")
    console.print(label, op, Text(" — "), Text(msg))

    if err and err.hint:
        console.print(Text(f"  hint: {err.hint}", style="dim"))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Raw-text ops ──────────────────────────────────────────────────────


def _raw_generate(result: ServiceResult) -> str | None:
    metadata = result.data.get("metadata", {})
    if metadata.get("output_path"):
        return None
    return str(result.data.get("code", ""))


def _raw_export(result: ServiceResult) -> str | None:
    return str(result.data.get("ontology", ""))


def _raw_query(result: ServiceResult) -> str | None:
    rendered = result.data.get("rendered")
    return str(rendered) if rendered else None


_RAW_OPS: dict[str, Any] = {
    "generate": _raw_generate,
    "export": _raw_export,
    "query": _raw_query,
}


# ── Operation renderers ───────────────────────────────────────────────


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a generation that was written to disk."""
    _status_line(console, result)
    metadata = result.data.get("metadata", {})
    summary = result.data.get("summary", {})
    _field(console, "output_path", metadata.get("output_path"))
    _field(console, "name", summary.get("name"))
    features = metadata.get("features") or []
    _field(console, "features", ", ".join(features) if features else "none")
    _field(console, "content_hash", str(metadata.get("content_hash", ""))[:12])
    if verbose:
        console.print(_command_tree(summary))
        _counts_line(console, summary)
        _render_meta(console, result)


def _render_query(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render query rows when no pre-rendered text is attached (json format)."""
    d = result.data
    console.print(json.dumps(d.get("rows", []), indent=2), markup=False)
    if verbose:
        console.print(f"\n{d.get('row_count', 0)} rows in {d.get('execution_ms', 0.0):.2f}ms")
        _render_meta(console, result)


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the command structure of a valid source."""
    d = result.data
    summary = d.get("summary", {})
    line = Text("OK", style="onto.ok")
    line.append(f"  {d.get('source', '')} is valid ({d.get('triple_count', 0)} triples)")
    console.print(line)
    console.print(_command_tree(summary))
    _counts_line(console, summary)
    if verbose:
        counts = d.get("counts", {})
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("Class")
        table.add_column("Instances", justify="right")
        for cls, count in counts.items():
            table.add_row(cls, str(count))
        console.print(table)
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "generate": _render_generate,
    "query": _render_query,
    "check": _render_check,
}
