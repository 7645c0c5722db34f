import json
import os
import tempfile
from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from api_trace.models.ast_models import ApiInvocationRecord, MethodIdentity

DIVIDER = "--------------------------------------------------------"
NOT_FOUND = "ASPX file not found for this event."


# --- Text report --------------------------------------------------------------

def render_record(info: ApiInvocationRecord) -> str:
    lines = [
        DIVIDER,
        f"API called in file: {info.api_file}",
        f"API method: {info.api_method}",
        f"Endpoint: {info.endpoint}",
        f"Immediate method: {info.immediate_method.name} (File: {info.immediate_method.file_path})",
    ]
    top = info.top_level_method or info.immediate_method
    lines.append(f"Top-level method: {top.name} (File: {top.file_path})")
    if info.ui_binding is not None:
        lines.append(f"ASPX file: {info.ui_binding.file_path}")
        lines.append(f"Button text: {info.ui_binding.text}")
    else:
        lines.append(NOT_FOUND)
    return "\n".join(lines) + "\n"


def render_report(records: Iterable[ApiInvocationRecord]) -> str:
    """
    One block per API call, each starting with the divider line.
    """
    return "".join(render_record(r) for r in records)


# --- JSON export --------------------------------------------------------------

def _method_dict(method: Optional[MethodIdentity]) -> Optional[dict]:
    if method is None:
        return None
    return {"name": method.name, "file": method.file_path}


def to_json(records: Iterable[ApiInvocationRecord]) -> str:
    """
    Serializes the resolved calls to JSON, for feeding into other tools.
    """
    out = []
    for r in records:
        out.append({
            "apiFile": r.api_file,
            "apiMethod": r.api_method,
            "endpoint": r.endpoint,
            "line": r.line,
            "col": r.col,
            "immediateMethod": _method_dict(r.immediate_method),
            "topLevelMethod": _method_dict(r.top_level_method),
            "uiBinding": {
                "file": r.ui_binding.file_path,
                "text": r.ui_binding.text,
            } if r.ui_binding else None,
        })
    return json.dumps(out, indent=2)


def write_report(path: str, content: str):
    """
    Writes the report in one go: a temp file next to the target is renamed
    over it, so readers never see a half-written report.
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".api-trace-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="backslashreplace", newline="\n") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Pretty printing ----------------------------------------------------------

def print_summary(records: list[ApiInvocationRecord], console: Console):
    """
    Human-friendly table of what we found.
    """
    table = Table(title=f"API calls ({len(records)})")
    table.add_column("API method", style="cyan")
    table.add_column("Endpoint")
    table.add_column("Top-level method", style="green")
    table.add_column("UI text")

    for r in records:
        top = r.top_level_method or r.immediate_method
        ui_text = escape(r.ui_binding.text) if r.ui_binding else "[dim]not found[/dim]"
        table.add_row(r.api_method, escape(r.endpoint), top.name, ui_text)

    console.print(table)
