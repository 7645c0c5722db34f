#!/usr/bin/env python3
"""
api-trace
---------
Finds every call to the API client methods (GET_JWT, POST_JWT, ...) in an
ASP.NET WebForms code base and traces each one back to the UI event that
triggers it:
- the endpoint argument passed to the API method
- the method containing the call
- the outermost method reaching it through the caller graph
- the <asp:...> control whose OnClick is bound to that method

USAGE EXAMPLES
--------------
# Trace a project, writing <root>/ApiTraceReport.txt:
api-trace /path/to/Portal

# Custom API surface and output file, JSON instead of text:
api-trace /path/to/Portal -m GetAsync -m PostAsync --format json -o calls.json
"""

import logging
import os
import sys
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from api_trace.config import (
    CODE_BEHIND_SUFFIX,
    DEFAULT_API_METHODS,
    DEFAULT_EVENT_ATTRIBUTES,
    DEFAULT_MARKUP_EXTENSIONS,
    DEFAULT_REPORT_NAME,
    DEFAULT_SOURCE_EXTENSIONS,
    TraceConfig,
)
from api_trace.errors import ApiTraceError
from api_trace.outputs.output import print_summary, render_report, to_json, write_report
from api_trace.pipeline import run_trace

app = typer.Typer(
    name="api-trace",
    help="Trace API calls in a WebForms code base back to the UI controls that trigger them",
    add_completion=False,
)
console = Console()


class ReportFormat(str, Enum):
    text = "text"
    json = "json"


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


@app.command()
def trace(
    root: Path = typer.Argument(..., help="Root directory of the project to scan"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help=f"Report path (default: <root>/{DEFAULT_REPORT_NAME})"),
    api_method: Optional[List[str]] = typer.Option(
        None, "--api-method", "-m", help="API method name to trace (repeatable)"),
    source_ext: Optional[List[str]] = typer.Option(
        None, "--source-ext", help="Source file extension (repeatable)"),
    markup_ext: Optional[List[str]] = typer.Option(
        None, "--markup-ext", help="Markup file extension (repeatable)"),
    event_attribute: Optional[List[str]] = typer.Option(
        None, "--event-attribute", help="Markup attribute binding a control to its handler (repeatable)"),
    code_behind_suffix: str = typer.Option(
        CODE_BEHIND_SUFFIX, "--code-behind-suffix", help="Suffix of code-behind files"),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Parallel indexing workers"),
    fmt: ReportFormat = typer.Option(ReportFormat.text, "--format", "-f", help="Report format"),
    summary: bool = typer.Option(True, "--summary/--no-summary", help="Print a summary table"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Trace every API call under ROOT and write a report."""
    setup_logging(verbose)

    config = TraceConfig(
        api_methods=frozenset(api_method or DEFAULT_API_METHODS),
        source_extensions=tuple(source_ext or DEFAULT_SOURCE_EXTENSIONS),
        markup_extensions=tuple(markup_ext or DEFAULT_MARKUP_EXTENSIONS),
        event_attributes=tuple(event_attribute or DEFAULT_EVENT_ATTRIBUTES),
        code_behind_suffix=code_behind_suffix,
        max_workers=workers,
    )

    try:
        result = run_trace(str(root), config)
    except ApiTraceError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if fmt == ReportFormat.json:
        content = to_json(result.records)
    else:
        content = render_report(result.records)

    output_path = str(output) if output else os.path.join(str(root), DEFAULT_REPORT_NAME)
    write_report(output_path, content)

    if summary:
        print_summary(result.records, console)
    console.print(f"Report saved to: {output_path}")


def main():
    app()


if __name__ == "__main__":
    main()
