"""Main Typer CLI application for xcallure."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from xcallure.config import get_settings
from xcallure.logging import configure_logging

app = typer.Typer(
    name="xcallure",
    help="Export Xcode xcresult test summaries to Allure results",
    no_args_is_help=True,
)


@app.callback()
def setup(
    verbose: Annotated[
        bool,
        typer.Option(
            "-v",
            "--verbose",
            help="Enable debug logging",
        ),
    ] = False,
) -> None:
    """Configure logging before any command runs."""
    settings = get_settings()
    configure_logging(
        log_level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json_format,
    )


@app.command()
def export(
    summary: Annotated[
        Path,
        typer.Argument(
            help="ActionTestSummary JSON produced by xcresulttool",
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "-o",
            "--output",
            help="Directory to write Allure results to",
        ),
    ] = Path("./allure-results"),
    label: Annotated[
        list[str] | None,
        typer.Option(
            "-l",
            "--label",
            help="Label added to the result, as name=value (repeatable)",
        ),
    ] = None,
    start: Annotated[
        int | None,
        typer.Option(
            "--start",
            help="Fallback start time in epoch milliseconds",
        ),
    ] = None,
    attachments_dir: Annotated[
        Path | None,
        typer.Option(
            "-a",
            "--attachments-dir",
            help="Directory holding exported xcresult attachments",
        ),
    ] = None,
    format_name: Annotated[
        str,
        typer.Option(
            "-f",
            "--format",
            help="Output format",
        ),
    ] = "allure2",
) -> None:
    """Convert one xcresult test summary into an Allure result file."""
    from xcallure.cli.commands import run_export

    exit_code = run_export(
        summary=summary,
        output_dir=output,
        labels=label or [],
        start=start,
        attachments_dir=attachments_dir,
        format_name=format_name,
    )
    raise typer.Exit(code=exit_code)


@app.command()
def formats() -> None:
    """List the available output formats."""
    from xcallure.export import get_default_registry

    for name in get_default_registry().names:
        typer.echo(name)


def main() -> None:
    """Entry point for the Typer CLI."""
    app()
