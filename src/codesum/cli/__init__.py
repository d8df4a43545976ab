"""
CLI for codesum.

Scans a directory and prints a Markdown, JSON or table summary of its
recognized source files.
"""

from pathlib import Path
from typing import Optional

import typer
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from codesum import __version__
from codesum.cli.ui import configure_logging, render_summary_table
from codesum.core.config import OUTPUT_FORMATS, load_config
from codesum.core.errors import CodesumError
from codesum.services.reporter import render_json, render_markdown
from codesum.services.summary_service import SummaryService

# Documents go to stdout, diagnostics to stderr
console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="codesum",
    help="Summarize a source tree for pasting into text-analysis tools.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"codesum {__version__}")
        raise typer.Exit()


def _fail(message: str, code: int = 1) -> typer.Exit:
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    return typer.Exit(code)


@app.command()
def main(
    path: Path = typer.Argument(Path("."), help="Directory to summarize"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format"),
    output_format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help=f"Output format: {', '.join(OUTPUT_FORMATS)} (default: markdown)",
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (.yaml, .yml or .json)"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", help="Number of parallel file readers"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging on stderr"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Print the version of the program and exit",
    ),
):
    """Summarize the recognized source files under PATH."""
    load_dotenv(Path.cwd() / ".env")

    try:
        cfg = load_config(config_path)
        if workers is not None:
            cfg.scan.max_workers = workers
        if json_output:
            cfg.output.format = "json"
        elif output_format is not None:
            cfg.output.format = output_format.lower()
        cfg.validate()
    except (FileNotFoundError, ValueError, TypeError, yaml.YAMLError) as e:
        raise _fail(f"Invalid configuration: {e}", code=2)

    configure_logging(err_console, cfg.logging, verbose=verbose)

    try:
        summary = SummaryService(cfg).summarize(path)
    except CodesumError as e:
        raise _fail(str(e))

    if cfg.output.format == "json":
        typer.echo(render_json(summary.project, summary.result))
    elif cfg.output.format == "table":
        render_summary_table(console, summary)
    else:
        typer.echo(render_markdown(summary.project, summary.result))


if __name__ == "__main__":
    app()
