"""
UI components for the codesum CLI.

Provides Rich based rendering for the table output format and the log
handler used by the command line.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from codesum.core.config import LoggingConfig
from codesum.services.reporter import format_timestamp
from codesum.services.summary_service import ProjectSummary


def configure_logging(
    console: Console, config: LoggingConfig, verbose: bool = False
) -> logging.Logger:
    """
    Route the codesum logger hierarchy to a Rich handler.

    Args:
        console: Console to log to (stderr, so stdout stays a clean document)
        config: Logging section of the run configuration
        verbose: Force DEBUG regardless of the configured level

    Returns:
        The configured 'codesum' logger
    """
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.WARNING)
    logger = logging.getLogger("codesum")
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(console=console, show_path=False, show_time=verbose)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(config.format))
    logger.addHandler(handler)
    return logger


def render_summary_table(console: Console, summary: ProjectSummary) -> None:
    """
    Render the project header, file table and language histogram.

    File contents are not shown in this format.
    """
    project = summary.project
    result = summary.result

    header = Table.grid(padding=1)
    header.add_column(style="bold")
    header.add_column()
    header.add_row("Project:", project.name)
    header.add_row("Main language:", project.dominant_type)
    header.add_row("Scan language:", project.scan_type)
    header.add_row("Package name:", project.repository)
    header.add_row("Detected from:", project.source)
    header.add_row("Total files:", str(len(result)))
    header.add_row("Total lines:", str(result.total_lines))
    console.print(Panel(header, title="[bold]codesum[/bold]", border_style="blue", expand=False))

    files_table = Table(title="Files", show_header=True, header_style="bold")
    files_table.add_column("Path", style="cyan")
    files_table.add_column("Language")
    files_table.add_column("Lines", justify="right")
    files_table.add_column("Modified", style="dim")
    for record in result.sorted_files():
        files_table.add_row(
            record.path, record.language, str(record.line_count), format_timestamp(record)
        )
    console.print(files_table)

    if result.language_histogram:
        lang_table = Table(title="Languages", box=None, show_header=True)
        lang_table.add_column("Language", style="cyan")
        lang_table.add_column("Files", justify="right")
        for language, count in sorted(result.language_histogram.items()):
            lang_table.add_row(language, str(count))
        console.print(Panel(lang_table, border_style="blue", expand=False))
