"""
Serialization of scan results.

Markdown is meant for pasting into chat-style tools, JSON for programs.
Files are always presented sorted by path.
"""

import json
from typing import Any

from codesum.core.file_scanner import FileRecord, ScanResult
from codesum.services.project_resolver import ProjectDescriptor

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(record: FileRecord) -> str:
    return record.modified_time.strftime(TIMESTAMP_FORMAT)


def file_to_dict(record: FileRecord) -> dict[str, Any]:
    return {
        "path": record.path,
        "language": record.language,
        "line_count": record.line_count,
        "last_modified": format_timestamp(record),
        "contents": record.contents,
    }


def summary_to_dict(project: ProjectDescriptor, result: ScanResult) -> dict[str, Any]:
    """Build the JSON-ready document for a project and its files."""
    return {
        "name": project.name,
        "repository": project.repository,
        "type": project.dominant_type,
        "scan_type": project.scan_type,
        "source": project.source,
        "languages": dict(sorted(result.language_histogram.items())),
        "files": [file_to_dict(record) for record in result.sorted_files()],
    }


def render_json(project: ProjectDescriptor, result: ScanResult) -> str:
    return json.dumps(summary_to_dict(project, result), indent=2, ensure_ascii=False)


def render_markdown(project: ProjectDescriptor, result: ScanResult) -> str:
    """
    Render the summary as a Markdown document.

    Layout::

        # <name>

        * Main language: <type>
        * Package name: <repository>

        ## Source code

        ### <path>

        ```<language>
        <contents>
        ```
    """
    lines = [
        f"# {project.name}",
        "",
        f"* Main language: {project.dominant_type}",
        f"* Package name: {project.repository}",
        "",
        "## Source code",
        "",
    ]
    for record in result.sorted_files():
        lines.extend([
            f"### {record.path}",
            "",
            f"```{record.language}",
            record.contents.rstrip("\n"),
            "```",
            "",
        ])
    return "\n".join(lines)
