"""
Services Layer - Project resolution, reporting and scan orchestration.
"""

from codesum.services.project_resolver import (
    MANIFEST_PROBES,
    ProbeResult,
    ProjectDescriptor,
    ProjectResolver,
    histogram_argmax,
)
from codesum.services.reporter import render_json, render_markdown, summary_to_dict
from codesum.services.summary_service import ProjectSummary, SummaryService, build_ignore_set

__all__ = [
    # Project resolution
    "MANIFEST_PROBES",
    "ProbeResult",
    "ProjectDescriptor",
    "ProjectResolver",
    "histogram_argmax",
    # Reporting
    "render_json",
    "render_markdown",
    "summary_to_dict",
    # Orchestration
    "ProjectSummary",
    "SummaryService",
    "build_ignore_set",
]
