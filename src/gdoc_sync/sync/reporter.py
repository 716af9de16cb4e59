"""Sync result formatting functions.

Provides human-readable and machine-readable output for sync passes:

- ``format_sync_result`` -- one-folder summary.
- ``format_sync_report`` -- batch summary.
- ``format_conflict_diff`` -- unified diff for conflict review.
- ``result_to_json`` / ``report_to_json`` -- structured dicts for MCP output.
"""

from __future__ import annotations

import difflib
from typing import TYPE_CHECKING

from .models import SyncOutcome
from .resolver import format_conflict_for_display

if TYPE_CHECKING:
    from .models import ConflictInfo, SyncReport, SyncResult

_LABELS = {
    SyncOutcome.UP_TO_DATE: "UP TO DATE",
    SyncOutcome.CREATED: "CREATED",
    SyncOutcome.PUSHED: "PUSHED",
    SyncOutcome.PULLED: "PULLED",
    SyncOutcome.CONFLICT: "CONFLICT",
    SyncOutcome.ERROR: "ERROR",
    SyncOutcome.NOT_AUTHENTICATED: "NOT AUTHENTICATED",
}

# ------------------------------------------------------------------
# Human-readable output
# ------------------------------------------------------------------


def format_sync_result(result: SyncResult) -> str:
    """Format one folder result as text.

    Conflicts are followed by their line-level change listing.
    """
    lines = [
        f"[{_LABELS[result.outcome]}] {result.folder_path}: {result.message}"
    ]
    if result.document_url:
        lines.append(f"  Document: {result.document_url}")
    if result.error and result.outcome != SyncOutcome.CONFLICT:
        lines.append(f"  Error: {result.error}")
    for conflict in result.conflicts or []:
        lines.append("")
        lines.append(format_conflict_for_display(conflict))
    return "\n".join(lines)


def format_sync_report(report: SyncReport) -> str:
    """Format a batch report as human-readable text.

    Args:
        report: The completed report.

    Returns:
        Multi-line formatted string.
    """
    lines = [report.summary(), f"Started: {report.started_at}"]
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    if not report.results:
        lines.append("No linked folders found.")
        return "\n".join(lines)

    for result in report.results:
        lines.append(
            f"  [{_LABELS[result.outcome]}] {result.folder_path}: "
            f"{result.message}"
        )
    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# Conflict diff
# ------------------------------------------------------------------


def format_conflict_diff(conflict: ConflictInfo) -> str:
    """Unified diff between the local and remote serialisations."""
    diff = "".join(
        difflib.unified_diff(
            conflict.local_version.splitlines(keepends=True),
            conflict.remote_version.splitlines(keepends=True),
            fromfile="local",
            tofile="remote",
        )
    )
    return diff.rstrip() or "(no textual differences)"


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def result_to_json(result: SyncResult) -> dict:
    """Convert a result to a dict for MCP ``structuredContent`` output."""
    entry: dict = {
        "folder_path": result.folder_path,
        "outcome": result.outcome.value,
        "success": result.success,
        "message": result.message,
    }
    if result.document_id:
        entry["document_id"] = result.document_id
    if result.document_url:
        entry["document_url"] = result.document_url
    if result.error:
        entry["error"] = result.error
    if result.conflicts:
        entry["conflicts"] = [
            c.model_dump(mode="json") for c in result.conflicts
        ]
    return entry


def report_to_json(report: SyncReport) -> dict:
    """Convert a batch report to a dict with counts and per-folder details."""
    return {
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "counts": {
            "total": len(report.results),
            "succeeded": len(report.succeeded),
            "failed": len(report.failed),
            "conflicts": len(report.conflicts),
            **{o.value: report.count(o) for o in SyncOutcome},
        },
        "results": [result_to_json(r) for r in report.results],
    }
