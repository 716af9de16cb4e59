"""Conflict detection, three-way line merge and line diff.

All functions are pure.  The merge is conservative: a single
line changed differently on both sides voids the whole merge and the
caller escalates to a conflict.  The diff is a greedy two-cursor walk with
a one-shot lookahead, not a minimal edit script.
"""

from __future__ import annotations

import logging

from .models import ConflictInfo, ConflictKind, ContentDiff, DiffKind

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Change classification
# ---------------------------------------------------------------------------


def detect_conflict(local: str, remote: str, base: str) -> bool:
    """True iff both sides moved away from *base* to different values."""
    return local != base and remote != base and local != remote


def auto_resolve(local: str, remote: str, base: str) -> str | None:
    """Resolve a three-way change without user input.

    Args:
        local: Local version.
        remote: Remote version.
        base: Common ancestor.

    Returns:
        The resolved text, or ``None`` when both sides changed the same
        line differently.
    """
    if local == base:
        return remote
    if remote == base:
        return local
    if local == remote:
        return local
    return try_line_merge(local, remote, base)


def try_line_merge(local: str, remote: str, base: str) -> str | None:
    """Merge line by line, treating missing lines as empty strings.

    Returns:
        The merged text, or ``None`` if any line was changed on both sides
        to different values.
    """
    local_lines = local.split("\n")
    remote_lines = remote.split("\n")
    base_lines = base.split("\n")

    merged: list[str] = []
    for idx in range(max(len(local_lines), len(remote_lines), len(base_lines))):
        l_line = local_lines[idx] if idx < len(local_lines) else ""
        r_line = remote_lines[idx] if idx < len(remote_lines) else ""
        b_line = base_lines[idx] if idx < len(base_lines) else ""

        if l_line == r_line:
            merged.append(l_line)
        elif l_line == b_line:
            merged.append(r_line)
        elif r_line == b_line:
            merged.append(l_line)
        else:
            logger.debug("Line %d changed on both sides", idx + 1)
            return None
    return "\n".join(merged)


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


def _find(lines: list[str], value: str, start: int) -> int:
    try:
        return lines.index(value, start)
    except ValueError:
        return -1


def generate_diff(old: str, new: str) -> list[ContentDiff]:
    """Line diff of *old* against *new*.

    On a mismatch the current old line is looked up in the rest of *new*
    and the current new line in the rest of *old*.  An insertion wins only
    when its distance is strictly smaller than the deletion's.
    """
    old_lines = old.split("\n")
    new_lines = new.split("\n")
    diffs: list[ContentDiff] = []
    i = j = 0

    while i < len(old_lines) or j < len(new_lines):
        if i >= len(old_lines):
            diffs.append(_added(j, new_lines[j]))
            j += 1
        elif j >= len(new_lines):
            diffs.append(_removed(i, old_lines[i]))
            i += 1
        elif old_lines[i] == new_lines[j]:
            i += 1
            j += 1
        else:
            insert_at = _find(new_lines, old_lines[i], j)
            delete_at = _find(old_lines, new_lines[j], i)
            if insert_at != -1 and (
                delete_at == -1 or insert_at - j < delete_at - i
            ):
                diffs.append(_added(j, new_lines[j]))
                j += 1
            elif delete_at != -1:
                diffs.append(_removed(i, old_lines[i]))
                i += 1
            else:
                diffs.append(
                    ContentDiff(
                        kind=DiffKind.MODIFIED,
                        location=f"line {i + 1}",
                        old_value=old_lines[i],
                        new_value=new_lines[j],
                    )
                )
                i += 1
                j += 1
    return diffs


def _added(j: int, value: str) -> ContentDiff:
    return ContentDiff(
        kind=DiffKind.ADDED, location=f"line {j + 1}", new_value=value
    )


def _removed(i: int, value: str) -> ContentDiff:
    return ContentDiff(
        kind=DiffKind.REMOVED, location=f"line {i + 1}", old_value=value
    )


# ---------------------------------------------------------------------------
# Conflict payloads
# ---------------------------------------------------------------------------


def create_conflict_info(
    local: str, remote: str, description: str
) -> ConflictInfo:
    return ConflictInfo(
        kind=ConflictKind.CONTENT,
        local_version=local,
        remote_version=remote,
        description=description,
    )


def format_conflict_for_display(conflict: ConflictInfo) -> str:
    """Render a conflict and its line diff as readable text.

    Added lines are prefixed ``+``, removed ``-`` and modified ``~``.
    """
    lines = [f"Conflict: {conflict.description}", "", "Changes detected:"]
    for diff in generate_diff(conflict.local_version, conflict.remote_version):
        if diff.kind == DiffKind.ADDED:
            lines.append(f"+ {diff.location}: {diff.new_value}")
        elif diff.kind == DiffKind.REMOVED:
            lines.append(f"- {diff.location}: {diff.old_value}")
        else:
            lines.append(f"~ {diff.location}:")
            lines.append(f"  Old: {diff.old_value}")
            lines.append(f"  New: {diff.new_value}")
    return "\n".join(lines)
