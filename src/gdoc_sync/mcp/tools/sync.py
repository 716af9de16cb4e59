"""MCP tool handlers for folder <-> document sync.

Defines four tools:

- ``folder_sync`` -- run one sync pass for a folder.
- ``folder_sync_all`` -- sync every linked folder under a root.
- ``folder_sync_status`` -- show the link state of a folder.
- ``folder_unlink`` -- forget a folder's link (the document is kept).
"""

from __future__ import annotations

import logging
from typing import Any

import mcp.types as types

from ...core.async_utils import run_sync
from ...file_handler import validate_folder_path
from ...sync.engine import SyncEngine
from ...sync.reporter import (
    format_sync_report,
    format_sync_result,
    report_to_json,
    result_to_json,
)
from .errors import build_error_response, corrective_action_for
from .registry import ToolSpec

logger = logging.getLogger(__name__)

_PATH_SCHEMA = {
    "type": "string",
    "description": "Absolute path of the local folder",
}


# ---------------------------------------------------------------------------
# Individual handlers
# ---------------------------------------------------------------------------


def _require_folder(args: dict[str, Any]):
    path = args.get("path")
    if not path:
        raise ValueError("path is required")
    return validate_folder_path(path)


async def _handle_folder_sync(
    engine: SyncEngine, args: dict[str, Any]
) -> types.CallToolResult:
    folder = _require_folder(args)
    result = await run_sync(engine.sync_folder, folder)
    text = format_sync_result(result)

    failure = corrective_action_for(result)
    if failure is not None:
        error_type, action = failure
        error = build_error_response(error_type, text, action)
        return types.CallToolResult(
            content=error.content,
            structuredContent=result_to_json(result),
            isError=True,
        )
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        structuredContent=result_to_json(result),
    )


async def _handle_folder_sync_all(
    engine: SyncEngine, args: dict[str, Any]
) -> types.CallToolResult:
    root = args.get("root")
    if root:
        root = validate_folder_path(root)
    report = await run_sync(engine.sync_all, root)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=format_sync_report(report))],
        structuredContent=report_to_json(report),
    )


async def _handle_folder_sync_status(
    engine: SyncEngine, args: dict[str, Any]
) -> types.CallToolResult:
    folder = _require_folder(args)
    status = await run_sync(engine.status, folder)

    if not status.linked:
        lines = [f"{status.folder_path} is not linked to a document."]
    else:
        changed = {True: "yes", False: "no", None: "unknown"}[
            status.local_changed
        ]
        lines = [
            f"Sync status for '{status.folder_path}'",
            f"  Document:      {status.document_url}",
            f"  Last sync:     {status.last_sync_time}",
            f"  Local changes: {changed}",
        ]
    return types.CallToolResult(
        content=[types.TextContent(type="text", text="\n".join(lines))],
        structuredContent=status.model_dump(),
    )


async def _handle_folder_unlink(
    engine: SyncEngine, args: dict[str, Any]
) -> types.CallToolResult:
    folder = _require_folder(args)
    removed = await run_sync(engine.unlink, folder)
    text = (
        f"Unlinked {folder}. The remote document was not deleted."
        if removed
        else f"{folder} was not linked."
    )
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        structuredContent={"folder_path": str(folder), "unlinked": removed},
    )


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------


SYNC_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=types.Tool(
            name="folder_sync",
            description=(
                "Synchronize a local folder of Markdown notes with its Google "
                "Doc. Creates the document on first use, then pushes local "
                "changes or pulls remote ones; reports a conflict when both "
                "sides changed."
            ),
            annotations=types.ToolAnnotations(
                readOnlyHint=False,
                destructiveHint=False,
                idempotentHint=True,
                openWorldHint=True,
            ),
            inputSchema={
                "type": "object",
                "properties": {"path": _PATH_SCHEMA},
                "required": ["path"],
            },
        ),
        mutating=True,
        handler=_handle_folder_sync,
    ),
    ToolSpec(
        tool=types.Tool(
            name="folder_sync_all",
            description=(
                "Sync every linked folder under a root folder (defaults to the "
                "configured vault root). One failure does not stop the batch."
            ),
            annotations=types.ToolAnnotations(
                readOnlyHint=False,
                destructiveHint=False,
                idempotentHint=True,
                openWorldHint=True,
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "root": {
                        "type": "string",
                        "description": "Absolute path searched for linked folders",
                    },
                },
                "required": [],
            },
        ),
        mutating=True,
        handler=_handle_folder_sync_all,
    ),
    ToolSpec(
        tool=types.Tool(
            name="folder_sync_status",
            description=(
                "Show whether a folder is linked, its document URL, last sync "
                "time and whether local files changed since."
            ),
            annotations=types.ToolAnnotations(
                readOnlyHint=True,
                destructiveHint=False,
                idempotentHint=True,
                openWorldHint=False,
            ),
            inputSchema={
                "type": "object",
                "properties": {"path": _PATH_SCHEMA},
                "required": ["path"],
            },
        ),
        mutating=False,
        handler=_handle_folder_sync_status,
    ),
    ToolSpec(
        tool=types.Tool(
            name="folder_unlink",
            description=(
                "Remove a folder's sync link. The Google Doc is left in place; "
                "the next sync creates a new document."
            ),
            annotations=types.ToolAnnotations(
                readOnlyHint=False,
                destructiveHint=True,
                idempotentHint=True,
                openWorldHint=False,
            ),
            inputSchema={
                "type": "object",
                "properties": {"path": _PATH_SCHEMA},
                "required": ["path"],
            },
        ),
        mutating=True,
        handler=_handle_folder_unlink,
    ),
]
