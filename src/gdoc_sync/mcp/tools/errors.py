"""Error response builders for MCP tool handlers.

Structured errors carry a corrective action so an agent can recover
without human intervention.
"""

import mcp.types as types

from ...sync.models import SyncOutcome, SyncResult


def build_error_response(
    error_type: str, message: str, corrective_action: str
) -> types.CallToolResult:
    """Build a structured error response with corrective action.

    Args:
        error_type: Error category (validation_error, not_authenticated,
            conflict, sync_error, server_error, unknown_tool)
        message: Human-readable error description
        corrective_action: Specific action the agent can take to resolve the error

    Returns:
        CallToolResult with isError=True

    Examples:
        >>> build_error_response("validation_error", "path is required", "Provide 'path'.")
        CallToolResult(content=[TextContent(...)], isError=True)
    """
    error_text = f"Error ({error_type}): {message}\n\nAction: {corrective_action}"

    return types.CallToolResult(
        content=[types.TextContent(type="text", text=error_text)],
        isError=True,
    )


_CORRECTIVE_ACTIONS: dict[SyncOutcome, tuple[str, str]] = {
    SyncOutcome.NOT_AUTHENTICATED: (
        "not_authenticated",
        "Refresh the Google credentials (GDOC_SYNC_REFRESH_TOKEN) and "
        "restart the server.",
    ),
    SyncOutcome.CONFLICT: (
        "conflict",
        "Both sides changed. Reconcile the folder or the document by hand, "
        "or call folder_unlink and sync again to create a fresh document.",
    ),
    SyncOutcome.ERROR: (
        "sync_error",
        "Check the folder path and Google Docs availability, then retry.",
    ),
}


def corrective_action_for(result: SyncResult) -> tuple[str, str] | None:
    """Return ``(error_type, action)`` for a failed result, else None."""
    if result.success:
        return None
    return _CORRECTIVE_ACTIONS.get(
        result.outcome, _CORRECTIVE_ACTIONS[SyncOutcome.ERROR]
    )
