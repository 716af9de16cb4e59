"""MCP tool handlers for folder sync.

Handlers wrap the synchronous ``SyncEngine`` with ``run_sync`` and turn
results into structured ``CallToolResult`` responses.
"""

from .errors import build_error_response
from .registry import ToolRegistry, ToolSpec
from .sync import SYNC_SPECS

ALL_SPECS: list[ToolSpec] = list(SYNC_SPECS)

__all__ = [
    "ALL_SPECS",
    "SYNC_SPECS",
    "ToolRegistry",
    "ToolSpec",
    "build_error_response",
]
