"""ToolSpec and ToolRegistry for MCP tool dispatch.

Key concepts:
- ToolSpec: Immutable dataclass linking a Tool definition, whether the tool
  writes to either side, and an async handler with standardized signature
  (engine, args) -> CallToolResult.
- ToolRegistry: Drops writing tools in read-only mode at construction time,
  then provides list_tools() and call_tool() dispatch with error translation.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import mcp.types as types

from ...core.errors import AuthenticationError, DocumentStoreError
from ...sync.engine import SyncEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Immutable definition of a single MCP tool.

    Attributes:
        tool: The MCP Tool definition (name, description, inputSchema).
        mutating: Whether the tool may modify local files or the remote document.
        handler: Async handler with signature (engine, args) -> CallToolResult.
    """

    tool: types.Tool
    mutating: bool
    handler: Callable[[SyncEngine, dict], Awaitable[types.CallToolResult]]


class ToolRegistry:
    """Registry of ToolSpecs; ``read_only=True`` hides mutating tools."""

    def __init__(self, specs: list[ToolSpec], read_only: bool = False):
        self._specs: dict[str, ToolSpec] = {
            spec.tool.name: spec
            for spec in specs
            if not (read_only and spec.mutating)
        }

    def list_tools(self) -> list[types.Tool]:
        """Return list of types.Tool for all registered specs."""
        return [spec.tool for spec in self._specs.values()]

    def tool_count(self) -> int:
        return len(self._specs)

    async def call_tool(
        self,
        name: str,
        arguments: dict | None,
        engine: SyncEngine,
    ) -> types.CallToolResult:
        """Dispatch tool call to registered handler.

        Translates authentication failures, store errors, validation errors
        and unexpected exceptions into structured CallToolResult responses.

        Raises:
            ValueError: If tool name is not registered (unknown or filtered out).
        """
        from .errors import build_error_response

        spec = self._specs.get(name)
        if spec is None:
            raise ValueError(f"Unknown tool: {name}")
        args = arguments or {}
        try:
            return await spec.handler(engine, args)
        except AuthenticationError as e:
            logger.warning("Authentication failure in %s: %s", name, e)
            return build_error_response(
                "not_authenticated",
                str(e),
                "Refresh the Google credentials and restart the server.",
            )
        except DocumentStoreError as e:
            logger.warning("Document store error in %s: %s", name, e)
            return build_error_response(
                "server_error", str(e), "Retry later."
            )
        except ValueError as e:
            return build_error_response(
                "validation_error",
                str(e),
                "Check parameter values and retry.",
            )
        except Exception as e:
            logger.exception("Unexpected error in tool %s", name)
            return build_error_response(
                "server_error", str(e), "Retry later or check the server log."
            )
