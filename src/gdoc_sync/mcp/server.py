"""MCP server for folder <-> Google Doc sync using stdio transport.

Transport: stdio
Protocol: JSON-RPC 2.0 over MCP
"""

import argparse
import asyncio
import logging
import sys

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from .. import __version__
from ..core.async_utils import run_sync
from ..logger import DEFAULT_MCP_LOG_FILE, setup_logging
from ..sync.engine import SyncEngine
from .lifespan import server_lifespan
from .tools import ALL_SPECS, ToolRegistry, build_error_response
from .tools.registry import ToolSpec

logger = logging.getLogger(__name__)

server = Server("gdoc-sync-mcp")

# Initialized in main()
_engine: SyncEngine | None = None
_registry: ToolRegistry | None = None


# ---------------------------------------------------------------------------
# Ping tool (always available)
# ---------------------------------------------------------------------------


async def _handle_ping(
    engine: SyncEngine, args: dict
) -> types.CallToolResult:
    """Handle ping tool -- validate Google credentials."""
    if await run_sync(engine.validate_credentials):
        return types.CallToolResult(
            content=[
                types.TextContent(
                    type="text",
                    text=f"gdoc-sync {__version__}: Google credentials are valid.",
                )
            ]
        )
    return types.CallToolResult(
        content=[
            types.TextContent(
                type="text",
                text="Google credentials were refused. Check "
                "GDOC_SYNC_CLIENT_ID, GDOC_SYNC_CLIENT_SECRET, "
                "GDOC_SYNC_REFRESH_TOKEN.",
            )
        ],
        isError=True,
    )


PING_SPEC = ToolSpec(
    tool=types.Tool(
        name="ping",
        description="Check that the server can authenticate with Google Docs",
        inputSchema={"type": "object", "properties": {}, "required": []},
    ),
    mutating=False,
    handler=_handle_ping,
)


# ---------------------------------------------------------------------------
# Global accessors
# ---------------------------------------------------------------------------


def get_engine() -> SyncEngine:
    """Get the global SyncEngine instance.

    Raises:
        RuntimeError: If the engine is not initialized
    """
    if _engine is None:
        raise RuntimeError(
            "SyncEngine not initialized. Server lifespan not started."
        )
    return _engine


def set_engine(engine: SyncEngine | None) -> None:
    global _engine
    _engine = engine


def get_registry() -> ToolRegistry:
    if _registry is None:
        raise RuntimeError("ToolRegistry not initialized.")
    return _registry


def set_registry(registry: ToolRegistry | None) -> None:
    global _registry
    _registry = registry


# ---------------------------------------------------------------------------
# MCP protocol handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    return get_registry().list_tools()


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict | None
) -> types.CallToolResult:
    """Handle tool execution via ToolRegistry dispatch."""
    engine = get_engine()
    try:
        return await get_registry().call_tool(name, arguments, engine)
    except ValueError as e:
        # Unknown or filtered-out tool name
        return build_error_response(
            "unknown_tool",
            str(e),
            "Use list_tools to see available tools.",
        )


# ---------------------------------------------------------------------------
# Server lifecycle
# ---------------------------------------------------------------------------


async def main(config_overrides: dict | None = None):
    """Run the MCP server with stdio transport.

    Logging is configured for MCP mode (file only, never stdout) before the
    stdio transport starts.

    Args:
        config_overrides: Optional dict of CLI values (credentials,
            vault_root, log_file, read_only).
    """
    overrides = dict(config_overrides or {})
    log_file = overrides.pop("log_file", None)
    read_only = overrides.pop("read_only", False)

    setup_logging(mode="mcp", debug=overrides.get("debug", False), log_file=log_file)

    all_specs = [PING_SPEC] + ALL_SPECS
    registry = ToolRegistry(all_specs, read_only=read_only)
    logger.info(
        "Registered %d tools (of %d total)",
        registry.tool_count(),
        len(all_specs),
    )
    set_registry(registry)

    async with server_lifespan(config_overrides=overrides) as ctx:
        set_engine(ctx["engine"])
        try:
            async with mcp.server.stdio.stdio_server() as (
                read_stream,
                write_stream,
            ):
                init_options = InitializationOptions(
                    server_name="gdoc-sync-mcp",
                    server_version=__version__,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                )
                await server.run(read_stream, write_stream, init_options)
        finally:
            set_engine(None)
            set_registry(None)


def run() -> None:
    """Entry point that handles errors gracefully and parses CLI arguments."""
    parser = argparse.ArgumentParser(
        description="gdoc-sync MCP server - sync local Markdown folders with Google Docs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with credentials from .env or config.yml
  gdoc-sync-mcp

  # Search a specific vault for linked folders
  gdoc-sync-mcp --vault-root ~/notes

  # Expose only read-only tools
  gdoc-sync-mcp --read-only

Note: This server uses stdio transport for JSON-RPC communication with MCP clients.
All user-facing messages are written to stderr.
        """,
    )
    parser.add_argument("--client-id", help="Override GDOC_SYNC_CLIENT_ID")
    parser.add_argument(
        "--client-secret",
        help="Override GDOC_SYNC_CLIENT_SECRET (visible in process list)",
    )
    parser.add_argument(
        "--refresh-token",
        help="Override GDOC_SYNC_REFRESH_TOKEN (visible in process list)",
    )
    parser.add_argument("--vault-root", help="Folder searched by folder_sync_all")
    parser.add_argument(
        "--log-file",
        default=DEFAULT_MCP_LOG_FILE,
        help=f"Log file path (default: {DEFAULT_MCP_LOG_FILE})",
    )
    parser.add_argument(
        "--read-only",
        action="store_true",
        help="Only expose tools that do not modify files or documents",
    )
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    parser.add_argument(
        "--version",
        action="version",
        version=f"gdoc-sync-mcp version {__version__}",
    )
    args = parser.parse_args()

    config_overrides: dict = {}
    for key in ("client_id", "client_secret", "refresh_token", "vault_root"):
        value = getattr(args, key)
        if value:
            config_overrides[key] = value
    config_overrides["log_file"] = args.log_file
    if args.read_only:
        config_overrides["read_only"] = True
    if args.debug:
        config_overrides["debug"] = True

    try:
        asyncio.run(main(config_overrides=config_overrides))
    except RuntimeError:
        # Error already printed to stderr by lifespan manager
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
