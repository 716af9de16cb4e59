"""Tests for the folder sync MCP tool handlers."""

from unittest.mock import MagicMock

import pytest

from gdoc_sync.mcp.tools.registry import ToolRegistry
from gdoc_sync.mcp.tools.sync import SYNC_SPECS
from gdoc_sync.sync.models import (
    FolderStatus,
    SyncOutcome,
    SyncReport,
    SyncResult,
)
from gdoc_sync.sync.resolver import create_conflict_info


@pytest.fixture
def registry():
    return ToolRegistry(SYNC_SPECS)


@pytest.fixture
def engine():
    return MagicMock()


def _text(result) -> str:
    return result.content[0].text


class TestFolderSync:
    async def test_success(self, registry, engine, tmp_path):
        engine.sync_folder.return_value = SyncResult(
            success=True,
            message="Already up to date",
            outcome=SyncOutcome.UP_TO_DATE,
            folder_path=str(tmp_path),
        )

        result = await registry.call_tool(
            "folder_sync", {"path": str(tmp_path)}, engine
        )

        assert not result.isError
        assert "[UP TO DATE]" in _text(result)
        assert result.structuredContent["outcome"] == "up_to_date"
        engine.sync_folder.assert_called_once_with(tmp_path.resolve())

    async def test_conflict_is_error(self, registry, engine, tmp_path):
        engine.sync_folder.return_value = SyncResult(
            success=False,
            message="Conflict: local and remote both changed",
            outcome=SyncOutcome.CONFLICT,
            folder_path=str(tmp_path),
            conflicts=[create_conflict_info("a", "b", "both changed")],
        )

        result = await registry.call_tool(
            "folder_sync", {"path": str(tmp_path)}, engine
        )

        assert result.isError is True
        assert _text(result).startswith("Error (conflict)")
        assert result.structuredContent["outcome"] == "conflict"

    async def test_missing_path(self, registry, engine):
        result = await registry.call_tool("folder_sync", {}, engine)
        assert result.isError is True
        assert "path is required" in _text(result)
        engine.sync_folder.assert_not_called()

    async def test_relative_path(self, registry, engine):
        result = await registry.call_tool(
            "folder_sync", {"path": "notes"}, engine
        )
        assert _text(result).startswith("Error (validation_error)")


class TestFolderSyncAll:
    async def test_report(self, registry, engine, tmp_path):
        engine.sync_all.return_value = SyncReport(
            results=[
                SyncResult(
                    success=True,
                    message="Pushed",
                    outcome=SyncOutcome.PUSHED,
                    folder_path="/a",
                )
            ],
            started_at="2026-01-01T00:00:00+00:00",
        )

        result = await registry.call_tool(
            "folder_sync_all", {"root": str(tmp_path)}, engine
        )

        assert "Pushed:     1" in _text(result)
        assert result.structuredContent["counts"]["pushed"] == 1
        engine.sync_all.assert_called_once_with(tmp_path.resolve())

    async def test_default_root(self, registry, engine):
        engine.sync_all.return_value = SyncReport(started_at="now")
        await registry.call_tool("folder_sync_all", None, engine)
        engine.sync_all.assert_called_once_with(None)


class TestStatusAndUnlink:
    async def test_status_unlinked(self, registry, engine, tmp_path):
        engine.status.return_value = FolderStatus(
            folder_path=str(tmp_path), linked=False
        )
        result = await registry.call_tool(
            "folder_sync_status", {"path": str(tmp_path)}, engine
        )
        assert "is not linked" in _text(result)

    async def test_status_linked(self, registry, engine, tmp_path):
        engine.status.return_value = FolderStatus(
            folder_path=str(tmp_path),
            linked=True,
            document_id="doc-1",
            document_url="https://docs.example.com/doc-1",
            last_sync_time="2026-01-01T00:00:00+00:00",
            local_changed=True,
        )
        result = await registry.call_tool(
            "folder_sync_status", {"path": str(tmp_path)}, engine
        )
        assert "Local changes: yes" in _text(result)
        assert result.structuredContent["document_id"] == "doc-1"

    async def test_unlink(self, registry, engine, tmp_path):
        engine.unlink.return_value = True
        result = await registry.call_tool(
            "folder_unlink", {"path": str(tmp_path)}, engine
        )
        assert "Unlinked" in _text(result)
        assert result.structuredContent["unlinked"] is True
