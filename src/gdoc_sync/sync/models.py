"""Pydantic models for the folder <-> document sync engine.

Defines the core data contracts used across all sync modules:

- ``NodeKind`` / ``TreeNode``: the local folder tree.
- ``Section``: a heading plus its body, extracted from the remote document.
- ``SyncMetadata``: per-folder link state persisted between passes.
- ``ConflictInfo`` / ``ContentDiff``: conflict and diff payloads.
- ``SyncOutcome`` / ``SyncResult``: outcome of one folder pass.
- ``SyncReport``: aggregate results for a batch of folders.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel


class NodeKind(str, Enum):
    """Kind of a local tree node."""

    FILE = "file"
    FOLDER = "folder"


class TreeNode(BaseModel):
    """A file or folder of the synced tree.

    Attributes:
        name: Folder name, or file name without extension.
        path: Location unique within the sync root (POSIX separators).
        kind: ``file`` or ``folder``.
        level: Depth from the synced root (root = 1).
        children: Ordered children, folders only.
        body: Markdown body with front matter removed, files only.
    """

    name: str
    path: str
    kind: NodeKind
    level: int = Field(ge=1)
    children: list[TreeNode] | None = None
    body: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_kind(self) -> TreeNode:
        if self.kind == NodeKind.FOLDER:
            if self.children is None or self.body is not None:
                raise ValueError(
                    f"folder node '{self.path}' must have children and no body"
                )
        elif self.body is None or self.children is not None:
            raise ValueError(
                f"file node '{self.path}' must have a body and no children"
            )
        return self

    @property
    def is_folder(self) -> bool:
        return self.kind == NodeKind.FOLDER


class Section(BaseModel):
    """A heading of the remote document and the markdown that follows it."""

    level: int
    title: str
    content: str = ""

    model_config = {"frozen": True}


class SyncMetadata(BaseModel):
    """Link state stored in the metadata file of a synced folder.

    Serialised with camelCase keys.  ``remote_content_hash`` is ``None``
    when the remote fingerprint was never computed; an empty digest is
    rejected so that "unknown" cannot be confused with "empty".

    Attributes:
        remote_id: Remote document identifier.
        last_sync_time: ISO 8601 timestamp of the last successful pass.
        folder_path: Path of the synced folder.
        local_content_hash: Fingerprint of the local tree at last sync.
        remote_content_hash: Fingerprint of the remote markdown at last sync.
        remote_revision: Remote revision token at last sync.
    """

    remote_id: str = Field(min_length=1)
    last_sync_time: str
    folder_path: str
    local_content_hash: str
    remote_content_hash: str | None = Field(default=None, min_length=1)
    remote_revision: str | None = None

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class ConflictKind(str, Enum):
    CONTENT = "content"
    STRUCTURE = "structure"


class ConflictInfo(BaseModel):
    """Both sides changed since the last sync.

    Attributes:
        kind: ``content`` or ``structure``.
        local_version: Serialised local side.
        remote_version: Serialised remote side.
        description: Human-readable explanation.
    """

    kind: ConflictKind = ConflictKind.CONTENT
    local_version: str
    remote_version: str
    description: str

    model_config = {"frozen": True}


class DiffKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class ContentDiff(BaseModel):
    """One line-level difference."""

    kind: DiffKind
    location: str
    old_value: str | None = None
    new_value: str | None = None

    model_config = {"frozen": True}


class SyncOutcome(str, Enum):
    """Terminal outcome of a single folder pass."""

    UP_TO_DATE = "up_to_date"
    CREATED = "created"
    PUSHED = "pushed"
    PULLED = "pulled"
    CONFLICT = "conflict"
    ERROR = "error"
    NOT_AUTHENTICATED = "not_authenticated"


class SyncResult(BaseModel):
    """Result of syncing one folder.

    Attributes:
        success: Whether the pass completed without conflict or error.
        message: Human-readable summary.
        outcome: Which branch the pass took.
        folder_path: The folder that was synced.
        document_id: Remote document identifier, when known.
        document_url: Browser URL of the remote document, when known.
        conflicts: Populated for the conflict outcome.
        error: Machine-readable error detail for failures.
    """

    success: bool
    message: str
    outcome: SyncOutcome
    folder_path: str = ""
    document_id: str | None = None
    document_url: str | None = None
    conflicts: list[ConflictInfo] | None = None
    error: str | None = None

    model_config = {"frozen": True}


class FolderStatus(BaseModel):
    """Link state of a folder, computed without contacting the remote."""

    folder_path: str
    linked: bool
    document_id: str | None = None
    document_url: str | None = None
    last_sync_time: str | None = None
    local_changed: bool | None = None

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for a batch of folder passes.

    Attributes:
        results: One result per folder, in processing order.
        started_at: ISO 8601 timestamp when the batch started.
        completed_at: ISO 8601 timestamp when the batch completed.
    """

    results: list[SyncResult] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def succeeded(self) -> list[SyncResult]:
        """Results where success is True."""
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[SyncResult]:
        """Results where success is False (conflicts included)."""
        return [r for r in self.results if not r.success]

    @property
    def conflicts(self) -> list[SyncResult]:
        """Results where outcome is CONFLICT."""
        return [
            r for r in self.results if r.outcome == SyncOutcome.CONFLICT
        ]

    def count(self, outcome: SyncOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    def summary(self) -> str:
        """Format a human-readable summary of the batch.

        Returns:
            Multi-line summary string with counts by outcome.
        """
        lines = [
            "Sync report for linked folders",
            f"  Created:    {self.count(SyncOutcome.CREATED)}",
            f"  Pushed:     {self.count(SyncOutcome.PUSHED)}",
            f"  Pulled:     {self.count(SyncOutcome.PULLED)}",
            f"  Up to date: {self.count(SyncOutcome.UP_TO_DATE)}",
            f"  Conflicts:  {len(self.conflicts)}",
            f"  Failed:     {len(self.failed)}",
            f"  Total:      {len(self.results)}",
        ]
        return "\n".join(lines)
