"""Folder <-> document sync engine.

Public API for keeping a local folder of Markdown notes and a single
Google Doc convergent.

Architecture
------------
Change detection is fingerprint based.  Each linked folder stores the
hash of its local tree and of the remote document's markdown rendering
seen at the last successful pass; a pass compares fresh fingerprints of
both sides with those and pushes, pulls or reports a conflict.

Modules:

- ``engine``      -- ``SyncEngine``: one pass per folder, batches.
- ``tree``        -- ``build_tree``: local folder -> ``TreeNode``.
- ``frontmatter`` -- front-matter stripping for note bodies.
- ``hasher``      -- canonical serialisation and SHA-256 fingerprints.
- ``metadata``    -- ``MetadataStore``: per-folder ``.sync-metadata.json``.
- ``resolver``    -- conflict detection, line merge, line diff.
- ``models``      -- core data contracts.
- ``reporter``    -- human-readable and JSON formatting.

Usage example
-------------
::

    from gdoc_sync.core import GoogleDocsClient, OAuthTokenProvider
    from gdoc_sync.sync import SyncEngine, format_sync_result

    engine = SyncEngine(
        store=GoogleDocsClient(),
        token_provider=OAuthTokenProvider(client_id, secret, refresh),
    )
    print(format_sync_result(engine.sync_folder("/notes/project")))
"""

from .engine import SyncEngine
from .metadata import METADATA_FILENAME, MetadataStore
from .models import (
    ConflictInfo,
    ContentDiff,
    FolderStatus,
    Section,
    SyncMetadata,
    SyncOutcome,
    SyncReport,
    SyncResult,
    TreeNode,
)
from .reporter import (
    format_conflict_diff,
    format_sync_report,
    format_sync_result,
    report_to_json,
    result_to_json,
)

__all__ = [
    "METADATA_FILENAME",
    "ConflictInfo",
    "ContentDiff",
    "FolderStatus",
    "MetadataStore",
    "Section",
    "SyncEngine",
    "SyncMetadata",
    "SyncOutcome",
    "SyncReport",
    "SyncResult",
    "TreeNode",
    "format_conflict_diff",
    "format_sync_report",
    "format_sync_result",
    "report_to_json",
    "result_to_json",
]
