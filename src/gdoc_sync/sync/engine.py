"""Sync engine that reconciles one folder with its remote document per pass.

Each pass is evaluated fresh:

1. Obtain a valid access token and install it on the document store.
2. Read the folder's metadata.  No metadata means the folder is unlinked:
   create a document, write the tree into it and persist the link.
3. Otherwise rebuild the local tree, fetch the remote document and compare
   both fingerprints with the stored ones:

   - neither changed: up to date, nothing is written;
   - local only: push (clear the document and rewrite it);
   - remote only: pull (write one file per level >= 2 section);
   - both: conflict, returned to the caller with metadata untouched.

Metadata is written only as the last step of a successful branch, so a
pass that fails part way leaves the previous link state in place and the
next pass retries.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import requests

from ..config import Settings
from ..core.client import DocumentStore
from ..core.errors import AuthenticationError, DocumentStoreError
from ..core.oauth import TokenProvider
from ..document import RemoteDocument
from ..file_handler import sanitize_filename, write_file
from .hasher import hash_content, hash_tree
from .metadata import MetadataStore
from .models import (
    FolderStatus,
    Section,
    SyncMetadata,
    SyncOutcome,
    SyncReport,
    SyncResult,
    TreeNode,
)
from .resolver import create_conflict_info
from .tree import build_tree

logger = logging.getLogger(__name__)

# Errors that abort a single pass without aborting a batch.
PASS_ERRORS = (
    DocumentStoreError,
    requests.RequestException,
    OSError,
    ValueError,
)


class SyncEngine:
    """Reconcile linked folders with their remote documents.

    Args:
        store: Remote document store (``GoogleDocsClient`` in production).
        token_provider: Source of access tokens for *store*.
        metadata: Metadata store; a default ``MetadataStore`` if omitted.
        settings: Immutable settings; only ``vault_root`` is used here.
    """

    def __init__(
        self,
        store: DocumentStore,
        token_provider: TokenProvider,
        metadata: MetadataStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.token_provider = token_provider
        self.metadata = metadata or MetadataStore()
        self.settings = settings or Settings()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate_credentials(self) -> bool:
        """Return ``True`` if a token can be obtained and is accepted."""
        try:
            self._authenticate()
        except AuthenticationError as exc:
            logger.warning("Credential validation failed: %s", exc)
            return False
        return self.store.validate_token()

    def sync_folder(self, folder: Path | str) -> SyncResult:
        """Run one sync pass for *folder*.

        Returns:
            Exactly one ``SyncResult``; failures are reported, not raised.
        """
        folder = Path(folder)
        folder_path = str(folder)

        try:
            self._authenticate()
        except AuthenticationError as exc:
            return self._not_authenticated(folder_path, exc)

        if not folder.is_dir():
            return SyncResult(
                success=False,
                message=f"Folder not found: {folder_path}",
                outcome=SyncOutcome.ERROR,
                folder_path=folder_path,
                error="folder_not_found",
            )

        try:
            metadata = self.metadata.read(folder)
            if metadata is None:
                return self._create_link(folder)
            return self._sync_linked(folder, metadata)
        except AuthenticationError as exc:
            return self._not_authenticated(folder_path, exc)
        except PASS_ERRORS as exc:
            logger.error("Sync failed for %s: %s", folder_path, exc)
            return SyncResult(
                success=False,
                message=f"Sync failed: {exc}",
                outcome=SyncOutcome.ERROR,
                folder_path=folder_path,
                error=f"{type(exc).__name__}: {exc}",
            )

    def sync_all(
        self,
        root: Path | str | None = None,
        folders: list[Path] | None = None,
    ) -> SyncReport:
        """Sync several folders one after another.

        Args:
            root: Folder searched for linked folders; defaults to the
                configured vault root.  Ignored when *folders* is given.
            folders: Explicit folders to sync.

        Returns:
            A ``SyncReport`` with one result per folder.

        Raises:
            ValueError: If neither *folders*, *root* nor a configured vault
                root is available.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        if folders is None:
            search_root = root or self.settings.vault_root
            if not search_root:
                raise ValueError(
                    "No folder to search: pass a root or set "
                    "GDOC_SYNC_VAULT_ROOT"
                )
            folders = self.metadata.find_linked_folders(
                Path(search_root).expanduser()
            )

        results: list[SyncResult] = []
        for folder in folders:
            try:
                results.append(self.sync_folder(folder))
            except Exception as exc:
                logger.error("Unexpected error syncing %s: %s", folder, exc)
                results.append(
                    SyncResult(
                        success=False,
                        message=f"Sync failed: {exc}",
                        outcome=SyncOutcome.ERROR,
                        folder_path=str(folder),
                        error=f"{type(exc).__name__}: {exc}",
                    )
                )

        report = SyncReport(
            results=results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Synced %d folder(s): %d succeeded, %d failed",
            len(results),
            len(report.succeeded),
            len(report.failed),
        )
        return report

    def status(self, folder: Path | str) -> FolderStatus:
        """Describe the link state of *folder* without remote calls."""
        folder = Path(folder)
        metadata = self.metadata.read(folder)
        if metadata is None:
            return FolderStatus(folder_path=str(folder), linked=False)
        local_changed = None
        if folder.is_dir():
            local_changed = (
                hash_tree(build_tree(folder)) != metadata.local_content_hash
            )
        return FolderStatus(
            folder_path=str(folder),
            linked=True,
            document_id=metadata.remote_id,
            document_url=self.store.document_url(metadata.remote_id),
            last_sync_time=metadata.last_sync_time,
            local_changed=local_changed,
        )

    def unlink(self, folder: Path | str) -> bool:
        """Forget the link of *folder*; the remote document is kept.

        Returns:
            ``True`` if metadata was removed.
        """
        removed = self.metadata.delete(Path(folder))
        if removed:
            logger.info("Unlinked %s", folder)
        return removed

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def _create_link(self, folder: Path) -> SyncResult:
        tree = build_tree(folder)
        local_hash = hash_tree(tree)

        created = self.store.create_document(folder.name)
        self._write_remote(created.id, tree)
        doc = self.store.get_document(created.id)

        self._save(folder, doc, local_hash)
        logger.info("Linked %s to document %s", folder, doc.id)
        return self._success(
            folder,
            SyncOutcome.CREATED,
            f"Created remote document '{folder.name}'",
            doc.id,
        )

    def _sync_linked(self, folder: Path, metadata: SyncMetadata) -> SyncResult:
        from ..converters import document_to_markdown

        tree = build_tree(folder)
        local_hash = hash_tree(tree)
        doc = self.store.get_document(metadata.remote_id)
        remote_hash = hash_content(document_to_markdown(doc))

        local_changed = local_hash != metadata.local_content_hash
        remote_changed = (
            doc.revision != metadata.remote_revision
            or metadata.remote_content_hash is None
            or remote_hash != metadata.remote_content_hash
        )
        logger.debug(
            "%s: local_changed=%s remote_changed=%s",
            folder,
            local_changed,
            remote_changed,
        )

        if not local_changed and not remote_changed:
            return self._success(
                folder,
                SyncOutcome.UP_TO_DATE,
                "Already up to date",
                metadata.remote_id,
            )
        if local_changed and not remote_changed:
            return self._push(folder, tree, local_hash, metadata.remote_id)
        if remote_changed and not local_changed:
            return self._pull(folder, doc)
        return self._conflict(folder, tree, doc)

    def _push(
        self, folder: Path, tree: TreeNode, local_hash: str, document_id: str
    ) -> SyncResult:
        self._write_remote(document_id, tree)
        doc = self.store.get_document(document_id)
        self._save(folder, doc, local_hash)
        logger.info("Pushed %s to document %s", folder, document_id)
        return self._success(
            folder,
            SyncOutcome.PUSHED,
            "Pushed local changes to remote document",
            document_id,
        )

    def _pull(self, folder: Path, doc: RemoteDocument) -> SyncResult:
        from ..converters import extract_structure

        written = 0
        for section in extract_structure(doc):
            if section.level < 2 or not section.content:
                continue
            name = sanitize_filename(section.title)
            if not name:
                logger.warning(
                    "Skipping section with unusable title %r", section.title
                )
                continue
            write_file(folder / f"{name}.md", section.content + "\n")
            written += 1

        local_hash = hash_tree(build_tree(folder))
        self._save(folder, doc, local_hash)
        logger.info("Pulled %d section(s) into %s", written, folder)
        return self._success(
            folder,
            SyncOutcome.PULLED,
            f"Pulled {written} section(s) from remote document",
            doc.id,
        )

    def _conflict(
        self, folder: Path, tree: TreeNode, doc: RemoteDocument
    ) -> SyncResult:
        from ..converters import extract_structure

        sections: list[Section] = extract_structure(doc)
        conflict = create_conflict_info(
            tree.model_dump_json(indent=2),
            json.dumps([s.model_dump() for s in sections], indent=2),
            "Both the local folder and the remote document changed "
            "since the last sync",
        )
        logger.warning("Conflict detected for %s", folder)
        return SyncResult(
            success=False,
            message="Conflict: local and remote both changed",
            outcome=SyncOutcome.CONFLICT,
            folder_path=str(folder),
            document_id=doc.id,
            document_url=self.store.document_url(doc.id),
            conflicts=[conflict],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _authenticate(self) -> None:
        self.store.set_access_token(self.token_provider.get_valid_token())

    def _write_remote(self, document_id: str, tree: TreeNode) -> None:
        """Clear the document and rebuild it from *tree*."""
        from ..converters import tree_to_requests

        self.store.clear_document(document_id)
        self.store.apply_mutations(document_id, tree_to_requests(tree))

    def _save(self, folder: Path, doc: RemoteDocument, local_hash: str) -> None:
        from ..converters import document_to_markdown

        self.metadata.write(
            folder,
            self.metadata.create(
                remote_id=doc.id,
                folder_path=str(folder),
                local_hash=local_hash,
                remote_revision=doc.revision,
                remote_content_hash=hash_content(document_to_markdown(doc)),
            ),
        )

    def _success(
        self,
        folder: Path,
        outcome: SyncOutcome,
        message: str,
        document_id: str,
    ) -> SyncResult:
        return SyncResult(
            success=True,
            message=message,
            outcome=outcome,
            folder_path=str(folder),
            document_id=document_id,
            document_url=self.store.document_url(document_id),
        )

    @staticmethod
    def _not_authenticated(
        folder_path: str, exc: AuthenticationError
    ) -> SyncResult:
        logger.warning("Not authenticated for %s: %s", folder_path, exc)
        return SyncResult(
            success=False,
            message="Not authenticated with Google. Check credentials.",
            outcome=SyncOutcome.NOT_AUTHENTICATED,
            folder_path=folder_path,
            error=str(exc),
        )
