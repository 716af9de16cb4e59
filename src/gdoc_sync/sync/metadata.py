"""Per-folder sync metadata persistence.

Every linked folder holds one ``.sync-metadata.json`` file recording the
remote document it is linked to and the fingerprints seen at the last
successful pass.

Key design choices:

* **Atomic writes** -- ``write()`` writes to a temp file then calls
  ``os.replace()`` so readers never see partial data.
* **Forgiving reads** -- a missing, unreadable or malformed file reads as
  ``None`` (the folder is treated as unlinked) and is logged, not raised.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from .models import SyncMetadata

logger = logging.getLogger(__name__)

METADATA_FILENAME = ".sync-metadata.json"


class MetadataStore:
    """Read, write and discover per-folder sync metadata files."""

    filename = METADATA_FILENAME

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def path(self, folder: Path) -> Path:
        """Return the metadata file location for *folder*."""
        return Path(folder) / self.filename

    def exists(self, folder: Path) -> bool:
        return self.path(folder).is_file()

    def read(self, folder: Path) -> SyncMetadata | None:
        """Load metadata for *folder*.

        Returns:
            The parsed metadata, or ``None`` when the file is missing or
            cannot be parsed.
        """
        target = self.path(folder)
        if not target.is_file():
            return None
        try:
            with open(target, encoding="utf-8") as fh:
                data = json.load(fh)
            return SyncMetadata.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable metadata %s: %s", target, e)
            return None

    def write(self, folder: Path, metadata: SyncMetadata) -> None:
        """Persist *metadata* for *folder* atomically (pretty-printed).

        Args:
            folder: Linked folder; must exist.
            metadata: Metadata to store.
        """
        folder = Path(folder)
        target = self.path(folder)
        payload = metadata.model_dump(by_alias=True, exclude_none=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(folder), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
            os.replace(tmp_path, target)
        except BaseException:
            # Clean up temp file on any failure.
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def delete(self, folder: Path) -> bool:
        """Remove the metadata file for *folder*.

        Returns:
            ``True`` if a file was removed, ``False`` if none existed.
        """
        target = self.path(folder)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        return True

    # ------------------------------------------------------------------
    # Construction and discovery
    # ------------------------------------------------------------------

    @staticmethod
    def create(
        remote_id: str,
        folder_path: str,
        local_hash: str,
        remote_revision: str | None = None,
        remote_content_hash: str | None = None,
    ) -> SyncMetadata:
        """Build fresh metadata stamped with the current UTC time."""
        return SyncMetadata(
            remote_id=remote_id,
            last_sync_time=datetime.now(timezone.utc).isoformat(),
            folder_path=folder_path,
            local_content_hash=local_hash,
            remote_revision=remote_revision,
            remote_content_hash=remote_content_hash,
        )

    def find_linked_folders(self, root: Path) -> list[Path]:
        """Return every folder under *root* (inclusive) holding metadata.

        Hidden directories are not descended into.
        """
        root = Path(root)
        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            if self.filename in filenames:
                found.append(Path(dirpath))
        return sorted(found)
