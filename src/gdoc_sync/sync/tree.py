"""Local folder tree builder.

Walks a folder and produces a fresh, ordered, leveled ``TreeNode`` tree:
folders before files, then by name.  Hidden entries, the metadata file and
non-markdown files are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from ..file_handler import read_file_with_encoding
from .frontmatter import strip_front_matter
from .hasher import hash_tree
from .metadata import METADATA_FILENAME
from .models import NodeKind, TreeNode

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


def _sort_key(entry: Path) -> tuple[bool, str, str]:
    return (not entry.is_dir(), entry.name.casefold(), entry.name)


def _is_included(entry: Path) -> bool:
    if entry.name == METADATA_FILENAME or entry.name.startswith("."):
        return False
    if entry.is_dir():
        return True
    return entry.is_file() and entry.suffix.lower() == MARKDOWN_SUFFIX


def build_tree(
    folder: Path, level: int = 1, _rel: PurePosixPath | None = None
) -> TreeNode:
    """Build the tree for *folder*.

    Args:
        folder: Directory to walk.
        level: Level assigned to *folder* itself (root = 1).

    Returns:
        Folder node whose ``path`` values are POSIX paths starting with the
        root folder name.
    """
    rel = _rel if _rel is not None else PurePosixPath(folder.name)
    entries = sorted(
        (e for e in folder.iterdir() if _is_included(e)), key=_sort_key
    )

    children: list[TreeNode] = []
    for entry in entries:
        child_rel = rel / entry.name
        if entry.is_dir():
            children.append(build_tree(entry, level + 1, child_rel))
        else:
            children.append(_build_file(entry, level + 1, child_rel))

    return TreeNode(
        name=folder.name,
        path=str(rel),
        kind=NodeKind.FOLDER,
        level=level,
        children=children,
    )


def _build_file(path: Path, level: int, rel: PurePosixPath) -> TreeNode:
    content, encoding = read_file_with_encoding(path)
    logger.debug("Read %s (%s)", rel, encoding)
    return TreeNode(
        name=path.stem,
        path=str(rel),
        kind=NodeKind.FILE,
        level=level,
        body=strip_front_matter(content),
    )


def calculate_folder_hash(folder: Path) -> str:
    """Fingerprint of the tree freshly built from *folder*."""
    return hash_tree(build_tree(folder))


def flatten_tree(node: TreeNode) -> list[TreeNode]:
    """Return *node* followed by all descendants, depth first."""
    nodes = [node]
    for child in node.children or []:
        nodes.extend(flatten_tree(child))
    return nodes
