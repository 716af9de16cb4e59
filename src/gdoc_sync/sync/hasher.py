"""Canonical tree serialization and content fingerprints.

The serialization is order-sensitive and whitespace-preserving: nothing is
normalised, so any change to a name, level, body or child order yields a
different digest.
"""

from __future__ import annotations

import hashlib

from .models import TreeNode


def serialize(node: TreeNode) -> str:
    """Serialize *node* and its descendants into a canonical string.

    Format: ``<kind>:<name>:<level>[:<body>][:children:[<child>,...]]``
    where the body segment is emitted only for non-empty bodies and the
    children segment only for non-empty child lists.  Every child is
    followed by a comma.
    """
    result = f"{node.kind.value}:{node.name}:{node.level}"
    if node.body:
        result += f":{node.body}"
    if node.children:
        result += ":children:["
        for child in node.children:
            result += serialize(child) + ","
        result += "]"
    return result


def hash_content(text: str) -> str:
    """Return the SHA-256 hex digest of *text* (UTF-8)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hash_tree(node: TreeNode) -> str:
    """Return the fingerprint of a whole tree."""
    return hash_content(serialize(node))
