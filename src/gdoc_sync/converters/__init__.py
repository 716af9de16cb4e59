"""Conversion between the local folder tree and the flat remote document."""

from .document_to_markdown import (
    document_to_markdown,
    extract_structure,
    paragraph_to_markdown,
)
from .tree_to_document import (
    blocks_to_requests,
    markdown_to_blocks,
    tree_to_blocks,
    tree_to_requests,
    utf16_len,
)

__all__ = [
    "blocks_to_requests",
    "document_to_markdown",
    "extract_structure",
    "markdown_to_blocks",
    "paragraph_to_markdown",
    "tree_to_blocks",
    "tree_to_requests",
    "utf16_len",
]
