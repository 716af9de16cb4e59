"""Folder tree to flat document conversion using mistune AST parsing.

The tree is flattened depth first (root excluded).  Folders become heading
paragraphs; files become a heading followed by their markdown body.  The
resulting paragraphs are turned into Google Docs ``batchUpdate`` requests
that rebuild an emptied document from scratch.
"""

from __future__ import annotations

import html
from typing import Any

import mistune

from ..document import Paragraph, ParagraphStyle, StyledRun, heading
from ..sync.models import TreeNode

INDENT_MAGNITUDE_PT = 36
BULLET_PREFIX = "• "
HORIZONTAL_RULE = "---"

_markdown = mistune.create_markdown(renderer="ast")


# =============================================================================
# Inline content
# =============================================================================


def _inline_runs(
    tokens: list[dict[str, Any]], bold: bool = False, italic: bool = False
) -> list[StyledRun]:
    """Flatten inline tokens into styled runs; nested emphasis composes."""
    runs: list[StyledRun] = []
    for token in tokens:
        token_type = token.get("type")
        if token_type == "strong":
            runs.extend(_inline_runs(token.get("children", []), True, italic))
        elif token_type == "emphasis":
            runs.extend(_inline_runs(token.get("children", []), bold, True))
        elif token_type in ("softbreak", "linebreak"):
            runs.append(StyledRun(text=" ", bold=bold, italic=italic))
        elif "children" in token:
            runs.extend(_inline_runs(token["children"], bold, italic))
        elif "raw" in token:
            text = html.unescape(token["raw"])
            if text:
                runs.append(StyledRun(text=text, bold=bold, italic=italic))
    return runs


# =============================================================================
# Block content
# =============================================================================


def _quote(paragraph: Paragraph) -> Paragraph:
    return Paragraph(
        runs=[
            StyledRun(text=run.text, bold=run.bold, italic=True)
            for run in paragraph.runs
        ],
        style=ParagraphStyle(indented=True),
    )


def _list_items(token: dict[str, Any]) -> list[Paragraph]:
    attrs = token.get("attrs") or {}
    ordered = attrs.get("ordered", False)
    start = attrs.get("start", 1)

    paragraphs: list[Paragraph] = []
    for position, item in enumerate(token.get("children", [])):
        prefix = f"{start + position}. " if ordered else BULLET_PREFIX
        runs = [StyledRun(text=prefix)]
        nested: list[Paragraph] = []
        for child in item.get("children", []):
            child_type = child.get("type")
            if child_type == "list":
                nested.extend(_list_items(child))
            elif child_type in ("paragraph", "block_text"):
                if len(runs) > 1:
                    runs.append(StyledRun(text=" "))
                runs.extend(_inline_runs(child.get("children", [])))
        paragraphs.append(Paragraph(runs=runs))
        paragraphs.extend(nested)
    return paragraphs


def _block_paragraphs(tokens: list[dict[str, Any]]) -> list[Paragraph]:
    paragraphs: list[Paragraph] = []
    for token in tokens:
        token_type = token.get("type")
        if token_type in ("paragraph", "block_text"):
            paragraphs.append(
                Paragraph(runs=_inline_runs(token.get("children", [])))
            )
        elif token_type == "heading":
            level = (token.get("attrs") or {}).get("level", 1)
            paragraphs.append(
                Paragraph(
                    runs=_inline_runs(token.get("children", [])),
                    style=ParagraphStyle(heading_level=min(level, 6)),
                )
            )
        elif token_type == "block_quote":
            paragraphs.extend(
                _quote(p)
                for p in _block_paragraphs(token.get("children", []))
            )
        elif token_type == "list":
            paragraphs.extend(_list_items(token))
        elif token_type == "thematic_break":
            paragraphs.append(Paragraph(runs=[StyledRun(text=HORIZONTAL_RULE)]))
        # block_code, block_html, blank_line and the rest are dropped
    return paragraphs


def markdown_to_blocks(markdown_text: str) -> list[Paragraph]:
    """Parse a markdown body into flat paragraphs.

    Args:
        markdown_text: Markdown source with front matter already removed.

    Returns:
        Paragraphs in document order.
    """
    tokens: list[dict[str, Any]] = _markdown(markdown_text)  # type: ignore[assignment]
    return _block_paragraphs(tokens)


def tree_to_blocks(root: TreeNode) -> list[Paragraph]:
    """Flatten *root* (excluded) into the paragraphs of its document.

    Folders emit one heading; files with a non-empty body emit a heading
    followed by the converted body.  Empty files are skipped.
    """
    blocks: list[Paragraph] = []
    for node in root.children or []:
        if node.is_folder:
            blocks.append(heading(node.name, node.level))
            blocks.extend(tree_to_blocks(node))
        elif node.body:
            blocks.append(heading(node.name, node.level))
            blocks.extend(markdown_to_blocks(node.body))
    return blocks


# =============================================================================
# Google Docs requests
# =============================================================================


def utf16_len(text: str) -> int:
    """Length of *text* in UTF-16 code units (the Docs API index unit)."""
    return len(text.encode("utf-16-le")) // 2


def blocks_to_requests(
    blocks: list[Paragraph], start_index: int = 1
) -> list[dict[str, Any]]:
    """Build ``batchUpdate`` requests that write *blocks* at *start_index*.

    Each paragraph gets one ``insertText``, one ``updateParagraphStyle``
    and ``updateTextStyle`` requests that first clear then set bold/italic,
    so no style leaks from neighbouring text.
    """
    requests: list[dict[str, Any]] = []
    index = start_index
    for block in blocks:
        text = block.text
        text_end = index + utf16_len(text)
        requests.append(
            {"insertText": {"location": {"index": index}, "text": text + "\n"}}
        )

        level = block.heading_level
        named = f"HEADING_{level}" if level else "NORMAL_TEXT"
        magnitude = INDENT_MAGNITUDE_PT if block.indented else 0
        requests.append(
            {
                "updateParagraphStyle": {
                    "range": {"startIndex": index, "endIndex": text_end + 1},
                    "paragraphStyle": {
                        "namedStyleType": named,
                        "indentStart": {"magnitude": magnitude, "unit": "PT"},
                    },
                    "fields": "namedStyleType,indentStart",
                }
            }
        )

        if text:
            requests.append(_text_style(index, text_end, False, False))
            offset = index
            for run in block.runs:
                run_end = offset + utf16_len(run.text)
                if run.text and (run.bold or run.italic):
                    requests.append(
                        _text_style(offset, run_end, run.bold, run.italic)
                    )
                offset = run_end

        index = text_end + 1
    return requests


def _text_style(start: int, end: int, bold: bool, italic: bool) -> dict:
    return {
        "updateTextStyle": {
            "range": {"startIndex": start, "endIndex": end},
            "textStyle": {"bold": bold, "italic": italic},
            "fields": "bold,italic",
        }
    }


def tree_to_requests(
    root: TreeNode, start_index: int = 1
) -> list[dict[str, Any]]:
    """Convert a tree straight into Google Docs requests."""
    return blocks_to_requests(tree_to_blocks(root), start_index)
