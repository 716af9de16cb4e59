"""Flat document to Markdown conversion and section extraction."""

from __future__ import annotations

import re

from ..document import Paragraph, RemoteDocument, StyledRun
from ..sync.models import Section

_HORIZONTAL_RULE_RE = re.compile(r"^-{3,}$")


def _merge_runs(runs: list[StyledRun]) -> list[StyledRun]:
    """Join adjacent runs that share a style."""
    merged: list[StyledRun] = []
    for run in runs:
        if not run.text:
            continue
        if merged and merged[-1].same_style(run):
            prev = merged.pop()
            run = StyledRun(
                text=prev.text + run.text, bold=run.bold, italic=run.italic
            )
        merged.append(run)
    return merged


def _render_run(run: StyledRun) -> str:
    """Wrap a run in emphasis markers, keeping edge whitespace outside."""
    if not (run.bold or run.italic):
        return run.text
    core = run.text.strip()
    if not core:
        return run.text
    lead = run.text[: len(run.text) - len(run.text.lstrip())]
    trail = run.text[len(run.text.rstrip()):]
    if run.bold and run.italic:
        marker = "***"
    elif run.bold:
        marker = "**"
    else:
        marker = "*"
    return f"{lead}{marker}{core}{marker}{trail}"


def paragraph_to_markdown(paragraph: Paragraph) -> str:
    """Render one paragraph as a markdown line.

    Args:
        paragraph: A non-blank paragraph.

    Returns:
        ``---`` for horizontal rules, ``# text`` for headings, ``> text``
        for indented paragraphs, otherwise the formatted text.
    """
    text = "".join(_render_run(run) for run in _merge_runs(paragraph.runs))
    if _HORIZONTAL_RULE_RE.match(text.strip()):
        return "---"
    level = paragraph.heading_level
    if level:
        return f"{'#' * level} {text}"
    if paragraph.indented:
        return f"> {text}"
    return text


def document_to_markdown(doc: RemoteDocument) -> str:
    """Render the whole document as markdown.

    Blank paragraphs are dropped and blocks are separated by one blank
    line, so every heading but the first is preceded by a blank line.
    """
    lines = [
        paragraph_to_markdown(p) for p in doc.blocks if not p.is_blank()
    ]
    return "\n\n".join(lines)


def extract_structure(doc: RemoteDocument) -> list[Section]:
    """Group the document into heading-delimited sections.

    Content before the first heading belongs to no section and is dropped.
    """
    sections: list[Section] = []
    current: dict | None = None
    for paragraph in doc.blocks:
        level = paragraph.heading_level
        if level:
            if current is not None:
                sections.append(Section(**current))
            current = {
                "level": level,
                "title": paragraph.text.strip(),
                "content": "",
            }
        elif current is not None and not paragraph.is_blank():
            line = paragraph_to_markdown(paragraph)
            if current["content"]:
                current["content"] += "\n\n" + line
            else:
                current["content"] = line
    if current is not None:
        sections.append(Section(**current))
    return sections
