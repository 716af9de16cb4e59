"""Flat remote document model.

A remote document is an ordered sequence of paragraphs.  There is no
nesting: hierarchy is carried only by ``ParagraphStyle.heading_level``.
Character offsets needed by the remote API are derived when writing and
are never stored here.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StyledRun(BaseModel):
    """A span of text sharing one inline style."""

    text: str
    bold: bool = False
    italic: bool = False

    model_config = {"frozen": True}

    def same_style(self, other: StyledRun) -> bool:
        """Return ``True`` if *other* has identical bold/italic flags."""
        return self.bold == other.bold and self.italic == other.italic


class ParagraphStyle(BaseModel):
    """Paragraph-level style.

    Attributes:
        heading_level: 1-6 for heading paragraphs, ``None`` for body text.
        indented: Indented paragraphs read back as block quotes.
    """

    heading_level: int | None = Field(default=None, ge=1, le=6)
    indented: bool = False

    model_config = {"frozen": True}


class Paragraph(BaseModel):
    """One block of the flat document."""

    runs: list[StyledRun] = []
    style: ParagraphStyle | None = None

    model_config = {"frozen": True}

    @property
    def text(self) -> str:
        """Concatenated plain text of all runs."""
        return "".join(run.text for run in self.runs)

    @property
    def heading_level(self) -> int | None:
        return self.style.heading_level if self.style else None

    @property
    def indented(self) -> bool:
        return bool(self.style and self.style.indented)

    def is_blank(self) -> bool:
        return not self.text.strip()


class RemoteDocument(BaseModel):
    """The external document as fetched from the document store.

    Attributes:
        id: Opaque document identifier.
        revision: Opaque token that changes on every remote mutation.
        title: Document title.
        blocks: Ordered paragraphs; the sole source of structure.
    """

    id: str
    revision: str
    title: str = ""
    blocks: list[Paragraph] = []

    model_config = {"frozen": True}


def heading(text: str, level: int) -> Paragraph:
    """Build a heading paragraph, capping *level* at 6."""
    return Paragraph(
        runs=[StyledRun(text=text)],
        style=ParagraphStyle(heading_level=min(level, 6)),
    )
