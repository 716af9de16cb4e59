"""Shared pytest fixtures for gdoc-sync tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from gdoc_sync.config import Settings
from gdoc_sync.core.errors import AuthenticationError, DocumentStoreError
from gdoc_sync.document import Paragraph, ParagraphStyle, RemoteDocument, StyledRun
from gdoc_sync.sync.engine import SyncEngine
from gdoc_sync.sync.metadata import MetadataStore

load_dotenv()


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require real Google credentials",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring real Google credentials"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------------
# In-memory document store
# ---------------------------------------------------------------------------


class _Char:
    """One character of a simulated document.

    Newlines carry the style of the paragraph they terminate.
    """

    __slots__ = ("text", "bold", "italic", "named", "indent")

    def __init__(self, text: str) -> None:
        self.text = text
        self.bold = False
        self.italic = False
        self.named = "NORMAL_TEXT"
        self.indent = 0


class FakeDocumentStore:
    """Minimal Google Docs replacement that replays batchUpdate requests.

    Document indices start at 1 and every document ends with a newline,
    as in the real API.  Each mutation bumps the revision.
    """

    def __init__(self) -> None:
        self.documents: dict[str, list[_Char]] = {}
        self.revisions: dict[str, int] = {}
        self.titles: dict[str, str] = {}
        self.token: str | None = None
        self.mutation_calls: list[tuple[str, list[dict[str, Any]]]] = []
        self.token_valid = True
        self._next_id = 1

    # -- DocumentStore ------------------------------------------------------

    def set_access_token(self, token: str) -> None:
        self.token = token

    def create_document(self, title: str) -> RemoteDocument:
        document_id = f"doc-{self._next_id}"
        self._next_id += 1
        self.documents[document_id] = [_Char("\n")]
        self.revisions[document_id] = 1
        self.titles[document_id] = title
        return self.get_document(document_id)

    def get_document(self, document_id: str) -> RemoteDocument:
        chars = self._chars(document_id)
        return RemoteDocument(
            id=document_id,
            revision=f"rev-{self.revisions[document_id]}",
            title=self.titles[document_id],
            blocks=_to_paragraphs(chars),
        )

    def apply_mutations(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> str | None:
        chars = self._chars(document_id)
        if not requests:
            return None
        self.mutation_calls.append((document_id, requests))
        for request in requests:
            _apply(chars, request)
        self.revisions[document_id] += 1
        return f"rev-{self.revisions[document_id]}"

    def clear_document(self, document_id: str) -> None:
        end_index = len(self._chars(document_id)) + 1
        if end_index > 2:
            self.apply_mutations(
                document_id,
                [
                    {
                        "deleteContentRange": {
                            "range": {"startIndex": 1, "endIndex": end_index - 1}
                        }
                    }
                ],
            )

    def document_url(self, document_id: str) -> str:
        return f"https://docs.example.com/{document_id}"

    def validate_token(self) -> bool:
        return self.token is not None and self.token_valid

    # -- Test helpers -------------------------------------------------------

    def edit(self, document_id: str, blocks: list[Paragraph]) -> None:
        """Replace the document content as a remote user would."""
        chars: list[_Char] = []
        for block in blocks:
            for run in block.runs:
                for ch in run.text:
                    c = _Char(ch)
                    c.bold, c.italic = run.bold, run.italic
                    chars.append(c)
            newline = _Char("\n")
            if block.heading_level:
                newline.named = f"HEADING_{block.heading_level}"
            newline.indent = 36 if block.indented else 0
            chars.append(newline)
        chars.append(_Char("\n"))
        self.documents[document_id] = chars
        self.revisions[document_id] += 1

    def _chars(self, document_id: str) -> list[_Char]:
        if document_id not in self.documents:
            raise DocumentStoreError(
                f"Document {document_id} not found", status_code=404
            )
        return self.documents[document_id]


def _apply(chars: list[_Char], request: dict[str, Any]) -> None:
    if "insertText" in request:
        body = request["insertText"]
        pos = body["location"]["index"] - 1
        chars[pos:pos] = [_Char(ch) for ch in body["text"]]
    elif "deleteContentRange" in request:
        rng = request["deleteContentRange"]["range"]
        del chars[rng["startIndex"] - 1 : rng["endIndex"] - 1]
    elif "updateParagraphStyle" in request:
        body = request["updateParagraphStyle"]
        rng = body["range"]
        style = body["paragraphStyle"]
        for c in chars[rng["startIndex"] - 1 : rng["endIndex"] - 1]:
            if c.text == "\n":
                c.named = style["namedStyleType"]
                c.indent = style["indentStart"]["magnitude"]
    elif "updateTextStyle" in request:
        body = request["updateTextStyle"]
        rng = body["range"]
        for c in chars[rng["startIndex"] - 1 : rng["endIndex"] - 1]:
            c.bold = body["textStyle"]["bold"]
            c.italic = body["textStyle"]["italic"]
    else:
        raise ValueError(f"Unsupported request: {sorted(request)}")


def _to_paragraphs(chars: list[_Char]) -> list[Paragraph]:
    paragraphs: list[Paragraph] = []
    runs: list[StyledRun] = []
    for c in chars:
        if c.text != "\n":
            if runs and runs[-1].bold == c.bold and runs[-1].italic == c.italic:
                prev = runs.pop()
                runs.append(
                    StyledRun(text=prev.text + c.text, bold=c.bold, italic=c.italic)
                )
            else:
                runs.append(StyledRun(text=c.text, bold=c.bold, italic=c.italic))
            continue
        level = None
        if c.named.startswith("HEADING_"):
            level = int(c.named[len("HEADING_"):])
        style = None
        if level is not None or c.indent > 0:
            style = ParagraphStyle(heading_level=level, indented=c.indent > 0)
        paragraphs.append(Paragraph(runs=runs, style=style))
        runs = []
    return paragraphs


class FakeTokenProvider:
    """Token provider returning a fixed token, or refusing when *fail*."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = 0

    def get_valid_token(self) -> str:
        self.calls += 1
        if self.fail:
            raise AuthenticationError("refresh token revoked")
        return "test-token"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def token_provider() -> FakeTokenProvider:
    return FakeTokenProvider()


@pytest.fixture
def engine(store, token_provider, tmp_path) -> SyncEngine:
    return SyncEngine(
        store=store,
        token_provider=token_provider,
        metadata=MetadataStore(),
        settings=Settings(vault_root=str(tmp_path)),
    )


@pytest.fixture
def make_folder(tmp_path):
    """Factory creating a folder populated from a ``{relpath: text}`` dict."""

    def _make(name: str, files: dict[str, str]) -> Path:
        folder = tmp_path / name
        folder.mkdir(parents=True, exist_ok=True)
        for rel, text in files.items():
            target = folder / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        return folder

    return _make


@pytest.fixture
def failing_token_provider() -> FakeTokenProvider:
    return FakeTokenProvider(fail=True)
