"""Google Docs REST client and the document store contract it fulfils."""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol

import requests

from ..document import Paragraph, ParagraphStyle, RemoteDocument, StyledRun
from .errors import AuthenticationError, DocumentStoreError

logger = logging.getLogger(__name__)

DOCS_API_URL = "https://docs.googleapis.com/v1"
TOKENINFO_URL = "https://www.googleapis.com/oauth2/v3/tokeninfo"
DOCUMENT_URL_TEMPLATE = "https://docs.google.com/document/d/{id}/edit"


class DocumentStore(Protocol):
    """Remote store holding one flat document per linked folder."""

    def set_access_token(self, token: str) -> None: ...

    def create_document(self, title: str) -> RemoteDocument: ...

    def get_document(self, document_id: str) -> RemoteDocument: ...

    def apply_mutations(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> str | None: ...

    def clear_document(self, document_id: str) -> None: ...

    def document_url(self, document_id: str) -> str: ...

    def validate_token(self) -> bool: ...


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def _parse_paragraph(paragraph: dict[str, Any]) -> Paragraph:
    runs: list[StyledRun] = []
    for element in paragraph.get("elements", []):
        if "textRun" in element:
            text_run = element["textRun"]
            style = text_run.get("textStyle") or {}
            runs.append(
                StyledRun(
                    text=text_run.get("content", "").replace("\x0b", " "),
                    bold=bool(style.get("bold")),
                    italic=bool(style.get("italic")),
                )
            )
        elif "horizontalRule" in element:
            runs.append(StyledRun(text="---"))

    if runs:
        last = runs[-1]
        runs[-1] = StyledRun(
            text=last.text.rstrip("\n"), bold=last.bold, italic=last.italic
        )
    runs = [run for run in runs if run.text]

    para_style = paragraph.get("paragraphStyle") or {}
    named = para_style.get("namedStyleType", "")
    level = None
    if named.startswith("HEADING_"):
        suffix = named[len("HEADING_"):]
        if suffix.isdigit() and 1 <= int(suffix) <= 6:
            level = int(suffix)
    indent = (para_style.get("indentStart") or {}).get("magnitude") or 0

    style = None
    if level is not None or indent > 0:
        style = ParagraphStyle(heading_level=level, indented=indent > 0)
    return Paragraph(runs=runs, style=style)


def parse_document(payload: dict[str, Any]) -> RemoteDocument:
    """Convert a ``documents.get`` JSON payload into a RemoteDocument.

    Only paragraphs are kept; tables, section breaks and other structural
    elements are ignored.
    """
    content = (payload.get("body") or {}).get("content") or []
    blocks = [
        _parse_paragraph(element["paragraph"])
        for element in content
        if "paragraph" in element
    ]
    return RemoteDocument(
        id=payload.get("documentId", ""),
        revision=payload.get("revisionId", ""),
        title=payload.get("title", ""),
        blocks=blocks,
    )


def document_end_index(payload: dict[str, Any]) -> int:
    """Return the end index of the last structural element (1 if empty)."""
    content = (payload.get("body") or {}).get("content") or []
    if not content:
        return 1
    return content[-1].get("endIndex", 1)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GoogleDocsClient:
    """Thread-safe Google Docs client (one ``requests.Session`` per thread).

    Args:
        base_url: API root, overridable for tests.
        timeout: ``(connect, read)`` timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = DOCS_API_URL,
        timeout: tuple[int, int] = (10, 60),
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._thread_local = threading.local()
        self._token: str | None = None

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = requests.Session()
        return self._thread_local.session

    def set_access_token(self, token: str) -> None:
        self._token = token

    def _request(
        self, method: str, url: str, **kwargs: Any
    ) -> dict[str, Any]:
        if not self._token:
            raise AuthenticationError("No access token set")
        headers = {"Authorization": f"Bearer {self._token}"}
        try:
            response = self._get_session().request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise DocumentStoreError(f"{method} {url} failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Access refused ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )
        if not response.ok:
            raise DocumentStoreError(
                f"{method} {url} returned {response.status_code}: "
                f"{response.text}",
                status_code=response.status_code,
            )
        return response.json() if response.content else {}

    def _get_raw(self, document_id: str) -> dict[str, Any]:
        return self._request("GET", f"{self.base_url}/documents/{document_id}")

    def create_document(self, title: str) -> RemoteDocument:
        """Create an empty document titled *title*."""
        payload = self._request(
            "POST", f"{self.base_url}/documents", json={"title": title}
        )
        logger.info("Created document %s", payload.get("documentId"))
        return parse_document(payload)

    def get_document(self, document_id: str) -> RemoteDocument:
        return parse_document(self._get_raw(document_id))

    def apply_mutations(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> str | None:
        """Send one ``batchUpdate``.

        Returns:
            The revision reported by the API after the update, if any.
        """
        if not requests:
            return None
        payload = self._request(
            "POST",
            f"{self.base_url}/documents/{document_id}:batchUpdate",
            json={"requests": requests},
        )
        logger.debug(
            "Applied %d requests to %s", len(requests), document_id
        )
        return (payload.get("writeControl") or {}).get("requiredRevisionId")

    def clear_document(self, document_id: str) -> None:
        """Delete all content but the mandatory trailing newline."""
        end_index = document_end_index(self._get_raw(document_id))
        if end_index > 2:
            self.apply_mutations(
                document_id,
                [
                    {
                        "deleteContentRange": {
                            "range": {
                                "startIndex": 1,
                                "endIndex": end_index - 1,
                            }
                        }
                    }
                ],
            )

    def document_url(self, document_id: str) -> str:
        return DOCUMENT_URL_TEMPLATE.format(id=document_id)

    def validate_token(self) -> bool:
        """Return ``True`` if the current access token is accepted."""
        if not self._token:
            return False
        try:
            response = self._get_session().get(
                TOKENINFO_URL,
                params={"access_token": self._token},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Token validation request failed: %s", e)
            return False
        return response.ok
