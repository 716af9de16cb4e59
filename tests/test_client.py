"""Tests for the Google Docs client and response parsing."""

from unittest.mock import MagicMock, Mock

import pytest
import requests

from gdoc_sync.core.client import (
    GoogleDocsClient,
    document_end_index,
    parse_document,
)
from gdoc_sync.core.errors import AuthenticationError, DocumentStoreError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _text(content, bold=False, italic=False):
    style = {}
    if bold:
        style["bold"] = True
    if italic:
        style["italic"] = True
    return {"textRun": {"content": content, "textStyle": style}}


def _paragraph(*elements, named="NORMAL_TEXT", indent=None, end=10):
    style = {"namedStyleType": named}
    if indent is not None:
        style["indentStart"] = {"magnitude": indent, "unit": "PT"}
    return {
        "endIndex": end,
        "paragraph": {"elements": list(elements), "paragraphStyle": style},
    }


def _payload(*content):
    return {
        "documentId": "doc-1",
        "revisionId": "rev-9",
        "title": "proj",
        "body": {"content": [{"sectionBreak": {}, "endIndex": 1}, *content]},
    }


def _response(status=200, json_data=None, text=""):
    response = Mock()
    response.status_code = status
    response.ok = 200 <= status < 400
    response.text = text
    response.content = b"{}" if json_data is not None else b""
    response.json.return_value = json_data
    return response


@pytest.fixture
def client():
    client = GoogleDocsClient(base_url="https://docs.test/v1")
    client.set_access_token("token")
    session = MagicMock()
    client._get_session = lambda: session
    return client, session


# ---------------------------------------------------------------------------
# parse_document
# ---------------------------------------------------------------------------


class TestParseDocument:
    def test_metadata(self):
        doc = parse_document(_payload())
        assert (doc.id, doc.revision, doc.title) == ("doc-1", "rev-9", "proj")
        assert doc.blocks == []

    def test_heading_and_runs(self):
        doc = parse_document(
            _payload(
                _paragraph(_text("Title\n"), named="HEADING_2"),
                _paragraph(_text("plain "), _text("bold\n", bold=True)),
            )
        )
        heading, body = doc.blocks
        assert heading.heading_level == 2
        assert heading.text == "Title"
        assert [(r.text, r.bold) for r in body.runs] == [
            ("plain ", False),
            ("bold", True),
        ]

    def test_trailing_newline_only_run_dropped(self):
        doc = parse_document(
            _payload(_paragraph(_text("word", italic=True), _text("\n")))
        )
        [block] = doc.blocks
        assert [(r.text, r.italic) for r in block.runs] == [("word", True)]

    def test_indent_and_vertical_tab(self):
        doc = parse_document(
            _payload(_paragraph(_text("a\x0bb\n"), indent=36))
        )
        [block] = doc.blocks
        assert block.indented is True
        assert block.text == "a b"

    def test_horizontal_rule(self):
        doc = parse_document(
            _payload(_paragraph({"horizontalRule": {}}, _text("\n")))
        )
        assert doc.blocks[0].text == "---"

    def test_title_style_is_body_text(self):
        doc = parse_document(_payload(_paragraph(_text("x\n"), named="TITLE")))
        assert doc.blocks[0].style is None

    def test_end_index(self):
        assert document_end_index(_payload(_paragraph(_text("x\n"), end=42))) == 42
        assert document_end_index({}) == 1


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequests:
    def test_requires_token(self):
        with pytest.raises(AuthenticationError):
            GoogleDocsClient().get_document("doc-1")

    def test_get_document(self, client):
        docs, session = client
        session.request.return_value = _response(json_data=_payload())

        doc = docs.get_document("doc-1")

        assert doc.id == "doc-1"
        method, url = session.request.call_args[0]
        assert (method, url) == ("GET", "https://docs.test/v1/documents/doc-1")
        headers = session.request.call_args[1]["headers"]
        assert headers == {"Authorization": "Bearer token"}

    def test_create_document(self, client):
        docs, session = client
        session.request.return_value = _response(json_data=_payload())

        docs.create_document("proj")

        assert session.request.call_args[1]["json"] == {"title": "proj"}

    def test_apply_mutations(self, client):
        docs, session = client
        session.request.return_value = _response(
            json_data={"writeControl": {"requiredRevisionId": "rev-10"}}
        )
        requests_ = [{"insertText": {"location": {"index": 1}, "text": "x\n"}}]

        assert docs.apply_mutations("doc-1", requests_) == "rev-10"
        _, url = session.request.call_args[0]
        assert url.endswith("/documents/doc-1:batchUpdate")
        assert session.request.call_args[1]["json"] == {"requests": requests_}

    def test_apply_nothing(self, client):
        docs, session = client
        assert docs.apply_mutations("doc-1", []) is None
        session.request.assert_not_called()

    def test_clear_document(self, client):
        docs, session = client
        session.request.side_effect = [
            _response(json_data=_payload(_paragraph(_text("abc\n"), end=5))),
            _response(json_data={}),
        ]

        docs.clear_document("doc-1")

        body = session.request.call_args[1]["json"]
        assert body == {
            "requests": [
                {"deleteContentRange": {"range": {"startIndex": 1, "endIndex": 4}}}
            ]
        }

    def test_clear_empty_document(self, client):
        docs, session = client
        session.request.return_value = _response(
            json_data=_payload(_paragraph(_text("\n"), end=2))
        )

        docs.clear_document("doc-1")

        assert session.request.call_count == 1

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors(self, client, status):
        docs, session = client
        session.request.return_value = _response(status=status, text="denied")
        with pytest.raises(AuthenticationError) as exc:
            docs.get_document("doc-1")
        assert exc.value.status_code == status

    def test_server_error(self, client):
        docs, session = client
        session.request.return_value = _response(status=500, text="oops")
        with pytest.raises(DocumentStoreError) as exc:
            docs.get_document("doc-1")
        assert exc.value.status_code == 500

    def test_network_error(self, client):
        docs, session = client
        session.request.side_effect = requests.ConnectionError("down")
        with pytest.raises(DocumentStoreError, match="down"):
            docs.get_document("doc-1")

    def test_document_url(self):
        url = GoogleDocsClient().document_url("abc")
        assert url == "https://docs.google.com/document/d/abc/edit"


class TestValidateToken:
    def test_valid(self, client):
        docs, session = client
        session.get.return_value = _response(json_data={})
        assert docs.validate_token() is True

    def test_refused(self, client):
        docs, session = client
        session.get.return_value = _response(status=400)
        assert docs.validate_token() is False

    def test_no_token(self):
        assert GoogleDocsClient().validate_token() is False

    def test_network_failure(self, client):
        docs, session = client
        session.get.side_effect = requests.Timeout("slow")
        assert docs.validate_token() is False


def test_sessions_are_per_thread():
    import threading

    docs = GoogleDocsClient()
    main_session = docs._get_session()
    other = []
    thread = threading.Thread(target=lambda: other.append(docs._get_session()))
    thread.start()
    thread.join()
    assert docs._get_session() is main_session
    assert other[0] is not main_session
