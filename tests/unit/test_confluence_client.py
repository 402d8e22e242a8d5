"""Unit tests for the Confluence backend."""

import asyncio
import json
import re

import httpx
import pytest

from docforge.interfaces.backend import BackendError, DiagramUploadError
from docforge.interfaces.diagram import DiagramRecord
from docforge.strategies.backends.confluence import (
    DIAGRAM_UPLOAD_HEADERS,
    ConfluenceClient,
    clean_title,
    extract_page_id,
    parse_error_body,
)

BASE_URL = "https://wiki.example.com"


def make_client(handler, **kwargs):
    return ConfluenceClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


class TestExtractPageId:
    """Test suite for page id extraction."""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://wiki.example.com/spaces/DOC/pages/12345/Template", "12345"),
            ("https://wiki.example.com/pages/viewpage.action?pageId=678", "678"),
            ("https://wiki.example.com/x/999", "999"),
            ("4242", "4242"),
            ("  4242 ", "4242"),
            ("https://wiki.example.com/display/DOC/Home", None),
            ("", None),
        ],
    )
    def test_extract(self, url, expected):
        assert extract_page_id(url) == expected


class TestCleanTitle:
    """Test suite for title cleanup."""

    def test_control_characters_removed(self):
        assert clean_title("Release\x00 \x07Notes") == "Release Notes"

    def test_mojibake_to_ascii(self):
        assert clean_title("Teamâ€™s â€œPlanâ€") == "Team's \"Plan\""

    def test_whitespace_collapsed(self):
        assert clean_title("  a \n\t b  ") == "a b"

    def test_empty_falls_back(self):
        assert clean_title("   ").startswith("Generated Document - ")


class TestParseErrorBody:
    """Test suite for Confluence error messages."""

    def test_message_and_errors(self):
        body = json.dumps(
            {
                "message": "Invalid page",
                "errors": [{"field": "title", "message": "A page with this title already exists"}, "oops"],
            }
        )
        assert parse_error_body(400, "Bad Request", body) == (
            "Invalid page\n\nDetailed errors:\n"
            "title: A page with this title already exists\n"
            "Unknown field: oops"
        )

    def test_raw_body(self):
        assert parse_error_body(500, "Server Error", "<html>boom</html>") == (
            "HTTP 500: Server Error\n\nRaw error: <html>boom</html>"
        )

    def test_empty_body(self):
        assert parse_error_body(503, "Service Unavailable", "") == "HTTP 503: Service Unavailable"


class TestConfluenceClient:
    """Test suite for ConfluenceClient."""

    def test_fetch_page(self):
        """Test fetching a page with its storage body."""
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["expand"] = request.url.params.get("expand")
            return httpx.Response(
                200,
                json={
                    "id": "12345",
                    "title": "Template",
                    "body": {"storage": {"value": "<p>{{A}}</p>"}, "view": {"value": "<p>A</p>"}},
                },
            )

        page = asyncio.run(make_client(handler).fetch_page("12345"))

        assert seen == {"path": "/rest/api/content/12345", "expand": "body.storage,body.view"}
        assert page.page_id == "12345"
        assert page.title == "Template"
        assert page.storage_body == "<p>{{A}}</p>"
        assert page.view_body == "<p>A</p>"

    def test_fetch_page_not_found(self):
        client = make_client(lambda request: httpx.Response(404, text="missing"))

        with pytest.raises(BackendError) as exc_info:
            asyncio.run(client.fetch_page("1"))

        assert exc_info.value.status_code == 404

    def test_fetch_page_requires_id(self):
        client = make_client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(ValueError):
            asyncio.run(client.fetch_page(""))

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BackendError):
            asyncio.run(make_client(handler).fetch_page("1"))

    def test_create_page(self):
        """Test the page creation payload and headers."""
        seen = {}

        def handler(request):
            seen["headers"] = request.headers
            seen["payload"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "id": "777",
                    "title": seen["payload"]["title"],
                    "_links": {"webui": "/spaces/DOC/pages/777"},
                },
            )

        created = asyncio.run(
            make_client(handler).create_page("My  Doc", "<p>x</p>", "DOC", parent_id="55")
        )

        payload = seen["payload"]
        assert payload["type"] == "page"
        assert payload["space"] == {"key": "DOC"}
        assert payload["body"] == {"storage": {"value": "<p>x</p>", "representation": "storage"}}
        assert payload["ancestors"] == [{"id": "55"}]
        assert re.fullmatch(r"My Doc-\d{13}", payload["title"])
        assert seen["headers"]["x-atlassian-token"] == "no-check"
        assert created.page_id == "777"
        assert created.web_url == "https://wiki.example.com/spaces/DOC/pages/777"

    def test_create_page_without_timestamp(self):
        seen = {}

        def handler(request):
            seen["payload"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "1", "title": "Doc"})

        created = asyncio.run(
            make_client(handler, append_title_timestamp=False).create_page("Doc", "<p/>", "DOC")
        )

        assert seen["payload"]["title"] == "Doc"
        assert "ancestors" not in seen["payload"]
        assert created.web_url is None

    def test_create_page_error(self):
        """Test that Confluence error details reach the exception."""
        body = {"message": "Title exists", "errors": [{"field": "title", "message": "duplicate"}]}
        client = make_client(lambda request: httpx.Response(400, json=body))

        with pytest.raises(BackendError) as exc_info:
            asyncio.run(client.create_page("Doc", "<p/>", "DOC"))

        assert "Title exists" in str(exc_info.value)
        assert "title: duplicate" in str(exc_info.value)
        assert exc_info.value.status_code == 400

    def test_create_page_requires_space(self):
        client = make_client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(ValueError):
            asyncio.run(client.create_page("Doc", "<p/>", ""))

    def test_upload_diagram(self):
        """Test the diagram upload request."""
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["headers"] = request.headers
            seen["payload"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True})

        record = DiagramRecord(
            filename="k-tool-diagram-1",
            macro_id="111",
            source_code="graph TD; A-->B",
            vector_image="<svg/>",
            raster_image="cG5n",
        )
        asyncio.run(make_client(handler).upload_diagram(record, "777"))

        assert seen["path"] == "/rest/mermaidrest/1.0/mermaid/777"
        assert seen["payload"] == {
            "filename": "k-tool-diagram-1",
            "data": "graph TD; A-->B",
            "svg": "<svg/>",
            "png": "cG5n",
        }
        for name, value in DIAGRAM_UPLOAD_HEADERS.items():
            assert seen["headers"][name] == value

    def test_upload_diagram_rejected(self):
        client = make_client(lambda request: httpx.Response(500, text="boom"))
        record = DiagramRecord(filename="k-tool-diagram-1", macro_id="111", source_code="x")

        with pytest.raises(DiagramUploadError) as exc_info:
            asyncio.run(client.upload_diagram(record, "777"))

        assert str(exc_info.value) == "HTTP 500: boom"
