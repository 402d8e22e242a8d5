"""Confluence REST backend.

Fetches template pages, creates pages from prepared documents and uploads
rendered diagrams to the mermaid-cloud plugin endpoint.
"""

import json
import logging
import re
import time
from datetime import date
from typing import Any

import httpx

from docforge.interfaces.backend import (
    BackendError,
    BaseContentBackend,
    CreatedPage,
    DiagramUploadError,
    PageContent,
)
from docforge.interfaces.diagram import DiagramRecord

logger = logging.getLogger(__name__)


_PAGE_ID_PATTERNS = (
    re.compile(r"/pages/(\d+)"),
    re.compile(r"pageId=(\d+)"),
    re.compile(r"/(\d+)$"),
)

_TITLE_CONTROL_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
# Titles are repaired to plain ASCII punctuation
_TITLE_MOJIBAKE = (
    ("â€™", "'"),
    ("â€œ", '"'),
    ("â€¦", "..."),
    ("â€", '"'),
)
_WHITESPACE = re.compile(r"\s+")

DIAGRAM_UPLOAD_HEADERS = {
    "Accept": "application/json, text/javascript, */*; q=0.01",
    "Content-Type": "application/json; charset=UTF-8",
    "X-Requested-With": "XMLHttpRequest",
}


def extract_page_id(url: str) -> str | None:
    """Pull a numeric page id out of a Confluence page URL.

    Recognizes ``/pages/<id>``, ``pageId=<id>`` and a trailing ``/<id>``.
    A bare numeric string is returned as is.
    """
    if not url:
        return None
    url = url.strip()
    if url.isdigit():
        return url
    for pattern in _PAGE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def clean_title(title: str) -> str:
    """Strip control characters and mojibake from a page title.

    Falls back to a dated generic title when nothing is left.
    """
    title = _TITLE_CONTROL_CHARS.sub("", title or "")
    for bad, good in _TITLE_MOJIBAKE:
        title = title.replace(bad, good)
    title = _WHITESPACE.sub(" ", title).strip()
    return title or f"Generated Document - {date.today().isoformat()}"


def parse_error_body(status_code: int, reason: str, body: str) -> str:
    """Build a readable message from a Confluence error response."""
    message = f"HTTP {status_code}: {reason}"
    try:
        data = json.loads(body)
    except ValueError:
        return f"{message}\n\nRaw error: {body}" if body else message

    if not isinstance(data, dict):
        return f"{message}\n\nRaw error: {body}"

    if data.get("message"):
        message = str(data["message"])

    errors = data.get("errors")
    if isinstance(errors, list) and errors:
        details = []
        for err in errors:
            if isinstance(err, dict):
                details.append(f"{err.get('field') or 'Unknown field'}: {err.get('message') or err}")
            else:
                details.append(f"Unknown field: {err}")
        message += "\n\nDetailed errors:\n" + "\n".join(details)

    return message


class ConfluenceClient(BaseContentBackend):
    """Async Confluence REST client.

    Attributes:
        base_url: Confluence root URL.
        content_path: Content REST path, ``/rest/api/content``.
        diagram_publish_path: Diagram upload path prefix.
    """

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        api_token: str | None = None,
        content_path: str = "/rest/api/content",
        diagram_publish_path: str = "/rest/mermaidrest/1.0/mermaid",
        timeout: float = 30.0,
        append_title_timestamp: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Confluence root URL.
            username: Basic-auth user, if the server needs credentials.
            api_token: Basic-auth password or API token.
            content_path: Content REST path.
            diagram_publish_path: Diagram upload path prefix.
            timeout: Per-request timeout in seconds.
            append_title_timestamp: Suffix created page titles with ``-<ms epoch>``.
            transport: Optional httpx transport, used by tests.
        """
        self._base_url = base_url.rstrip("/")
        self._auth = (username, api_token) if username and api_token else None
        self._content_path = "/" + content_path.strip("/")
        self._diagram_publish_path = "/" + diagram_publish_path.strip("/")
        self._timeout = timeout
        self._append_title_timestamp = append_title_timestamp
        self._transport = transport

        logger.info(f"ConfluenceClient initialized: base_url={self._base_url}")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            auth=self._auth,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}", exc_info=True)
            raise BackendError(f"Request to {path} failed: {e}") from e

    async def fetch_page(self, page_id: str) -> PageContent:
        if not page_id:
            raise ValueError("Page ID is required")

        path = f"{self._content_path}/{page_id}"
        response = await self._send(
            "GET",
            path,
            params={"expand": "body.storage,body.view"},
            headers={"Accept": "application/json"},
        )
        if not response.is_success:
            logger.error(f"Fetching page {page_id} failed: {response.status_code} {response.text}")
            raise BackendError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        data = response.json()
        body = data.get("body") or {}
        page = PageContent(
            page_id=str(data.get("id", page_id)),
            title=data.get("title", ""),
            storage_body=(body.get("storage") or {}).get("value", ""),
            view_body=(body.get("view") or {}).get("value", ""),
        )
        logger.info(f"Fetched page {page.page_id}: {page.title!r} ({len(page.storage_body)} chars)")
        return page

    async def create_page(
        self,
        title: str,
        document: str,
        space_key: str,
        parent_id: str | None = None,
    ) -> CreatedPage:
        if not space_key:
            raise ValueError("Space key is required")

        page_title = clean_title(title)
        if self._append_title_timestamp:
            page_title = f"{page_title}-{int(time.time() * 1000)}"

        payload: dict[str, Any] = {
            "type": "page",
            "title": page_title,
            "space": {"key": space_key},
            "body": {"storage": {"value": document, "representation": "storage"}},
        }
        if parent_id:
            payload["ancestors"] = [{"id": parent_id}]

        response = await self._send(
            "POST",
            self._content_path,
            json=payload,
            headers={
                "Content-Type": "application/json; charset=utf-8",
                "Accept": "application/json",
                "X-Atlassian-Token": "no-check",
            },
        )
        if not response.is_success:
            message = parse_error_body(response.status_code, response.reason_phrase, response.text)
            logger.error(f"Page creation failed: {message}")
            raise BackendError(message, status_code=response.status_code)

        data = response.json()
        web_ui = (data.get("_links") or {}).get("webui")
        created = CreatedPage(
            page_id=str(data["id"]),
            title=data.get("title", page_title),
            web_url=f"{self._base_url}{web_ui}" if web_ui else None,
        )
        logger.info(f"Created page {created.page_id}: {created.title!r}")
        return created

    async def upload_diagram(self, record: DiagramRecord, page_id: str) -> None:
        if not page_id:
            raise ValueError("Page ID is required")

        payload = {
            "filename": record.filename,
            "data": record.source_code,
            "svg": record.vector_image or "",
            "png": record.raster_image or "",
        }
        response = await self._send(
            "POST",
            f"{self._diagram_publish_path}/{page_id}",
            content=json.dumps(payload),
            headers=DIAGRAM_UPLOAD_HEADERS,
        )
        if not response.is_success:
            raise DiagramUploadError(response.status_code, response.text)
