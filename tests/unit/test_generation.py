"""Unit tests for the generation service client."""

import asyncio
import json

import httpx
import pytest

from docforge.interfaces.publisher import GenerationError
from docforge.strategies.backends.generation import GenerationApiFiller
from docforge.strategies.template_engine.models import FillRequest


@pytest.fixture
def fill_request():
    """Create a fill request."""
    return FillRequest(
        ba_content="Users can reset their password.",
        template_structure="<p><<content_goes_here>></p>",
        original_storage_format="<p><br/></p>",
        placeholders=["{{SUMMARY}}"],
        selected_model="sonar",
    )


def make_handler(statuses, result=None, start=None):
    """Build a transport handler that walks through job statuses."""
    calls = {"start": 0, "status": 0, "result": 0, "payload": None}
    queue = list(statuses)

    def handler(request):
        match request.url.path:
            case "/api/generate-full-confluence-doc":
                calls["start"] += 1
                calls["payload"] = json.loads(request.content)
                return httpx.Response(200, json=start if start is not None else {"job_id": "job-1"})
            case "/api/generate-status":
                calls["status"] += 1
                assert request.url.params["job_id"] == "job-1"
                return httpx.Response(200, json=queue.pop(0) if queue else {"status": "running"})
            case "/api/generate-result":
                calls["result"] += 1
                return httpx.Response(200, json=result)
        return httpx.Response(404)

    return handler, calls


def make_filler(handler, max_attempts=5):
    return GenerationApiFiller(
        base_url="http://generator.local",
        poll_interval=0,
        max_attempts=max_attempts,
        transport=httpx.MockTransport(handler),
    )


class TestFillRequest:
    """Test suite for the request payload."""

    def test_payload_uses_wire_names(self, fill_request):
        payload = fill_request.to_payload()

        assert payload["selectedModel"] == "sonar"
        assert "selected_model" not in payload
        assert payload["placeholders"] == ["{{SUMMARY}}"]

    def test_alias_accepted(self):
        request = FillRequest(
            ba_content="x", template_structure="", original_storage_format="", selectedModel="m"
        )
        assert request.selected_model == "m"


class TestGenerationApiFiller:
    """Test suite for GenerationApiFiller."""

    def test_job_completes(self, fill_request):
        """Test a job that finishes after a few polls."""
        handler, calls = make_handler(
            [{"status": "running", "progress_message": "Writing"}, {"status": "done"}],
            result={
                "result": {
                    "success": True,
                    "full_storage_format": "<p>Filled</p>",
                    "suggested_title": "Password Reset",
                }
            },
        )

        document = asyncio.run(make_filler(handler).fill(fill_request))

        assert document.storage_format == "<p>Filled</p>"
        assert document.suggested_title == "Password Reset"
        assert calls["status"] == 2
        assert calls["payload"]["selectedModel"] == "sonar"
        assert calls["payload"]["ba_content"] == "Users can reset their password."

    def test_string_result(self, fill_request):
        handler, _ = make_handler([{"status": "done"}], result={"result": "<p>Plain</p>"})

        document = asyncio.run(make_filler(handler).fill(fill_request))

        assert document.storage_format == "<p>Plain</p>"
        assert document.suggested_title is None

    def test_missing_job_id(self, fill_request):
        """Test the service error is surfaced when no job starts."""
        handler, calls = make_handler([], start={"error": "quota exceeded"})

        with pytest.raises(GenerationError, match="quota exceeded"):
            asyncio.run(make_filler(handler).fill(fill_request))

        assert calls["status"] == 0

    def test_job_error(self, fill_request):
        handler, calls = make_handler([{"status": "error", "error": "model crashed"}])

        with pytest.raises(GenerationError, match="model crashed"):
            asyncio.run(make_filler(handler).fill(fill_request))

        assert calls["result"] == 0

    def test_job_times_out(self, fill_request):
        """Test giving up after the configured number of checks."""
        handler, calls = make_handler([])

        with pytest.raises(GenerationError, match="did not finish"):
            asyncio.run(make_filler(handler, max_attempts=3).fill(fill_request))

        assert calls["status"] == 3

    def test_unsuccessful_result(self, fill_request):
        handler, _ = make_handler(
            [{"status": "done"}], result={"result": {"success": False, "error": "bad template"}}
        )

        with pytest.raises(GenerationError, match="bad template"):
            asyncio.run(make_filler(handler).fill(fill_request))

    def test_empty_document(self, fill_request):
        handler, _ = make_handler(
            [{"status": "done"}], result={"result": {"success": True, "full_storage_format": ""}}
        )

        with pytest.raises(GenerationError, match="empty document"):
            asyncio.run(make_filler(handler).fill(fill_request))

    def test_http_error(self, fill_request):
        filler = make_filler(lambda request: httpx.Response(503, text="down"))

        with pytest.raises(GenerationError):
            asyncio.run(filler.fill(fill_request))
