from datetime import datetime, timedelta, timezone
import json

import httpx
import pytest

from core.adapter import ClarityToolAdapter
from core.clarity_client import ClarityClient

FIXED_NOW = datetime(2024, 6, 1, 8, 0, 0, tzinfo=timezone.utc)


def _adapter(settings, transport, clock=None) -> ClarityToolAdapter:
    return ClarityToolAdapter(ClarityClient(settings, transport=transport), clock=clock)


def _parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.mark.asyncio
async def test_dashboard_returns_pretty_printed_upstream_json(settings, ok_transport) -> None:
    text = await _adapter(settings, ok_transport).query_analytics_dashboard("top pages")

    assert text == json.dumps({"rows": [1, 2, 3]}, indent=2)
    assert ok_transport.requests[0].url.path == "/mcp/dashboard/query"
    assert ok_transport.last_body == {"query": "top pages", "timezone": "UTC"}


@pytest.mark.asyncio
async def test_dashboard_forwards_explicit_timezone(settings, ok_transport) -> None:
    await _adapter(settings, ok_transport).query_analytics_dashboard(
        "sessions today", timezone="America/New_York"
    )

    assert ok_transport.last_body["timezone"] == "America/New_York"


@pytest.mark.asyncio
async def test_recordings_defaults_with_fixed_clock(settings, ok_transport) -> None:
    adapter = _adapter(settings, ok_transport, clock=lambda: FIXED_NOW)

    await adapter.list_session_recordings()

    assert ok_transport.requests[0].url.path == "/mcp/recordings/sample"
    assert ok_transport.last_body == {
        "start": "2024-05-30T08:00:00.000Z",
        "end": "2024-06-01T08:00:00.000Z",
        "filters": {},
        "sortBy": "sessionStart",
        "count": 10,
    }


@pytest.mark.asyncio
async def test_recordings_default_window_uses_wall_clock(settings, ok_transport) -> None:
    before = datetime.now(timezone.utc)
    await _adapter(settings, ok_transport).list_session_recordings()
    after = datetime.now(timezone.utc)

    body = ok_transport.last_body
    start, end = _parse_iso(body["start"]), _parse_iso(body["end"])
    # Millisecond truncation can put `end` up to 1ms before `before`.
    assert before - timedelta(milliseconds=1) <= end <= after
    assert abs((end - start) - timedelta(days=2)) < timedelta(seconds=1)


@pytest.mark.asyncio
@pytest.mark.parametrize("count, expected", [(None, 10), (37, 37), (500, 100), (37.5, 37.5)])
async def test_recordings_count_sent_upstream(settings, ok_transport, count, expected) -> None:
    await _adapter(settings, ok_transport).list_session_recordings(count=count)

    assert ok_transport.last_body["count"] == expected


@pytest.mark.asyncio
async def test_documentation_query(settings, ok_transport) -> None:
    text = await _adapter(settings, ok_transport).query_documentation_resources("what are heatmaps?")

    assert json.loads(text) == {"rows": [1, 2, 3]}
    assert ok_transport.requests[0].url.path == "/mcp/documentation/query"
    assert ok_transport.last_body == {"query": "what are heatmaps?"}


@pytest.mark.asyncio
async def test_dashboard_failure_is_reported_not_raised(settings, failing_transport) -> None:
    text = await _adapter(settings, failing_transport).query_analytics_dashboard("bounce rate")

    payload = json.loads(text)
    assert "500" in payload["error"]
    assert "server error" in payload["error"]
    assert payload["query"] == "bounce rate"


@pytest.mark.asyncio
async def test_recordings_failure_echoes_every_parameter(settings, failing_transport) -> None:
    filters = {"deviceType": "Mobile", "country": "US"}

    text = await _adapter(settings, failing_transport).list_session_recordings(
        start="2024-01-01", filters=filters, sort_by="duration", count=500,
    )

    assert json.loads(text) == {
        "error": "Clarity API error (500): server error",
        "start": "2024-01-01",
        "end": None,
        "filters": filters,
        "sortBy": "duration",
        "count": 500,
    }


@pytest.mark.asyncio
async def test_documentation_failure_echoes_query(settings, failing_transport) -> None:
    text = await _adapter(settings, failing_transport).query_documentation_resources("install?")

    assert json.loads(text) == {
        "error": "Clarity API error (500): server error",
        "query": "install?",
    }


@pytest.mark.asyncio
async def test_unreachable_upstream_collapses_to_error_field(settings, make_transport) -> None:
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("network unreachable", request=request)

    text = await _adapter(settings, make_transport(unreachable)).query_analytics_dashboard("q")

    payload = json.loads(text)
    assert set(payload) == {"error", "query", "timezone"}
    assert payload["timezone"] is None
    assert "network unreachable" in payload["error"]


@pytest.mark.asyncio
async def test_non_standard_json_constant_becomes_valid_error_text(settings, make_transport) -> None:
    def nan_body(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b'{"bounceRate": NaN}')

    text = await _adapter(settings, make_transport(nan_body)).query_analytics_dashboard("bounce")

    def strict(name: str):
        raise AssertionError(f"tool text contains {name}")

    payload = json.loads(text, parse_constant=strict)
    assert "NaN" in payload["error"]
    assert payload["query"] == "bounce"
