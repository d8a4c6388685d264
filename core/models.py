# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# Every value here lives for exactly one tool call:
#
#     DashboardQuery / RecordingsQuery / DocumentationQuery   (tool input)
#                         │
#                         ▼  to_upstream_call()
#                   UpstreamCall    (endpoint path + JSON body)
#                         │
#                         ▼  ClarityClient.execute()
#                  UpstreamResult   (parsed JSON  OR  error message)
#
# The request dataclasses keep the caller's input exactly as given (None for
# omitted fields).  Defaults are applied only when the UpstreamCall is built,
# so a failure payload echoes every parameter as the caller sent it, with
# null for the ones left out.
# =============================================================================

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import json
from typing import Any, Optional, Union


# -----------------------------------------------------------------------------
# Upstream endpoint paths (relative to Settings.base_url)
# -----------------------------------------------------------------------------
DASHBOARD_QUERY_PATH = "/dashboard/query"
RECORDINGS_SAMPLE_PATH = "/recordings/sample"
DOCUMENTATION_QUERY_PATH = "/documentation/query"

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------
DEFAULT_TIMEZONE = "UTC"
DEFAULT_SORT_BY = "sessionStart"
DEFAULT_RECORDING_COUNT = 10
MAX_RECORDING_COUNT = 100
DEFAULT_LOOKBACK = timedelta(days=2)


def to_iso_timestamp(moment: datetime) -> str:
    """Format a datetime as UTC with millisecond precision and a Z suffix.

    >>> to_iso_timestamp(datetime(2024, 1, 31, 23, 59, 59, tzinfo=timezone.utc))
    '2024-01-31T23:59:59.000Z'
    """
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# -----------------------------------------------------------------------------
# UpstreamCall — what actually goes over the wire
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class UpstreamCall:
    """One POST to the Clarity API."""

    endpoint_path: str                 # "/dashboard/query"
    request_body: dict[str, Any] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# UpstreamResult — success value OR failure message, never both
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class UpstreamResult:
    """Outcome of an UpstreamCall.

    Exactly one of `data` / `error` is meaningful: when `error` is None the
    call succeeded and `data` holds the parsed JSON body (which may itself be
    null).
    """

    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any) -> "UpstreamResult":
        return cls(data=data)

    @classmethod
    def failure(cls, message: str) -> "UpstreamResult":
        return cls(error=message)

    def to_payload(self, echo: Optional[dict[str, Any]] = None) -> Any:
        """The JSON value handed back to the tool caller.

        On failure this is {"error": message, **echo}; on success it is the
        upstream JSON unchanged.
        """
        if self.ok:
            return self.data
        payload: dict[str, Any] = {"error": self.error}
        payload.update(echo or {})
        return payload

    def to_text(self, echo: Optional[dict[str, Any]] = None) -> str:
        """Pretty-printed (2-space) JSON text of to_payload()."""
        return json.dumps(self.to_payload(echo), indent=2, ensure_ascii=False)


# -----------------------------------------------------------------------------
# Tool inputs
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class DashboardQuery:
    """Input for query-analytics-dashboard."""

    query: str
    timezone: Optional[str] = None     # "America/New_York"; defaults to UTC

    def echo(self) -> dict[str, Any]:
        return {"query": self.query, "timezone": self.timezone}

    def to_upstream_call(self) -> UpstreamCall:
        return UpstreamCall(
            endpoint_path=DASHBOARD_QUERY_PATH,
            request_body={
                "query": self.query,
                "timezone": self.timezone or DEFAULT_TIMEZONE,
            },
        )


@dataclass(frozen=True)
class RecordingsQuery:
    """Input for list-session-recordings."""

    start: Optional[str] = None        # ISO 8601; defaults to now - 2 days
    end: Optional[str] = None          # ISO 8601; defaults to now
    filters: Optional[dict[str, Any]] = None
    sort_by: Optional[str] = None      # "sessionStart", "duration", ...
    count: Optional[Union[int, float]] = None  # defaults to 10, capped at 100

    def echo(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "filters": self.filters,
            "sortBy": self.sort_by,
            "count": self.count,
        }

    def resolved_count(self) -> Union[int, float]:
        # 0 counts as "not given", matching the upstream client's behaviour.
        return min(self.count or DEFAULT_RECORDING_COUNT, MAX_RECORDING_COUNT)

    def to_upstream_call(self, now: Optional[datetime] = None) -> UpstreamCall:
        """Resolve defaults against `now` (UTC wall clock when omitted)."""
        if now is None:
            now = datetime.now(timezone.utc)

        return UpstreamCall(
            endpoint_path=RECORDINGS_SAMPLE_PATH,
            request_body={
                "start": self.start or to_iso_timestamp(now - DEFAULT_LOOKBACK),
                "end": self.end or to_iso_timestamp(now),
                "filters": self.filters or {},
                "sortBy": self.sort_by or DEFAULT_SORT_BY,
                "count": self.resolved_count(),
            },
        )


@dataclass(frozen=True)
class DocumentationQuery:
    """Input for query-documentation-resources."""

    query: str

    def echo(self) -> dict[str, Any]:
        return {"query": self.query}

    def to_upstream_call(self) -> UpstreamCall:
        return UpstreamCall(
            endpoint_path=DOCUMENTATION_QUERY_PATH,
            request_body={"query": self.query},
        )
