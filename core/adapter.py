# =============================================================================
# core/adapter.py  —  The Three Clarity Operations
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Implements query-analytics-dashboard, list-session-recordings and
#   query-documentation-resources as plain async methods.  tools/mcp_server.py
#   only declares the MCP schemas and delegates here.
#
# CALL CONTRACT:
#   Every method returns JSON TEXT and NEVER raises for upstream problems.
#     success  →  the upstream JSON, pretty-printed
#     failure  →  {"error": "<message>", <every input parameter, null if omitted>}
#   A failed upstream call is still a successful tool call at the protocol
#   level; the failure travels inside the payload.
# =============================================================================

from datetime import datetime
import logging
from typing import Any, Callable, Optional, Union

from core.clarity_client import ClarityClient
from core.models import (
    DashboardQuery,
    DocumentationQuery,
    RecordingsQuery,
    UpstreamCall,
)

logger = logging.getLogger(__name__)


class ClarityToolAdapter:
    """Maps tool inputs onto Clarity API calls and wraps the outcome."""

    def __init__(
        self,
        client: ClarityClient,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            client: Upstream client bound to the process Settings.
            clock: Returns the current UTC time; used for the recordings
                   window defaults.  Defaults to the wall clock.
        """
        self._client = client
        self._clock = clock

    async def _run(self, tool_name: str, call: UpstreamCall, echo: dict[str, Any]) -> str:
        result = await self._client.execute(call)
        if not result.ok:
            logger.error("[%s] Error: %s", tool_name, result.error)
        return result.to_text(echo)

    async def query_analytics_dashboard(self, query: str, timezone: Optional[str] = None) -> str:
        request = DashboardQuery(query=query, timezone=timezone)
        return await self._run(
            "query-analytics-dashboard", request.to_upstream_call(), request.echo()
        )

    async def list_session_recordings(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        filters: Optional[dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        count: Optional[Union[int, float]] = None,
    ) -> str:
        request = RecordingsQuery(
            start=start, end=end, filters=filters, sort_by=sort_by, count=count
        )
        now = self._clock() if self._clock else None
        return await self._run(
            "list-session-recordings", request.to_upstream_call(now), request.echo()
        )

    async def query_documentation_resources(self, query: str) -> str:
        request = DocumentationQuery(query=query)
        return await self._run(
            "query-documentation-resources", request.to_upstream_call(), request.echo()
        )
