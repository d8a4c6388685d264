# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Declares the three Clarity tools with their input schemas, plus the
#   /health route, and builds the ASGI app that serves them over streamable
#   HTTP.  Each tool is a thin wrapper around core/adapter.py.
#
# HOW IT WORKS (the flow):
#   1. An MCP client POSTs (or GETs) /mcp
#   2. FastMCP validates the arguments against the tool's schema
#   3. The decorated function below delegates to ClarityToolAdapter
#   4. The adapter POSTs to the Clarity API and returns JSON text
#   5. FastMCP wraps that text as {"content": [{"type": "text", ...}]}
#
# ROUTES:
#   GET|POST /mcp      MCP streamable HTTP (GET opens the SSE stream of a session)
#   GET      /health   {"status", "service", "hasToken"}
#
# RUNNING THIS SERVER:
#   a) python main.py
#   b) python -m tools.mcp_server
# =============================================================================

from datetime import datetime
import json
import logging
import sys
from typing import Annotated, Any, Callable, Optional, Union

import httpx
import uvicorn
from fastmcp import FastMCP
from pydantic import Field
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from core.adapter import ClarityToolAdapter
from core.clarity_client import ClarityClient
from core.config import SERVICE_NAME, SERVICE_VERSION, Settings, load_settings

MCP_PATH = "/mcp"
HEALTH_PATH = "/health"

# =============================================================================
# Logging Setup
# =============================================================================
# Log lines go to STDERR.  Colours:
#     CYAN    incoming tool calls (name + parameters)
#     GREEN   responses (compact JSON)
#     YELLOW  status/progress messages
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log the tool response as compact JSON in GREEN, then return it."""
    compact = json.dumps(json.loads(text), separators=(",", ":"), ensure_ascii=False)
    logger.info(f"{_GREEN}  ← {tool_name} response: {compact}{_RESET}")
    return text


# =============================================================================
# Server factory
# =============================================================================
def create_server(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastMCP:
    """Build the FastMCP server with the three Clarity tools and /health.

    Args:
        settings: Process configuration (token, base URL).
        transport: httpx transport for upstream calls; tests pass a
                   MockTransport, production leaves it as None.
        clock: Current-time source for the recordings window defaults.

    Returns:
        A configured FastMCP instance.
    """
    adapter = ClarityToolAdapter(ClarityClient(settings, transport=transport), clock=clock)
    mcp = FastMCP(SERVICE_NAME, version=SERVICE_VERSION)

    # -------------------------------------------------------------------------
    # TOOL 1: query-analytics-dashboard
    # -------------------------------------------------------------------------
    @mcp.tool(
        name="query-analytics-dashboard",
        description=(
            "Retrieves analytics data and metrics from your Clarity project dashboard "
            "using a simplified natural language search query. Use this to get traffic "
            "stats, user behavior metrics, and performance data."
        ),
    )
    async def query_analytics_dashboard(
        query: Annotated[str, Field(description=(
            "Natural language query for analytics data (e.g., \"show me bounce rate "
            "for the last 7 days\", \"top pages by sessions this month\")"
        ))],
        timezone: Annotated[Optional[str], Field(description=(
            "Timezone for the query (defaults to UTC). Example: \"America/New_York\""
        ))] = None,
    ) -> str:
        _log_request("query-analytics-dashboard", query=query, timezone=timezone)
        text = await adapter.query_analytics_dashboard(query=query, timezone=timezone)
        return _log_response("query-analytics-dashboard", text)

    # -------------------------------------------------------------------------
    # TOOL 2: list-session-recordings
    # -------------------------------------------------------------------------
    @mcp.tool(
        name="list-session-recordings",
        description=(
            "Retrieves a list of session recordings from your Clarity project with "
            "advanced filtering options. Filter by device type, browser, OS, location, "
            "URL patterns, and more. Dates must be in ISO 8601 format (YYYY-MM-DD or "
            "YYYY-MM-DDTHH:mm:ss.sssZ)."
        ),
    )
    async def list_session_recordings(
        start: Annotated[Optional[str], Field(description=(
            "Start date in ISO 8601 format (defaults to 2 days ago). "
            "Example: \"2024-01-01\" or \"2024-01-01T00:00:00.000Z\""
        ))] = None,
        end: Annotated[Optional[str], Field(description=(
            "End date in ISO 8601 format (defaults to now). "
            "Example: \"2024-01-31\" or \"2024-01-31T23:59:59.999Z\""
        ))] = None,
        filters: Annotated[Optional[dict[str, Any]], Field(description=(
            "Filters object with keys like \"deviceType\", \"browser\", \"os\", "
            "\"country\", \"url\". Example: {\"deviceType\": \"Mobile\", \"country\": \"US\"}"
        ))] = None,
        sortBy: Annotated[Optional[str], Field(description=(
            "Sort field (e.g., \"sessionStart\", \"duration\"). Defaults to \"sessionStart\""
        ))] = None,
        count: Annotated[Optional[Union[int, float]], Field(description=(
            "Number of recordings to retrieve (max 100, defaults to 10)"
        ))] = None,
    ) -> str:
        _log_request(
            "list-session-recordings",
            start=start, end=end, filters=filters, sortBy=sortBy, count=count,
        )
        _log_status(f"Fetching recordings from {start or '2 days ago'} to {end or 'now'}")
        text = await adapter.list_session_recordings(
            start=start, end=end, filters=filters, sort_by=sortBy, count=count,
        )
        return _log_response("list-session-recordings", text)

    # -------------------------------------------------------------------------
    # TOOL 3: query-documentation-resources
    # -------------------------------------------------------------------------
    @mcp.tool(
        name="query-documentation-resources",
        description=(
            "Retrieves snippets from Microsoft Clarity documentation to find answers to "
            "user questions. Use this to get help with setup, troubleshooting, feature "
            "explanations, and best practices."
        ),
    )
    async def query_documentation_resources(
        query: Annotated[str, Field(description=(
            "Natural language question about Clarity (e.g., \"how do I install Clarity "
            "on WordPress?\", \"what are heatmaps?\", \"how to filter rage clicks?\")"
        ))],
    ) -> str:
        _log_request("query-documentation-resources", query=query)
        text = await adapter.query_documentation_resources(query=query)
        return _log_response("query-documentation-resources", text)

    # -------------------------------------------------------------------------
    # Liveness
    # -------------------------------------------------------------------------
    @mcp.custom_route(HEALTH_PATH, methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "healthy",
            "service": SERVICE_NAME,
            "hasToken": settings.has_token,
        })

    return mcp


def create_app(mcp: FastMCP) -> Starlette:
    """Wrap the server in a streamable-HTTP ASGI app with open CORS.

    Session-tracking mode: stateless mode mounts /mcp for POST and DELETE
    only, and GET must reach the MCP handler too.
    """
    cors = Middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        allow_credentials=False,
    )
    return mcp.http_app(path=MCP_PATH, middleware=[cors], stateless_http=False)


def run(settings: Settings) -> None:
    """Bind settings.host:settings.port and serve until interrupted."""
    app = create_app(create_server(settings))

    base = f"http://localhost:{settings.port}"
    logger.info(f"Microsoft Clarity MCP Server running on port {settings.port}")
    logger.info(f"API Token: {'Configured' if settings.has_token else 'Missing'}")
    logger.info(f"Health check: {base}{HEALTH_PATH}")
    logger.info(f"MCP endpoint: {base}{MCP_PATH}")

    uvicorn.run(app, host=settings.host, port=settings.port, log_level="warning")


# =============================================================================
# Server entry point
# =============================================================================
if __name__ == "__main__":
    configure_logging()
    run(load_settings())
