# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains the Clarity adapter logic:
#
#     config.py          Settings, read once from the environment
#     models.py          per-call values (tool inputs, UpstreamCall/Result)
#     clarity_client.py  the single outbound POST
#     adapter.py         the three tool operations
#
# Nothing in this package imports FastMCP or Starlette.  The MCP layer lives
# in tools/ and only delegates here.
# =============================================================================
