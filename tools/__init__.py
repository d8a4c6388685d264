# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP server that exposes the Clarity tools.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP clients and core/.  It:
#     1. Declares each tool's name, description and typed parameters
#     2. Delegates the call to core.adapter.ClarityToolAdapter
#     3. Logs the request/response pair
#     4. Serves everything (plus /health) as an ASGI app
#
#   It holds no Clarity-specific logic of its own.
# =============================================================================
