# =============================================================================
# main.py  —  Entry Point for the Clarity MCP Server
# =============================================================================
#
# HOW TO RUN:
#   python main.py                 (or the `clarity-mcp-server` script)
#
# WHAT HAPPENS:
#   1. Logging is configured (stderr)
#   2. .env.local / .env are loaded and frozen into a Settings value
#   3. The FastMCP server is built with the three Clarity tools
#   4. uvicorn binds PORT (default 3000) and serves /mcp and /health
# =============================================================================

from core.config import load_settings
from tools.mcp_server import configure_logging, run


def main() -> None:
    configure_logging()
    run(load_settings())


if __name__ == "__main__":
    main()
