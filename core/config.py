# =============================================================================
# core/config.py  —  Process Configuration
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reads the Clarity API token and the listen address from the environment
#   ONCE, at startup, and freezes them into a Settings value.  That value is
#   handed to the adapter and the server factory explicitly; nothing else in
#   the project reads os.environ.
#
# ENVIRONMENT VARIABLES:
#   CLARITY_API_TOKEN   Bearer token for the Clarity API (optional; calls fail
#                       upstream without it, the server still starts)
#   PORT                Listen port (default 3000)
#   HOST                Bind address (default 0.0.0.0)
#
# .env FILES:
#   .env.local is loaded first, then .env.  Neither overrides a variable that
#   is already set in the real environment.
# =============================================================================

from dataclasses import dataclass
import logging
import os
from typing import Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# The upstream API is fixed; only the credential varies per deployment.
CLARITY_API_BASE_URL = "https://clarity.microsoft.com/mcp"

SERVICE_NAME = "clarity-mcp-server"
SERVICE_VERSION = "1.0.0"

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"


@dataclass(frozen=True)
class Settings:
    """Read-only configuration shared by every tool invocation."""

    api_token: Optional[str] = None
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    base_url: str = CLARITY_API_BASE_URL

    @property
    def has_token(self) -> bool:
        return bool(self.api_token)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the process environment.

    Args:
        environ: Mapping to read instead of os.environ.  When given, .env
                 files are NOT loaded (used by tests).

    Returns:
        A frozen Settings value.

    Raises:
        ValueError: If PORT is set but is not an integer.
    """
    if environ is None:
        load_dotenv(".env.local")
        load_dotenv()
        environ = os.environ

    raw_port = environ.get("PORT") or str(DEFAULT_PORT)
    try:
        port = int(raw_port)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {raw_port!r}") from None

    settings = Settings(
        api_token=environ.get("CLARITY_API_TOKEN") or None,
        port=port,
        host=environ.get("HOST") or DEFAULT_HOST,
    )

    if not settings.has_token:
        logger.warning("CLARITY_API_TOKEN not set. API calls will fail.")

    return settings
