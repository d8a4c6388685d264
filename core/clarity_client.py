# =============================================================================
# core/clarity_client.py  —  Clarity API HTTP Client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Sends one UpstreamCall to the Microsoft Clarity API and returns its JSON.
#
#     post()     raises ClarityAPIError / httpx.HTTPError / ValueError
#     execute()  never raises; folds every failure into an UpstreamResult
#
# REQUEST SHAPE:
#   POST {base_url}{endpoint_path}
#   Content-Type: application/json
#   Authorization: Bearer <CLARITY_API_TOKEN>
#   body: UpstreamCall.request_body as JSON
#
# Each call opens its own httpx.AsyncClient, so concurrent tool calls share
# nothing but the read-only Settings.  No retries, no timeout override.
#
# TIMEOUTS:
#   httpx applies its default of 5 seconds per connect/read/write/pool phase.
#   A slow natural-language dashboard query that takes longer than that comes
#   back as {"error": "..."}.
#
# RESPONSE DECODING:
#   Bodies are decoded as strict JSON.  NaN / Infinity / -Infinity are
#   rejected, so every payload handed to the caller is valid JSON text.
# =============================================================================

import json
import logging
from typing import Any, Optional

import httpx

from core.config import Settings
from core.models import UpstreamCall, UpstreamResult

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Clarity API returned non-standard JSON constant {name}")


class ClarityAPIError(Exception):
    """The Clarity API answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Clarity API error ({status_code}): {body}")


class ClarityClient:
    """Thin async wrapper around the Clarity API's POST endpoints."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            settings: Base URL and bearer token.
            transport: Optional httpx transport (tests pass an
                       httpx.MockTransport here).
        """
        self._settings = settings
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._settings.api_token or ''}",
        }

    def url_for(self, call: UpstreamCall) -> str:
        return f"{self._settings.base_url}{call.endpoint_path}"

    async def post(self, call: UpstreamCall) -> Any:
        """Issue the POST and return the decoded JSON body.

        Raises:
            ClarityAPIError: Non-success HTTP status.
            httpx.HTTPError: Connection-level failure (DNS, refused, timeout).
            ValueError: A success response whose body is not strict JSON.
        """
        url = self.url_for(call)
        logger.debug("POST %s body=%s", url, call.request_body)

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                url,
                json=call.request_body,
                headers=self._headers(),
            )

        if not response.is_success:
            raise ClarityAPIError(response.status_code, response.text)

        return json.loads(response.text, parse_constant=_reject_constant)

    async def execute(self, call: UpstreamCall) -> UpstreamResult:
        """Like post(), but every failure becomes UpstreamResult.failure()."""
        try:
            data = await self.post(call)
        except (ClarityAPIError, httpx.HTTPError, ValueError) as e:
            message = str(e) or e.__class__.__name__
            logger.debug("Upstream call to %s failed: %s", call.endpoint_path, message)
            return UpstreamResult.failure(message)
        return UpstreamResult.success(data)
