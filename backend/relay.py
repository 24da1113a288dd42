"""Server-side relay to the upstream messages API.

Browsers and other untrusted callers post the request body here; the relay
adds the credential and version headers and forwards it unchanged. The
caller never sees the key.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from sparkling.config.inference import ANTHROPIC_VERSION, DEFAULT_API_ENDPOINT, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

MISSING_KEY_ERROR = "API key not configured on server"
PROXY_ERROR = "Proxy server error"


class AnthropicRelay:
    """Forward message requests upstream with the server's credential.

    Upstream error responses are passed back with their original status and
    JSON body. Transport failures become a 500 with a ``Proxy server error``
    body. Nothing is retried; the calling client owns its retry policy.
    """

    def __init__(
        self,
        api_key: Optional[str],
        upstream_url: str = DEFAULT_API_ENDPOINT,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or ""
        self.upstream_url = upstream_url
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.forwarded = 0
        self.failed = 0

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
            logger.info("Relay client started for %s", self.upstream_url)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Relay client closed")

    def build_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    async def forward(self, payload: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        """Send ``payload`` upstream.

        Returns:
            Tuple of (HTTP status, JSON body) to return to the caller
        """
        if not self.configured:
            logger.error("Relay request rejected: no API key configured")
            return 500, {"error": MISSING_KEY_ERROR}

        await self.start()
        client = self._client
        if client is None:
            self.failed += 1
            logger.error("Relay client is not available")
            return 500, {"error": PROXY_ERROR, "message": "Relay client unavailable"}

        try:
            response = await client.post(self.upstream_url, json=payload, headers=self.build_headers())
        except httpx.HTTPError as e:
            self.failed += 1
            logger.error("Relay request failed: %s", e)
            return 500, {"error": PROXY_ERROR, "message": str(e) or type(e).__name__}

        try:
            body = response.json()
        except ValueError as e:
            self.failed += 1
            logger.error("Upstream returned a non-JSON body (HTTP %d)", response.status_code)
            return 500, {"error": PROXY_ERROR, "message": f"Invalid upstream response: {e}"}

        if response.is_error:
            self.failed += 1
            logger.warning("Upstream returned HTTP %d", response.status_code)
            return response.status_code, body

        self.forwarded += 1
        logger.debug("Relayed request upstream (HTTP %d)", response.status_code)
        return response.status_code, body
