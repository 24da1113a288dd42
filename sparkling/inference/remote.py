"""Remote inference strategy backed by a text-generation messages API.

Requests go either straight to the upstream endpoint (credential sent in
``x-api-key``) or to a same-origin relay that injects the credential server
side. Failures never raise out of :meth:`RemoteStrategy.infer`; they become
failed :class:`InferenceResult` values.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from sparkling.config.inference import ANTHROPIC_VERSION, RETRY_DELAY, SYSTEM_INSTRUCTION
from sparkling.config.simulation_config import InferenceConfig
from sparkling.exceptions import InferenceError, ResponseParseError
from sparkling.inference.parsing import extract_text, parse_reasoning_response
from sparkling.inference.types import InferenceContext, InferenceResult

logger = logging.getLogger(__name__)

STRATEGY_NAME = "remote"


class RemoteStrategy:
    """Async client for the reasoning endpoint.

    Features:
    - Lazily created ``httpx.AsyncClient`` with connection pooling
    - Retries with exponential backoff on timeouts and connect errors
    - Non-2xx responses reported as failures without retrying
    """

    name = STRATEGY_NAME
    RETRY_DELAY = RETRY_DELAY

    def __init__(self, config: InferenceConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.request_timeout),
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
                transport=self._transport,
            )
            logger.debug("Remote inference client started (%s)", self.config.api_endpoint)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("Remote inference client closed")

    def build_request(self, context: InferenceContext) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "system": SYSTEM_INSTRUCTION,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "messages": [{"role": "user", "content": context.prompt}],
        }

    def build_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if not self.config.use_relay:
            headers["x-api-key"] = self.config.api_key
            headers["anthropic-version"] = ANTHROPIC_VERSION
        return headers

    async def _post(self, payload: Dict[str, Any], retries: int = 0) -> httpx.Response:
        """POST with retry on transient network errors.

        Raises:
            InferenceError: On a non-2xx status or after exhausting retries
        """
        await self.start()
        client = self._client
        if client is None:
            raise InferenceError("Reasoning client is not available")

        try:
            response = await client.post(
                self.config.api_endpoint, json=payload, headers=self.build_headers()
            )
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            raise InferenceError(
                f"HTTP {e.response.status_code} from reasoning endpoint: {e.response.text[:200]}"
            ) from e

        except (httpx.TimeoutException, httpx.ConnectError) as e:
            if retries < self.config.max_retries:
                delay = self.RETRY_DELAY * (2**retries)
                logger.warning(
                    "Inference request failed (%s), retrying in %.1fs... (attempt %d/%d)",
                    type(e).__name__,
                    delay,
                    retries + 1,
                    self.config.max_retries,
                )
                await asyncio.sleep(delay)
                return await self._post(payload, retries=retries + 1)
            raise InferenceError(
                f"Reasoning request failed after {self.config.max_retries} retries: {type(e).__name__}"
            ) from e

    async def infer(self, context: InferenceContext) -> InferenceResult:
        started = time.perf_counter()
        try:
            response = await self._post(self.build_request(context))
            try:
                body = response.json()
            except ValueError as e:
                raise ResponseParseError(f"response body is not JSON: {e}") from e

            parsed = parse_reasoning_response(extract_text(body))
            if parsed.is_err():
                raise ResponseParseError(parsed.error)
            result = parsed.unwrap()

        except InferenceError as e:
            logger.warning("Remote inference for sparkling %d failed: %s", context.sparkling_id, e)
            failed = InferenceResult.failure(
                f"Inference failed: {e}", strategy=self.name, error=str(e)
            )
            failed.latency = time.perf_counter() - started
            return failed

        except httpx.HTTPError as e:
            logger.error("Unexpected HTTP error during inference: %s", e, exc_info=True)
            failed = InferenceResult.failure(
                f"Inference error: {type(e).__name__}", strategy=self.name, error=str(e)
            )
            failed.latency = time.perf_counter() - started
            return failed

        return InferenceResult(
            success=True,
            reasoning=result.reasoning or "No reasoning provided.",
            parameters=result.parameters,
            strategy=self.name,
            latency=time.perf_counter() - started,
        )
