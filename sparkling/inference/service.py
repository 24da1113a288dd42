"""Inference service: strategy selection, dispatch and metrics.

The service is constructed explicitly by whoever owns the simulation and
passed to each sparkling. Dispatch never blocks the simulation tick:

- the local strategy runs inline and returns an already-completed future
- the remote strategy runs on an asyncio loop owned by the service in a
  daemon thread; dispatch returns a ``concurrent.futures.Future`` at once

Results are applied only by the owning sparkling when it drains the future
during its own update.
"""

import asyncio
import logging
import threading
import time
from concurrent.futures import Future
from typing import Optional

import httpx

from sparkling.config.simulation_config import VALID_STRATEGIES, InferenceConfig
from sparkling.exceptions import ConfigurationError
from sparkling.inference.local import LocalRuleStrategy
from sparkling.inference.metrics import InferenceMetrics
from sparkling.inference.remote import RemoteStrategy
from sparkling.inference.types import InferenceContext, InferenceResult

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT = 5.0


class InferenceService:
    """Owns the active strategy, the remote loop thread and the metrics.

    Attributes:
        config: Inference configuration in effect
        metrics: Counters and recent-run buffer
    """

    def __init__(
        self,
        config: Optional[InferenceConfig] = None,
        metrics: Optional[InferenceMetrics] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or InferenceConfig()
        self.metrics = metrics or InferenceMetrics(self.config.recent_buffer_size)
        self._transport = transport
        self._local = LocalRuleStrategy()
        self._remote: Optional[RemoteStrategy] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.strategy_name = self._resolve_strategy(self.config)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def _resolve_strategy(self, config: InferenceConfig) -> str:
        if config.strategy not in VALID_STRATEGIES:
            raise ConfigurationError(f"unknown inference strategy {config.strategy!r}")
        if config.strategy == "remote" and not config.has_credentials:
            logger.warning(
                "Remote inference selected without a credential or relay endpoint; using local strategy"
            )
            return "local"
        logger.info("Inference strategy: %s", config.strategy)
        return config.strategy

    def reconfigure(self, config: InferenceConfig) -> None:
        """Swap configuration; the remote client is rebuilt on next use."""
        strategy = self._resolve_strategy(config)
        self._close_remote()
        self.config = config
        self.strategy_name = strategy

    @property
    def is_remote(self) -> bool:
        return self.strategy_name == "remote"

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self, context: InferenceContext, superseded: Optional[threading.Event] = None
    ) -> "Future[InferenceResult]":
        """Start an inference run for ``context`` without blocking.

        The caller sets ``superseded`` once it stops waiting for the run. A
        remote result that lands afterwards is counted as discarded rather
        than as a completed run.
        """
        logger.debug("Dispatching %s inference for sparkling %d", self.strategy_name, context.sparkling_id)
        if not self.is_remote:
            return self._run_local(context)

        loop = self._ensure_loop()
        return asyncio.run_coroutine_threadsafe(self._run_remote(context, superseded), loop)

    def infer_now(self, context: InferenceContext, timeout: Optional[float] = None) -> InferenceResult:
        """Blocking convenience wrapper used by tools and tests."""
        return self.dispatch(context).result(timeout=timeout)

    def _run_local(self, context: InferenceContext) -> "Future[InferenceResult]":
        future: "Future[InferenceResult]" = Future()
        started = time.perf_counter()
        result = self._local.infer(context)
        result.latency = time.perf_counter() - started
        self._record(context, result)
        future.set_result(result)
        return future

    async def _run_remote(
        self, context: InferenceContext, superseded: Optional[threading.Event] = None
    ) -> InferenceResult:
        remote = self._get_remote()
        result = await remote.infer(context)
        if superseded is not None and superseded.is_set():
            logger.debug("Late inference result for sparkling %d discarded", context.sparkling_id)
            self.metrics.record_discarded()
        else:
            self._record(context, result)
        return result

    def _record(self, context: InferenceContext, result: InferenceResult) -> None:
        self.metrics.record(
            sparkling_id=context.sparkling_id,
            strategy=result.strategy or self.strategy_name,
            success=result.success,
            latency=result.latency,
            reasoning=result.reasoning,
            parameter_count=len(result.parameters),
            error=result.error,
        )

    def _get_remote(self) -> RemoteStrategy:
        if self._remote is None:
            self._remote = RemoteStrategy(self.config, transport=self._transport)
        return self._remote

    # ------------------------------------------------------------------
    # Loop thread lifecycle
    # ------------------------------------------------------------------

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._loop.run_forever, name="sparkling-inference", daemon=True
                )
                self._thread.start()
                logger.debug("Inference loop thread started")
            return self._loop

    def _close_remote(self) -> None:
        remote, self._remote = self._remote, None
        if remote is not None and self._loop is not None:
            asyncio.run_coroutine_threadsafe(remote.close(), self._loop).result(SHUTDOWN_TIMEOUT)

    def shutdown(self) -> None:
        """Close the remote client and stop the loop thread."""
        self._close_remote()
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is not None:
            loop.call_soon_threadsafe(loop.stop)
            if thread is not None:
                thread.join(SHUTDOWN_TIMEOUT)
            loop.close()
            logger.debug("Inference loop thread stopped")

    def __enter__(self) -> "InferenceService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
