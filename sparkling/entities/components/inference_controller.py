"""Per-sparkling inference pacing: IDLE → PREPARING → THINKING → PROCESSING → IDLE.

The controller owns the inference status machine and the pending future for
the current run. The future is only inspected here, at a fixed point of the
owner's update, so results are applied on the simulation thread.

A monotonically increasing generation number is bumped on every dispatch and
on every timeout. A result is applied only if its generation still matches,
which guarantees at-most-once application even when a late result arrives
after the timeout already moved the status on.
"""

import logging
import threading
from concurrent.futures import Future
from typing import Optional, Tuple

from sparkling.config import inference as inference_defaults
from sparkling.inference.service import InferenceService
from sparkling.inference.types import InferenceResult
from sparkling.protocols import InferenceHost
from sparkling.state_machine import InferenceStatus, create_inference_state_machine

logger = logging.getLogger(__name__)


class InferenceController:
    """Drives one sparkling's reasoning runs.

    Attributes:
        energy_cost: Neural energy deducted on dispatch
        thinking_timeout: Simulation seconds before THINKING gives up
        last_inference_time: Simulation time the last run returned to IDLE
        last_reasoning: Reasoning text of the last applied result
    """

    def __init__(
        self,
        sparkling_id: int,
        service: Optional[InferenceService],
        energy_cost: float = inference_defaults.INFERENCE_ENERGY_COST,
        thinking_timeout: float = inference_defaults.THINKING_TIMEOUT,
    ) -> None:
        self._sparkling_id = sparkling_id
        self._service = service
        self._machine = create_inference_state_machine()
        self._pending: Optional[Tuple[int, "Future[InferenceResult]", threading.Event]] = None
        self._generation = 0
        self.energy_cost = energy_cost
        self.thinking_timeout = thinking_timeout
        self.last_inference_time = 0.0
        self.last_reasoning = ""
        self.last_success: Optional[bool] = None
        self.last_changes = ""

    @property
    def status(self) -> InferenceStatus:
        return self._machine.state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def time_in_status(self, now: float) -> float:
        return self._machine.time_in_state(now)

    def update(self, now: float, host: InferenceHost) -> None:
        """Advance the status machine by one tick."""
        status = self._machine.state

        if status is InferenceStatus.IDLE:
            params = host.parameters
            if (
                self._service is not None
                and host.neural_energy >= params.inference_threshold
                and now - self.last_inference_time >= params.inference_interval
            ):
                self._machine.transition(InferenceStatus.PREPARING, now, "energy threshold reached")

        elif status is InferenceStatus.PREPARING:
            if self.time_in_status(now) >= inference_defaults.PREPARING_DURATION:
                self._dispatch(now, host)

        elif status is InferenceStatus.THINKING:
            if self._drain(host):
                self._machine.transition(InferenceStatus.PROCESSING, now, "result received")
            elif self.time_in_status(now) >= self.thinking_timeout:
                self._time_out(host)
                self._machine.transition(InferenceStatus.PROCESSING, now, "timeout")

        elif status is InferenceStatus.PROCESSING:
            if self.time_in_status(now) >= inference_defaults.PROCESSING_DURATION:
                self._machine.transition(InferenceStatus.IDLE, now, "processing complete")
                self.last_inference_time = now

    def _dispatch(self, now: float, host: InferenceHost) -> None:
        self._machine.transition(InferenceStatus.THINKING, now, "dispatch")
        host.spend_neural_energy(self.energy_cost)
        self._generation += 1
        superseded = threading.Event()
        if self._service is None:
            future = Future()
            future.set_result(InferenceResult.failure("No inference service attached.", error="no_service"))
            self._pending = (self._generation, future, superseded)
            return
        logger.debug("Sparkling %d starting inference (generation %d)", self._sparkling_id, self._generation)
        try:
            future = self._service.dispatch(host.build_inference_context(), superseded)
        except RuntimeError as e:
            logger.error("Could not dispatch inference for sparkling %d: %s", self._sparkling_id, e)
            future = Future()
            future.set_result(InferenceResult.failure(f"Inference dispatch failed: {e}", error=str(e)))
        self._pending = (self._generation, future, superseded)

    def _drain(self, host: InferenceHost) -> bool:
        """Apply a completed result for the current generation; True if one was consumed."""
        if self._pending is None:
            return False
        generation, future, _ = self._pending
        if not future.done():
            return False
        self._pending = None

        if generation != self._generation:
            logger.debug("Discarding stale inference result for sparkling %d", self._sparkling_id)
            return False

        error = future.exception()
        if error is not None:
            logger.error("Inference for sparkling %d raised: %s", self._sparkling_id, error)
            result = InferenceResult.failure(f"Inference error: {error}", error=str(error))
        else:
            result = future.result()

        self._apply(result, host)
        return True

    def _time_out(self, host: InferenceHost) -> None:
        logger.warning(
            "Inference for sparkling %d timed out after %.1fs", self._sparkling_id, self.thinking_timeout
        )
        self._generation += 1
        if self._pending is not None:
            _, _, superseded = self._pending
            superseded.set()
        if self._service is not None:
            self._service.metrics.record_timeout(
                self._sparkling_id, self._service.strategy_name, self.thinking_timeout
            )
        self._pending = None
        self._apply(InferenceResult.failure("Inference timed out before a result arrived.", error="timeout"), host)

    def _apply(self, result: InferenceResult, host: InferenceHost) -> None:
        self.last_changes = host.apply_inference_result(result)
        self.last_success = result.success
        self.last_reasoning = result.reasoning
        if result.success:
            logger.info("Sparkling %d inference applied: %s", self._sparkling_id, self.last_changes)
        else:
            logger.warning("Sparkling %d inference failed: %s", self._sparkling_id, result.reasoning)

    def abandon(self) -> None:
        """Forget any in-flight run (used when the owner fades out)."""
        if self._pending is not None:
            self._pending[2].set()
            self._generation += 1
            self._pending = None

    def to_dict(self, now: float) -> dict:
        return {
            "status": self.status.value,
            "timer": self.time_in_status(now),
            "generation": self._generation,
            "last_inference_time": self.last_inference_time,
            "last_reasoning": self.last_reasoning,
            "last_success": self.last_success,
            "last_changes": self.last_changes,
        }
