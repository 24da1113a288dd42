"""Fakes for exercising inference pacing without a real strategy."""

import threading
from concurrent.futures import Future
from typing import List, Optional

from sparkling.inference import InferenceContext, InferenceMetrics, InferenceResult
from sparkling.parameters import DecisionParameters


class PendingService:
    """Inference service stand-in whose futures are resolved by the test.

    Like the real remote path, a result that lands after the caller set
    ``superseded`` is counted as discarded and not as a run.
    """

    strategy_name = "pending"

    def __init__(self) -> None:
        self.metrics = InferenceMetrics()
        self.futures: List["Future[InferenceResult]"] = []
        self.contexts: List[InferenceContext] = []
        self.superseded: List[threading.Event] = []

    def dispatch(
        self, context: InferenceContext, superseded: Optional[threading.Event] = None
    ) -> "Future[InferenceResult]":
        future: "Future[InferenceResult]" = Future()
        superseded = superseded or threading.Event()
        future.add_done_callback(lambda f: self._finish(context, f, superseded))
        self.futures.append(future)
        self.contexts.append(context)
        self.superseded.append(superseded)
        return future

    def _finish(self, context: InferenceContext, future: "Future[InferenceResult]", superseded) -> None:
        if superseded.is_set():
            self.metrics.record_discarded()
            return
        success = future.exception() is None and future.result().success
        self.metrics.record(context.sparkling_id, self.strategy_name, success, latency=0.0)


class FailingService(PendingService):
    """Service whose dispatch fails outright, as after shutdown."""

    def dispatch(
        self, context: InferenceContext, superseded: Optional[threading.Event] = None
    ) -> "Future[InferenceResult]":
        raise RuntimeError("inference loop is closed")


class FakeHost:
    """Minimal inference host recording every applied result."""

    def __init__(self, neural_energy: float = 80.0, parameters: DecisionParameters = None) -> None:
        self.neural_energy = neural_energy
        self.parameters = parameters or DecisionParameters()
        self.applied: List[InferenceResult] = []

    def spend_neural_energy(self, amount: float) -> float:
        spent = min(amount, self.neural_energy)
        self.neural_energy -= spent
        return spent

    def build_inference_context(self) -> InferenceContext:
        return InferenceContext(
            sparkling_id=1,
            state="exploring",
            food=50.0,
            max_food=100.0,
            neural_energy=self.neural_energy,
            max_neural_energy=100.0,
            parameters=self.parameters.to_dict(),
        )

    def apply_inference_result(self, result: InferenceResult) -> str:
        self.applied.append(result)
        return "no changes" if not result.success else "applied"
