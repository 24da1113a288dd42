"""Inference observability: counters, rolling latency and recent runs.

Metrics are written from both the simulation thread (local strategy) and the
inference loop thread (remote strategy), so every mutation takes the lock.
They never influence behavior.
"""

import threading
import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Deque, Dict, List, Optional

from sparkling.config.inference import RECENT_INFERENCE_BUFFER

LATENCY_WINDOW = 50


@dataclass
class InferenceRecord:
    sparkling_id: int
    strategy: str
    success: bool
    latency: float
    reasoning: str
    parameter_count: int
    wall_time: float
    error: Optional[str] = None


class InferenceMetrics:
    """Totals plus a bounded ring buffer of the most recent runs."""

    def __init__(self, buffer_size: int = RECENT_INFERENCE_BUFFER, latency_window: int = LATENCY_WINDOW) -> None:
        self._lock = threading.Lock()
        self._buffer_size = buffer_size
        self._latency_window = latency_window
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.total = 0
            self.successful = 0
            self.failed = 0
            self.timeouts = 0
            self.discarded = 0
            self._latencies: Deque[float] = deque(maxlen=self._latency_window)
            self._recent: Deque[InferenceRecord] = deque(maxlen=self._buffer_size)

    def record(
        self,
        sparkling_id: int,
        strategy: str,
        success: bool,
        latency: float,
        reasoning: str = "",
        parameter_count: int = 0,
        error: Optional[str] = None,
    ) -> None:
        with self._lock:
            self.total += 1
            if success:
                self.successful += 1
            else:
                self.failed += 1
            self._latencies.append(latency)
            self._recent.append(
                InferenceRecord(
                    sparkling_id=sparkling_id,
                    strategy=strategy,
                    success=success,
                    latency=latency,
                    reasoning=reasoning,
                    parameter_count=parameter_count,
                    wall_time=time.time(),
                    error=error,
                )
            )

    def record_timeout(self, sparkling_id: int, strategy: str, latency: float) -> None:
        """Count a run its owner gave up on as a failed run."""
        self.record(
            sparkling_id=sparkling_id,
            strategy=strategy,
            success=False,
            latency=latency,
            reasoning="Inference timed out before a result arrived.",
            error="timeout",
        )
        with self._lock:
            self.timeouts += 1

    def record_discarded(self) -> None:
        """A result arrived for a superseded inference generation."""
        with self._lock:
            self.discarded += 1

    @property
    def average_latency(self) -> float:
        with self._lock:
            if not self._latencies:
                return 0.0
            return sum(self._latencies) / len(self._latencies)

    def recent(self) -> List[InferenceRecord]:
        with self._lock:
            return list(self._recent)

    def to_dict(self) -> Dict[str, Any]:
        recent = [asdict(record) for record in self.recent()]
        with self._lock:
            counts = {
                "total": self.total,
                "successful": self.successful,
                "failed": self.failed,
                "timeouts": self.timeouts,
                "discarded": self.discarded,
            }
        counts["average_latency"] = self.average_latency
        counts["recent"] = recent
        return counts
