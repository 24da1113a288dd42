"""Background simulation runner thread."""

import logging
import threading
import time
from typing import Any, Dict, Optional

from sparkling.config import engine as engine_defaults
from sparkling.config.simulation_config import SimulationConfig
from sparkling.simulation import SimulationEngine

logger = logging.getLogger(__name__)

STATUS_LOG_INTERVAL = 5.0  # wall-clock seconds


class SimulationRunner:
    """Ticks a :class:`SimulationEngine` at a fixed rate in a daemon thread.

    Readers take :attr:`lock` so snapshots never observe a half-applied tick.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        engine: Optional[SimulationEngine] = None,
        tick_dt: float = engine_defaults.DEFAULT_TICK_DT,
    ):
        self.engine = engine if engine is not None else SimulationEngine(config)
        self.tick_dt = tick_dt
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self.lock = threading.Lock()

        self.last_status_time = time.time()
        self.status_tick_count = 0
        self.current_actual_tps = 0.0

    def setup(self) -> None:
        with self.lock:
            if not self.engine.is_setup:
                self.engine.setup()

    def start(self) -> None:
        """Start ticking in a background thread."""
        if not self.running:
            self.setup()
            self.running = True
            self.thread = threading.Thread(target=self._run_loop, name="simulation-runner", daemon=True)
            self.thread.start()

    def stop(self) -> None:
        """Stop the loop and release the engine's inference service."""
        self.running = False
        if self.thread:
            self.thread.join(timeout=2.0)
            self.thread = None
        self.engine.shutdown()

    def step(self, ticks: int = 1) -> None:
        """Advance synchronously; used when the loop is not running."""
        self.setup()
        with self.lock:
            for _ in range(ticks):
                self.engine.update(self.tick_dt)

    def _run_loop(self) -> None:
        logger.info("Simulation loop: Starting")
        next_tick_time = time.time()

        try:
            while self.running:
                next_tick_time += self.tick_dt
                with self.lock:
                    try:
                        self.engine.update(self.tick_dt)
                    except Exception as e:
                        logger.error("Simulation loop: Error at tick %d: %s", self.engine.tick_count, e, exc_info=True)

                self.status_tick_count += 1
                now = time.time()
                if now - self.last_status_time >= STATUS_LOG_INTERVAL:
                    self.current_actual_tps = self.status_tick_count / (now - self.last_status_time)
                    self.status_tick_count = 0
                    self.last_status_time = now
                    self._log_status()

                sleep_time = next_tick_time - time.time()
                if sleep_time > 0:
                    time.sleep(sleep_time)
                elif sleep_time < -0.1:
                    # Too far behind; resync instead of running zero-delay ticks
                    next_tick_time = time.time()
        finally:
            logger.info("Simulation loop: Ended after %d ticks", self.engine.tick_count)

    def _log_status(self) -> None:
        with self.lock:
            stats = self.engine.get_stats()
        logger.info(
            "Simulation status TPS=%.1f, Live=%d, Food=%.0f, Energy=%.0f, Inferences=%d",
            self.current_actual_tps,
            stats["live"],
            stats["world_food"],
            stats["world_neural_energy"],
            stats["inference"]["total"],
        )

    # Read-only accessors

    def get_state(self, include_cells: bool = True) -> Dict[str, Any]:
        with self.lock:
            return self.engine.snapshot(include_cells=include_cells)

    def get_sparkling(self, sparkling_id: int) -> Optional[Dict[str, Any]]:
        with self.lock:
            sparkling = self.engine.get_sparkling(sparkling_id)
            if sparkling is None:
                return None
            return sparkling.to_snapshot(include_memory=True)

    def get_stats(self) -> Dict[str, Any]:
        with self.lock:
            return self.engine.get_stats()

    def get_inference_metrics(self) -> Dict[str, Any]:
        metrics = self.engine.service.metrics.to_dict()
        metrics["strategy"] = self.engine.service.strategy_name
        return metrics

    def get_status(self) -> Dict[str, Any]:
        with self.lock:
            return {
                "tick": self.engine.tick_count,
                "time": self.engine.world.current_time,
                "population": len(self.engine.sparklings),
                "live": self.engine.live_count(),
                "running": self.running,
                "strategy": self.engine.service.strategy_name,
            }
