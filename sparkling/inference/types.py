"""Value types exchanged between sparklings and inference strategies."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class InferenceContext:
    """Snapshot of one sparkling handed to a strategy.

    Built on the simulation thread and never mutated afterwards, so it is
    safe to read from the inference loop thread.

    Attributes:
        sparkling_id: Owner id
        state: Behavior state name
        food: Current food reserve
        max_food: Food capacity
        neural_energy: Current neural energy reserve
        max_neural_energy: Neural energy capacity
        memories: Most recent entries per memory kind, as plain dicts
        latest_inference: Most recent inference memory, if any
        parameters: Current decision parameter values
        prompt: Rendered prompt text for text-generation strategies
    """

    sparkling_id: int
    state: str
    food: float
    max_food: float
    neural_energy: float
    max_neural_energy: float
    memories: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    latest_inference: Optional[Dict[str, Any]] = None
    parameters: Dict[str, float] = field(default_factory=dict)
    prompt: str = ""

    @property
    def food_ratio(self) -> float:
        return self.food / self.max_food if self.max_food > 0 else 0.0

    @property
    def energy_ratio(self) -> float:
        return self.neural_energy / self.max_neural_energy if self.max_neural_energy > 0 else 0.0

    def memory_count(self, kind: str) -> int:
        return len(self.memories.get(kind, []))


@dataclass
class InferenceResult:
    """Outcome of one inference run.

    Attributes:
        success: Whether a usable proposal was produced
        reasoning: Free text explanation or a diagnostic on failure
        parameters: Proposed parameter values (validated before use)
        strategy: Name of the strategy that produced the result
        latency: Wall-clock seconds spent
        error: Error description on failure
    """

    success: bool
    reasoning: str
    parameters: Dict[str, float] = field(default_factory=dict)
    strategy: str = ""
    latency: float = 0.0
    error: Optional[str] = None

    @classmethod
    def failure(cls, reasoning: str, *, strategy: str = "", error: Optional[str] = None) -> "InferenceResult":
        return cls(success=False, reasoning=reasoning, strategy=strategy, error=error or reasoning)
