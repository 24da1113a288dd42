"""Explicit state machines for sparkling behavior and inference.

Every state is enumerated and every legal transition is declared up front,
so an illegal move is reported immediately instead of silently producing
an inconsistent sparkling:

    machine = create_behavior_state_machine()
    result = machine.try_transition(BehaviorState.RESTING, at=now, reason="tired")
    if result.is_err():
        logger.warning("Rejected transition: %s", result.error)

Two machines run side by side on every sparkling. The behavior machine
drives movement and collection; the inference machine paces reasoning
runs. They are independent so a slow inference never stalls movement.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Generic, List, TypeVar

from sparkling.result import Err, Ok, Result

S = TypeVar("S", bound=Enum)


@dataclass
class StateTransition(Generic[S]):
    """Record of a transition, kept when history tracking is on.

    Attributes:
        from_state: State before the transition
        to_state: State after the transition
        at: Simulation time of the transition
        reason: Short free-text cause
    """

    from_state: S
    to_state: S
    at: float
    reason: str = ""


class StateMachine(Generic[S]):
    """Generic state machine with declared transitions.

    Attributes:
        state: Current state (read only)
        entered_at: Simulation time the current state was entered
    """

    def __init__(
        self,
        initial_state: S,
        valid_transitions: Dict[S, List[S]],
        track_history: bool = False,
        max_history: int = 50,
    ) -> None:
        if initial_state not in valid_transitions:
            raise ValueError(
                f"Initial state {initial_state} not in valid_transitions. "
                f"Valid states: {list(valid_transitions.keys())}"
            )
        self._state = initial_state
        self._transitions = valid_transitions
        self._track_history = track_history
        self._max_history = max_history
        self._history: List[StateTransition[S]] = []
        self.entered_at = 0.0

    @property
    def state(self) -> S:
        return self._state

    @property
    def history(self) -> List[StateTransition[S]]:
        return self._history.copy()

    def can_transition(self, target: S) -> bool:
        return target in self._transitions.get(self._state, [])

    def try_transition(self, target: S, at: float = 0.0, reason: str = "") -> Result[S, str]:
        """Move to ``target`` if the transition is declared.

        Returns:
            Ok(target) on success, Err(message) when the move is illegal
        """
        if not self.can_transition(target):
            valid_targets = self._transitions.get(self._state, [])
            return Err(
                f"Invalid transition: {self._state.name} -> {target.name}. "
                f"Valid targets from {self._state.name}: {[t.name for t in valid_targets]}"
            )
        self._enter(target, at, reason)
        return Ok(target)

    def transition(self, target: S, at: float = 0.0, reason: str = "") -> S:
        """Like :meth:`try_transition` but raises ``ValueError`` on an illegal move."""
        result = self.try_transition(target, at, reason)
        if result.is_err():
            raise ValueError(result.error)
        return result.unwrap()

    def force_state(self, state: S, at: float = 0.0, reason: str = "forced") -> None:
        """Set the state without validation (tests and restores only)."""
        self._enter(state, at, f"[FORCED] {reason}")

    def time_in_state(self, now: float) -> float:
        return now - self.entered_at

    def get_valid_transitions(self) -> List[S]:
        return list(self._transitions.get(self._state, []))

    def is_terminal(self) -> bool:
        return not self._transitions.get(self._state)

    def _enter(self, target: S, at: float, reason: str) -> None:
        previous = self._state
        self._state = target
        self.entered_at = at
        if self._track_history:
            self._history.append(StateTransition(previous, target, at, reason))
            if len(self._history) > self._max_history:
                self._history = self._history[-self._max_history :]

    def __repr__(self) -> str:
        return f"StateMachine(state={self._state.name})"


# ============================================================================
# Behavior
# ============================================================================


class BehaviorState(Enum):
    """What a sparkling is currently doing."""

    IDLE = "idle"
    EXPLORING = "exploring"
    SEEKING_FOOD = "seeking_food"
    SEEKING_ENERGY = "seeking_energy"
    COLLECTING = "collecting"
    RESTING = "resting"
    COMPETING = "competing"
    FADING = "fading"


MOVING_STATES = frozenset(
    {BehaviorState.EXPLORING, BehaviorState.SEEKING_FOOD, BehaviorState.SEEKING_ENERGY}
)

BEHAVIOR_TRANSITIONS: Dict[BehaviorState, List[BehaviorState]] = {
    BehaviorState.IDLE: [BehaviorState.EXPLORING, BehaviorState.FADING],
    BehaviorState.EXPLORING: [
        BehaviorState.SEEKING_FOOD,
        BehaviorState.SEEKING_ENERGY,
        BehaviorState.RESTING,
        BehaviorState.FADING,
    ],
    BehaviorState.SEEKING_FOOD: [
        BehaviorState.EXPLORING,
        BehaviorState.COLLECTING,
        BehaviorState.FADING,
    ],
    BehaviorState.SEEKING_ENERGY: [
        BehaviorState.EXPLORING,
        BehaviorState.COLLECTING,
        BehaviorState.FADING,
    ],
    BehaviorState.COLLECTING: [
        BehaviorState.SEEKING_FOOD,
        BehaviorState.SEEKING_ENERGY,
        BehaviorState.EXPLORING,
        BehaviorState.COMPETING,
        BehaviorState.FADING,
    ],
    BehaviorState.RESTING: [BehaviorState.EXPLORING, BehaviorState.FADING],
    BehaviorState.COMPETING: [BehaviorState.COLLECTING, BehaviorState.FADING],
    BehaviorState.FADING: [],
}


def create_behavior_state_machine(track_history: bool = False) -> StateMachine[BehaviorState]:
    return StateMachine(
        initial_state=BehaviorState.EXPLORING,
        valid_transitions=BEHAVIOR_TRANSITIONS,
        track_history=track_history,
    )


# ============================================================================
# Inference
# ============================================================================


class InferenceStatus(Enum):
    """Progress of the current reasoning run."""

    IDLE = "idle"
    PREPARING = "preparing"
    THINKING = "thinking"
    PROCESSING = "processing"


INFERENCE_TRANSITIONS: Dict[InferenceStatus, List[InferenceStatus]] = {
    InferenceStatus.IDLE: [InferenceStatus.PREPARING],
    InferenceStatus.PREPARING: [InferenceStatus.THINKING],
    InferenceStatus.THINKING: [InferenceStatus.PROCESSING],
    InferenceStatus.PROCESSING: [InferenceStatus.IDLE],
}


def create_inference_state_machine(track_history: bool = False) -> StateMachine[InferenceStatus]:
    return StateMachine(
        initial_state=InferenceStatus.IDLE,
        valid_transitions=INFERENCE_TRANSITIONS,
        track_history=track_history,
    )
