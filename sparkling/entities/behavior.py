"""Behavior controller: the per-tick state rules of a sparkling.

The controller owns the behavior state machine and decides, once per tick,
whether to explore, seek, collect, rest or compete. It never raises;
illegal transitions are logged and ignored.
"""

import logging
import random
from typing import Dict, Optional

from sparkling.config import sparklings as sparkling_defaults
from sparkling.entities.components.movement import MovementComponent
from sparkling.entities.components.perception import PerceptionComponent
from sparkling.entities.components.reserves import ResourceReserves
from sparkling.math_utils import Vector2
from sparkling.parameters import DecisionParameters
from sparkling.state_machine import (
    MOVING_STATES,
    BehaviorState,
    StateMachine,
    create_behavior_state_machine,
)

logger = logging.getLogger(__name__)

SEEKING_STATES = frozenset({BehaviorState.SEEKING_FOOD, BehaviorState.SEEKING_ENERGY})
STATIONARY_STATES = frozenset(
    {
        BehaviorState.IDLE,
        BehaviorState.RESTING,
        BehaviorState.COLLECTING,
        BehaviorState.COMPETING,
        BehaviorState.FADING,
    }
)


class BehaviorController:
    """Decides what a sparkling does next.

    Attributes:
        idle_time: How long the current IDLE or RESTING spell lasts
        home: Fallback destination when memory and senses come up empty
    """

    def __init__(
        self,
        movement: MovementComponent,
        perception: PerceptionComponent,
        reserves: ResourceReserves,
        rng: random.Random,
        home: Vector2,
        track_history: bool = False,
    ) -> None:
        self._movement = movement
        self._perception = perception
        self._reserves = reserves
        self._rng = rng
        self._machine = create_behavior_state_machine(track_history=track_history)
        self.idle_time = 0.0
        self.home = home.copy()

    @property
    def state(self) -> BehaviorState:
        return self._machine.state

    @property
    def machine(self) -> StateMachine[BehaviorState]:
        return self._machine

    def time_in_state(self, now: float) -> float:
        return self._machine.time_in_state(now)

    def is_moving(self) -> bool:
        return self._machine.state in MOVING_STATES

    def _enter(self, target: BehaviorState, now: float, reason: str) -> bool:
        result = self._machine.try_transition(target, at=now, reason=reason)
        if result.is_err():
            logger.warning("Ignoring behavior transition: %s", result.error)
            return False
        return True

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def decide(self, now: float, params: DecisionParameters) -> None:
        """Apply the transition rules for the current state."""
        state = self._machine.state
        if state in (BehaviorState.IDLE, BehaviorState.RESTING):
            if self.time_in_state(now) > self.idle_time:
                self._start_exploring(now, params, "rested")
        elif state is BehaviorState.EXPLORING:
            self._decide_exploring(now, params)
        elif state is BehaviorState.SEEKING_FOOD:
            self._decide_seeking(now, params, seeking_food=True)
        elif state is BehaviorState.SEEKING_ENERGY:
            self._decide_seeking(now, params, seeking_food=False)
        elif state is BehaviorState.COLLECTING:
            if self.time_in_state(now) > sparkling_defaults.COLLECTING_DWELL_TIME:
                self._finish_collecting(now, params)
        # COMPETING is left by the penalty timer; FADING is terminal.

    def _decide_exploring(self, now: float, params: DecisionParameters) -> None:
        food_ratio = self._reserves.food_ratio
        energy_ratio = self._reserves.energy_ratio
        elapsed = self.time_in_state(now)

        if food_ratio < params.hunger_threshold:
            critical = food_ratio < params.critical_hunger_threshold
            if critical or self._rng.random() > params.persistence_factor:
                self._start_seeking(now, params, seeking_food=True)
        elif energy_ratio < params.energy_low_threshold:
            critical = energy_ratio < params.critical_energy_threshold
            if critical or self._rng.random() > params.persistence_factor:
                self._start_seeking(now, params, seeking_food=False)
        elif elapsed > params.exploration_duration:
            if self._enter(BehaviorState.RESTING, now, "exploration finished"):
                jitter = sparkling_defaults.REST_JITTER
                self.idle_time = params.rest_duration * (1 - jitter + self._rng.random() * 2 * jitter)
                self._movement.stop()
            return

        if (
            self._machine.state is BehaviorState.EXPLORING
            and elapsed > sparkling_defaults.EXPLORING_DIRECTION_CHANGE_DELAY
            and self._rng.random() < sparkling_defaults.DIRECTION_CHANGE_BASE_CHANCE * (1 + params.novelty_preference)
        ):
            self._movement.set_random_heading(params.novelty_preference)

    def _decide_seeking(self, now: float, params: DecisionParameters, seeking_food: bool) -> None:
        if seeking_food:
            satiated = self._reserves.food_ratio > params.food_satiation_threshold
        else:
            satiated = self._reserves.energy_ratio > params.energy_satiation_threshold
        if satiated:
            self._movement.target = None
            self._start_exploring(now, params, "satiated")
            return

        if self._movement.target is None or self._movement.at_target():
            self.resolve_target(params, seeking_food)

    def _finish_collecting(self, now: float, params: DecisionParameters) -> None:
        if self._reserves.food_ratio < params.hunger_threshold:
            self._enter(BehaviorState.SEEKING_FOOD, now, "still hungry")
        elif self._reserves.energy_ratio < params.energy_low_threshold:
            self._enter(BehaviorState.SEEKING_ENERGY, now, "still low on energy")
        else:
            self._start_exploring(now, params, "done collecting")

    def _start_exploring(self, now: float, params: DecisionParameters, reason: str) -> None:
        if self._enter(BehaviorState.EXPLORING, now, reason):
            self._movement.set_random_heading(params.novelty_preference)

    def _start_seeking(self, now: float, params: DecisionParameters, seeking_food: bool) -> None:
        target = BehaviorState.SEEKING_FOOD if seeking_food else BehaviorState.SEEKING_ENERGY
        if self._enter(target, now, "resource low"):
            self._movement.target = self._perception.remembered_target(self._movement.position, seeking_food, params)

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------

    def resolve_target(self, params: DecisionParameters, seeking_food: bool) -> Optional[Vector2]:
        """Pick a destination from memory, then the senses, then home.

        Falls back to a random heading when nothing is found and there is
        no current target.
        """
        position = self._movement.position
        target = self._perception.remembered_target(position, seeking_food, params)
        if target is None:
            target = self._perception.sensed_target(position, seeking_food, params)
        if target is None and self._should_head_home(params, seeking_food):
            target = self.home.copy()

        if target is not None:
            self._movement.target = target
        elif self._movement.target is None:
            self._movement.set_random_heading(params.novelty_preference)
        return target

    def _should_head_home(self, params: DecisionParameters, seeking_food: bool) -> bool:
        ratio = self._reserves.food_ratio if seeking_food else self._reserves.energy_ratio
        if ratio >= sparkling_defaults.HOME_FALLBACK_RATIO:
            return False
        return self._rng.random() < params.memory_trust_factor * 0.5

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def seek_speed_modifier(self, params: DecisionParameters) -> float:
        state = self._machine.state
        if state is BehaviorState.SEEKING_FOOD and self._reserves.food_ratio < params.critical_hunger_threshold:
            return sparkling_defaults.URGENT_SEEK_SPEED_MODIFIER
        if state is BehaviorState.SEEKING_ENERGY and self._reserves.energy_ratio < params.critical_energy_threshold:
            return sparkling_defaults.URGENT_SEEK_SPEED_MODIFIER
        return sparkling_defaults.SEEK_SPEED_MODIFIER

    def move(self, dt: float, now: float, params: DecisionParameters) -> None:
        """Steer toward the target (if any) and step the position.

        Reaching a target while seeking switches to COLLECTING and stops.
        Reaching one while exploring just clears it.
        """
        state = self._machine.state
        if state in STATIONARY_STATES:
            return

        target = self._movement.target
        if target is not None:
            if self._movement.at(target):
                self._movement.target = None
                if state in SEEKING_STATES and self._enter(BehaviorState.COLLECTING, now, "arrived"):
                    self._movement.stop()
                    return
            else:
                self._movement.head_toward(target, self.seek_speed_modifier(params))

        self._movement.step(dt)

    # ------------------------------------------------------------------
    # External triggers
    # ------------------------------------------------------------------

    def enter_competing(self, now: float) -> bool:
        if self._machine.state is not BehaviorState.COLLECTING:
            return False
        return self._enter(BehaviorState.COMPETING, now, "competition penalty")

    def leave_competing(self, now: float) -> bool:
        if self._machine.state is not BehaviorState.COMPETING:
            return False
        return self._enter(BehaviorState.COLLECTING, now, "penalty expired")

    def begin_fading(self, now: float, reason: str) -> bool:
        if self._machine.state is BehaviorState.FADING:
            return False
        if not self._enter(BehaviorState.FADING, now, reason):
            return False
        self._movement.stop()
        self._movement.target = None
        return True

    def to_dict(self, now: float) -> Dict[str, object]:
        return {
            "state": self.state.value,
            "state_timer": self.time_in_state(now),
            "idle_time": self.idle_time,
            "home": self.home.to_dict(),
        }
