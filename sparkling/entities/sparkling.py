"""The Sparkling entity.

A sparkling is assembled from narrow components:

    reserves     - bounded food and neural energy
    memory       - importance-weighted memory store
    movement     - position, velocity and target steering
    perception   - periodic scans feeding memory, target lookup
    collection   - withdrawing resources from the current cell
    territory    - advisory territory claims
    inference    - pacing of reasoning runs
    behavior     - the state rules tying the above together

The entity itself owns the per-tick update order, metabolism, competition
penalties and the fade-out lifecycle.
"""

import logging
import random
from typing import Any, Dict, Optional

from sparkling.config import sparklings as sparkling_defaults
from sparkling.config.simulation_config import SimulationConfig
from sparkling.entities.behavior import BehaviorController
from sparkling.entities.components import (
    CollectionComponent,
    CollectionOutcome,
    InferenceController,
    MovementComponent,
    PerceptionComponent,
    ResourceReserves,
    Territory,
    TerritoryComponent,
)
from sparkling.inference.context import build_context
from sparkling.inference.service import InferenceService
from sparkling.inference.types import InferenceContext, InferenceResult
from sparkling.inference.validation import validate_proposals
from sparkling.math_utils import Vector2, clamp
from sparkling.memory import EncounterOutcome, MemoryStore
from sparkling.parameters import (
    BehavioralProfile,
    DecisionParameters,
    for_profile,
    randomized,
    summarize_changes,
)
from sparkling.protocols import WorldView
from sparkling.state_machine import MOVING_STATES, BehaviorState, InferenceStatus

logger = logging.getLogger(__name__)

COMPETING_PENALTY_THRESHOLD = 0.3
ENCOUNTER_BASE_RECORD_CHANCE = 0.5
IMPORTANCE_PARAMETERS = frozenset({"food_memory_importance", "energy_memory_importance"})


class Sparkling:
    """One autonomous forager.

    Attributes:
        profile: Behavioral profile the parameters were drawn from
        competition_penalty: Collection multiplier reduction in [0, 1]
        competition_timer: Remaining penalty duration
        fade_progress: 0..1 while fading out
    """

    def __init__(
        self,
        sparkling_id: int,
        position: Vector2,
        world: WorldView,
        rng: Optional[random.Random] = None,
        config: Optional[SimulationConfig] = None,
        profile: BehavioralProfile = BehavioralProfile.BALANCED,
        service: Optional[InferenceService] = None,
        parameters: Optional[DecisionParameters] = None,
        cell_size: Optional[float] = None,
    ) -> None:
        config = config or SimulationConfig()
        stats = config.sparklings
        self._id = sparkling_id
        self._rng = rng or random.Random()
        self.profile = profile

        if parameters is None:
            parameters = randomized(for_profile(profile), rng=self._rng)
        self._parameters = parameters

        self.reserves = ResourceReserves(
            max_food=stats.max_food,
            max_neural_energy=stats.max_neural_energy,
            food=stats.max_food * stats.initial_food_ratio,
            neural_energy=stats.max_neural_energy * stats.initial_energy_ratio,
        )
        self.memory = MemoryStore(
            stats.memory_capacity,
            food_importance_param=parameters.food_memory_importance,
            energy_importance_param=parameters.energy_memory_importance,
        )
        self.movement = MovementComponent(world, self._rng, position, stats.speed)
        self.perception = PerceptionComponent(
            world, self.memory, self._rng, cell_size if cell_size is not None else config.world.cell_size
        )
        self.collection = CollectionComponent(world, self.memory, self.reserves, self._rng)
        self.territory_component = TerritoryComponent()
        self.inference = InferenceController(
            sparkling_id,
            service,
            energy_cost=config.inference.energy_cost,
            thinking_timeout=config.inference.thinking_timeout,
        )
        self.behavior = BehaviorController(self.movement, self.perception, self.reserves, self._rng, home=position)

        self.competition_penalty = 0.0
        self.competition_timer = 0.0
        self.fade_progress = 0.0
        self._fading = False
        self._fadeout_enabled = config.population.fadeout_enabled
        self._ready_for_removal = False
        self._now = 0.0
        self.last_collection = CollectionOutcome()

        self.movement.set_random_heading(parameters.novelty_preference)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def id(self) -> int:
        return self._id

    @property
    def position(self) -> Vector2:
        return self.movement.position

    @property
    def velocity(self) -> Vector2:
        return self.movement.velocity

    @property
    def state(self) -> BehaviorState:
        return self.behavior.state

    @property
    def parameters(self) -> DecisionParameters:
        return self._parameters

    @property
    def food(self) -> float:
        return self.reserves.food

    @property
    def neural_energy(self) -> float:
        return self.reserves.neural_energy

    @property
    def food_ratio(self) -> float:
        return self.reserves.food_ratio

    @property
    def energy_ratio(self) -> float:
        return self.reserves.energy_ratio

    @property
    def territory(self) -> Optional[Territory]:
        return self.territory_component.territory

    @property
    def inference_status(self) -> InferenceStatus:
        return self.inference.status

    @property
    def is_fading(self) -> bool:
        return self._fading

    @property
    def ready_for_removal(self) -> bool:
        return self._ready_for_removal

    def is_active(self) -> bool:
        return not self._fading

    def fitness(self) -> float:
        """Combined resource ratio; used to rank sparklings for population control."""
        return self.reserves.food_ratio + self.reserves.energy_ratio

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, dt: float, now: float) -> None:
        """Advance this sparkling by one tick of ``dt`` simulation seconds."""
        if self._ready_for_removal:
            return
        self._now = now
        self.memory.update_time(now)

        if self._fading:
            self._update_fade(dt)
            return

        self._consume(dt)
        if self._fadeout_enabled and self.reserves.is_depleted():
            self.begin_fade("resources depleted")
            return

        params = self._parameters
        position = self.movement.position
        self.perception.update(now, position, params)
        self.inference.update(now, self)
        self._update_competition(dt)
        self._update_territory()
        self.behavior.decide(now, params)
        self.behavior.move(dt, now, params)

        if self.behavior.state is BehaviorState.COLLECTING:
            self.last_collection = self.collection.collect(
                self.movement.position,
                params,
                self.behavior.time_in_state(now),
                self.competition_penalty,
            )

    def _consume(self, dt: float) -> None:
        params = self._parameters
        self.reserves.consume_food(sparkling_defaults.FOOD_CONSUMPTION_RATE * dt)
        if self.inference.status is InferenceStatus.THINKING:
            rate = sparkling_defaults.NEURAL_ENERGY_CONSUMPTION_RATE * sparkling_defaults.THINKING_ENERGY_MULTIPLIER
            self.reserves.consume_neural_energy(rate * dt)
        if self.behavior.state in MOVING_STATES:
            self.reserves.consume_food(sparkling_defaults.MOVEMENT_FOOD_COST * dt)
        if self.reserves.food < self.reserves.max_food * params.critical_hunger_threshold:
            self.reserves.consume_neural_energy(sparkling_defaults.CRITICAL_HUNGER_ENERGY_DRAIN * dt)

    def _update_competition(self, dt: float) -> None:
        if self.competition_timer <= 0:
            return
        self.competition_timer -= dt
        if self.competition_timer <= 0:
            self.competition_penalty = 0.0
            self.competition_timer = 0.0
            self.behavior.leave_competing(self._now)

    def _update_territory(self) -> None:
        if self.behavior.state is not BehaviorState.COLLECTING:
            return
        position = self.movement.position
        if self.territory_component.should_claim(position, self.reserves.food_ratio, self._parameters):
            territory = self.territory_component.claim(position, self._parameters)
            self.behavior.home = position
            logger.debug(
                "Sparkling %d claimed territory at (%.0f, %.0f) radius %.0f",
                self._id,
                territory.center.x,
                territory.center.y,
                territory.radius,
            )

    # ------------------------------------------------------------------
    # Fade-out
    # ------------------------------------------------------------------

    def begin_fade(self, reason: str = "population control") -> bool:
        """Start fading out; returns False if already fading."""
        if self._fading:
            return False
        if not self.behavior.begin_fading(self._now, reason):
            return False
        self._fading = True
        self.fade_progress = 0.0
        self.inference.abandon()
        logger.info("Sparkling %d started fading out: %s", self._id, reason)
        return True

    def _update_fade(self, dt: float) -> None:
        self.fade_progress = min(1.0, self.fade_progress + dt / sparkling_defaults.FADEOUT_DURATION)
        if self.fade_progress >= 1.0:
            self._ready_for_removal = True
            logger.info("Sparkling %d finished fading out", self._id)

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    def apply_competition_penalty(self, magnitude: float, duration: float) -> None:
        self.competition_penalty = clamp(magnitude, 0.0, 1.0)
        self.competition_timer = duration
        if self.competition_penalty > COMPETING_PENALTY_THRESHOLD:
            self.behavior.enter_competing(self._now)

    def record_encounter(self, peer_id: int, peer_position: Vector2, outcome: EncounterOutcome) -> bool:
        """Remember a peer (probabilistically) and back off if it is too close.

        Returns:
            True if an encounter memory was stored
        """
        params = self._parameters
        recorded = False
        record_chance = ENCOUNTER_BASE_RECORD_CHANCE + params.cooperation_tendency * 0.5
        if self._rng.random() < record_chance:
            recorded = self.memory.add_encounter_memory(self.movement.position, peer_id, outcome)

        if self.movement.distance_to(peer_position) < params.personal_space_factor:
            self.movement.steer_away(peer_position)
        return recorded

    # ------------------------------------------------------------------
    # Inference host
    # ------------------------------------------------------------------

    def spend_neural_energy(self, amount: float) -> float:
        return self.reserves.consume_neural_energy(amount)

    def build_inference_context(self) -> InferenceContext:
        return build_context(
            sparkling_id=self._id,
            state=self.behavior.state.value,
            food=self.reserves.food,
            max_food=self.reserves.max_food,
            neural_energy=self.reserves.neural_energy,
            max_neural_energy=self.reserves.max_neural_energy,
            memory=self.memory,
            parameters=self._parameters,
        )

    def apply_inference_result(self, result: InferenceResult) -> str:
        """Merge a result into parameters and memory; returns the change summary."""
        summary = "no changes"
        if result.success:
            changes = self._parameters.apply(validate_proposals(result.parameters))
            summary = summarize_changes(changes)
            if IMPORTANCE_PARAMETERS.intersection(changes):
                self.memory.update_importance_multipliers(
                    self._parameters.food_memory_importance,
                    self._parameters.energy_memory_importance,
                )
        self.memory.add_inference_memory(self.movement.position, result.reasoning, summary, result.success)
        return summary

    # ------------------------------------------------------------------
    # Render boundary
    # ------------------------------------------------------------------

    def to_snapshot(self, include_memory: bool = False) -> Dict[str, Any]:
        territory = self.territory
        snapshot: Dict[str, Any] = {
            "id": self._id,
            "profile": self.profile.value,
            "position": self.movement.position.to_dict(),
            "velocity": self.movement.velocity.to_dict(),
            "state": self.behavior.state.value,
            "state_timer": self.behavior.time_in_state(self._now),
            "food": self.reserves.food,
            "max_food": self.reserves.max_food,
            "neural_energy": self.reserves.neural_energy,
            "max_neural_energy": self.reserves.max_neural_energy,
            "target": self.movement.target.to_dict() if self.movement.target is not None else None,
            "home": self.behavior.home.to_dict(),
            "territory": territory.to_dict() if territory is not None else None,
            "competition": {"penalty": self.competition_penalty, "timer": self.competition_timer},
            "inference": self.inference.to_dict(self._now),
            "fading": self._fading,
            "fade_progress": self.fade_progress,
            "memory_count": self.memory.count(),
            "parameters": self._parameters.to_dict(),
        }
        if include_memory:
            snapshot["memories"] = self.memory.snapshot()
        return snapshot

    def __repr__(self) -> str:
        return f"Sparkling(id={self._id}, state={self.behavior.state.name})"
