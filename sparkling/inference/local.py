"""Rule-based local inference strategy.

Inspects the same context a remote model would receive and proposes small
bounded nudges. It always succeeds; proposals are clamped later by
validation like any other strategy's output.
"""

import logging
from typing import Dict, List

from sparkling.inference.types import InferenceContext, InferenceResult
from sparkling.memory import MemoryEventType

logger = logging.getLogger(__name__)

STRATEGY_NAME = "local"


class LocalRuleStrategy:
    """Deterministic substitute for a remote reasoning call."""

    name = STRATEGY_NAME

    def infer(self, context: InferenceContext) -> InferenceResult:
        params = context.parameters
        proposals: Dict[str, float] = {}
        notes: List[str] = []

        food_ratio = context.food_ratio
        energy_ratio = context.energy_ratio

        if food_ratio < 0.3 and energy_ratio > 0.5:
            proposals["resource_preference"] = params["resource_preference"] - 0.2
            notes.append("Shifted preference toward food because food is low.")
        elif food_ratio > 0.7 and energy_ratio < 0.3:
            proposals["resource_preference"] = params["resource_preference"] + 0.2
            notes.append("Shifted preference toward neural energy because energy is low.")

        food_found = context.memory_count(MemoryEventType.RESOURCE_FOUND.value)
        food_depleted = context.memory_count(MemoryEventType.RESOURCE_DEPLETED.value)
        energy_found = context.memory_count(MemoryEventType.ENERGY_FOUND.value)
        energy_depleted = context.memory_count(MemoryEventType.ENERGY_DEPLETED.value)

        if food_depleted:
            proposals["hunger_threshold"] = params["hunger_threshold"] + 0.1
            notes.append("Seeking food earlier because food spots keep running dry.")
        if energy_depleted:
            proposals["energy_low_threshold"] = params["energy_low_threshold"] + 0.1
            notes.append("Seeking energy earlier because energy spots keep running dry.")

        if not food_found or not energy_found:
            proposals["exploration_range"] = params["exploration_range"] + 20
            proposals["novelty_preference"] = params["novelty_preference"] + 0.1
            notes.append("Exploring wider because I remember too few resources.")

        any_found = food_found or energy_found
        any_depleted = food_depleted or energy_depleted
        if any_found and not any_depleted:
            proposals["memory_trust_factor"] = params["memory_trust_factor"] + 0.1
            notes.append("Trusting memory more since remembered spots have been reliable.")
        elif any_depleted and not any_found:
            proposals["memory_trust_factor"] = params["memory_trust_factor"] - 0.1
            notes.append("Trusting memory less since remembered spots were depleted.")

        encounters = context.memories.get(MemoryEventType.SPARKLING_ENCOUNTER.value, [])
        if encounters:
            outcome = encounters[0].get("outcome")
            if outcome == "negative":
                proposals["cooperation_tendency"] = params["cooperation_tendency"] - 0.05
                notes.append("Cooperating less after a lost competition.")
            elif outcome == "positive":
                proposals["cooperation_tendency"] = params["cooperation_tendency"] + 0.05
                notes.append("Cooperating more after a good encounter.")

        reasoning = " ".join(notes) if notes else "Current parameters look adequate; no adjustments."
        logger.debug("Local inference for sparkling %d proposed %d changes", context.sparkling_id, len(proposals))
        return InferenceResult(success=True, reasoning=reasoning, parameters=proposals, strategy=self.name)
