"""Encounters and resource contests between sparklings.

Runs once per tick over every unordered pair of active sparklings in index
order. Pairs within the encounter radius record a mutual encounter. Pairs
within the tighter competition radius that are both COLLECTING also hold a
contest: the sparkling with the higher advantage wins, the other takes a
collection penalty. An exact tie penalizes both, more mildly.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from sparkling.config.simulation_config import CompetitionConfig
from sparkling.memory import EncounterOutcome
from sparkling.parameters import DecisionParameters
from sparkling.protocols import Competitor
from sparkling.state_machine import BehaviorState
from sparkling.systems.base import BaseSystem, SystemResult

if TYPE_CHECKING:
    from sparkling.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)


def competitive_advantage(params: DecisionParameters) -> float:
    """Efficient, uncooperative sparklings win contests."""
    return params.collection_efficiency * (1.0 - params.cooperation_tendency)


@dataclass
class ContestResult:
    """Outcome of one contest; ``winner_id`` is None on a tie."""

    first_id: int
    second_id: int
    winner_id: Optional[int]

    @property
    def tie(self) -> bool:
        return self.winner_id is None


class CompetitionSystem(BaseSystem):
    """Pairwise encounter and contest resolver."""

    def __init__(self, engine: "SimulationEngine", config: Optional[CompetitionConfig] = None) -> None:
        super().__init__(engine, "Competition")
        self.config = config or CompetitionConfig()
        self._total_encounters = 0
        self._total_contests = 0
        self._total_ties = 0
        self.last_contests: List[ContestResult] = []

    def _do_update(self, dt: float) -> SystemResult:
        return self.resolve(self._engine.sparklings)

    def advantage(self, competitor: Competitor) -> float:
        """Contest score, boosted inside the competitor's own territory when enabled."""
        score = competitive_advantage(competitor.parameters)
        bonus = self.config.territorial_advantage_bonus
        territory = competitor.territory
        if bonus > 0 and territory is not None and territory.contains(competitor.position):
            score *= 1.0 + bonus
        return score

    def resolve(self, competitors: Sequence[Competitor]) -> SystemResult:
        """Resolve every pair once, in index order."""
        active = [c for c in competitors if c.is_active()]
        encounter_sq = self.config.encounter_radius ** 2
        competition_sq = self.config.competition_radius ** 2

        encounters = 0
        affected = set()
        self.last_contests = []

        for i in range(len(active)):
            first = active[i]
            for j in range(i + 1, len(active)):
                second = active[j]
                first_pos = first.position
                second_pos = second.position
                distance_sq = first_pos.distance_squared_to(second_pos)
                if distance_sq >= encounter_sq:
                    continue

                encounters += 1
                first_outcome = second_outcome = EncounterOutcome.NEUTRAL
                if (
                    distance_sq < competition_sq
                    and first.state is BehaviorState.COLLECTING
                    and second.state is BehaviorState.COLLECTING
                ):
                    first_outcome, second_outcome = self._contest(first, second)
                    affected.update((first.id, second.id))

                first.record_encounter(second.id, second_pos, first_outcome)
                second.record_encounter(first.id, first_pos, second_outcome)

        ties = sum(1 for contest in self.last_contests if contest.tie)
        self._total_encounters += encounters
        self._total_contests += len(self.last_contests)
        self._total_ties += ties

        return SystemResult(
            entities_affected=len(affected),
            details={"encounters": encounters, "contests": len(self.last_contests), "ties": ties},
        )

    def _contest(self, first: Competitor, second: Competitor) -> Tuple[EncounterOutcome, EncounterOutcome]:
        first_score = self.advantage(first)
        second_score = self.advantage(second)

        if first_score == second_score:
            first.apply_competition_penalty(self.config.tie_penalty, self.config.tie_penalty_duration)
            second.apply_competition_penalty(self.config.tie_penalty, self.config.tie_penalty_duration)
            self.last_contests.append(ContestResult(first.id, second.id, None))
            logger.debug("Sparklings %d and %d tied a contest", first.id, second.id)
            return EncounterOutcome.NEGATIVE, EncounterOutcome.NEGATIVE

        if first_score > second_score:
            winner, loser = first, second
        else:
            winner, loser = second, first
        loser.apply_competition_penalty(self.config.loser_penalty, self.config.loser_penalty_duration)
        self.last_contests.append(ContestResult(first.id, second.id, winner.id))
        logger.debug("Sparkling %d won a contest against %d", winner.id, loser.id)

        if winner is first:
            return EncounterOutcome.POSITIVE, EncounterOutcome.NEGATIVE
        return EncounterOutcome.NEGATIVE, EncounterOutcome.POSITIVE

    def get_debug_info(self) -> Dict[str, Any]:
        info = super().get_debug_info()
        info.update(
            {
                "total_encounters": self._total_encounters,
                "total_contests": self._total_contests,
                "total_ties": self._total_ties,
                "territorial_advantage_bonus": self.config.territorial_advantage_bonus,
            }
        )
        return info
