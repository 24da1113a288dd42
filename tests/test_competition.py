"""Tests for encounters and resource contests."""

import pytest

from sparkling.config.simulation_config import CompetitionConfig
from sparkling.entities.components import Territory
from sparkling.math_utils import Vector2
from sparkling.memory import EncounterOutcome
from sparkling.parameters import DecisionParameters
from sparkling.protocols import Competitor
from sparkling.state_machine import BehaviorState
from sparkling.systems import CompetitionSystem, competitive_advantage
from tests.fakes.fake_competitor import FakeCompetitor

STRONG = DecisionParameters(collection_efficiency=1.5, cooperation_tendency=0.1)
WEAK = DecisionParameters(collection_efficiency=1.0, cooperation_tendency=0.5)


def make_system(**overrides):
    return CompetitionSystem(engine=None, config=CompetitionConfig(**overrides))


def test_fake_satisfies_protocol():
    assert isinstance(FakeCompetitor(1, Vector2(0, 0)), Competitor)


def test_advantage_formula():
    assert competitive_advantage(STRONG) == pytest.approx(1.35)
    assert competitive_advantage(WEAK) == pytest.approx(0.5)


def test_stronger_collector_wins():
    strong = FakeCompetitor(1, Vector2(100, 100), parameters=STRONG)
    weak = FakeCompetitor(2, Vector2(110, 100), parameters=WEAK)

    result = make_system().resolve([weak, strong])

    assert strong.penalties == []
    assert weak.penalties == [(0.5, 5.0)]
    assert strong.encounters == [(2, EncounterOutcome.POSITIVE)]
    assert weak.encounters == [(1, EncounterOutcome.NEGATIVE)]
    assert result.details == {"encounters": 1, "contests": 1, "ties": 0}
    assert result.entities_affected == 2


def test_tie_penalizes_both_mildly():
    first = FakeCompetitor(1, Vector2(100, 100))
    second = FakeCompetitor(2, Vector2(100, 110))
    system = make_system()

    system.resolve([first, second])

    assert first.penalties == [(0.3, 3.0)]
    assert second.penalties == [(0.3, 3.0)]
    assert first.encounters == [(2, EncounterOutcome.NEGATIVE)]
    assert second.encounters == [(1, EncounterOutcome.NEGATIVE)]
    assert system.last_contests[0].tie


@pytest.mark.parametrize("distance", [20.0, 25.0])
def test_encounter_without_contest_outside_competition_radius(distance):
    first = FakeCompetitor(1, Vector2(100, 100), parameters=STRONG)
    second = FakeCompetitor(2, Vector2(100 + distance, 100))

    result = make_system().resolve([first, second])

    assert first.penalties == [] and second.penalties == []
    assert first.encounters == [(2, EncounterOutcome.NEUTRAL)]
    assert result.details["contests"] == 0


def test_no_encounter_at_encounter_radius():
    first = FakeCompetitor(1, Vector2(100, 100))
    second = FakeCompetitor(2, Vector2(130, 100))

    result = make_system().resolve([first, second])

    assert first.encounters == []
    assert result.details["encounters"] == 0


def test_contest_requires_both_collecting():
    collector = FakeCompetitor(1, Vector2(100, 100), parameters=STRONG)
    explorer = FakeCompetitor(2, Vector2(105, 100), state=BehaviorState.EXPLORING)

    make_system().resolve([collector, explorer])

    assert explorer.penalties == []
    assert explorer.encounters == [(1, EncounterOutcome.NEUTRAL)]


def test_inactive_competitors_are_ignored():
    first = FakeCompetitor(1, Vector2(100, 100))
    fading = FakeCompetitor(2, Vector2(105, 100), active=False)

    result = make_system().resolve([first, fading])

    assert first.encounters == []
    assert fading.penalties == []
    assert result.details["encounters"] == 0


def test_every_pair_is_resolved_once():
    group = [FakeCompetitor(i, Vector2(100 + i * 5, 100), state=BehaviorState.RESTING) for i in range(1, 4)]

    result = make_system().resolve(group)

    assert result.details["encounters"] == 3
    for competitor in group:
        assert len(competitor.encounters) == 2


def test_territorial_bonus_breaks_ties_at_home():
    home = FakeCompetitor(1, Vector2(100, 100), territory=Territory(Vector2(100, 100), 50.0))
    visitor = FakeCompetitor(2, Vector2(110, 100))

    make_system(territorial_advantage_bonus=0.5).resolve([visitor, home])

    assert home.penalties == []
    assert visitor.penalties == [(0.5, 5.0)]


def test_territory_ignored_without_bonus():
    home = FakeCompetitor(1, Vector2(100, 100), territory=Territory(Vector2(100, 100), 50.0))
    visitor = FakeCompetitor(2, Vector2(110, 100))

    make_system().resolve([visitor, home])

    assert home.penalties == [(0.3, 3.0)]


def test_contest_between_real_sparklings(make_sparkling):
    strong = make_sparkling(1, Vector2(110, 110), parameters=DecisionParameters(**STRONG.to_dict()))
    weak = make_sparkling(2, Vector2(120, 110), parameters=DecisionParameters(**WEAK.to_dict()))
    for sparkling in (strong, weak):
        sparkling.behavior.machine.force_state(BehaviorState.COLLECTING, at=0.0)

    make_system().resolve([strong, weak])

    assert weak.state is BehaviorState.COMPETING
    assert weak.competition_penalty == 0.5
    assert strong.state is BehaviorState.COLLECTING
    assert strong.competition_penalty == 0.0
