import random

import pytest

from sparkling.inference.validation import validate_proposals
from sparkling.parameters import (
    PARAMETER_SPECS,
    BehavioralProfile,
    DecisionParameters,
    blend,
    evolve,
    for_profile,
    normalize_parameter_key,
    randomized,
    summarize_changes,
)


def test_defaults_match_specs():
    params = DecisionParameters()

    assert params.is_valid()
    for spec in PARAMETER_SPECS:
        assert getattr(params, spec.name) == spec.default


def test_construction_clamps_out_of_range_values():
    params = DecisionParameters(hunger_threshold=5.0, inference_interval=1.0)

    assert params.hunger_threshold == 0.7
    assert params.inference_interval == 10.0


@pytest.mark.parametrize(
    "key",
    ["hungerThreshold", "Hunger Threshold", "HUNGER_THRESHOLD", "hunger-threshold", "hunger_threshold"],
)
def test_key_spellings_normalize(key):
    assert normalize_parameter_key(key) == "hunger_threshold"


def test_unknown_keys_do_not_normalize():
    assert normalize_parameter_key("appetite") is None
    assert normalize_parameter_key("") is None


def test_apply_normalizes_clamps_and_reports_changes():
    params = DecisionParameters()

    changes = params.apply(
        {
            "hungerThreshold": 0.5,
            "Novelty Preference": 0.9,
            "resource_preference": -5,
            "bogus": 1,
            "cooperation_tendency": "high",
            "rest_duration": True,
        }
    )

    assert set(changes) == {"hunger_threshold", "novelty_preference", "resource_preference"}
    assert params.hunger_threshold == 0.5
    assert params.novelty_preference == 0.9
    assert params.resource_preference == -1.0
    assert params.cooperation_tendency == 0.5
    assert params.is_valid()


def test_apply_same_value_is_not_a_change():
    params = DecisionParameters()

    assert params.apply({"hunger_threshold": 0.4}) == {}


def test_summarize_changes():
    assert summarize_changes({}) == "no changes"
    assert summarize_changes({"resource_preference": (0.0, -0.2)}) == "resource_preference: 0.00 → -0.20"


def test_profiles_override_defaults():
    gatherer = for_profile(BehavioralProfile.GATHERER)
    explorer = for_profile(BehavioralProfile.EXPLORER)

    assert gatherer.resource_preference == -0.7
    assert explorer.exploration_range == 300
    assert for_profile(BehavioralProfile.BALANCED) == DecisionParameters()


@pytest.mark.parametrize("profile", list(BehavioralProfile))
def test_randomized_presets_stay_valid(profile):
    rng = random.Random(3)
    for _ in range(20):
        assert randomized(for_profile(profile), 0.2, rng).is_valid()


def test_randomized_without_variation_is_identity():
    base = for_profile(BehavioralProfile.SOCIAL)

    assert randomized(base, 0.0, random.Random(1)).to_dict() == base.to_dict()


def test_blend_endpoints_and_midpoint():
    a = DecisionParameters(exploration_range=100)
    b = DecisionParameters(exploration_range=300)

    assert blend(a, b, 0.0).exploration_range == 100
    assert blend(a, b, 1.0).exploration_range == 300
    assert blend(a, b, 0.5).exploration_range == 200


def test_evolve_moves_area_parameters_without_mutating_input():
    params = DecisionParameters()

    evolved = evolve(params, "food", 1.0)

    assert evolved.hunger_threshold == pytest.approx(0.3)
    assert evolved.collection_efficiency == pytest.approx(1.1)
    assert evolved.resource_preference == pytest.approx(-0.1)
    assert params == DecisionParameters()


def test_evolve_clamps_and_rejects_unknown_area():
    params = DecisionParameters(inference_threshold=50)

    assert evolve(params, "inference", 1.0).inference_threshold == 50

    with pytest.raises(ValueError):
        evolve(params, "poker", 1.0)


def test_validate_proposals_filters_and_clamps():
    validated = validate_proposals(
        {
            "HungerThreshold": 2.0,
            "unknown": 1,
            "novelty_preference": float("nan"),
            "rest_duration": True,
            "exploration range": 250,
        }
    )

    assert validated == {"hunger_threshold": 0.7, "exploration_range": 250}
