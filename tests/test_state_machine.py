"""Tests for the declared-transition state machines and Result type."""

import pytest

from sparkling.result import Err, Ok
from sparkling.state_machine import (
    BEHAVIOR_TRANSITIONS,
    BehaviorState,
    InferenceStatus,
    StateMachine,
    create_behavior_state_machine,
    create_inference_state_machine,
)


def test_every_behavior_state_is_declared():
    assert set(BEHAVIOR_TRANSITIONS) == set(BehaviorState)


def test_valid_transition_returns_ok_and_records_time():
    machine = create_behavior_state_machine()

    result = machine.try_transition(BehaviorState.RESTING, at=4.0, reason="tired")

    assert result == Ok(BehaviorState.RESTING)
    assert machine.state is BehaviorState.RESTING
    assert machine.time_in_state(6.5) == pytest.approx(2.5)


def test_invalid_transition_returns_err_and_keeps_state():
    machine = create_behavior_state_machine()

    result = machine.try_transition(BehaviorState.COMPETING)

    assert result.is_err()
    assert "EXPLORING -> COMPETING" in result.error
    assert machine.state is BehaviorState.EXPLORING


def test_transition_raises_on_illegal_move():
    machine = create_behavior_state_machine()

    with pytest.raises(ValueError):
        machine.transition(BehaviorState.COLLECTING)


def test_fading_is_terminal():
    machine = create_behavior_state_machine()
    machine.transition(BehaviorState.FADING, at=1.0)

    assert machine.is_terminal()
    assert machine.get_valid_transitions() == []


def test_inference_cycle():
    machine = create_inference_state_machine(track_history=True)

    for status in (
        InferenceStatus.PREPARING,
        InferenceStatus.THINKING,
        InferenceStatus.PROCESSING,
        InferenceStatus.IDLE,
    ):
        machine.transition(status)

    assert machine.state is InferenceStatus.IDLE
    assert [t.to_state for t in machine.history][-1] is InferenceStatus.IDLE
    assert len(machine.history) == 4


def test_history_is_bounded():
    machine = StateMachine(
        InferenceStatus.IDLE,
        {InferenceStatus.IDLE: [InferenceStatus.IDLE]},
        track_history=True,
        max_history=3,
    )
    for tick in range(10):
        machine.transition(InferenceStatus.IDLE, at=float(tick))

    assert [t.at for t in machine.history] == [7.0, 8.0, 9.0]


def test_unknown_initial_state_rejected():
    with pytest.raises(ValueError):
        StateMachine(BehaviorState.IDLE, {BehaviorState.EXPLORING: []})


def test_result_helpers():
    assert Ok(3).map(lambda v: v * 2).unwrap() == 6
    assert Err("bad").unwrap_or(7) == 7
    assert Err("bad").map(lambda v: v * 2).error == "bad"
    with pytest.raises(ValueError):
        Err("bad").unwrap()
