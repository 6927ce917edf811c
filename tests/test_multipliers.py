import logging

import pytest

from chronoplay.calculators import AffectingTimerCalculators, GoingEventValueCalculator
from chronoplay.going_events import calculate_value_and_send_going_event
from chronoplay.multipliers import (
    initialize_time_multipliers,
    listen_for_time_multiplier_set_requests,
    listen_for_time_multiplier_update_requests,
)
from chronoplay.timer_systems import (
    listen_for_emitting_timer_firing_requests,
    listen_for_update_affected_entities_after_timer_birth_requests,
    tick_emitting_timers,
)
from chronoplay.timer_types import (
    DEFAULT_TIME_MULTIPLIER,
    SetTimeMultiplier,
    TimeMultiplier,
    TimeMultiplierId,
    TimerCalculatorSetPolicy,
    TimerFireRequest,
    TimerGoingEvent,
    TimerGoingEventType,
)
from chronoplay.world import World


def _multiplier_entity(world, multiplier_id):
    return next(
        entity for entity, multiplier in world.query(TimeMultiplier) if multiplier.id is multiplier_id
    )


def test_initialize_spawns_every_multiplier_with_default_value():
    world = World()
    initialize_time_multipliers(world)
    spawned = world.query(TimeMultiplier, AffectingTimerCalculators)
    assert sorted(multiplier.id.name for _, multiplier, _ in spawned) == sorted(
        multiplier_id.name for multiplier_id in TimeMultiplierId
    )
    assert all(multiplier.value == DEFAULT_TIME_MULTIPLIER for _, multiplier, _ in spawned)
    changeable = {multiplier.id: multiplier.changeable for _, multiplier, _ in spawned}
    assert changeable[TimeMultiplierId.REAL_TIME] is False
    assert changeable[TimeMultiplierId.GAME_TIME_MULTIPLIER] is True


def test_update_request_changes_changeable_multiplier():
    world = World()
    initialize_time_multipliers(world)
    entity = _multiplier_entity(world, TimeMultiplierId.GAME_TIME_MULTIPLIER)
    world.send(TimerGoingEvent(TimerGoingEventType.CHANGE_TIME_MULTIPLIER_SPEED, entity, 0.5))
    listen_for_time_multiplier_update_requests(world)
    assert world.get(entity, TimeMultiplier).value == pytest.approx(DEFAULT_TIME_MULTIPLIER + 0.5)


def test_update_request_leaves_fixed_multiplier():
    world = World()
    initialize_time_multipliers(world)
    entity = _multiplier_entity(world, TimeMultiplierId.REAL_TIME)
    world.send(TimerGoingEvent(TimerGoingEventType.CHANGE_TIME_MULTIPLIER_SPEED, entity, 0.5))
    listen_for_time_multiplier_update_requests(world)
    assert world.get(entity, TimeMultiplier).value == DEFAULT_TIME_MULTIPLIER


def test_update_request_of_other_type_is_ignored():
    world = World()
    initialize_time_multipliers(world)
    entity = _multiplier_entity(world, TimeMultiplierId.GAME_TIME_MULTIPLIER)
    world.send(TimerGoingEvent(TimerGoingEventType.MOVE_IN_DIRECT_LINE, entity, 0.5))
    listen_for_time_multiplier_update_requests(world)
    assert world.get(entity, TimeMultiplier).value == DEFAULT_TIME_MULTIPLIER


def test_set_request_fires_timer_with_calculator():
    world = World()
    initialize_time_multipliers(world)
    entity = _multiplier_entity(world, TimeMultiplierId.GAME_TIME_MULTIPLIER)
    world.send(SetTimeMultiplier(TimeMultiplierId.GAME_TIME_MULTIPLIER, 0.5, 0.1))
    listen_for_time_multiplier_set_requests(world)

    requests = world.pending_events(TimerFireRequest)
    assert len(requests) == 1
    timer = requests[0].timer
    assert requests[0].parent_sequence is None
    assert timer.duration == pytest.approx(0.1)
    assert list(timer.affected_entities_iter()) == [entity]
    calculator_entity = next(timer.calculator_entities_iter())
    calculator = world.get(calculator_entity, GoingEventValueCalculator)
    assert calculator.set_policy is TimerCalculatorSetPolicy.KEEP_NEW_TIMER
    assert calculator.going_event_type is TimerGoingEventType.CHANGE_TIME_MULTIPLIER_SPEED


def test_set_request_on_fixed_multiplier_is_refused(caplog):
    caplog.set_level(logging.INFO, logger="chronoplay")
    world = World()
    initialize_time_multipliers(world)
    world.send(SetTimeMultiplier(TimeMultiplierId.REAL_TIME, 0.5, 0.1))
    listen_for_time_multiplier_set_requests(world)
    assert world.pending_events(TimerFireRequest) == []
    assert world.query(GoingEventValueCalculator) == []
    assert "Attempted to change fixed multiplier" in caplog.text


def test_set_request_for_missing_multiplier_is_reported(caplog):
    caplog.set_level(logging.INFO, logger="chronoplay")
    world = World()
    world.send(SetTimeMultiplier(TimeMultiplierId.UI_TIME_MULTIPLIER, 0.5, 0.1))
    listen_for_time_multiplier_set_requests(world)
    assert world.pending_events(TimerFireRequest) == []
    assert "not found" in caplog.text


def test_multiplier_reaches_requested_value_after_duration():
    world = World()
    initialize_time_multipliers(world)
    entity = _multiplier_entity(world, TimeMultiplierId.GAME_TIME_MULTIPLIER)
    for system in (
        listen_for_time_multiplier_set_requests,
        listen_for_emitting_timer_firing_requests,
        listen_for_update_affected_entities_after_timer_birth_requests,
        tick_emitting_timers,
        calculate_value_and_send_going_event,
        listen_for_time_multiplier_update_requests,
    ):
        world.add_system(system)
    world.send(SetTimeMultiplier(TimeMultiplierId.GAME_TIME_MULTIPLIER, 0.5, 0.1))
    world.time.advance_by(0.1)
    world.update()
    assert world.get(entity, TimeMultiplier).value == pytest.approx(0.5)
    affecting = world.get(entity, AffectingTimerCalculators)
    registered = affecting.get(TimerGoingEventType.CHANGE_TIME_MULTIPLIER_SPEED)
    assert registered is not None and len(registered) == 1