import pytest

from chronoplay.calculators import AffectingTimerCalculators, GoingEventValueCalculator
from chronoplay.geometry import Transform, Vec3
from chronoplay.going_events import (
    calculate_value_and_send_going_event,
    clear_done_timers_from_affecting_timers,
    initialize_calculators,
    listen_for_translation_update_requests,
)
from chronoplay.interpolation import Interpolator, ValueByInterpolation
from chronoplay.timer_types import (
    TIMER_MAX_ASSIGNED_ENTITIES,
    CalculateAndSendGoingEvent,
    TimerAffectedEntity,
    TimerAndCalculator,
    TimerCalculatorSetPolicy,
    TimerDoneEvent,
    TimerDoneEventType,
    TimerGoingEvent,
    TimerGoingEventType,
    ValueCalculatorRequest,
)
from chronoplay.vec_based_array import VecBasedArray
from chronoplay.world import World

DELTA = 10.0
SPEED = TimerGoingEventType.CHANGE_TIME_MULTIPLIER_SPEED
MOVE = TimerGoingEventType.MOVE_IN_DIRECT_LINE


def spawn_calculator(world, going_event_type=SPEED):
    return world.spawn(
        GoingEventValueCalculator(
            TimerCalculatorSetPolicy.KEEP_NEW_TIMER,
            ValueByInterpolation(0.0, DELTA, Interpolator()),
            going_event_type,
        )
    )


def request(world, calculator, target, progress):
    world.send(CalculateAndSendGoingEvent(calculator, target, progress))
    calculate_value_and_send_going_event(world)
    return world.pending_events(TimerGoingEvent)[-1]


def test_full_progress_emits_full_delta():
    world = World()
    target = world.spawn()
    calculator = spawn_calculator(world)
    event = request(world, calculator, target, 1.0)
    assert event.entity == target
    assert event.event_type is SPEED
    assert event.value_delta == pytest.approx(DELTA)


def test_deltas_sum_to_total_change():
    world = World()
    target = world.spawn()
    calculator = spawn_calculator(world)
    deltas = [request(world, calculator, target, p).value_delta for p in (0.25, 0.5, 1.0)]
    assert sum(deltas) == pytest.approx(DELTA)
    assert len(world.pending_events(TimerGoingEvent)) == 3


def test_missing_calculator_sends_nothing():
    world = World()
    target = world.spawn()
    world.send(CalculateAndSendGoingEvent(world.spawn(), target, 0.5))
    calculate_value_and_send_going_event(world)
    assert world.pending_events(TimerGoingEvent) == []


def test_initialize_request_restarts_calculator():
    world = World()
    target = world.spawn()
    calculator = spawn_calculator(world)
    request(world, calculator, target, 1.0)
    world.send(ValueCalculatorRequest.initialize(calculator))
    initialize_calculators(world)
    assert request(world, calculator, target, 1.0).value_delta == pytest.approx(DELTA)


def test_destroy_request_does_not_restart_calculator():
    world = World()
    target = world.spawn()
    calculator = spawn_calculator(world)
    request(world, calculator, target, 1.0)
    world.send(ValueCalculatorRequest.destroy(calculator))
    initialize_calculators(world)
    assert request(world, calculator, target, 1.0).value_delta == pytest.approx(0.0)


def test_done_timer_is_removed_from_affecting_timers():
    world = World()
    timer = world.spawn()
    calculator = spawn_calculator(world)
    affecting = AffectingTimerCalculators()
    affecting.insert_get_rejected_value(
        SPEED, TimerAndCalculator(timer, calculator), TimerCalculatorSetPolicy.APPEND_TO_TIMERS_OF_TYPE
    )
    target = world.spawn(affecting)
    world.send(
        TimerDoneEvent(
            TimerDoneEventType.nothing(),
            VecBasedArray([TimerAffectedEntity(target, calculator)], TIMER_MAX_ASSIGNED_ENTITIES),
            timer,
        )
    )
    clear_done_timers_from_affecting_timers(world)
    assert world.get(target, AffectingTimerCalculators).get(SPEED) == []


def test_other_timers_stay_in_affecting_timers():
    world = World()
    timer, other_timer = world.spawn(), world.spawn()
    calculator = spawn_calculator(world)
    kept = TimerAndCalculator(other_timer, calculator)
    affecting = AffectingTimerCalculators()
    affecting.insert_get_rejected_value(SPEED, kept, TimerCalculatorSetPolicy.KEEP_NEW_TIMER)
    target = world.spawn(affecting)
    world.send(
        TimerDoneEvent(
            TimerDoneEventType.nothing(),
            VecBasedArray([TimerAffectedEntity(target, calculator)], TIMER_MAX_ASSIGNED_ENTITIES),
            timer,
        )
    )
    clear_done_timers_from_affecting_timers(world)
    assert affecting.get(SPEED) == [kept]


def test_move_event_translates_entity():
    world = World()
    entity = world.spawn(Transform())
    delta = Vec3(1.0, 2.0, 3.0)
    world.send(TimerGoingEvent(MOVE, entity, delta))
    listen_for_translation_update_requests(world)
    assert world.get(entity, Transform).translation == delta


def test_moves_accumulate():
    world = World()
    start = Vec3(4.0, 5.0, 6.0)
    entity = world.spawn(Transform(start))
    delta = Vec3(1.0, 2.0, 3.0)
    world.send(TimerGoingEvent(MOVE, entity, delta))
    world.send(TimerGoingEvent(MOVE, entity, -delta))
    listen_for_translation_update_requests(world)
    assert world.get(entity, Transform).translation == start


def test_speed_event_does_not_move():
    world = World()
    start = Vec3(4.0, 5.0, 6.0)
    entity = world.spawn(Transform(start))
    world.send(TimerGoingEvent(SPEED, entity, 1.0))
    listen_for_translation_update_requests(world)
    assert world.get(entity, Transform).translation == start


def test_move_for_entity_without_transform_is_skipped(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    world = World()
    entity = world.spawn()
    world.send(TimerGoingEvent(MOVE, entity, Vec3(1.0, 1.0, 1.0)))
    listen_for_translation_update_requests(world)
    assert world.get(entity, Transform) is None