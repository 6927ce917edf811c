import logging

import pytest

from chronoplay.calculators import AffectingTimerCalculators, GoingEventValueCalculator
from chronoplay.interpolation import Interpolator, ValueByInterpolation
from chronoplay.sequencing import TimerSequence, listen_for_done_sequence_timers
from chronoplay.timer_systems import (
    clear_calculators_if_part_of_looping_sequence,
    clear_done_timers,
    listen_for_affected_entity_removal_request,
    listen_for_emitting_timer_firing_requests,
    listen_for_update_affected_entities_after_timer_birth_requests,
    tick_emitting_timers,
)
from chronoplay.timer_types import (
    CalculateAndSendGoingEvent,
    EmittingTimer,
    RemoveFromTimerAffectedEntities,
    TimeMultiplier,
    TimeMultiplierId,
    TimerAffectedEntity,
    TimerCalculatorSetPolicy,
    TimerDoneEvent,
    TimerDoneEventType,
    TimerFireRequest,
    TimerGoingEventType,
    TimerParentSequence,
    UpdateAffectedEntitiesAfterTimerBirth,
    ValueCalculatorRequest,
)
from chronoplay.world import World

TIMER_DURATION_IN_SECONDS = 60.0


def spawn_empty_entity(world):
    return world.spawn(AffectingTimerCalculators())


def spawn_redundant_calculator(world, policy):
    return world.spawn(
        GoingEventValueCalculator(
            policy,
            ValueByInterpolation(0.0, 0.0, Interpolator()),
            TimerGoingEventType.CHANGE_TIME_MULTIPLIER_SPEED,
        )
    )


def fast_forward(world, seconds):
    world.time.advance_by(seconds)


def count_affected_entities(world):
    return sum(len(timer.affected_entities) for _, timer in world.query(EmittingTimer))


def request_emitting_timer_firing(world, affected_entity, duration):
    world.send(
        TimerFireRequest(
            timer=EmittingTimer([affected_entity], [], duration, TimerDoneEventType()),
            parent_sequence=None,
        )
    )


@pytest.mark.parametrize(
    "policy, expected_after_second_fire",
    [
        (TimerCalculatorSetPolicy.KEEP_NEW_TIMER, 1),
        (TimerCalculatorSetPolicy.IGNORE_NEW_IF_ASSIGNED, 1),
        (TimerCalculatorSetPolicy.APPEND_TO_TIMERS_OF_TYPE, 2),
    ],
)
def test_timer_policy(policy, expected_after_second_fire):
    world = World()
    calculator = spawn_redundant_calculator(world, policy)
    empty_entity = spawn_empty_entity(world)
    affected = TimerAffectedEntity(empty_entity, calculator)
    world.add_system(listen_for_emitting_timer_firing_requests)
    world.add_system(listen_for_update_affected_entities_after_timer_birth_requests)
    world.add_system(listen_for_affected_entity_removal_request)

    request_emitting_timer_firing(world, affected, TIMER_DURATION_IN_SECONDS)
    world.update()
    single = count_affected_entities(world)
    request_emitting_timer_firing(world, affected, TIMER_DURATION_IN_SECONDS)
    world.update()
    after_second = count_affected_entities(world)

    assert single == 1
    assert after_second == expected_after_second_fire


def _create_emitting_timers(world):
    empty_entity = spawn_empty_entity(world)
    timers = []
    for _ in range(2):
        calculator = spawn_redundant_calculator(
            world, TimerCalculatorSetPolicy.IGNORE_NEW_IF_ASSIGNED
        )
        timers.append(
            EmittingTimer(
                [TimerAffectedEntity(empty_entity, calculator)],
                [],
                TIMER_DURATION_IN_SECONDS,
                TimerDoneEventType.nothing(),
            )
        )
    return timers


def _sequence_spawner(looping):
    pending = [looping]

    def spawn_sequence(world):
        if not pending:
            return
        timers = _create_emitting_timers(world)
        if pending.pop():
            TimerSequence.spawn_looping_sequence_and_fire_first_timer(world, timers)
        else:
            TimerSequence.spawn_non_looping_sequence_and_fire_first_timer(world, timers)

    return spawn_sequence


def _status(world):
    return (
        len(world.query(GoingEventValueCalculator)),
        len(world.query(EmittingTimer)),
        len(world.query(TimerSequence)),
    )


@pytest.mark.parametrize("looping", [True, False])
def test_timer_sequence(looping):
    world = World()
    world.add_system(_sequence_spawner(looping))
    world.add_system(tick_emitting_timers)
    world.add_system(listen_for_emitting_timer_firing_requests)
    world.add_system(listen_for_done_sequence_timers)
    world.add_system(clear_done_timers)

    world.update()
    after_creation = _status(world)
    fast_forward(world, TIMER_DURATION_IN_SECONDS)
    world.update()
    world.update()
    after_first_done = _status(world)
    fast_forward(world, TIMER_DURATION_IN_SECONDS)
    world.update()
    world.update()
    after_last_done = _status(world)

    still_going = (2, 1, 1)
    assert after_creation == still_going
    assert after_first_done == still_going
    if looping:
        assert after_last_done == still_going
    else:
        assert after_last_done == (0, 0, 0)


def test_tick_sends_calculation_requests_and_done_event():
    world = World()
    target = spawn_empty_entity(world)
    calculator = spawn_redundant_calculator(world, TimerCalculatorSetPolicy.KEEP_NEW_TIMER)
    timer_entity = world.spawn(EmittingTimer([TimerAffectedEntity(target, calculator)], [], 2.0))

    fast_forward(world, 1.0)
    tick_emitting_timers(world)
    assert world.pending_events(CalculateAndSendGoingEvent) == [
        CalculateAndSendGoingEvent(calculator, target, 0.5)
    ]
    assert world.pending_events(TimerDoneEvent) == []

    tick_emitting_timers(world)
    done_events = world.pending_events(TimerDoneEvent)
    assert [event.timer_entity for event in done_events] == [timer_entity]
    assert done_events[0].timer_parent_sequence is None


def test_tick_applies_subscribed_multipliers():
    world = World()
    world.spawn(TimeMultiplier(TimeMultiplierId.GAME_TIME_MULTIPLIER, 2.0, True))
    world.spawn(TimeMultiplier(TimeMultiplierId.UI_TIME_MULTIPLIER, 4.0, True))
    timer_entity = world.spawn(
        EmittingTimer([], [TimeMultiplierId.GAME_TIME_MULTIPLIER], 1.0)
    )
    fast_forward(world, 0.25)
    tick_emitting_timers(world)
    assert world.get(timer_entity, EmittingTimer).normalized_progress == pytest.approx(0.5)


def test_tick_does_nothing_without_elapsed_time():
    world = World()
    timer_entity = world.spawn(EmittingTimer([], [], 1.0))
    tick_emitting_timers(world)
    assert world.get(timer_entity, EmittingTimer).normalized_progress == 0.0
    assert world.pending_events(TimerDoneEvent) == []


def test_firing_spawns_timer_with_parent_sequence():
    world = World()
    parent = TimerParentSequence(world.spawn(), 3)
    world.send(TimerFireRequest(EmittingTimer([], [], 5.0), parent))
    listen_for_emitting_timer_firing_requests(world)
    spawned = world.query(EmittingTimer, TimerParentSequence)
    assert len(spawned) == 1
    assert spawned[0][2] == parent
    births = world.pending_events(UpdateAffectedEntitiesAfterTimerBirth)
    assert len(births) == 1
    assert births[0].timer_entity == spawned[0][0]


def test_clear_done_timers_without_sequence_removes_calculators():
    world = World()
    target = spawn_empty_entity(world)
    calculator = spawn_redundant_calculator(world, TimerCalculatorSetPolicy.KEEP_NEW_TIMER)
    timer = EmittingTimer([TimerAffectedEntity(target, calculator)], [], 1.0)
    timer_entity = world.spawn(timer)
    world.send(TimerDoneEvent(TimerDoneEventType(), timer.affected_entities, timer_entity, None))
    clear_done_timers(world)
    assert not world.contains(timer_entity)
    assert not world.contains(calculator)
    assert world.contains(target)


def test_clear_done_timers_in_sequence_keeps_calculators():
    world = World()
    target = spawn_empty_entity(world)
    calculator = spawn_redundant_calculator(world, TimerCalculatorSetPolicy.KEEP_NEW_TIMER)
    timer = EmittingTimer([TimerAffectedEntity(target, calculator)], [], 1.0)
    timer_entity = world.spawn(timer)
    parent = TimerParentSequence(world.spawn(), 0)
    world.send(TimerDoneEvent(TimerDoneEventType(), timer.affected_entities, timer_entity, parent))
    clear_done_timers(world)
    assert not world.contains(timer_entity)
    assert world.contains(calculator)


@pytest.mark.parametrize("looping, expected_requests", [(True, 1), (False, 0)])
def test_clear_calculators_if_part_of_looping_sequence(looping, expected_requests):
    world = World()
    target = spawn_empty_entity(world)
    calculator = spawn_redundant_calculator(world, TimerCalculatorSetPolicy.KEEP_NEW_TIMER)
    timer = EmittingTimer([TimerAffectedEntity(target, calculator)], [], 1.0)
    sequence_entity = world.spawn(TimerSequence([timer], looping))
    world.send(TimerFireRequest(timer, TimerParentSequence(sequence_entity, 0)))
    clear_calculators_if_part_of_looping_sequence(world)
    requests = world.pending_events(ValueCalculatorRequest)
    assert requests == [ValueCalculatorRequest.initialize(calculator)] * expected_requests


def test_removal_request_for_missing_timer_is_reported(caplog):
    caplog.set_level(logging.INFO, logger="chronoplay")
    world = World()
    target = spawn_empty_entity(world)
    world.send(RemoveFromTimerAffectedEntities(world.spawn(), TimerAffectedEntity(target, None)))
    listen_for_affected_entity_removal_request(world)
    assert "Couldn't find timer to remove entity from" in caplog.text


def test_removal_request_for_unaffected_entity_is_reported(caplog):
    caplog.set_level(logging.INFO, logger="chronoplay")
    world = World()
    target = spawn_empty_entity(world)
    other = spawn_empty_entity(world)
    timer_entity = world.spawn(EmittingTimer([TimerAffectedEntity(target, None)], [], 1.0))
    world.send(RemoveFromTimerAffectedEntities(timer_entity, TimerAffectedEntity(other, None)))
    listen_for_affected_entity_removal_request(world)
    assert "Error when accessing affected entities" in caplog.text
    assert len(world.get(timer_entity, EmittingTimer).affected_entities) == 1


def test_removal_request_removes_entity():
    world = World()
    target = spawn_empty_entity(world)
    timer_entity = world.spawn(EmittingTimer([TimerAffectedEntity(target, None)], [], 1.0))
    world.send(RemoveFromTimerAffectedEntities(timer_entity, TimerAffectedEntity(target, None)))
    listen_for_affected_entity_removal_request(world)
    assert len(world.get(timer_entity, EmittingTimer).affected_entities) == 0


def test_birth_without_affecting_component_warns(caplog):
    caplog.set_level(logging.INFO, logger="chronoplay")
    world = World()
    bare_entity = world.spawn()
    calculator = spawn_redundant_calculator(world, TimerCalculatorSetPolicy.KEEP_NEW_TIMER)
    world.send(TimerFireRequest(EmittingTimer([TimerAffectedEntity(bare_entity, calculator)], [], 1.0)))
    listen_for_emitting_timer_firing_requests(world)
    listen_for_update_affected_entities_after_timer_birth_requests(world)
    assert "couldn't find entity in affecting timers component query" in caplog.text