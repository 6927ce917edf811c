"""Systems that fire, tick, trim and clear emitting timers."""

from __future__ import annotations

import copy

from .calculators import AffectingTimerCalculators, GoingEventValueCalculator
from .debug_log import LogCategory, print_error, print_info, print_warning
from .sequencing import TimerSequence
from .timer_types import (
    DEFAULT_TIME_MULTIPLIER,
    CalculateAndSendGoingEvent,
    EmittingTimer,
    RemoveFromTimerAffectedEntities,
    TimeMultiplier,
    TimeMultiplierId,
    TimeRelatedError,
    TimerAffectedEntitiesError,
    TimerAndCalculator,
    TimerDoneEvent,
    TimerFireRequest,
    TimerParentSequence,
    UpdateAffectedEntitiesAfterTimerBirth,
    ValueCalculatorRequest,
)
from .vec_based_array import VecBasedArray, VecBasedArrayError
from .world import Entity, EntityError, World, despawn_recursive_notify_on_fail


def listen_for_emitting_timer_firing_requests(world: World) -> None:
    """Spawn the requested timers and announce each one's birth."""
    for request in world.read_events(listen_for_emitting_timer_firing_requests, TimerFireRequest):
        components: list[object] = [copy.copy(request.timer)]
        if request.parent_sequence is not None:
            components.append(request.parent_sequence)
        timer_entity = world.spawn(*components)
        world.send(
            UpdateAffectedEntitiesAfterTimerBirth(
                timer_entity=timer_entity, newborn_timer=copy.copy(request.timer)
            )
        )


def clear_calculators_if_part_of_looping_sequence(world: World) -> None:
    """Ask for the calculators of timers refired by a looping sequence to start over."""
    for request in world.read_events(clear_calculators_if_part_of_looping_sequence, TimerFireRequest):
        parent = request.parent_sequence
        if parent is None:
            continue
        sequence = world.get(parent.parent_sequence, TimerSequence)
        if sequence is None or not sequence.loop_back_to_start:
            continue
        for calculator_entity in request.timer.calculator_entities_iter():
            world.send(ValueCalculatorRequest.initialize(calculator_entity))


def listen_for_update_affected_entities_after_timer_birth_requests(world: World) -> None:
    """Register newborn timers with the entities they affect, applying set policies."""
    for request in world.read_events(
        listen_for_update_affected_entities_after_timer_birth_requests,
        UpdateAffectedEntitiesAfterTimerBirth,
    ):
        for affected in request.newborn_timer.affected_entities:
            calculator_entity = affected.value_calculator_entity
            if calculator_entity is None:
                continue
            calculator = world.get(calculator_entity, GoingEventValueCalculator)
            if calculator is None:
                continue
            affecting_timers = world.get(affected.affected_entity, AffectingTimerCalculators)
            if affecting_timers is None:
                print_warning(
                    EntityError.entity_not_in_query(
                        "couldn't find entity in affecting timers component query upon timer firing"
                    ),
                    [LogCategory.REQUEST_NOT_FULFILLED, LogCategory.TIME],
                )
                continue
            _set_active_calculator_and_destroy_inactive(
                world,
                affecting_timers,
                TimerAndCalculator(timer=request.timer_entity, value_calculator=calculator_entity),
                calculator,
            )


def _set_active_calculator_and_destroy_inactive(
    world: World,
    affecting_timers: AffectingTimerCalculators,
    newborn: TimerAndCalculator,
    calculator: GoingEventValueCalculator,
) -> None:
    rejected = affecting_timers.insert_get_rejected_value(
        calculator.going_event_type, newborn, calculator.set_policy
    )
    for timer_and_calculator in rejected or ():
        _destroy_inactive_and_send_removal_request(world, timer_and_calculator)


def _destroy_inactive_and_send_removal_request(
    world: World, inactive: TimerAndCalculator
) -> None:
    world.despawn(inactive.value_calculator)
    timer = world.get(inactive.timer, EmittingTimer)
    if timer is None:
        return
    affected = timer.affected_entities.get_by_calculator_entity(inactive.value_calculator)
    if affected is not None:
        world.send(
            RemoveFromTimerAffectedEntities(timer_entity=inactive.timer, entity_to_remove=affected)
        )


def tick_emitting_timers(world: World) -> None:
    """Advance every timer by the frame time scaled by its multipliers."""
    time_delta = world.time.delta_seconds
    multipliers = [multiplier for _, multiplier in world.query(TimeMultiplier)]
    for timer_entity, timer in world.query(EmittingTimer):
        scaled_delta = time_delta * _calculate_time_multiplier(multipliers, timer.time_multipliers)
        _tick_emitting_timer_and_send_events(
            world, scaled_delta, timer, timer_entity, world.get(timer_entity, TimerParentSequence)
        )


def _calculate_time_multiplier(
    multipliers: list[TimeMultiplier], subscribed: VecBasedArray[TimeMultiplierId]
) -> float:
    factor = DEFAULT_TIME_MULTIPLIER
    for multiplier_id in subscribed:
        for multiplier in multipliers:
            if multiplier.id is multiplier_id:
                factor *= multiplier.value
    return factor


def _tick_emitting_timer_and_send_events(
    world: World,
    time_to_tick: float,
    timer: EmittingTimer,
    timer_entity: Entity,
    parent_sequence: TimerParentSequence | None,
) -> None:
    progress = timer.tick_and_get_normalized_progress(time_to_tick)
    if progress is None:
        return
    for affected in timer.affected_entities:
        if affected.value_calculator_entity is not None:
            world.send(
                CalculateAndSendGoingEvent(
                    going_event_value_calculator=affected.value_calculator_entity,
                    affected_entity=affected.affected_entity,
                    normalized_progress=progress,
                )
            )
    if timer.finished():
        world.send(
            TimerDoneEvent(
                event_type=timer.send_once_done,
                affected_entities=copy.copy(timer.affected_entities),
                timer_entity=timer_entity,
                timer_parent_sequence=parent_sequence,
            )
        )


def clear_done_timers(world: World) -> None:
    """Despawn done timers, and their calculators when no sequence still needs them."""
    for done_event in world.read_events(clear_done_timers, TimerDoneEvent):
        timer = world.get(done_event.timer_entity, EmittingTimer)
        if timer is None:
            continue
        despawn_recursive_notify_on_fail(world, done_event.timer_entity, "EmittingTimer")
        if done_event.timer_parent_sequence is None:
            for calculator_entity in timer.calculator_entities_iter():
                despawn_recursive_notify_on_fail(
                    world, calculator_entity, "an EmittingTimer's ValueCalculator"
                )


def listen_for_affected_entity_removal_request(world: World) -> None:
    """Remove entities from the timers that should no longer affect them."""
    for request in world.read_events(
        listen_for_affected_entity_removal_request, RemoveFromTimerAffectedEntities
    ):
        try:
            _remove_affected_entity(world, request)
        except TimeRelatedError as error:
            print_error(error, [LogCategory.REQUEST_NOT_FULFILLED])
        else:
            print_info(
                f"Removed entity {request.entity_to_remove!r} from timer: {request.timer_entity!r}",
                [LogCategory.TIME],
            )


def _remove_affected_entity(world: World, request: RemoveFromTimerAffectedEntities) -> None:
    timer = world.get(request.timer_entity, EmittingTimer)
    if timer is None:
        raise TimeRelatedError.timer_to_remove_from_not_found(request)
    try:
        timer.affected_entities.remove_by_item(request.entity_to_remove)
    except VecBasedArrayError as error:
        raise TimeRelatedError.timer_affected_entities_error(
            TimerAffectedEntitiesError.from_array_error(error)
        ) from error