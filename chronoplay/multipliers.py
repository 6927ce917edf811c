"""Systems that create time multipliers and change their values over time."""

from __future__ import annotations

from .calculators import AffectingTimerCalculators, GoingEventValueCalculator
from .debug_log import LogCategory, print_warning
from .interpolation import Interpolator, ValueByInterpolation
from .timer_types import (
    EmittingTimer,
    SetTimeMultiplier,
    TimeMultiplier,
    TimeMultiplierId,
    TimeRelatedError,
    TimerAffectedEntity,
    TimerCalculatorSetPolicy,
    TimerDoneEventType,
    TimerFireRequest,
    TimerGoingEvent,
    TimerGoingEventType,
)
from .world import Entity, World


def initialize_time_multipliers(world: World) -> None:
    """Spawn one multiplier entity per known multiplier id."""
    for multiplier_id in TimeMultiplierId:
        world.spawn(multiplier_id.to_initial_properties(), AffectingTimerCalculators())


def listen_for_time_multiplier_update_requests(world: World) -> None:
    """Apply multiplier-speed going events to the multipliers they target."""
    for event in world.read_events(listen_for_time_multiplier_update_requests, TimerGoingEvent):
        if event.event_type is not TimerGoingEventType.CHANGE_TIME_MULTIPLIER_SPEED:
            continue
        if not isinstance(event.value_delta, (int, float)):
            continue
        multiplier = world.get(event.entity, TimeMultiplier)
        if multiplier is not None:
            multiplier.update_value(event.value_delta)


def listen_for_time_multiplier_set_requests(world: World) -> None:
    """Start a timer that moves the requested multiplier to its new value."""
    for request in world.read_events(listen_for_time_multiplier_set_requests, SetTimeMultiplier):
        try:
            _fire_time_multiplier_changers(world, request)
        except TimeRelatedError as error:
            print_warning(error, [LogCategory.REQUEST_NOT_FULFILLED, LogCategory.TIME])


def _fire_time_multiplier_changers(world: World, request: SetTimeMultiplier) -> None:
    for multiplier_entity, multiplier in world.query(TimeMultiplier):
        if multiplier.id is not request.multiplier_id:
            continue
        if not multiplier.changeable:
            raise TimeRelatedError.attempted_to_change_fixed_time_multiplier(request.multiplier_id)
        _spawn_calculator_and_fire_multiplier_changer(world, request, multiplier_entity, multiplier)
        return
    raise TimeRelatedError.time_multiplier_not_found(request.multiplier_id)


def _spawn_calculator_and_fire_multiplier_changer(
    world: World, request: SetTimeMultiplier, multiplier_entity: Entity, multiplier: TimeMultiplier
) -> None:
    calculator_entity = world.spawn(
        GoingEventValueCalculator(
            TimerCalculatorSetPolicy.KEEP_NEW_TIMER,
            ValueByInterpolation.from_goal_and_current(
                multiplier.value, request.new_multiplier, Interpolator()
            ),
            TimerGoingEventType.CHANGE_TIME_MULTIPLIER_SPEED,
        )
    )
    world.send(
        TimerFireRequest(
            timer=EmittingTimer(
                [TimerAffectedEntity(multiplier_entity, calculator_entity)],
                [],
                request.duration,
                TimerDoneEventType(),
            ),
            parent_sequence=None,
        )
    )