"""Systems turning timer progress into value changes and applying movement."""

from __future__ import annotations

from .calculators import AffectingTimerCalculators, GoingEventValueCalculator
from .debug_log import LogCategory, print_error
from .geometry import MovementType, Transform, Vec3
from .timer_types import (
    CalculateAndSendGoingEvent,
    TimerDoneEvent,
    TimerGoingEvent,
    ValueCalculatorRequest,
)
from .world import EntityError, World


def calculate_value_and_send_going_event(world: World) -> None:
    """Answer each calculation request with a going event from its calculator."""
    for request in world.read_events(calculate_value_and_send_going_event, CalculateAndSendGoingEvent):
        calculator = world.get(request.going_event_value_calculator, GoingEventValueCalculator)
        if calculator is not None:
            world.send(
                calculator.get_timer_going_event(
                    request.normalized_progress, request.affected_entity
                )
            )


def initialize_calculators(world: World) -> None:
    """Reset the calculators named by initialize requests."""
    for request in world.read_events(initialize_calculators, ValueCalculatorRequest):
        if request.kind is not ValueCalculatorRequest.Kind.INITIALIZE:
            continue
        calculator = world.get(request.entity, GoingEventValueCalculator)
        if calculator is not None:
            calculator.initialize_calculator()


def clear_done_timers_from_affecting_timers(world: World) -> None:
    """Drop finished timers from every entity's record of affecting timers."""
    for done_event in world.read_events(clear_done_timers_from_affecting_timers, TimerDoneEvent):
        for calculator_entity in done_event.affected_entities.calculator_entities_iter():
            calculator = world.get(calculator_entity, GoingEventValueCalculator)
            if calculator is None:
                continue
            for _, affecting_timers in world.query(AffectingTimerCalculators):
                affecting_timers.remove(calculator.going_event_type, done_event.timer_entity)


def listen_for_translation_update_requests(world: World) -> None:
    """Move entities by the deltas of direct-line movement events."""
    for event in world.read_events(listen_for_translation_update_requests, TimerGoingEvent):
        if event.event_type.movement_type is not MovementType.IN_DIRECT_LINE:
            continue
        if not isinstance(event.value_delta, Vec3):
            continue
        transform = world.get(event.entity, Transform)
        if transform is None:
            print_error(
                EntityError.entity_not_in_query(
                    f"couldn't fetch entity of type {Transform.__name__} from query (mut)"
                ),
                [LogCategory.CRUCIAL, LogCategory.REQUEST_NOT_FULFILLED],
            )
            return
        transform.translation = transform.translation + event.value_delta