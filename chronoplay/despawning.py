"""Despawning of entities whose timers asked for it, with their related timers."""

from __future__ import annotations

from .calculators import AffectingTimerCalculators
from .debug_log import LogCategory, print_warning
from .timer_types import (
    RemoveFromTimerAffectedEntities,
    TimerAffectedEntity,
    TimerDoneEvent,
    TimerParentSequence,
)
from .world import DespawnPolicy, Entity, World, despawn_recursive_notify_on_fail


def listen_for_despawn_requests_from_timers(world: World) -> None:
    """Despawn the affected entities of done timers that request it, per their policy."""
    for event in world.read_events(listen_for_despawn_requests_from_timers, TimerDoneEvent):
        policy = event.event_type.despawn_policy
        if policy is None:
            continue
        for affected in event.affected_entities:
            if policy is DespawnPolicy.DESPAWN_SELF_AND_REMOVE_FROM_AFFECTING_TIMERS:
                _remove_from_all_affecting_timers(world, affected.affected_entity)
            elif policy is DespawnPolicy.DESPAWN_SELF_AND_AFFECTING_TIMERS_AND_PARENT_SEQUENCES:
                _destroy_affecting_timers_and_calculators_and_sequences(
                    world, affected.affected_entity
                )
            despawn_recursive_notify_on_fail(
                world,
                affected.affected_entity,
                "(affected entity from timer despawn affected entities request)",
            )


def _remove_from_all_affecting_timers(world: World, affected_entity: Entity) -> None:
    affecting_timers = world.get(affected_entity, AffectingTimerCalculators)
    if affecting_timers is None:
        print_warning(
            f"Was asked to remove entity {affected_entity!r} from affecting timers, "
            "but it has none.",
            [LogCategory.REQUEST_NOT_FULFILLED],
        )
        return
    for timers_of_type in affecting_timers.values():
        for affecting_timer in timers_of_type:
            world.send(
                RemoveFromTimerAffectedEntities(
                    timer_entity=affecting_timer.timer,
                    entity_to_remove=TimerAffectedEntity(
                        affected_entity, affecting_timer.value_calculator
                    ),
                )
            )


def _destroy_affecting_timers_and_calculators_and_sequences(
    world: World, affected_entity: Entity
) -> None:
    affecting_timers = world.get(affected_entity, AffectingTimerCalculators)
    if affecting_timers is None:
        print_warning(
            f"Was asked to destroy the calculator, timer and sequence of entity "
            f"{affected_entity!r}, but it has no affecting timers component.",
            [LogCategory.REQUEST_NOT_FULFILLED],
        )
        return
    for timers_of_type in affecting_timers.values():
        for affecting_timer in timers_of_type:
            despawn_recursive_notify_on_fail(world, affecting_timer.value_calculator, "EmittingTimer")
            if not world.contains(affecting_timer.timer):
                continue
            parent = world.get(affecting_timer.timer, TimerParentSequence)
            world.despawn(affecting_timer.timer)
            if parent is not None:
                world.despawn(parent.parent_sequence)