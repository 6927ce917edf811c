"""Timer sequences: timers fired one after another, optionally looping."""

from __future__ import annotations

import copy
from typing import Iterable

from .debug_log import LogCategory, print_error
from .timer_types import (
    MAX_TIMERS_IN_SEQUENCE,
    EmittingTimer,
    TimerDoneEvent,
    TimerFireRequest,
    TimerParentSequence,
    TimerSequenceError,
    TimerSequenceStatus,
)
from .vec_based_array import VecBasedArray
from .world import Entity, EntityError, World, despawn_recursive_notify_on_fail


class TimerSequence:
    """An ordered list of timers; each one is fired when the one before it is done."""

    def __init__(self, timers_in_order: Iterable[EmittingTimer], loop_back_to_start: bool) -> None:
        self.timers_in_order: VecBasedArray[EmittingTimer] = VecBasedArray(
            timers_in_order, MAX_TIMERS_IN_SEQUENCE
        )
        self.loop_back_to_start = loop_back_to_start

    @classmethod
    def spawn_looping_sequence_and_fire_first_timer(
        cls, world: World, timers_in_order: Iterable[EmittingTimer]
    ) -> Entity:
        return cls.spawn_sequence_and_fire_first_timer(world, timers_in_order, True)

    @classmethod
    def spawn_non_looping_sequence_and_fire_first_timer(
        cls, world: World, timers_in_order: Iterable[EmittingTimer]
    ) -> Entity:
        return cls.spawn_sequence_and_fire_first_timer(world, timers_in_order, False)

    @classmethod
    def spawn_sequence_and_fire_first_timer(
        cls, world: World, timers_in_order: Iterable[EmittingTimer], loop_back_to_start: bool
    ) -> Entity:
        """Spawn a sequence entity and request its first timer; raise if there are no timers."""
        timers = list(timers_in_order)
        if not timers:
            raise TimerSequenceError.tried_to_fire_a_timer_sequence_with_no_timers()
        sequence = cls(timers, loop_back_to_start)
        sequence_entity = world.spawn(sequence)
        sequence.fire_first_timer(world, sequence_entity)
        return sequence_entity

    def fire_first_timer(self, world: World, sequence: Entity) -> None:
        """Send a fire request for the first timer of this sequence."""
        if len(self.timers_in_order) == 0:
            raise TimerSequenceError.tried_to_fire_a_timer_sequence_with_no_timers()
        world.send(
            TimerFireRequest(
                timer=copy.copy(self.timers_in_order.array[0]),
                parent_sequence=TimerParentSequence(sequence, 0),
            )
        )

    @classmethod
    def looping_sequence(cls, timers_in_order: Iterable[EmittingTimer]) -> "TimerSequence":
        return cls(timers_in_order, True)

    @classmethod
    def non_looping_sequence(cls, timers_in_order: Iterable[EmittingTimer]) -> "TimerSequence":
        return cls(timers_in_order, False)

    def get_timer_by_index(self, index: int) -> EmittingTimer:
        """Return a fresh copy of the timer at ``index``."""
        array = self.timers_in_order.array
        timer = array[index] if 0 <= index < len(array) else None
        if timer is None:
            raise TimerSequenceError.sequence_has_no_timer_in_index(index)
        return copy.copy(timer)

    def get_next_timer_index(self, done_timer_index: int) -> TimerSequenceStatus:
        next_index = done_timer_index + 1
        if next_index >= len(self.timers_in_order):
            if self.loop_back_to_start:
                return TimerSequenceStatus(next_timer_index=0, sequence_done=False)
            return TimerSequenceStatus(next_timer_index=None, sequence_done=True)
        return TimerSequenceStatus(next_timer_index=next_index, sequence_done=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimerSequence):
            return NotImplemented
        return (self.timers_in_order, self.loop_back_to_start) == (
            other.timers_in_order,
            other.loop_back_to_start,
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"TimerSequence(timers_in_order={self.timers_in_order!r}, "
            f"loop_back_to_start={self.loop_back_to_start!r})"
        )


def listen_for_done_sequence_timers(world: World) -> None:
    """Advance the sequences whose timers finished, clearing those that are done."""
    for done_event in world.read_events(listen_for_done_sequence_timers, TimerDoneEvent):
        parent = done_event.timer_parent_sequence
        if parent is None:
            continue
        timer_sequence = world.get(parent.parent_sequence, TimerSequence)
        if timer_sequence is None:
            print_error(
                EntityError.entity_not_in_query("timer sequence of a done timer"),
                [LogCategory.REQUEST_NOT_FULFILLED],
            )
            continue
        try:
            _advance_sequence(world, parent.index_in_sequence, parent.parent_sequence, timer_sequence)
        except TimerSequenceError as error:
            print_error(error, [LogCategory.TIME, LogCategory.REQUEST_NOT_FULFILLED])


def _advance_sequence(
    world: World, done_timer_index: int, sequence_entity: Entity, timer_sequence: TimerSequence
) -> None:
    status = timer_sequence.get_next_timer_index(done_timer_index)
    if status.next_timer_index is not None:
        world.send(
            TimerFireRequest(
                timer=timer_sequence.get_timer_by_index(status.next_timer_index),
                parent_sequence=TimerParentSequence(sequence_entity, status.next_timer_index),
            )
        )
    if status.sequence_done:
        for timer in timer_sequence.timers_in_order:
            for calculator_entity in timer.calculator_entities_iter():
                despawn_recursive_notify_on_fail(
                    world, calculator_entity, "an EmittingTimer's ValueCalculator"
                )
        despawn_recursive_notify_on_fail(world, sequence_entity, "timer sequence")