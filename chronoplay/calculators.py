"""Value calculators for running timers and the per-entity record of affecting timers."""

from __future__ import annotations

from typing import Any, Generic, Iterator, Optional, TypeVar

from .interpolation import ValueByInterpolation
from .timer_types import (
    TimerAndCalculator,
    TimerCalculatorSetPolicy,
    TimerGoingEvent,
    TimerGoingEventType,
)
from .world import Entity

T = TypeVar("T")


class GoingEventValueCalculator(Generic[T]):
    """Turns timer progress into value changes for one kind of going event."""

    def __init__(
        self,
        set_policy: TimerCalculatorSetPolicy,
        calculator: ValueByInterpolation[T],
        going_event_type: TimerGoingEventType,
    ) -> None:
        self.set_policy = set_policy
        self._calculator = calculator
        self._going_event_type = going_event_type

    @property
    def going_event_type(self) -> TimerGoingEventType:
        return self._going_event_type

    def get_timer_going_event(
        self, normalized_progress: float, affected_entity: Entity
    ) -> TimerGoingEvent[T]:
        """Build the event carrying the value change since the previous call."""
        return TimerGoingEvent(
            event_type=self._going_event_type,
            entity=affected_entity,
            value_delta=self._calculator.calculate_delta(normalized_progress),
        )

    def initialize_calculator(self) -> None:
        self._calculator.initialize_previous_value()

    def __repr__(self) -> str:
        return (
            f"GoingEventValueCalculator(set_policy={self.set_policy!r}, "
            f"calculator={self._calculator!r}, going_event_type={self._going_event_type!r})"
        )


class AffectingTimerCalculators:
    """The timers (and their calculators) currently acting on an entity, by event type."""

    def __init__(self) -> None:
        self._by_type: dict[TimerGoingEventType, list[TimerAndCalculator]] = {}

    def get(self, going_event_type: TimerGoingEventType) -> Optional[list[TimerAndCalculator]]:
        timers = self._by_type.get(going_event_type)
        return None if timers is None else list(timers)

    def insert_get_rejected_value(
        self,
        key: TimerGoingEventType,
        value: TimerAndCalculator,
        policy: TimerCalculatorSetPolicy,
    ) -> Optional[list[TimerAndCalculator]]:
        """Record a new timer under ``policy``; return the timers that lost out, if any."""
        if policy is TimerCalculatorSetPolicy.KEEP_NEW_TIMER:
            replaced = self._by_type.get(key)
            self._by_type[key] = [value]
            return replaced
        if policy is TimerCalculatorSetPolicy.IGNORE_NEW_IF_ASSIGNED:
            if self._by_type.get(key):
                return [value]
            self._by_type[key] = [value]
            return None
        if policy is TimerCalculatorSetPolicy.APPEND_TO_TIMERS_OF_TYPE:
            self._by_type.setdefault(key, []).append(value)
            return None
        raise ValueError(f"unknown timer calculator set policy: {policy!r}")

    def remove(
        self, going_event_type: TimerGoingEventType, timer_entity: Entity
    ) -> Optional[TimerAndCalculator]:
        """Remove and return the first record of ``timer_entity`` under this type."""
        timers = self._by_type.get(going_event_type)
        if timers is None:
            return None
        for position, timer_and_calculator in enumerate(timers):
            if timer_and_calculator.timer == timer_entity:
                return timers.pop(position)
        return None

    def values(self) -> Iterator[list[TimerAndCalculator]]:
        return (list(timers) for timers in self._by_type.values())

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, AffectingTimerCalculators):
            return NotImplemented
        return self._by_type == other._by_type

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"AffectingTimerCalculators({self._by_type!r})"