"""Timers, the events they exchange, time multipliers and time-related errors."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Generic, Iterable, Iterator, Optional, TypeVar

from .debug_log import LogCategory, print_warning
from .geometry import MovementType
from .validation import clamp_and_notify
from .vec_based_array import (
    FoundNoItemToMatchWith,
    IndexOutOfRange,
    ItemWithAffectedEntityNotFound,
    VecBasedArray,
    VecBasedArrayError,
)
from .world import DespawnPolicy, Entity

T = TypeVar("T")

AN_HOUR_IN_SECONDS = 3600.0
A_MILLISECOND_IN_SECONDS = 0.001
A_MINUTE_IN_SECONDS = 60.0

MIN_TIME_MULTIPLIER = 0.001
MAX_TIME_MULTIPLIER = 100.0
DEFAULT_TIME_MULTIPLIER = 1.0
TIMER_MAX_ASSIGNED_MULTIPLIERS = 5
TIMER_MAX_ASSIGNED_ENTITIES = 12
MAX_TIMERS_IN_SEQUENCE = 8


@dataclass(frozen=True)
class TimerAffectedEntity:
    """An entity a timer acts on, with the calculator that produces its values."""

    affected_entity: Entity
    value_calculator_entity: Optional[Entity] = None


@dataclass(frozen=True)
class TimerAndCalculator:
    timer: Entity
    value_calculator: Entity


class TimerCalculatorSetPolicy(Enum):
    """How a new timer is treated when an entity already has timers of its type."""

    KEEP_NEW_TIMER = auto()
    IGNORE_NEW_IF_ASSIGNED = auto()
    APPEND_TO_TIMERS_OF_TYPE = auto()


@dataclass(frozen=True)
class TimerDoneEventType:
    """What happens once a timer is done; no despawn policy means nothing."""

    despawn_policy: Optional[DespawnPolicy] = None

    @classmethod
    def nothing(cls) -> "TimerDoneEventType":
        return cls()

    @classmethod
    def despawn_affected_entities(cls, policy: DespawnPolicy) -> "TimerDoneEventType":
        return cls(policy)

    @property
    def is_nothing(self) -> bool:
        return self.despawn_policy is None


class TimerGoingEventType(Enum):
    """The kind of change a running timer drives."""

    CHANGE_TIME_MULTIPLIER_SPEED = "change_time_multiplier_speed"
    MOVE_IN_DIRECT_LINE = MovementType.IN_DIRECT_LINE

    @classmethod
    def move(cls, movement_type: MovementType) -> "TimerGoingEventType":
        return cls(movement_type)

    @property
    def movement_type(self) -> Optional[MovementType]:
        return self.value if isinstance(self.value, MovementType) else None


class TimeMultiplierId(Enum):
    """Known time multipliers; the first one, real time, is the default."""

    REAL_TIME = auto()
    GAME_TIME_MULTIPLIER = auto()
    UI_TIME_MULTIPLIER = auto()

    @classmethod
    def default(cls) -> "TimeMultiplierId":
        return cls.REAL_TIME

    def to_initial_properties(self) -> "TimeMultiplier":
        return TimeMultiplier(self, DEFAULT_TIME_MULTIPLIER, self is not TimeMultiplierId.default())


class _DescribedError(Exception):
    """An error carrying a readable message and the value it is about."""

    def __init__(self, message: str, subject: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.subject = subject

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _DescribedError):
            return NotImplemented
        return type(self) is type(other) and (self.message, self.subject) == (
            other.message,
            other.subject,
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.message))


class TimerAffectedEntitiesError(_DescribedError):
    @classmethod
    def found_no_affected_entity_to_match_with(
        cls, affected_entity: Any
    ) -> "TimerAffectedEntitiesError":
        return cls(f"Found no affected entity to match with {affected_entity!r}", affected_entity)

    @classmethod
    def index_out_of_range_for_affected_entities(cls, index: int) -> "TimerAffectedEntitiesError":
        return cls(f"Index {index!r} out of range for timer affected entities", index)

    @classmethod
    def item_with_affected_entity_not_found(cls, entity: Entity) -> "TimerAffectedEntitiesError":
        return cls(f"The timer doesn't affect this entity: {entity!r}", entity)

    @classmethod
    def from_array_error(cls, error: VecBasedArrayError) -> "TimerAffectedEntitiesError":
        """Describe an affected-entities array failure in timer terms."""
        if isinstance(error, FoundNoItemToMatchWith):
            return cls.found_no_affected_entity_to_match_with(error.item)
        if isinstance(error, IndexOutOfRange):
            return cls.index_out_of_range_for_affected_entities(error.index)
        if isinstance(error, ItemWithAffectedEntityNotFound):
            return cls.item_with_affected_entity_not_found(error.entity)
        raise TypeError(f"not a vec-based array error: {error!r}")


class TimeRelatedError(_DescribedError):
    @classmethod
    def time_multiplier_not_found(cls, multiplier_id: TimeMultiplierId) -> "TimeRelatedError":
        return cls(f"Time processor with id {multiplier_id.name} not found", multiplier_id)

    @classmethod
    def attempted_to_change_fixed_time_multiplier(
        cls, multiplier_id: TimeMultiplierId
    ) -> "TimeRelatedError":
        return cls(
            f"Attempted to change fixed multiplier time processor with id {multiplier_id.name}",
            multiplier_id,
        )

    @classmethod
    def timer_to_remove_from_not_found(cls, event: Any) -> "TimeRelatedError":
        return cls(f"Couldn't find timer to remove entity from. Event: {event!r}", event)

    @classmethod
    def timer_affected_entities_error(
        cls, error: TimerAffectedEntitiesError
    ) -> "TimeRelatedError":
        return cls(f"Error when accessing affected entities: {error}", error)


class TimerSequenceError(_DescribedError):
    @classmethod
    def sequence_has_no_timer_in_index(cls, index: int) -> "TimerSequenceError":
        return cls(
            "Tried to fire a sequence timer, but the sequence has no timer of index "
            f"{index!r}",
            index,
        )

    @classmethod
    def tried_to_fire_a_timer_sequence_with_no_timers(cls) -> "TimerSequenceError":
        return cls("Tried to fire a timer sequence with an empty timer list")


class TimeMultiplier:
    """A named factor applied to the time that timers subscribed to it see."""

    def __init__(self, multiplier_id: TimeMultiplierId, value: float, changeable: bool) -> None:
        self._id = multiplier_id
        self._value = clamp_and_notify(value, MIN_TIME_MULTIPLIER, MAX_TIME_MULTIPLIER)
        self._changeable = changeable

    @property
    def id(self) -> TimeMultiplierId:
        return self._id

    @property
    def value(self) -> float:
        return self._value

    @property
    def changeable(self) -> bool:
        return self._changeable

    def update_value(self, value_delta: float) -> None:
        """Shift the value, or warn and leave it if this multiplier is fixed."""
        if self._changeable:
            self._value += value_delta
        else:
            print_warning(
                TimeRelatedError.attempted_to_change_fixed_time_multiplier(self._id),
                [LogCategory.REQUEST_NOT_FULFILLED, LogCategory.TIME],
            )

    def __repr__(self) -> str:
        return (
            f"TimeMultiplier(id={self._id.name}, value={self._value!r}, "
            f"changeable={self._changeable!r})"
        )


class EmittingTimer:
    """A timer that reports its normalized progress to the entities it affects."""

    def __init__(
        self,
        affected_entities: Iterable[TimerAffectedEntity],
        time_multipliers: Iterable[TimeMultiplierId],
        duration: float,
        send_once_done: TimerDoneEventType = TimerDoneEventType(),
    ) -> None:
        self.affected_entities: VecBasedArray[TimerAffectedEntity] = VecBasedArray(
            affected_entities, TIMER_MAX_ASSIGNED_ENTITIES
        )
        self.time_multipliers: VecBasedArray[TimeMultiplierId] = VecBasedArray(
            time_multipliers, TIMER_MAX_ASSIGNED_MULTIPLIERS
        )
        self._duration = clamp_and_notify(duration, A_MILLISECOND_IN_SECONDS, AN_HOUR_IN_SECONDS)
        self.send_once_done = send_once_done
        self._elapsed_time = 0.0
        self._normalized_progress = 0.0

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def elapsed_time(self) -> float:
        return self._elapsed_time

    @property
    def normalized_progress(self) -> float:
        return self._normalized_progress

    def affected_entities_iter(self) -> Iterator[Entity]:
        return self.affected_entities.affected_entities_iter()

    def calculator_entities_iter(self) -> Iterator[Entity]:
        return self.affected_entities.calculator_entities_iter()

    def reset(self) -> None:
        self._elapsed_time = 0.0
        self._normalized_progress = 0.0

    def finished(self) -> bool:
        return self._normalized_progress >= 1.0

    def tick_and_get_normalized_progress(self, processed_time: float) -> Optional[float]:
        """Advance by ``processed_time``; return the new progress, or None if nothing moved."""
        if processed_time > 0.0 and not self.finished():
            self._elapsed_time += processed_time
            self._normalized_progress = min(self._elapsed_time / self._duration, 1.0)
            return self._normalized_progress
        return None

    def __copy__(self) -> "EmittingTimer":
        clone = EmittingTimer.__new__(EmittingTimer)
        clone.affected_entities = copy.copy(self.affected_entities)
        clone.time_multipliers = copy.copy(self.time_multipliers)
        clone._duration = self._duration
        clone.send_once_done = self.send_once_done
        clone._elapsed_time = self._elapsed_time
        clone._normalized_progress = self._normalized_progress
        return clone

    def _state(self) -> tuple[Any, ...]:
        return (
            self.affected_entities,
            self.time_multipliers,
            self._duration,
            self.send_once_done,
            self._elapsed_time,
            self._normalized_progress,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EmittingTimer):
            return NotImplemented
        return self._state() == other._state()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"EmittingTimer(affected_entities={self.affected_entities!r}, "
            f"time_multipliers={self.time_multipliers!r}, duration={self._duration!r}, "
            f"send_once_done={self.send_once_done!r}, elapsed_time={self._elapsed_time!r}, "
            f"normalized_progress={self._normalized_progress!r})"
        )


@dataclass(frozen=True)
class TimerParentSequence:
    parent_sequence: Entity
    index_in_sequence: int


@dataclass(frozen=True)
class TimerSequenceStatus:
    next_timer_index: Optional[int]
    sequence_done: bool


@dataclass
class TimerDoneEvent:
    event_type: TimerDoneEventType
    affected_entities: VecBasedArray
    timer_entity: Entity
    timer_parent_sequence: Optional[TimerParentSequence] = None


@dataclass
class TimerFireRequest:
    timer: EmittingTimer
    parent_sequence: Optional[TimerParentSequence] = None


@dataclass(frozen=True)
class TimerGoingEvent(Generic[T]):
    event_type: TimerGoingEventType
    entity: Entity
    value_delta: T


@dataclass(frozen=True)
class CalculateAndSendGoingEvent:
    going_event_value_calculator: Entity
    affected_entity: Entity
    normalized_progress: float


@dataclass(frozen=True)
class RemoveFromTimerAffectedEntities:
    timer_entity: Entity
    entity_to_remove: TimerAffectedEntity


@dataclass(frozen=True)
class SetTimeMultiplier:
    multiplier_id: TimeMultiplierId
    new_multiplier: float
    duration: float


@dataclass
class UpdateAffectedEntitiesAfterTimerBirth:
    timer_entity: Entity
    newborn_timer: EmittingTimer


@dataclass(frozen=True)
class ValueCalculatorRequest:
    """A request to destroy or re-initialize a value calculator entity."""

    class Kind(Enum):
        DESTROY = auto()
        INITIALIZE = auto()

    kind: "ValueCalculatorRequest.Kind"
    entity: Entity

    @classmethod
    def destroy(cls, entity: Entity) -> "ValueCalculatorRequest":
        return cls(cls.Kind.DESTROY, entity)

    @classmethod
    def initialize(cls, entity: Entity) -> "ValueCalculatorRequest":
        return cls(cls.Kind.INITIALIZE, entity)