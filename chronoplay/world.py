"""A small entity/component world with double-buffered events and ordered systems."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Hashable, Iterable, Optional, Union

from .debug_log import LogCategory, print_error, print_warning


@dataclass(frozen=True, order=True)
class Entity:
    index: int


@dataclass
class Time:
    """Frame time; the delta stays as set until it is advanced again."""

    delta_seconds: float = 0.0
    elapsed_seconds: float = 0.0

    def advance_by(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"cannot advance time by a negative amount: {seconds}")
        self.delta_seconds = float(seconds)
        self.elapsed_seconds += seconds


class EntityError(Exception):
    """An entity could not be reached."""

    def __init__(self, message: str, detail: str) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    @classmethod
    def entity_not_in_query(cls, detail: str) -> "EntityError":
        return cls(f"Error getting entity, {detail}", detail)

    @classmethod
    def commands_couldnt_get_entity(cls, detail: str) -> "EntityError":
        return cls(f"Commands couldn't get entity, {detail}", detail)

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityError):
            return NotImplemented
        return self.message == other.message

    def __hash__(self) -> int:
        return hash(self.message)


class DespawnPolicy(Enum):
    """What else goes when an affected entity is despawned; the first is the default."""

    DESPAWN_SELF = auto()
    DESPAWN_SELF_AND_REMOVE_FROM_AFFECTING_TIMERS = auto()
    DESPAWN_SELF_AND_AFFECTING_TIMERS_AND_PARENT_SEQUENCES = auto()


class InputSystemSet(Enum):
    LISTENING_PREPARATIONS = auto()
    LISTENING = auto()
    HANDLING = auto()


class TickingSystemSet(Enum):
    PRE_TICKING_EARLY_PREPARATIONS = auto()
    PRE_TICKING_PREPARATIONS = auto()
    PRE_TICKING = auto()
    TIMER_TICKING = auto()
    POST_TICKING_IMMEDIATE = auto()
    POST_TICKING = auto()


class EndOfFrameSystemSet(Enum):
    PRE_TIMER_CLEARING = auto()
    TIMER_CLEARING = auto()
    POST_TIMER_CLEARING = auto()
    LATE_DESPAWN = auto()
    POST_LATE_DESPAWN = auto()


SystemSet = Union[InputSystemSet, TickingSystemSet, EndOfFrameSystemSet]
System = Callable[["World"], None]

_SET_RANK = {
    system_set: rank
    for rank, system_set in enumerate(
        itertools.chain(InputSystemSet, TickingSystemSet, EndOfFrameSystemSet)
    )
}
_UNSET_RANK = -1


@dataclass
class _EventChannel:
    previous: list[tuple[int, Any]] = field(default_factory=list)
    current: list[tuple[int, Any]] = field(default_factory=list)

    def swap(self) -> None:
        self.previous = self.current
        self.current = []

    def stored(self) -> list[tuple[int, Any]]:
        return self.previous + self.current


class World:
    """Entities with typed components, events that live for two updates, and systems.

    Systems without a set run first, in the order they were added; the rest run by
    set: input, then ticking, then end of frame.
    """

    def __init__(self) -> None:
        self._entities: dict[Entity, dict[type, Any]] = {}
        self._entity_indices = itertools.count()
        self._channels: dict[type, _EventChannel] = {}
        self._cursors: dict[tuple[Hashable, type], int] = {}
        self._sequence = itertools.count()
        self._systems: list[tuple[int, int, System]] = []
        self.resources: dict[type, Any] = {Time: Time()}

    @property
    def time(self) -> Time:
        return self.resources[Time]

    def spawn(self, *args: Any) -> Entity:
        """Create an entity holding the given components."""
        entity = Entity(next(self._entity_indices))
        self._entities[entity] = {}
        self.insert(entity, *args)
        return entity

    def despawn(self, entity: Entity) -> bool:
        """Remove the entity; return whether it existed."""
        return self._entities.pop(entity, None) is not None

    def contains(self, entity: Entity) -> bool:
        return entity in self._entities

    def get(self, entity: Entity, component_type: type) -> Any:
        """Return the entity's component of this type, or None."""
        components = self._entities.get(entity)
        return None if components is None else components.get(component_type)

    def insert(self, entity: Entity, *args: Any) -> None:
        """Add components to an entity, replacing any of the same type."""
        components = self._entities.get(entity)
        if components is None:
            raise EntityError.commands_couldnt_get_entity(f"{entity!r} (insert attempt)")
        for component in args:
            components[type(component)] = component

    def remove_component(self, entity: Entity, component_type: type) -> Any:
        """Remove and return the component of this type, or None if it had none."""
        components = self._entities.get(entity)
        if components is None:
            raise EntityError.commands_couldnt_get_entity(f"{entity!r} (component removal attempt)")
        return components.pop(component_type, None)

    def query(self, *args: type) -> list[tuple[Any, ...]]:
        """Return ``(entity, *components)`` for every entity holding all the given types."""
        if not args:
            raise TypeError("query needs at least one component type")
        return [
            (entity, *(components[component_type] for component_type in args))
            for entity, components in list(self._entities.items())
            if all(component_type in components for component_type in args)
        ]

    def send(self, event: Any) -> None:
        self._channels.setdefault(type(event), _EventChannel()).current.append(
            (next(self._sequence), event)
        )

    def read_events(self, reader_key: Hashable, event_type: type) -> list[Any]:
        """Return the events of this type that ``reader_key`` has not read yet."""
        channel = self._channels.get(event_type)
        if channel is None:
            return []
        cursor_key = (reader_key, event_type)
        last_read = self._cursors.get(cursor_key, -1)
        fresh = [(sequence, event) for sequence, event in channel.stored() if sequence > last_read]
        if fresh:
            self._cursors[cursor_key] = fresh[-1][0]
        return [event for _, event in fresh]

    def pending_events(self, event_type: type) -> list[Any]:
        """Return every stored event of this type, read or not."""
        channel = self._channels.get(event_type)
        return [] if channel is None else [event for _, event in channel.stored()]

    def add_system(self, system: System, system_set: Optional[SystemSet] = None) -> None:
        if system_set is None:
            rank = _UNSET_RANK
        elif system_set in _SET_RANK:
            rank = _SET_RANK[system_set]
        else:
            raise ValueError(f"unknown system set: {system_set!r}")
        self._systems.append((rank, len(self._systems), system))

    def update(self) -> None:
        """Age the event buffers, then run every system once in order."""
        for channel in self._channels.values():
            channel.swap()
        for _, _, system in sorted(self._systems, key=lambda entry: entry[:2]):
            system(self)


def remove_component_notify_on_fail(world: World, entity: Entity, component_type: type) -> bool:
    """Remove a component, logging an error if the entity is gone; return success."""
    if not world.contains(entity):
        print_error(
            EntityError.commands_couldnt_get_entity(
                f"with component: {component_type.__name__!r} (component removal attempt)"
            ),
            [LogCategory.REQUEST_NOT_FULFILLED],
        )
        return False
    world.remove_component(entity, component_type)
    return True


def despawn_recursive_notify_on_fail(world: World, entity: Entity, entity_name: str) -> bool:
    """Despawn an entity, logging an error if it is already gone; return success."""
    if world.despawn(entity):
        return True
    print_error(
        EntityError.commands_couldnt_get_entity(f"{entity_name} (despawn attempt)"),
        [LogCategory.REQUEST_NOT_FULFILLED],
    )
    return False


def at_limit(items: Iterable[Any], max_count: int) -> bool:
    """Return whether there are already ``max_count`` items, warning if so."""
    items = list(items)
    if len(items) >= max_count:
        print_warning(
            f"{items!r} reached max count {max_count}",
            [LogCategory.VALUE_VALIDATION, LogCategory.REQUEST_NOT_FULFILLED],
        )
        return True
    return False