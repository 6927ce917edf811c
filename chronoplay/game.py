"""The playground game: orbs spawned and collected by timers, and a patrolling entity."""

from __future__ import annotations

from dataclasses import dataclass

from .calculators import AffectingTimerCalculators, GoingEventValueCalculator
from .debug_log import LogCategory, print_error
from .geometry import MovementType, PathTravelType, Transform, Vec2, Vec3
from .interpolation import Interpolator, ValueByInterpolation
from .sequencing import TimerSequence
from .timer_types import (
    EmittingTimer,
    TimeMultiplierId,
    TimerAffectedEntity,
    TimerCalculatorSetPolicy,
    TimerDoneEventType,
    TimerFireRequest,
    TimerGoingEventType,
    TimerSequenceError,
)
from .world import DespawnPolicy, Entity, World, at_limit

ORB_MAX_COUNT = 3
ORB_MAX_RADIUS = 42.0
ORB_COLLECTION_TIME = 0.4
ORB_COLLECTION_POWER = 2.0

EXAMPLE_PATROLLER_SQUARE_DURATION = 1.0
EXAMPLE_PATROLLER_DIAGON_DURATION = 2.0
PATROLLER_INTERPOLATOR_POWER = 2.0

MULTIPLIER_WHEN_SLOW_MOTION = 0.005


@dataclass(frozen=True)
class SpawnOrb:
    """A request to spawn an orb at a point of the game world."""

    location: Vec2


@dataclass(frozen=True)
class CollectAllOrbs:
    """A request to pull every orb towards a point and despawn it there."""

    location: Vec2


@dataclass(frozen=True)
class Orb:
    """Marks an orb entity."""


@dataclass(frozen=True)
class Patroller:
    """Marks a patrolling entity."""


def _to_vec3(location: Vec2) -> Vec3:
    return Vec3(location.x, location.y, 0.0)


def spawn_orb(world: World) -> None:
    """Spawn requested orbs while fewer than the maximum existed at the start of the frame."""
    existing_orbs = [orb for _, orb in world.query(Orb)]
    for request in world.read_events(spawn_orb, SpawnOrb):
        if at_limit(existing_orbs, ORB_MAX_COUNT):
            return
        world.spawn(
            Transform(translation=_to_vec3(request.location)),
            AffectingTimerCalculators(),
            Orb(),
        )


def collect_all_orbs(world: World) -> None:
    """Fire a timer that moves every orb to the target and despawns it when done."""
    for request in world.read_events(collect_all_orbs, CollectAllOrbs):
        affected = _orbs_and_calculators_for_timer(world, request.location)
        world.send(
            TimerFireRequest(
                timer=EmittingTimer(
                    affected,
                    [TimeMultiplierId.GAME_TIME_MULTIPLIER],
                    ORB_COLLECTION_TIME,
                    TimerDoneEventType.despawn_affected_entities(
                        DespawnPolicy.DESPAWN_SELF_AND_REMOVE_FROM_AFFECTING_TIMERS
                    ),
                ),
                parent_sequence=None,
            )
        )


def _orbs_and_calculators_for_timer(world: World, target: Vec2) -> list[TimerAffectedEntity]:
    goal = _to_vec3(target)
    affected = []
    for orb_entity, _, transform in world.query(Orb, Transform):
        calculator_entity = world.spawn(
            GoingEventValueCalculator(
                TimerCalculatorSetPolicy.IGNORE_NEW_IF_ASSIGNED,
                ValueByInterpolation.from_goal_and_current(
                    transform.translation, goal, Interpolator(ORB_COLLECTION_POWER)
                ),
                TimerGoingEventType.move(MovementType.IN_DIRECT_LINE),
            )
        )
        affected.append(TimerAffectedEntity(orb_entity, calculator_entity))
    return affected


def spawn_patroller(world: World) -> Entity:
    """Spawn the patrolling entity and return it."""
    return world.spawn(
        Transform(translation=Vec3(250.0, 250.0, 0.0)),
        AffectingTimerCalculators(),
        Patroller(),
    )


def initiate_square_movement(world: World) -> None:
    """Start every patroller looping around a square."""
    for patroller_entity, _ in world.query(Patroller):
        path = PathTravelType.CYCLE.apply_to_path(
            [
                Vec3(100.0, 100.0, 0.0),
                Vec3(100.0, -100.0, 0.0),
                Vec3(-100.0, -100.0, 0.0),
                Vec3(-100.0, 100.0, 0.0),
            ]
        )
        _initiate_movement_along_path(
            world, patroller_entity, EXAMPLE_PATROLLER_SQUARE_DURATION, path
        )


def initiate_diagonal_movement(world: World) -> None:
    """Start every patroller looping back and forth along a diagonal."""
    for patroller_entity, _ in world.query(Patroller):
        path = PathTravelType.CYCLE.apply_to_path(
            [Vec3(150.0, 150.0, 0.0), Vec3(-150.0, -150.0, 0.0)]
        )
        _initiate_movement_along_path(
            world, patroller_entity, EXAMPLE_PATROLLER_DIAGON_DURATION, path
        )


def _initiate_movement_along_path(
    world: World, patroller_entity: Entity, timers_duration: float, path: list[Vec3]
) -> None:
    timers = [
        EmittingTimer(
            [TimerAffectedEntity(patroller_entity, world.spawn(calculator))],
            [TimeMultiplierId.GAME_TIME_MULTIPLIER],
            timers_duration,
            TimerDoneEventType.nothing(),
        )
        for calculator in _value_calculators_for_path(path, PATROLLER_INTERPOLATOR_POWER)
    ]
    try:
        TimerSequence.spawn_looping_sequence_and_fire_first_timer(world, timers)
    except TimerSequenceError as error:
        print_error(error, [LogCategory.TIME, LogCategory.REQUEST_NOT_FULFILLED])


def _value_calculators_for_path(
    path: list[Vec3], interpolator_power: float
) -> list[GoingEventValueCalculator]:
    return [
        GoingEventValueCalculator(
            TimerCalculatorSetPolicy.APPEND_TO_TIMERS_OF_TYPE,
            ValueByInterpolation.from_goal_and_current(
                start, goal, Interpolator(interpolator_power)
            ),
            TimerGoingEventType.move(MovementType.IN_DIRECT_LINE),
        )
        for start, goal in zip(path, path[1:])
    ]