"""Assembly of the playground world and the command that runs it."""

from __future__ import annotations

import argparse
import itertools
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .debug_log import create_new_log_file
from .despawning import listen_for_despawn_requests_from_timers
from .game import (
    collect_all_orbs,
    initiate_diagonal_movement,
    initiate_square_movement,
    spawn_orb,
    spawn_patroller,
)
from .going_events import (
    calculate_value_and_send_going_event,
    clear_done_timers_from_affecting_timers,
    initialize_calculators,
    listen_for_translation_update_requests,
)
from .input import (
    KEYBOARD_INPUT,
    MOUSE_INPUT,
    ButtonInput,
    CursorWorldPosition,
    listen_for_mouse_clicks,
    listen_for_move_requests,
    slow_time_when_pressing_space,
)
from .multipliers import (
    initialize_time_multipliers,
    listen_for_time_multiplier_set_requests,
    listen_for_time_multiplier_update_requests,
)
from .sequencing import listen_for_done_sequence_timers
from .timer_systems import (
    clear_calculators_if_part_of_looping_sequence,
    clear_done_timers,
    listen_for_affected_entity_removal_request,
    listen_for_emitting_timer_firing_requests,
    listen_for_update_affected_entities_after_timer_birth_requests,
    tick_emitting_timers,
)
from .world import (
    EndOfFrameSystemSet,
    InputSystemSet,
    SystemSet,
    TickingSystemSet,
    World,
)

WINDOW_SIZE_IN_PIXELS = 600.0
SCREEN_COLOR_BACKGROUND = (0.1, 0.1, 0.1)
DEFAULT_FRAMES_PER_SECOND = 60.0


@dataclass(frozen=True)
class MainCamera:
    """Marks the camera the game world is seen through."""


def _spawn_camera(world: World) -> None:
    world.spawn(MainCamera())


def _clear_button_inputs(world: World) -> None:
    for key in (KEYBOARD_INPUT, MOUSE_INPUT):
        world.resources[key].clear()


_UPDATE_SYSTEMS: tuple[tuple[Callable[[World], object], SystemSet], ...] = (
    (listen_for_move_requests, InputSystemSet.LISTENING),
    (slow_time_when_pressing_space, InputSystemSet.LISTENING),
    (listen_for_mouse_clicks, InputSystemSet.LISTENING),
    (spawn_orb, InputSystemSet.HANDLING),
    (collect_all_orbs, InputSystemSet.HANDLING),
    (listen_for_emitting_timer_firing_requests, TickingSystemSet.PRE_TICKING_EARLY_PREPARATIONS),
    (clear_calculators_if_part_of_looping_sequence, TickingSystemSet.PRE_TICKING_EARLY_PREPARATIONS),
    (
        listen_for_update_affected_entities_after_timer_birth_requests,
        TickingSystemSet.PRE_TICKING_PREPARATIONS,
    ),
    (initialize_calculators, TickingSystemSet.PRE_TICKING),
    (tick_emitting_timers, TickingSystemSet.TIMER_TICKING),
    (calculate_value_and_send_going_event, TickingSystemSet.POST_TICKING_IMMEDIATE),
    (listen_for_translation_update_requests, TickingSystemSet.POST_TICKING),
    (clear_done_timers_from_affecting_timers, TickingSystemSet.POST_TICKING),
    (listen_for_time_multiplier_update_requests, TickingSystemSet.POST_TICKING),
    (listen_for_time_multiplier_set_requests, TickingSystemSet.POST_TICKING),
    (listen_for_affected_entity_removal_request, EndOfFrameSystemSet.PRE_TIMER_CLEARING),
    (clear_done_timers, EndOfFrameSystemSet.TIMER_CLEARING),
    (listen_for_done_sequence_timers, EndOfFrameSystemSet.TIMER_CLEARING),
    (listen_for_despawn_requests_from_timers, EndOfFrameSystemSet.LATE_DESPAWN),
    (_clear_button_inputs, EndOfFrameSystemSet.POST_LATE_DESPAWN),
)

_STARTUP_SYSTEMS: tuple[Callable[[World], object], ...] = (
    initialize_time_multipliers,
    spawn_patroller,
    initiate_square_movement,
    initiate_diagonal_movement,
    _spawn_camera,
)


def build_app() -> World:
    """Create the game world, register its systems and run the startup steps."""
    world = World()
    world.resources[KEYBOARD_INPUT] = ButtonInput()
    world.resources[MOUSE_INPUT] = ButtonInput()
    world.resources[CursorWorldPosition] = CursorWorldPosition()
    for system, system_set in _UPDATE_SYSTEMS:
        world.add_system(system, system_set)
    for startup_system in _STARTUP_SYSTEMS:
        startup_system(world)
    return world


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="chronoplay", description="Run the timer playground without a window."
    )
    parser.add_argument(
        "--frames", type=int, default=None, help="number of frames to run (default: until interrupted)"
    )
    parser.add_argument(
        "--fps", type=float, default=DEFAULT_FRAMES_PER_SECOND, help="target frames per second"
    )
    args = parser.parse_args(argv)
    if args.frames is not None and args.frames < 0:
        parser.error("--frames must not be negative")
    if args.fps <= 0:
        parser.error("--fps must be positive")
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the game loop, advancing time by real elapsed time each frame."""
    args = _parse_args(argv)
    create_new_log_file()
    world = build_app()
    frame_budget = 1.0 / args.fps
    frames = itertools.count() if args.frames is None else range(args.frames)
    last_frame = time.perf_counter()
    try:
        for _ in frames:
            frame_start = time.perf_counter()
            world.time.advance_by(frame_start - last_frame)
            last_frame = frame_start
            world.update()
            spare = frame_budget - (time.perf_counter() - frame_start)
            if spare > 0:
                time.sleep(spare)
    except KeyboardInterrupt:
        pass
    return 0