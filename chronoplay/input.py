"""Keyboard and mouse input: button state and the systems that react to it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable

from .game import MULTIPLIER_WHEN_SLOW_MOTION, CollectAllOrbs, SpawnOrb
from .geometry import BasicDirection, Vec2
from .timer_types import SetTimeMultiplier, TimeMultiplierId
from .world import World

KEYBOARD_INPUT = "keyboard_input"
MOUSE_INPUT = "mouse_input"

KEY_SPACE = "Space"
MOUSE_LEFT = "Left"
MOUSE_RIGHT = "Right"

SLOW_MOTION_TRANSITION_SECONDS = 0.1
NORMAL_TIME_MULTIPLIER = 1.0


class ButtonInput:
    """Which buttons are held, and which changed state this frame."""

    def __init__(self) -> None:
        self._pressed: set[Hashable] = set()
        self._just_pressed: set[Hashable] = set()
        self._just_released: set[Hashable] = set()

    def press(self, button: Hashable) -> None:
        if button not in self._pressed:
            self._pressed.add(button)
            self._just_pressed.add(button)

    def release(self, button: Hashable) -> None:
        if button in self._pressed:
            self._pressed.remove(button)
            self._just_released.add(button)

    def __contains__(self, button: Hashable) -> bool:
        return button in self._pressed

    def just_pressed(self, button: Hashable) -> bool:
        return button in self._just_pressed

    def just_released(self, button: Hashable) -> bool:
        return button in self._just_released

    def clear(self) -> None:
        """Forget this frame's changes; held buttons stay held."""
        self._just_pressed.clear()
        self._just_released.clear()


@dataclass
class CursorWorldPosition:
    """Where the cursor points in world coordinates."""

    position: Vec2 = field(default_factory=lambda: Vec2(0.0, 0.0))


def _button_input(world: World, key: str) -> ButtonInput:
    return world.resources.setdefault(key, ButtonInput())


def _cursor(world: World) -> CursorWorldPosition:
    return world.resources.setdefault(CursorWorldPosition, CursorWorldPosition())


def slow_time_when_pressing_space(world: World) -> None:
    """Slow game time while space is held, and restore it on release."""
    keyboard = _button_input(world, KEYBOARD_INPUT)
    if keyboard.just_pressed(KEY_SPACE):
        world.send(
            SetTimeMultiplier(
                multiplier_id=TimeMultiplierId.GAME_TIME_MULTIPLIER,
                new_multiplier=MULTIPLIER_WHEN_SLOW_MOTION,
                duration=SLOW_MOTION_TRANSITION_SECONDS,
            )
        )
    if keyboard.just_released(KEY_SPACE):
        world.send(
            SetTimeMultiplier(
                multiplier_id=TimeMultiplierId.GAME_TIME_MULTIPLIER,
                new_multiplier=NORMAL_TIME_MULTIPLIER,
                duration=SLOW_MOTION_TRANSITION_SECONDS,
            )
        )


def listen_for_move_requests(world: World) -> list[BasicDirection]:
    """Return the directions of this frame's newly pressed movement keys."""
    keyboard = _button_input(world, KEYBOARD_INPUT)
    return [
        direction
        for key in sorted(keyboard._just_pressed, key=str)
        if (direction := BasicDirection.from_keycode(key)) is not None
    ]


def listen_for_mouse_clicks(world: World) -> None:
    """Left click spawns an orb at the cursor; right click collects all orbs there."""
    mouse = _button_input(world, MOUSE_INPUT)
    position = _cursor(world).position
    if mouse.just_pressed(MOUSE_LEFT):
        world.send(SpawnOrb(position))
    if mouse.just_pressed(MOUSE_RIGHT):
        world.send(CollectAllOrbs(position))