"""Interpolation of numeric values (floats or vectors) along a normalized progress."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .validation import clamp_and_notify

T = TypeVar("T")


@dataclass(frozen=True)
class Interpolator:
    """Maps progress ``p`` in ``[0, 1]`` onto ``p ** power``."""

    power: float = 1.0

    def calculate(self, origin: Any, delta: Any, normalized_progress: float) -> Any:
        """Return ``origin + delta * progress ** power``, clamping progress into ``[0, 1]``."""
        progress = clamp_and_notify(normalized_progress, 0.0, 1.0)
        return origin + delta * (progress**self.power)


@dataclass
class ValueByInterpolation(Generic[T]):
    """Tracks an interpolated value and reports how much it moved since the last call."""

    original_value: T
    delta: T
    interpolator: Interpolator = field(default_factory=Interpolator)
    previous_value: T = field(init=False)

    def __post_init__(self) -> None:
        self.previous_value = self.original_value

    @classmethod
    def from_goal_and_current(
        cls, original_value: T, goal_value: T, interpolator: Interpolator
    ) -> "ValueByInterpolation[T]":
        return cls(original_value, goal_value - original_value, interpolator)

    def calculate_delta(self, normalized_progress: float) -> T:
        """Return the change in value since the previous call at this progress."""
        current_value = self.interpolator.calculate(
            self.original_value, self.delta, normalized_progress
        )
        change = current_value - self.previous_value
        self.previous_value = current_value
        return change

    def initialize_previous_value(self) -> None:
        """Start measuring changes from the original value again."""
        self.previous_value = self.original_value