"""Argument validation helpers that correct bad values and report the correction."""

from __future__ import annotations

from typing import Iterable, TypeVar

from .debug_log import LogCategory, print_warning

T = TypeVar("T")

_VALIDATION_CATEGORIES = (LogCategory.VALUE_VALIDATION, LogCategory.REQUEST_NOT_FULFILLED)


class MismatchError(Exception):
    """An expected value did not match the one that was found."""

    def __init__(self, expected: str, found: str) -> None:
        super().__init__(expected, found)
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        return f"expected {self.expected} but found {self.found}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MismatchError):
            return NotImplemented
        return (self.expected, self.found) == (other.expected, other.found)

    def __hash__(self) -> int:
        return hash((self.expected, self.found))


def clamp_and_notify(value: T, minimum: T, maximum: T) -> T:
    """Clamp ``value`` into ``[minimum, maximum]``, warning when it had to be fixed."""
    type_name = type(value).__name__
    if value < minimum:
        print_warning(
            f"value of type {type_name} had value below min: {value!r},\n"
            f"fixed to min: {minimum!r}.",
            _VALIDATION_CATEGORIES,
        )
        return minimum
    if value > maximum:
        print_warning(
            f"value of type {type_name} had value above max: {value!r},\n"
            f"fixed to max: {maximum!r}.",
            _VALIDATION_CATEGORIES,
        )
        return maximum
    return value


def truncated_if_at_limit(items: Iterable[T], max_count: int) -> list[T]:
    """Return the items as a list, cut down to ``max_count`` with a warning if longer."""
    items = list(items)
    if len(items) > max_count:
        print_warning(
            f"{items!r} reached max count {max_count}, shortning to max",
            _VALIDATION_CATEGORIES,
        )
        return items[:max_count]
    return items