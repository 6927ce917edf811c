"""A fixed-capacity, compact array with removal by value, index or entity."""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

from .validation import truncated_if_at_limit

T = TypeVar("T")


class VecBasedArrayError(Exception):
    """Base class of the errors raised by :class:`VecBasedArray`."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VecBasedArrayError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash(type(self).__name__)


class FoundNoItemToMatchWith(VecBasedArrayError):
    def __init__(self, item: Any, array: "VecBasedArray[Any]") -> None:
        super().__init__(item, array)
        self.item = item
        self.array = array

    def __str__(self) -> str:
        return (
            f"Couldn't find item to match with: {self.item!r} "
            f"in vec-based array: {self.array!r} "
        )


class IndexOutOfRange(VecBasedArrayError):
    def __init__(self, index: int, array: "VecBasedArray[Any]") -> None:
        super().__init__(index, array)
        self.index = index
        self.array = array

    def __str__(self) -> str:
        return f"Index: {self.index!r} out of range for vec-based array: {self.array!r} "


class ItemWithAffectedEntityNotFound(VecBasedArrayError):
    def __init__(self, entity: Any) -> None:
        super().__init__(entity)
        self.entity = entity

    def __str__(self) -> str:
        return f"Couldn't find item with affected entity: {self.entity!r}"


class VecBasedArray(Generic[T]):
    """Up to ``capacity`` items kept at the front of ``array``; free slots hold None."""

    def __init__(self, items: Iterable[T], capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must not be negative, got {capacity}")
        kept = truncated_if_at_limit(items, capacity)
        self.capacity = capacity
        self.array: list[Optional[T]] = kept + [None] * (capacity - len(kept))
        self._length = len(kept)

    def __iter__(self) -> Iterator[T]:
        return iter(self.array[: self._length])

    def __len__(self) -> int:
        return self._length

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VecBasedArray):
            return NotImplemented
        return (self.capacity, self._length, self.array) == (
            other.capacity,
            other._length,
            other.array,
        )

    __hash__ = None  # type: ignore[assignment]

    def __copy__(self) -> "VecBasedArray[T]":
        return VecBasedArray(list(self), self.capacity)

    def __repr__(self) -> str:
        return f"VecBasedArray(array={self.array!r}, len={self._length})"

    def _first_match(self, predicate: Callable[[T], bool]) -> Optional[tuple[int, T]]:
        return next(((index, item) for index, item in enumerate(self) if predicate(item)), None)

    def _remove_first_match(self, key: Any, predicate: Callable[[T], bool]) -> T:
        match = self._first_match(predicate)
        if match is None:
            raise FoundNoItemToMatchWith(key, self.__copy__())
        return self.remove_by_index(match[0])

    def remove_by_item(self, item: T) -> T:
        """Remove and return the first item equal to ``item``."""
        return self._remove_first_match(item, lambda candidate: candidate == item)

    def remove_by_index(self, index: int) -> T:
        """Remove the item at ``index``; the last item moves into its slot."""
        if not 0 <= index < self._length:
            raise IndexOutOfRange(index, self.__copy__())
        removed = self.array[index]
        self._length -= 1
        self.array[index] = self.array[self._length]
        self.array[self._length] = None
        return removed  # type: ignore[return-value]

    def affected_entities_iter(self) -> Iterator[Any]:
        """Affected entities of timer-affected-entity items."""
        return (item.affected_entity for item in self)  # type: ignore[attr-defined]

    def calculator_entities_iter(self) -> Iterator[Any]:
        """Value calculator entities of timer-affected-entity items that have one."""
        return (
            item.value_calculator_entity  # type: ignore[attr-defined]
            for item in self
            if item.value_calculator_entity is not None  # type: ignore[attr-defined]
        )

    def remove_by_affected_entity(self, entity: Any) -> T:
        return self._remove_first_match(
            entity, lambda item: item.affected_entity == entity  # type: ignore[attr-defined]
        )

    def remove_by_calculator_entity(self, calculator: Any) -> T:
        return self._remove_first_match(calculator, _calculator_matcher(calculator))

    def get_by_calculator_entity(self, calculator: Any) -> Optional[T]:
        match = self._first_match(_calculator_matcher(calculator))
        return None if match is None else match[1]


def _calculator_matcher(calculator: Any) -> Callable[[Any], bool]:
    def matches(item: Any) -> bool:
        return item.value_calculator_entity is not None and item.value_calculator_entity == calculator

    return matches