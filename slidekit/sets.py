"""A set of unique, hashable items."""

from __future__ import annotations

from typing import Generic, Hashable, Iterable, Iterator, TypeVar

T = TypeVar("T", bound=Hashable)


class Set(Generic[T]):
    """A collection of unique items that remembers insertion order."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, *args: T) -> None:
        self._items: dict[T, None] = dict.fromkeys(args)

    def add(self, *args: T) -> None:
        """Add all given items."""
        for item in args:
            self._items[item] = None

    def merge(self, other: Iterable[T]) -> None:
        """Add every item of another set to this one."""
        for item in other:
            self._items[item] = None

    def has(self, item: T) -> bool:
        """Tell whether the item is in the set."""
        return item in self._items

    def list(self) -> list[T]:
        """Return all items as a new list."""
        return list(self._items)

    def remove(self, *args: T) -> None:
        """Remove the given items; items not in the set are ignored."""
        for item in args:
            self._items.pop(item, None)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Set):
            return NotImplemented
        return equal(self, other)

    def __repr__(self) -> str:
        inner = ", ".join(repr(item) for item in self._items)
        return f"Set({inner})"


def equal(first: Set[T], second: Set[T]) -> bool:
    """Return True if both sets hold the same items."""
    if len(first) != len(second):
        return False
    return all(second.has(item) for item in first)