"""Ordered containers used across the manifest model."""

from collections.abc import Iterable, Iterator, MutableSet
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")


class OrderedMap(dict, Generic[K, V]):
    """A dict with explicit insertion-order helpers.

    New keys append at the end, updating a key keeps its position, and removal
    closes the gap without reordering the remaining keys. Plain ``dict``
    already behaves this way; the helpers make the contract visible at call
    sites that mutate manifests.
    """

    def insert(self, key: K, value: V) -> bool:
        """Set ``key`` and report whether it was newly added."""
        is_new = key not in self
        self[key] = value
        return is_new

    def remove(self, key: K) -> V:
        """Remove ``key`` and return its value.

        Raises:
            KeyError: If the key is absent
        """
        return self.pop(key)

    def index(self, key: K) -> int:
        """Return the position of ``key``."""
        for position, existing in enumerate(self):
            if existing == key:
                return position
        raise KeyError(key)

    def same_order(self, other: "OrderedMap[K, V]") -> bool:
        """Equality that also compares key order."""
        return list(self.items()) == list(other.items())

    def copy(self) -> "OrderedMap[K, V]":
        return OrderedMap(self)

    def __repr__(self) -> str:
        return f"OrderedMap({dict.__repr__(self)})"


class OrderedSet(MutableSet, Generic[T]):
    """Set that iterates in first-insertion order."""

    def __init__(self, items: Iterable[T] = ()):
        self._items: dict[T, None] = dict.fromkeys(items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: T) -> None:
        self._items[item] = None

    def discard(self, item: T) -> None:
        self._items.pop(item, None)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedSet):
            return list(self) == list(other)
        return super().__eq__(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"
