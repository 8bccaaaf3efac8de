"""Small generic helpers over mappings and sequences."""

from __future__ import annotations

from typing import Callable, Hashable, Iterable, Mapping, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
T = TypeVar("T")


def map_keys(m: Mapping[K, V]) -> list[K]:
    """Return the keys of a mapping as a list."""
    return list(m)


def map_filter_keys(m: Mapping[K, V], predicate: Callable[[V], bool]) -> list[K]:
    """Return the keys whose value satisfies the predicate."""
    return [key for key, value in m.items() if predicate(value)]


def delete_item(items: Iterable[T], item: T) -> list[T]:
    """Return a new list without any occurrence of item."""
    return [element for element in items if element != item]


def filter_items(items: Iterable[T], predicate: Callable[[T], bool]) -> list[T]:
    """Return the elements that satisfy the predicate."""
    return [element for element in items if predicate(element)]