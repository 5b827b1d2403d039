"""Collection: an ordered list wrapper with chainable helpers.

Handlers can return a ``Collection`` directly; the response shaper
serializes it to JSON like a plain list.

Methods that transform return a new ``Collection``. Methods named after
list mutations (``add``, ``append``, ``prepend``, ``remove``) mutate in
place and return ``self`` so they chain.
"""

from __future__ import annotations

import json
import random as _random
from collections.abc import Callable, Iterable, Iterator
from functools import reduce as _reduce
from typing import Any


class Collection[T]:
    """An ordered group of items.

    Usage::

        users = Collection(rows).filter(lambda u: u.active).map(lambda u: u.name)
        users.first()
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: list[T] = list(items)

    # -- Protocol --

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Collection):
            return self._items == other._items
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Collection({self._items!r})"

    def __str__(self) -> str:
        return self.to_json()

    # -- Access --

    def all(self) -> list[T]:
        """All items, as a new list."""
        return list(self._items)

    def first(self, default: T | None = None) -> T | None:
        return self._items[0] if self._items else default

    def last(self, default: T | None = None) -> T | None:
        return self._items[-1] if self._items else default

    def get(self, index: int, default: T | None = None) -> T | None:
        """Item at *index*, or *default* when out of range."""
        try:
            return self._items[index]
        except IndexError:
            return default

    def random(self) -> T | None:
        return _random.choice(self._items) if self._items else None

    def is_empty(self) -> bool:
        return not self._items

    def count(self) -> int:
        return len(self._items)

    # -- Transformations (new Collection) --

    def map[U](self, callback: Callable[[T], U]) -> Collection[U]:
        return Collection(callback(item) for item in self._items)

    def filter(self, callback: Callable[[T], bool] | None = None) -> Collection[T]:
        """Keep items for which *callback* is truthy (items themselves if None)."""
        if callback is None:
            return Collection(item for item in self._items if item)
        return Collection(item for item in self._items if callback(item))

    def reduce(self, callback: Callable[[Any, T], Any], initial: Any = None) -> Any:
        return _reduce(callback, self._items, initial)

    def chunk(self, size: int) -> Collection[Collection[T]]:
        """Split into collections of at most *size* items."""
        if size < 1:
            msg = f"chunk size must be positive, got {size}"
            raise ValueError(msg)
        return Collection(
            Collection(self._items[i : i + size]) for i in range(0, len(self._items), size)
        )

    def slice(self, offset: int, length: int | None = None) -> Collection[T]:
        end = None if length is None else offset + length
        return Collection(self._items[offset:end])

    def sort(
        self,
        key: Callable[[T], Any] | None = None,
        *,
        reverse: bool = False,
    ) -> Collection[T]:
        return Collection(sorted(self._items, key=key, reverse=reverse))  # type: ignore[type-var]

    def reverse(self) -> Collection[T]:
        return Collection(reversed(self._items))

    def shuffle(self) -> Collection[T]:
        items = list(self._items)
        _random.shuffle(items)
        return Collection(items)

    def unique(self) -> Collection[T]:
        """Drop repeated items, keeping first occurrences in order."""
        seen: list[T] = []
        for item in self._items:
            if item not in seen:
                seen.append(item)
        return Collection(seen)

    # -- Mutation (in place, chainable) --

    def add(self, item: T) -> Collection[T]:
        self._items.append(item)
        return self

    def append(self, items: Iterable[T]) -> Collection[T]:
        """Add every item of *items* at the end."""
        self._items.extend(items)
        return self

    def prepend(self, items: Iterable[T]) -> Collection[T]:
        """Add every item of *items* at the front, preserving their order."""
        self._items[:0] = list(items)
        return self

    def remove(self, index: int) -> Collection[T]:
        del self._items[index]
        return self

    def shift(self) -> T | None:
        return self._items.pop(0) if self._items else None

    def pop(self) -> T | None:
        return self._items.pop() if self._items else None

    # -- Serialization --

    def to_list(self) -> list[Any]:
        """Items as a plain list, with nested collections unwrapped."""
        return [item.to_list() if isinstance(item, Collection) else item for item in self._items]

    def to_json(self) -> str:
        """JSON document of the items. Non-ASCII is kept as-is."""
        return json.dumps(self.to_list(), ensure_ascii=False, default=str)
