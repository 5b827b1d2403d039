"""Read-only multi-value mappings shared by headers, query strings and forms.

A ``MultiDict`` keeps every ``(name, value)`` pair in arrival order.
Mapping access returns the first value sent under a name; ``get_list``
returns all of them.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Self


class MultiDict(Mapping[str, str]):
    """Ordered ``(name, value)`` pairs with first-value lookup."""

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self._pairs: tuple[tuple[str, str], ...] = tuple(
            (self.fold(name), value) for name, value in pairs
        )

    @staticmethod
    def fold(name: str) -> str:
        """Normalize a name before storing or comparing it."""
        return name

    def __getitem__(self, key: str) -> str:
        wanted = self.fold(key)
        for name, value in self._pairs:
            if name == wanted:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        wanted = self.fold(key)
        return [value for name, value in self._pairs if name == wanted]

    def multi_items(self) -> tuple[tuple[str, str], ...]:
        """Every pair, duplicates included."""
        return self._pairs

    @classmethod
    def from_mapping(cls, data: Mapping[str, str]) -> Self:
        return cls(data.items())
