"""
Order-insensitive comparison of multi-valued response types ("code token" == "token code").
"""
from collections.abc import Iterable


class UnorderedList:
    def __init__(self, items: str | Iterable[str] | None = None):
        if items is None:
            items = []
        elif isinstance(items, str):
            items = items.split(" ")
        self._items = [i for i in items if i]

    def equal_to(self, other) -> bool:
        if not isinstance(other, UnorderedList):
            other = UnorderedList(other)
        if len(self) != len(other):
            return False
        return all(item in other._items for item in self._items)

    def contains(self, value: str) -> bool:
        return value in self._items

    def contains_any(self, values: Iterable[str]) -> bool:
        return any(v in self._items for v in values)

    def __eq__(self, other) -> bool:
        if isinstance(other, (UnorderedList, str, list, tuple)):
            return self.equal_to(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __str__(self) -> str:
        return " ".join(self._items)

    def __repr__(self) -> str:
        return f"UnorderedList({str(self)!r})"
