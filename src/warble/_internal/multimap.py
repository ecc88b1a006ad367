"""Ordered multimaps — the storage behind RequestParams.

``MultiValueMapping`` is the read protocol ``FormData`` implements and
``RequestParams`` accepts as a source, so any multi-valued mapping can
seed a bag. ``MultiMap`` is the mutable, insertion-ordered container
the parameter bag keeps its three collections in.
"""

from collections.abc import Callable, Iterator
from typing import Generic, Protocol, TypeVar, runtime_checkable

V = TypeVar("V")


@runtime_checkable
class MultiValueMapping(Protocol):
    """A read-only string mapping where keys can have multiple values.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    def __getitem__(self, key: str) -> str: ...
    def __contains__(self, key: object) -> bool: ...
    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...
    def get(self, key: str, default: str | None = None) -> str | None: ...
    def get_list(self, key: str) -> list[str]: ...


class MultiMap(Generic[V]):
    """Mutable multimap that remembers global insertion order.

    Stored as a flat list of ``(key, value)`` entries, so duplicate keys
    and duplicate pairs are both kept and ``entries()`` replays them in
    the order they were added, regardless of key.

    ``len()`` counts entries, not distinct keys.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[tuple[str, V]] = []

    def add(self, key: str, value: V) -> None:
        self._entries.append((key, value))

    def get_all(self, key: str) -> list[V]:
        """Return every value stored under *key*, oldest first."""
        return [v for k, v in self._entries if k == key]

    def remove_all(self, key: str) -> int:
        """Drop every entry for *key*. Returns the number removed."""
        return self._remove_where(lambda k, _: k == key)

    def remove(self, key: str, matches: Callable[[V], bool]) -> int:
        """Drop the entries for *key* whose value satisfies *matches*."""
        return self._remove_where(lambda k, v: k == key and matches(v))

    def entries(self) -> Iterator[tuple[str, V]]:
        return iter(list(self._entries))

    def keys(self) -> list[str]:
        """Distinct keys in first-seen order."""
        return list(dict.fromkeys(k for k, _ in self._entries))

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        items = ", ".join(f"({k!r}, {v!r})" for k, v in self._entries)
        return f"MultiMap([{items}])"

    def _remove_where(self, predicate: Callable[[str, V], bool]) -> int:
        kept = [(k, v) for k, v in self._entries if not predicate(k, v)]
        removed = len(self._entries) - len(kept)
        self._entries = kept
        return removed
