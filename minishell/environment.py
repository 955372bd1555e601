"""The shell's ordered list of environment entries."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping


class Environment:
    """An ordered collection of ``NAME=value`` (or bare ``NAME``) entries."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "Environment":
        """Build an environment from a name-to-value mapping, keeping its order."""
        return cls(f"{name}={value}" for name, value in mapping.items())

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Environment({self._entries!r})"

    def snapshot(self) -> list[str]:
        """Return an independent copy of the entries."""
        return list(self._entries)

    def find(self, prefix: str) -> str | None:
        """Return the first entry that starts with ``prefix``, or None."""
        return next((e for e in self._entries if e.startswith(prefix)), None)

    def replace(self, prefix: str, entry: str) -> bool:
        """Replace the first entry starting with ``prefix``; return whether one was found."""
        for pos, existing in enumerate(self._entries):
            if existing.startswith(prefix):
                self._entries[pos] = entry
                return True
        return False

    def append(self, entry: str) -> None:
        """Add an entry at the end."""
        self._entries.append(entry)

    def remove_where(self, predicate: Callable[[str], bool]) -> int:
        """Remove every entry matching ``predicate``; return how many were removed."""
        kept = [e for e in self._entries if not predicate(e)]
        removed = len(self._entries) - len(kept)
        self._entries = kept
        return removed

    def to_mapping(self) -> dict[str, str]:
        """Return a name-to-value dict of the entries that hold a value."""
        result: dict[str, str] = {}
        for entry in self._entries:
            name, sep, value = entry.partition("=")
            if sep:
                result[name] = value
        return result