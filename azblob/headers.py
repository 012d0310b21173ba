"""
Immutable request header snapshots.

Headers are accumulated by the request builder and frozen into a HeaderSet
before signing, so every signed-over header is final when the signature is
computed.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

HeaderValue = Union[str, int, Sequence[str]]
HeaderInput = Union["HeaderSet", Mapping[str, HeaderValue], Iterable[Tuple[str, str]]]


@dataclass(frozen=True)
class HeaderSet:
    """
    Case-insensitive, insertion-ordered, immutable collection of headers.

    A header may carry several values; ``get()`` joins them without a
    separator, which is how they enter the string-to-sign.
    """

    entries: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def of(cls, headers: Optional[HeaderInput] = None) -> "HeaderSet":
        """Build a HeaderSet from a mapping, pair iterable or another HeaderSet."""
        if headers is None:
            return cls()
        if isinstance(headers, HeaderSet):
            return headers

        if hasattr(headers, "multi_items"):
            items = headers.multi_items()  # httpx.Headers
        elif isinstance(headers, Mapping):
            items = headers.items()
        else:
            items = headers

        entries: List[Tuple[str, str]] = []
        for name, value in items:
            if isinstance(value, (list, tuple)):
                entries.extend((name, str(v)) for v in value)
            else:
                entries.append((name, str(value)))
        return cls(tuple(entries))

    def get_all(self, name: str) -> List[str]:
        """All values of a header, in insertion order."""
        wanted = name.lower()
        return [value for key, value in self.entries if key.lower() == wanted]

    def get(self, name: str, default: str = "") -> str:
        """Header value with multiple values concatenated, or ``default``."""
        values = self.get_all(name)
        if not values:
            return default
        return "".join(values)

    def names(self) -> List[str]:
        """Distinct lowercase header names, in first-seen order."""
        seen: List[str] = []
        for key, _ in self.entries:
            lowered = key.lower()
            if lowered not in seen:
                seen.append(lowered)
        return seen

    def with_header(self, name: str, value: HeaderValue) -> "HeaderSet":
        """Return a copy where ``name`` holds only ``value``."""
        return self.without(name).add(name, value)

    def add(self, name: str, value: HeaderValue) -> "HeaderSet":
        """Return a copy with ``value`` appended to ``name``."""
        if isinstance(value, (list, tuple)):
            extra = tuple((name, str(v)) for v in value)
        else:
            extra = ((name, str(value)),)
        return HeaderSet(self.entries + extra)

    def without(self, name: str) -> "HeaderSet":
        """Return a copy with every value of ``name`` removed."""
        wanted = name.lower()
        return HeaderSet(tuple(e for e in self.entries if e[0].lower() != wanted))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(self.get_all(name))

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
