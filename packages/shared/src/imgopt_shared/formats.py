"""
Target format descriptors.

A FormatSpec only describes a format. The encoder and the capability
check are plugged in by the converter package, which keeps this package
free of any imaging dependency.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator

Encoder = Callable[[Any, int], bytes]
Capability = Callable[[], bool]


@dataclass(frozen=True)
class FormatSpec:
    """
    A derivable output format.

    priority orders formats for presentation, lowest first. More modern
    formats get lower numbers so they are offered to browsers first.
    """
    name: str
    extension: str
    mime_type: str
    encoder: Encoder
    is_available: Capability
    priority: int = 100

    def __post_init__(self) -> None:
        if not self.extension.startswith("."):
            raise ValueError(f"Extension must start with a dot: {self.extension!r}")


class FormatRegistry:
    """Ordered collection of target formats, keyed by name."""

    def __init__(self, formats: Iterable[FormatSpec] = ()):
        self._formats: dict[str, FormatSpec] = {}
        for spec in formats:
            self.register(spec)

    def register(self, spec: FormatSpec) -> None:
        """Add a format, replacing any format with the same name."""
        self._formats[spec.name.lower()] = spec

    def unregister(self, name: str) -> None:
        self._formats.pop(name.lower(), None)

    def get(self, name: str) -> FormatSpec:
        try:
            return self._formats[name.lower()]
        except KeyError:
            raise KeyError(f"Unknown format: {name}") from None

    def names(self) -> list[str]:
        return [spec.name for spec in self]

    def __iter__(self) -> Iterator[FormatSpec]:
        return iter(sorted(self._formats.values(), key=lambda s: (s.priority, s.name)))

    def __len__(self) -> int:
        return len(self._formats)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._formats
