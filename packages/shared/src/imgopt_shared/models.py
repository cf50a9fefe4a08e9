"""Request and result types exchanged with the hosting application."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass(frozen=True)
class ConversionRequest:
    """What the caller wants derived for one image."""
    src: str
    disable: bool = False
    recreate: bool = False


@dataclass
class DerivedImages:
    """
    Usable derived paths for one source image.

    Sparse: a missing format means the caller should use the original.
    Entries keep insertion order, which the optimizer fills most modern
    format first.
    """
    src: str
    paths: dict[str, str] = field(default_factory=dict)
    mime_types: dict[str, str] = field(default_factory=dict)

    def add(self, format_name: str, path: str, mime_type: str) -> None:
        self.paths[format_name] = path
        self.mime_types[format_name] = mime_type

    def get(self, format_name: str) -> str | None:
        return self.paths.get(format_name)

    def sources(self) -> list[tuple[str, str]]:
        """(mime type, path) pairs in presentation order."""
        return [(self.mime_types[name], path) for name, path in self.paths.items()]

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __contains__(self, format_name: object) -> bool:
        return format_name in self.paths

    def __len__(self) -> int:
        return len(self.paths)

    def __bool__(self) -> bool:
        return bool(self.paths)
