"""
Exceptions raised inside the derivation pipeline.

These never reach callers of the optimizer: the cache catches them and
falls back to the original image.
"""

from __future__ import annotations

from pathlib import Path


class ImgOptError(Exception):
    """Base exception for image derivation failures."""
    pass


class UnsupportedSourceError(ImgOptError, ValueError):
    """Raised when no decoder is registered for a source extension."""

    def __init__(self, path: Path, extension: str):
        self.path = path
        self.extension = extension
        super().__init__(f"Unsupported source format {extension or '<none>'!r}: {path}")


class DecodeError(ImgOptError):
    """Raised when a source image can't be read."""

    def __init__(self, path: Path, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to decode {path}: {cause}")


class EncodeError(ImgOptError, RuntimeError):
    """Raised when an encoder fails to produce output."""

    def __init__(self, format_name: str, quality: int, cause: BaseException):
        self.format_name = format_name
        self.quality = quality
        self.cause = cause
        super().__init__(f"{format_name} encode failed (q={quality}): {cause}")
