"""
Path handling for source images and their derived siblings.

Callers pass paths relative to the web root ("/images/a.png"). The short
form is what gets served back, the full form is what gets opened on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from werkzeug.security import safe_join

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedPaths:
    """Where a derived file lives: as served (short) and on disk (full)."""
    short: str
    full: Path


def is_in_dir(base: Path, target: Path) -> bool:
    """Check if target path is in base dir."""
    try:
        target.resolve().relative_to(base.resolve())
        return True
    except ValueError:
        return False


def source_extension(src: str | Path) -> str:
    """Lower-cased extension including the dot, or "" if there is none."""
    return PurePosixPath(str(src)).suffix.lower()


def resolve_source(web_root: Path, src: str) -> Path | None:
    """
    Join a caller-relative source path onto the web root.

    Returns None for empty paths and for paths that would escape the root,
    either through ".." segments or through symlinks.
    """
    relative = src.lstrip("/")
    if not relative:
        return None

    joined = safe_join(str(web_root), relative)
    if joined is None:
        logger.warning("Rejected source path outside web root: %s", src)
        return None

    full = Path(joined)
    if not is_in_dir(web_root, full):
        logger.warning("Source resolves outside web root: %s", src)
        return None
    return full


def derived_paths(src: str, full_source: Path, extension: str) -> DerivedPaths:
    """Same directory, same stem, new extension."""
    short = str(PurePosixPath(src).with_suffix(extension))
    return DerivedPaths(short=short, full=full_source.with_suffix(extension))
