"""
Derived image cache.

A derived file sits next to its source with the same stem and the target
format's extension. It is served only while its mtime equals the source
mtime and it is strictly smaller than the source. Otherwise it gets
regenerated:
1. Decode the source once
2. Encode at quality 100, stepping down by 5 until the output is smaller
   than the source or quality would drop below 70
3. Write the last output atomically and copy the source mtime onto it
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from PIL import Image

from imgopt_shared.config import OptimizerConfig
from imgopt_shared.errors import DecodeError, EncodeError, UnsupportedSourceError
from imgopt_shared.files import DerivedPaths, derived_paths, resolve_source
from imgopt_shared.formats import Encoder, FormatSpec

from .codecs import decode_source

logger = logging.getLogger(__name__)

QUALITY_START = 100
QUALITY_STEP = 5
QUALITY_FLOOR = 70


def search_quality(
    image: Image.Image,
    encoder: Encoder,
    source_size: int,
    start: int = QUALITY_START,
    step: int = QUALITY_STEP,
    floor: int = QUALITY_FLOOR,
) -> tuple[bytes, int]:
    """
    Encode at decreasing quality until the output undercuts source_size.

    Always encodes at least once. Stops at the first output smaller than
    the source, or after encoding at the lowest quality not below floor.

    Returns: (encoded bytes of the last attempt, quality used)

    Raises:
        EncodeError: If any attempt fails
    """
    quality = start
    while True:
        data = encoder(image, quality)
        used = quality
        quality -= step
        if len(data) < source_size or quality < floor:
            return data, used


def write_atomic(target: Path, data: bytes) -> None:
    """Write through a temporary sibling so readers never see a partial file."""
    tmp = target.with_name(f".{target.name}.{os.getpid()}.tmp")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


class DerivationCache:
    """Looks up or regenerates derived images beside their sources."""

    def __init__(self, config: OptimizerConfig):
        self._config = config
        self._web_root = config.resolved_root()

        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def web_root(self) -> Path:
        return self._web_root

    def resolve(
        self,
        src: str,
        fmt: FormatSpec,
        recreate: bool = False,
        disable: bool = False,
    ) -> str | None:
        """
        Return the short path of a usable derived file, or None.

        None means "serve the original". This never raises for missing,
        empty or unreadable sources, unavailable encoders or failed
        encodes.
        """
        if self._config.is_disabled(fmt.name) or disable:
            logger.debug("%s disabled for %s", fmt.name, src)
            return None

        if not fmt.is_available():
            logger.debug("%s encoder unavailable, skipping %s", fmt.name, src)
            return None

        recreate = recreate or self._config.recreate_all

        try:
            source = resolve_source(self._web_root, src)
            if source is None or not source.is_file():
                logger.debug("Source not found: %s", src)
                return None

            source_stat = source.stat()
            if source_stat.st_size == 0:
                logger.debug("Source is empty: %s", src)
                return None

            paths = derived_paths(src, source, fmt.extension)
            with self._lock_for(paths.full):
                return self._lookup_or_convert(source, source_stat, paths, fmt, recreate)
        except OSError as e:
            logger.warning("Filesystem error deriving %s for %s: %s", fmt.name, src, e)
            return None

    def _lock_for(self, path: Path) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = self._locks[path] = threading.Lock()
            return lock

    def _lookup_or_convert(
        self,
        source: Path,
        source_stat: os.stat_result,
        paths: DerivedPaths,
        fmt: FormatSpec,
        recreate: bool,
    ) -> str | None:
        if not recreate:
            try:
                derived_stat = paths.full.stat()
            except FileNotFoundError:
                derived_stat = None

            if derived_stat is not None:
                if derived_stat.st_size >= source_stat.st_size:
                    logger.debug(
                        "%s (%d bytes) not smaller than source (%d bytes), using original",
                        paths.short, derived_stat.st_size, source_stat.st_size,
                    )
                    return None

                if derived_stat.st_mtime_ns == source_stat.st_mtime_ns:
                    return paths.short

                logger.debug("%s is stale, regenerating", paths.short)

        return self._convert(source, source_stat, paths, fmt)

    def _convert(
        self,
        source: Path,
        source_stat: os.stat_result,
        paths: DerivedPaths,
        fmt: FormatSpec,
    ) -> str | None:
        try:
            image = decode_source(source)
        except UnsupportedSourceError as e:
            logger.debug("%s", e)
            return None
        except DecodeError as e:
            logger.warning("%s", e)
            return None

        try:
            data, quality = search_quality(image, fmt.encoder, source_stat.st_size)
        except EncodeError as e:
            logger.warning("Giving up on %s for %s: %s", fmt.name, source.name, e)
            return None
        finally:
            image.close()

        write_atomic(paths.full, data)
        os.utime(paths.full, ns=(source_stat.st_mtime_ns, source_stat.st_mtime_ns))

        if len(data) >= source_stat.st_size:
            logger.info(
                "%s not smaller than source at q=%d (%d >= %d bytes), using original",
                paths.short, quality, len(data), source_stat.st_size,
            )
            return None

        logger.info(
            "Generated %s at q=%d: %d -> %d bytes",
            paths.short, quality, source_stat.st_size, len(data),
        )
        return paths.short
