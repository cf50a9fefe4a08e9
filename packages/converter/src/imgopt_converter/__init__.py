"""
Derived image engine.

This package is the core WebP/AVIF derivation logic. Hosts call
ImageOptimizer with a path relative to the web root and get back the
derived files that are worth serving.

Deployment:
    pip install imgopt

This package has no networking dependencies. It's pure image processing.
"""

from .cache import QUALITY_FLOOR, QUALITY_START, QUALITY_STEP, DerivationCache, search_quality
from .codecs import (
    AVIF,
    WEBP,
    avif_available,
    decode_jpeg,
    decode_png,
    decode_source,
    default_registry,
    encode_avif,
    encode_webp,
    webp_available,
)
from .optimizer import ImageOptimizer

__all__ = [
    "ImageOptimizer",
    "DerivationCache",
    "search_quality",
    "QUALITY_START",
    "QUALITY_STEP",
    "QUALITY_FLOOR",
    "WEBP",
    "AVIF",
    "default_registry",
    "decode_source",
    "decode_png",
    "decode_jpeg",
    "encode_webp",
    "encode_avif",
    "webp_available",
    "avif_available",
]
