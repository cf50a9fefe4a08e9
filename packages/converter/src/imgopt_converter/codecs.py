"""
Pillow decoders and encoders.

Sources are decoded once into an owned in-memory bitmap. Encoders take
that bitmap and a quality level and return the encoded bytes without
touching the filesystem.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Callable

from PIL import Image, ImageOps, features

from imgopt_shared.errors import DecodeError, EncodeError, UnsupportedSourceError
from imgopt_shared.files import source_extension
from imgopt_shared.formats import FormatRegistry, FormatSpec

logger = logging.getLogger(__name__)

Decoder = Callable[[Path], Image.Image]


def _has_alpha(img: Image.Image) -> bool:
    return "A" in img.getbands() or "transparency" in img.info


def decode_png(path: Path) -> Image.Image:
    """Truecolor bitmap, keeping the alpha channel when there is one."""
    with Image.open(path) as img:
        img.load()
        mode = "RGBA" if _has_alpha(img) else "RGB"
        return img.convert(mode)


def decode_jpeg(path: Path) -> Image.Image:
    """Truecolor bitmap with the EXIF orientation applied."""
    with Image.open(path) as img:
        img = ImageOps.exif_transpose(img)
        return img.convert("RGB")


DECODERS: dict[str, Decoder] = {
    ".png": decode_png,
    ".jpg": decode_jpeg,
    ".jpeg": decode_jpeg,
}


def decode_source(path: Path) -> Image.Image:
    """
    Decode a source image using the decoder for its extension.

    Raises:
        UnsupportedSourceError: If no decoder handles the extension
        DecodeError: If Pillow can't read the file
    """
    ext = source_extension(path)
    decoder = DECODERS.get(ext)
    if decoder is None:
        raise UnsupportedSourceError(path, ext)

    try:
        image = decoder(path)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(path, e) from e

    logger.debug("Decoded %s: %dx%d %s", path.name, image.width, image.height, image.mode)
    return image


def _save_to_bytes(image: Image.Image, format_name: str, pillow_format: str,
                   quality: int, **options) -> bytes:
    buf = io.BytesIO()
    try:
        image.save(buf, format=pillow_format, quality=quality, **options)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(format_name, quality, e) from e
    return buf.getvalue()


def encode_webp(image: Image.Image, quality: int) -> bytes:
    return _save_to_bytes(image, "webp", "WEBP", quality, method=4)


def encode_avif(image: Image.Image, quality: int) -> bytes:
    return _save_to_bytes(image, "avif", "AVIF", quality)


def _module_available(name: str) -> bool:
    # Older Pillow releases don't know the avif module at all.
    if name not in features.modules:
        return False
    return bool(features.check_module(name))


def webp_available() -> bool:
    return _module_available("webp")


def avif_available() -> bool:
    return _module_available("avif")


WEBP = FormatSpec(
    name="webp",
    extension=".webp",
    mime_type="image/webp",
    encoder=encode_webp,
    is_available=webp_available,
    priority=20,
)

AVIF = FormatSpec(
    name="avif",
    extension=".avif",
    mime_type="image/avif",
    encoder=encode_avif,
    is_available=avif_available,
    priority=10,
)


def default_registry() -> FormatRegistry:
    """WebP and AVIF, AVIF offered first."""
    return FormatRegistry([WEBP, AVIF])
