"""Tests for Pillow decoders and encoders."""

from unittest.mock import MagicMock

import pytest
from PIL import Image, features

from imgopt_converter.codecs import (
    AVIF,
    WEBP,
    decode_source,
    default_registry,
    encode_webp,
    webp_available,
)
from imgopt_shared.errors import DecodeError, EncodeError, UnsupportedSourceError

needs_webp = pytest.mark.skipif(not features.check_module("webp"), reason="Pillow built without WebP")


class TestDecodePng:
    def test_rgb_stays_rgb(self, tmp_path, make_noise):
        path = tmp_path / "a.png"
        make_noise(mode="RGB").save(path)
        with decode_source(path) as image:
            assert image.mode == "RGB"
            assert image.size == (64, 64)

    def test_alpha_preserved(self, tmp_path, make_noise):
        path = tmp_path / "a.png"
        make_noise(mode="RGBA").save(path)
        with decode_source(path) as image:
            assert image.mode == "RGBA"

    def test_palette_with_transparency_becomes_rgba(self, tmp_path):
        path = tmp_path / "p.png"
        img = Image.new("P", (8, 8), 0)
        img.putpalette([255, 0, 0, 0, 255, 0] + [0] * 762)
        img.save(path, transparency=0)
        with decode_source(path) as image:
            assert image.mode == "RGBA"
            assert image.getpixel((0, 0))[3] == 0

    def test_grayscale_becomes_truecolor(self, tmp_path):
        path = tmp_path / "g.PNG"
        Image.new("L", (4, 4), 128).save(path, format="PNG")
        with decode_source(path) as image:
            assert image.mode == "RGB"


class TestDecodeJpeg:
    @pytest.mark.parametrize("name", ["a.jpg", "a.jpeg", "A.JPG"])
    def test_extensions(self, tmp_path, make_noise, name):
        path = tmp_path / name
        make_noise().save(path, format="JPEG")
        with decode_source(path) as image:
            assert image.mode == "RGB"

    def test_exif_orientation_applied(self, tmp_path):
        path = tmp_path / "rotated.jpg"
        exif = Image.Exif()
        exif[0x0112] = 6  # rotate 90 CW on display
        Image.new("RGB", (40, 20), "white").save(path, exif=exif.tobytes())
        with decode_source(path) as image:
            assert image.size == (20, 40)

    def test_cmyk_converted(self, tmp_path):
        path = tmp_path / "cmyk.jpg"
        Image.new("CMYK", (8, 8), (0, 0, 0, 0)).save(path)
        with decode_source(path) as image:
            assert image.mode == "RGB"


class TestDecodeErrors:
    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "a.gif"
        Image.new("RGB", (4, 4)).save(path, format="GIF")
        with pytest.raises(UnsupportedSourceError) as exc:
            decode_source(path)
        assert exc.value.extension == ".gif"

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image at all")
        with pytest.raises(DecodeError) as exc:
            decode_source(path)
        assert exc.value.path == path


class TestEncoders:
    @needs_webp
    def test_webp_bytes(self, make_noise):
        data = encode_webp(make_noise(), 80)
        assert data[:4] == b"RIFF"
        assert data[8:12] == b"WEBP"

    @needs_webp
    def test_lower_quality_is_smaller(self, make_noise):
        image = make_noise(size=(128, 128))
        assert len(encode_webp(image, 70)) < len(encode_webp(image, 100))

    def test_failure_wrapped(self):
        image = MagicMock()
        image.save.side_effect = OSError("encoder exploded")
        with pytest.raises(EncodeError) as exc:
            encode_webp(image, 85)
        assert exc.value.format_name == "webp"
        assert exc.value.quality == 85
        assert isinstance(exc.value.cause, OSError)


class TestRegistry:
    def test_avif_before_webp(self):
        assert default_registry().names() == ["avif", "webp"]

    def test_descriptors(self):
        assert (WEBP.extension, WEBP.mime_type) == (".webp", "image/webp")
        assert (AVIF.extension, AVIF.mime_type) == (".avif", "image/avif")

    def test_webp_capability_matches_pillow(self):
        assert webp_available() == bool(features.check_module("webp"))
