import os
import random
from pathlib import Path

import pytest
from PIL import Image

from imgopt_shared.config import OptimizerConfig
from imgopt_shared.formats import FormatSpec


def noise_image(size=(64, 64), mode="RGB", seed=0) -> Image.Image:
    """Random pixels: PNG can't compress these, lossy encoders can."""
    channels = len(mode)
    data = random.Random(seed).randbytes(size[0] * size[1] * channels)
    return Image.frombytes(mode, size, data)


class FakeEncoder:
    """Encoder returning size_for(quality) bytes and recording every call."""

    def __init__(self, size_for):
        self.size_for = size_for
        self.calls: list[int] = []

    def __call__(self, image, quality):
        self.calls.append(quality)
        return b"\0" * self.size_for(quality)


def fake_format(encoder, name="fake", extension=".fake", available=True, priority=50):
    return FormatSpec(
        name=name,
        extension=extension,
        mime_type=f"image/{name}",
        encoder=encoder,
        is_available=lambda: available,
        priority=priority,
    )


@pytest.fixture
def web_root(tmp_path) -> Path:
    root = tmp_path / "webroot"
    (root / "images").mkdir(parents=True)
    return root


@pytest.fixture
def config(web_root) -> OptimizerConfig:
    return OptimizerConfig(web_root=web_root)


@pytest.fixture
def png_source(web_root) -> Path:
    """A noise PNG at /images/photo.png with a fixed mtime."""
    path = web_root / "images" / "photo.png"
    noise_image().save(path, format="PNG")
    mtime_ns = 1_600_000_000 * 1_000_000_000
    os.utime(path, ns=(mtime_ns, mtime_ns))
    return path


@pytest.fixture
def make_noise():
    return noise_image


@pytest.fixture
def make_encoder():
    return FakeEncoder


@pytest.fixture
def make_format():
    return fake_format
