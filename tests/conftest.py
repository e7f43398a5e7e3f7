from pathlib import Path
from typing import Any, Callable

import pytest
from PIL import Image

from srcset.codec import Codec, Decoded
from srcset.config import RunConfig


@pytest.fixture
def make_image() -> Callable[..., Path]:
    def _make(path: Path, width: int, height: int, mode: str = "RGB") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        color = (200, 120, 40, 255)[: len(mode)] if mode != "L" else 128
        Image.new(mode, (width, height), color).save(path)
        return path

    return _make


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., RunConfig]:
    def _make(input_path: Path, **overrides: Any) -> RunConfig:
        values = {
            "input_path": input_path,
            "output_root": tmp_path / "out",
            "min_size": 0,
            "sigma": 0.0,
        }
        values.update(overrides)
        return RunConfig(**values)

    return _make


class FakeCodec(Codec):
    """In-memory codec: reports fixed dimensions and records every save."""

    name = "fake"
    extensions = frozenset({".jpg", ".png"})

    def __init__(self, width: int = 1000, height: int = 500, fail_on: int = 0):
        self.width = width
        self.height = height
        self.fail_on = fail_on
        self.saved = []

    def open(self, path: Path) -> Decoded:
        if path.read_bytes().startswith(b"corrupt"):
            raise OSError("cannot identify image file")
        return Decoded(None, self.width, self.height, "RGB")

    def resize(self, picture, width: int, height: int):
        return (width, height)

    def save(self, picture, path: Path) -> None:
        if self.fail_on and picture[0] == self.fail_on:
            raise OSError(f"disk full writing {path.name}")
        self.saved.append((path, picture))


@pytest.fixture
def fake_codec() -> FakeCodec:
    return FakeCodec()
