"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from imgcoon.generators import GeneratorRegistry
from imgcoon.models import ConversionRequest
from imgcoon.thumbnails import ThumbnailConfig

ImageFactory = Callable[..., Path]


@pytest.fixture
def config() -> ThumbnailConfig:
    """Default configuration with a short tool timeout."""
    return ThumbnailConfig(tools={"timeout": 5})


@pytest.fixture
def registry(config: ThumbnailConfig) -> GeneratorRegistry:
    return GeneratorRegistry.default(config)


@pytest.fixture
def make_image(tmp_path: Path) -> ImageFactory:
    """Write a solid-color image and return its path."""

    def _make(
        name: str = "source.png",
        size: tuple[int, int] = (100, 100),
        color: tuple[int, ...] | str = (255, 0, 0),
        mode: str = "RGB",
        format: str | None = None,
    ) -> Path:
        path = tmp_path / name
        Image.new(mode, size, color).save(path, format=format)
        return path

    return _make


@pytest.fixture
def make_request(tmp_path: Path) -> Callable[..., ConversionRequest]:
    """Build a request for a 64x64 PNG thumbnail in tmp_path."""

    def _make(source_path: Path, **kwargs) -> ConversionRequest:
        defaults = {
            "source_path": source_path,
            "source_mime": "image/png",
            "destination_path": tmp_path / "thumb.png",
            "destination_mime": "image/png",
            "width": 64,
            "height": 64,
        }
        defaults.update(kwargs)
        return ConversionRequest(**defaults)

    return _make
