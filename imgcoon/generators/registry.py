"""Ordered, read-only registry of generators."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from imgcoon.generators.base import Generator
from imgcoon.generators.cad import CadGenerator
from imgcoon.generators.documents import DocumentGenerator, EbookGenerator, PdfGenerator
from imgcoon.generators.images import ImageGenerator, RawImageGenerator, SvgGenerator
from imgcoon.generators.media import AudioGenerator, VideoGenerator
from imgcoon.thumbnails.config import ThumbnailConfig

# Dispatch order. When several generators claim a mime the earlier one runs
# first; svg and raw must precede the generic image generator.
GENERATOR_CLASSES: tuple[type[Generator], ...] = (
    VideoGenerator,
    SvgGenerator,
    RawImageGenerator,
    ImageGenerator,
    PdfGenerator,
    AudioGenerator,
    EbookGenerator,
    CadGenerator,
    DocumentGenerator,
)


class GeneratorRegistry:
    """Fixed sequence of generators, looked up by name or by mime type.

    The registry is built once and never changes afterwards.
    """

    def __init__(self, generators: Iterable[Generator]) -> None:
        self._generators: tuple[Generator, ...] = tuple(generators)
        self._by_name: dict[str, Generator] = {}
        for generator in self._generators:
            if generator.name in self._by_name:
                raise ValueError(f"Duplicate generator name: {generator.name}")
            self._by_name[generator.name] = generator

    @classmethod
    def default(cls, config: ThumbnailConfig | None = None) -> GeneratorRegistry:
        """Registry with all built-in generators in dispatch order."""
        config = config or ThumbnailConfig()
        return cls(generator_class(config) for generator_class in GENERATOR_CLASSES)

    def get(self, name: str) -> Generator | None:
        """Get a generator by its exact name."""
        return self._by_name.get(name)

    def names(self) -> list[str]:
        """List generator names in dispatch order."""
        return [g.name for g in self._generators]

    def matching(self, mime: str) -> list[Generator]:
        """Generators that claim the mime type, in dispatch order."""
        return [g for g in self._generators if g.is_supported(mime)]

    def __iter__(self) -> Iterator[Generator]:
        return iter(self._generators)

    def __len__(self) -> int:
        return len(self._generators)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
