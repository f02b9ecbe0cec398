"""Base generator interface.

A generator turns one family of input formats into an intermediate raster
file, usually by calling an external converter. Every generator reports
whether it supports a mime type and performs the conversion, returning a
``GeneratorAttempt`` instead of raising.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from imgcoon.thumbnails.config import ThumbnailConfig, ToolConfig

logger = logging.getLogger(__name__)


class ToolFailure(Exception):
    """An external converter ran but did not produce a usable raster."""


@dataclass
class GeneratorAttempt:
    """Outcome of running one generator for one request."""

    generator: str
    ok: bool
    path: Path | None = None
    error: str | None = None


class Generator(ABC):
    """Converts a source file into a raster the processor can load.

    Subclasses declare ``MIME_PATTERNS`` (matched anywhere inside the mime
    string) and ``MIME_TYPES`` (matched exactly), and implement ``_convert``.
    """

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    MIME_PATTERNS: ClassVar[tuple[str, ...]] = ()
    MIME_TYPES: ClassVar[tuple[str, ...]] = ()

    def __init__(self, config: ThumbnailConfig | None = None) -> None:
        self.config = config or ThumbnailConfig()

    @property
    def tools(self) -> ToolConfig:
        return self.config.tools

    @classmethod
    def is_supported(cls, mime: str) -> bool:
        """Check whether this generator claims the mime type."""
        return mime in cls.MIME_TYPES or any(p in mime for p in cls.MIME_PATTERNS)

    def convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None = None,
    ) -> GeneratorAttempt:
        """Run the conversion.

        Args:
            source_path: File to convert
            source_mime: Mime type of the source
            intermediate_path: Where the raster should be written
            quality: Requested thumbnail quality (0-100)
            size: Requested thumbnail box, for generators that render to size

        Returns:
            GeneratorAttempt with the raster path on success
        """
        try:
            path = self._convert(source_path, source_mime, intermediate_path, quality, size)
        except Exception as e:
            logger.warning(f"Generator {self.name} failed for {source_path}: {e}")
            return GeneratorAttempt(generator=self.name, ok=False, error=str(e) or type(e).__name__)

        logger.debug(f"Generator {self.name} produced {path}")
        return GeneratorAttempt(generator=self.name, ok=True, path=path)

    @abstractmethod
    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        """Produce the raster and return its path. Raise on failure."""

    def box(self, size: tuple[int, int] | None) -> tuple[int, int]:
        """Requested box, falling back to the configured default."""
        return size or (self.config.width, self.config.height)

    def run_tool(
        self, cmd: list[str], cwd: Path | None = None
    ) -> subprocess.CompletedProcess[bytes]:
        """Run an external converter with the configured timeout.

        Raises CalledProcessError on a non-zero exit, TimeoutExpired when the
        tool runs too long and FileNotFoundError if the binary is missing.
        """
        logger.debug(f"Running {' '.join(cmd)}")
        return subprocess.run(
            cmd,
            cwd=cwd,
            check=True,
            capture_output=True,
            timeout=self.tools.timeout,
        )

    @staticmethod
    def require_output(path: Path) -> Path:
        """Fail unless the tool left a non-empty file behind."""
        if not path.is_file() or path.stat().st_size == 0:
            raise ToolFailure(f"No output written to {path}")
        return path
