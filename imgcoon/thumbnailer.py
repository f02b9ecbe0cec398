"""Main Imgcoon class - one call from any source file to a thumbnail."""

from __future__ import annotations

import logging
import mimetypes
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from imgcoon.errors import ErrorKind, ThumbnailError
from imgcoon.generators import Dispatcher, GeneratorAttempt, GeneratorRegistry
from imgcoon.models.request import (
    AUTO_GENERATOR,
    AnchorPoint,
    ConversionRequest,
    ThumbnailMode,
)
from imgcoon.thumbnails import ThumbnailConfig, ThumbnailProcessor

logger = logging.getLogger(__name__)

DEFAULT_MIME = "application/octet-stream"

# Types the platform mime table usually lacks
EXTRA_MIME_TYPES = {
    ".cr2": "image/x-canon-cr2",
    ".cr3": "image/x-canon-cr3",
    ".nef": "image/x-nikon-nef",
    ".arw": "image/x-sony-arw",
    ".dng": "image/x-adobe-dng",
    ".orf": "image/x-olympus-orf",
    ".rw2": "image/x-panasonic-rw2",
    ".raf": "image/x-fuji-raf",
    ".epub": "application/epub+zip",
    ".mobi": "application/x-mobipocket-ebook",
    ".azw3": "application/vnd.amazon.ebook",
    ".fcstd": "application/x-extension-fcstd",
    ".dxf": "application/dxf",
    ".dwg": "application/acad",
    ".stl": "model/x-stl-binary",
    ".step": "model/x-step",
    ".stp": "model/x-step",
    ".webp": "image/webp",
    ".avif": "image/avif",
}

_mime_db = mimetypes.MimeTypes()
for _ext, _mime in EXTRA_MIME_TYPES.items():
    _mime_db.add_type(_mime, _ext)


def guess_mime(path: str | Path) -> str:
    """Mime type from the file name, or application/octet-stream."""
    mime, _ = _mime_db.guess_type(Path(path).name)
    return mime or DEFAULT_MIME


@dataclass
class RunResult:
    """Outcome of one thumbnail run. Truthy on success."""

    ok: bool
    error: ErrorKind | None = None
    generator: str | None = None
    attempts: list[GeneratorAttempt] = field(default_factory=list)
    message: str = ""

    def __bool__(self) -> bool:
        return self.ok


class Imgcoon:
    """Creates thumbnails from videos, images, PDFs, office documents and more.

    Configure with the ``set_*`` methods and call ``generate()``, or use
    the ``create()`` shortcut.
    """

    def __init__(
        self,
        config: ThumbnailConfig | None = None,
        registry: GeneratorRegistry | None = None,
    ) -> None:
        self.config = config or ThumbnailConfig()
        self.registry = registry or GeneratorRegistry.default(self.config)
        self.dispatcher = Dispatcher(self.registry)
        self.processor = ThumbnailProcessor(self.config)

        self.src_path: Path | None = None
        self.src_mime: str = DEFAULT_MIME
        self.dest_path: Path | None = None
        self.dest_mime: str = self.config.destination_mime
        self.width: int = self.config.width
        self.height: int = self.config.height
        self.quality: int = self.config.quality
        self.mode: ThumbnailMode = self.config.mode
        self.anchor: AnchorPoint = self.config.anchor
        self.generator: str = AUTO_GENERATOR

    @classmethod
    def create(
        cls,
        src_path: str | Path,
        dest_path: str | Path,
        dest_mime: str = "image/webp",
        mode: ThumbnailMode | str = ThumbnailMode.CROP,
        overwrite: bool = True,
        generator: str = AUTO_GENERATOR,
        width: int | None = None,
        height: int | None = None,
        quality: int | None = None,
        config: ThumbnailConfig | None = None,
    ) -> bool:
        """Create a thumbnail in one call. Returns True on success."""
        x = cls(config)
        x.set_source(src_path)
        x.set_destination(dest_path, dest_mime)
        x.set_generator(generator)
        if width is not None or height is not None:
            x.set_size(
                width if width is not None else x.width,
                height if height is not None else x.height,
            )
        if quality is not None:
            x.set_quality(quality)
        try:
            x.set_mode(mode)
        except ValueError:
            logger.warning(f"Invalid mode: {mode}")
            return False
        return x.generate(overwrite)

    def set_source(self, src_path: str | Path, src_mime: str | None = None) -> Imgcoon:
        """Set the source file; the mime is guessed from the name if not given."""
        self.src_path = Path(src_path)
        self.src_mime = src_mime or guess_mime(self.src_path)
        return self

    def set_destination(self, dest_path: str | Path, dest_mime: str | None = None) -> Imgcoon:
        """Set the thumbnail file path and mime.

        Recommended mime types: image/webp, image/jpeg, image/png.
        """
        self.dest_path = Path(dest_path)
        self.dest_mime = dest_mime or self.config.destination_mime
        return self

    def set_mode(self, mode: ThumbnailMode | str) -> Imgcoon:
        """Set the image mode: crop (default), bestfit or canvas."""
        self.mode = ThumbnailMode(mode)
        return self

    def set_quality(self, quality: int) -> Imgcoon:
        """Set the thumbnail quality (0-100)."""
        self.quality = quality
        return self

    def set_size(self, width: int, height: int | None = None) -> Imgcoon:
        """Set the thumbnail box. A missing height makes it square."""
        self.width = width
        self.height = height if height is not None else width
        return self

    def set_anchor(self, anchor: AnchorPoint | str) -> Imgcoon:
        """Set the anchor point kept when cropping."""
        self.anchor = AnchorPoint(anchor)
        return self

    def set_generator(self, name: str) -> Imgcoon:
        """Force a generator by name, or 'auto' to pick by mime type."""
        self.generator = name
        return self

    def build_request(self) -> ConversionRequest:
        """Freeze the current settings into a request."""
        if self.src_path is None or self.dest_path is None:
            raise ValueError("Source and destination must be set before generating")
        return ConversionRequest(
            source_path=self.src_path,
            source_mime=self.src_mime,
            destination_path=self.dest_path,
            destination_mime=self.dest_mime,
            width=self.width,
            height=self.height,
            quality=self.quality,
            mode=self.mode,
            anchor=self.anchor,
            generator=self.generator,
        )

    def generate(self, overwrite: bool = True) -> bool:
        """Generate the thumbnail.

        Args:
            overwrite: replace an existing thumbnail. Default: True.

        Returns:
            True on success, False on failure.
        """
        try:
            request = self.build_request()
        except ValueError as e:
            logger.warning(f"Invalid thumbnail request: {e}")
            return False
        return self.run(request, overwrite).ok

    def run(self, request: ConversionRequest, overwrite: bool = True) -> RunResult:
        """Run a request and report the detailed outcome. Never raises."""
        try:
            result = self._run(request, overwrite)
        except Exception as e:
            logger.exception(f"Unexpected failure creating {request.destination_path}")
            return RunResult(ok=False, error=ErrorKind.UNEXPECTED_ERROR, message=str(e))

        if result.ok:
            logger.info(f"Thumbnail created: {request.destination_path} ({result.generator})")
        else:
            logger.info(
                f"Thumbnail failed for {request.source_path}: {result.error.value} {result.message}"
            )
        return result

    def _run(self, request: ConversionRequest, overwrite: bool) -> RunResult:
        if not request.source_path.exists():
            return RunResult(
                ok=False,
                error=ErrorKind.SOURCE_NOT_FOUND,
                message=f"Source not found: {request.source_path}",
            )

        dest = request.destination_path
        dest.parent.mkdir(mode=self.config.dir_mode, parents=True, exist_ok=True)

        if dest.exists():
            if not overwrite:
                return RunResult(
                    ok=False,
                    error=ErrorKind.DESTINATION_EXISTS,
                    message=f"Destination exists: {dest}",
                )
            dest.unlink()

        with tempfile.TemporaryDirectory(prefix="imgcoon-") as tmp_dir:
            dispatch = self.dispatcher.select_and_convert(request, Path(tmp_dir))
            if not dispatch.ok:
                return RunResult(
                    ok=False,
                    error=dispatch.error,
                    attempts=dispatch.attempts,
                    message=dispatch.message,
                )

            try:
                self.processor.process(dispatch.path, request)
            except ThumbnailError as e:
                return RunResult(
                    ok=False,
                    error=e.kind,
                    generator=dispatch.generator,
                    attempts=dispatch.attempts,
                    message=str(e),
                )

        return RunResult(ok=True, generator=dispatch.generator, attempts=dispatch.attempts)


def create(
    src_path: str | Path,
    dest_path: str | Path,
    dest_mime: str = "image/webp",
    mode: ThumbnailMode | str = ThumbnailMode.CROP,
    overwrite: bool = True,
    generator: str = AUTO_GENERATOR,
    width: int | None = None,
    height: int | None = None,
    quality: int | None = None,
    config: ThumbnailConfig | None = None,
) -> bool:
    """Create a thumbnail for ``src_path`` at ``dest_path``. Returns True on success."""
    return Imgcoon.create(
        src_path,
        dest_path,
        dest_mime=dest_mime,
        mode=mode,
        overwrite=overwrite,
        generator=generator,
        width=width,
        height=height,
        quality=quality,
        config=config,
    )
