"""Thumbnail post-processing using Pillow."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from PIL import Image, ImageOps
from pydantic import BaseModel, Field

from imgcoon.errors import EncodeError, LoadError
from imgcoon.models.request import AnchorPoint, ConversionRequest, ThumbnailMode
from imgcoon.thumbnails.config import ThumbnailConfig
from imgcoon.thumbnails.sampling import (
    SampleColor,
    detect_transparency,
    has_alpha_channel,
    infer_background,
)

logger = logging.getLogger(__name__)

MIME_FORMATS: dict[str, str] = {
    "image/webp": "WEBP",
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/pjpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/avif": "AVIF",
    "image/tiff": "TIFF",
    "image/bmp": "BMP",
}

# Output formats that keep an alpha channel; the rest get flattened.
ALPHA_OUTPUT_FORMATS = frozenset({"WEBP", "PNG", "GIF", "AVIF", "TIFF"})
LOSSY_FORMATS = frozenset({"WEBP", "JPEG", "AVIF"})


class ImageAnalysis(BaseModel):
    """Diagnostic summary of a raster file."""

    width: int
    height: int
    format: str | None = None
    mode: str
    has_transparency: bool = Field(..., description="Result of the five-point alpha sample")
    background: SampleColor | None = Field(
        default=None, description="Inferred canvas color (None when transparent)"
    )


class ThumbnailProcessor:
    """Turns an intermediate raster into the final thumbnail file."""

    def __init__(self, config: ThumbnailConfig | None = None) -> None:
        self.config = config or ThumbnailConfig()

    def process(self, intermediate_path: Path, request: ConversionRequest) -> Path:
        """Load, orient, resize per mode and encode.

        Raises:
            LoadError: the intermediate file is missing or undecodable
            EncodeError: the destination could not be encoded or written
        """
        image, format = self.load(intermediate_path)
        image = self.orient(image)
        result = self.apply_geometry(image, format, request)
        self.encode(result, request.destination_path, request.destination_mime, request.quality)
        return request.destination_path

    def load(self, path: Path) -> tuple[Image.Image, str | None]:
        """Decode a raster file completely and return it with its format tag."""
        try:
            with Image.open(path) as opened:
                opened.load()
                format = opened.format
                image = opened.copy()
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise LoadError(f"Cannot load {path}: {e}") from e

        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA" if has_alpha_channel(image) else "RGB")
        return image, format

    def orient(self, image: Image.Image) -> Image.Image:
        """Apply the EXIF orientation tag, if any."""
        return ImageOps.exif_transpose(image)

    def apply_geometry(
        self,
        image: Image.Image,
        format: str | None,
        request: ConversionRequest,
    ) -> Image.Image:
        size = (request.width, request.height)
        if request.mode == ThumbnailMode.CROP:
            return self.crop(image, size, request.anchor)
        if request.mode == ThumbnailMode.BESTFIT:
            return self.bestfit(image, size)
        return self.canvas(image, format, size)

    def crop(
        self,
        image: Image.Image,
        size: tuple[int, int],
        anchor: AnchorPoint = AnchorPoint.CENTER,
    ) -> Image.Image:
        """Fill the box exactly, cutting the excess around the anchor."""
        return ImageOps.fit(
            image, size, Image.Resampling.LANCZOS, centering=anchor.centering
        )

    def bestfit(self, image: Image.Image, size: tuple[int, int]) -> Image.Image:
        """Scale to fit inside the box while keeping the aspect ratio."""
        new_size = self.fit_size(image.size, size)
        if new_size == image.size:
            return image
        return image.resize(new_size, Image.Resampling.LANCZOS)

    def canvas(
        self,
        image: Image.Image,
        format: str | None,
        size: tuple[int, int],
    ) -> Image.Image:
        """Best fit, then center on a canvas of exactly the requested size."""
        fitted = self.bestfit(image, size)
        offset = ((size[0] - fitted.width) // 2, (size[1] - fitted.height) // 2)

        if detect_transparency(fitted, format):
            logger.debug("Transparency detected, using transparent canvas")
            canvas = Image.new("RGBA", size, (0, 0, 0, 0))
            canvas.alpha_composite(fitted.convert("RGBA"), dest=offset)
            return canvas

        background = infer_background(fitted)
        logger.debug(f"Inferred canvas background {background.hex}")
        canvas = Image.new("RGB", size, background.rgb)
        if fitted.mode == "RGBA":
            canvas.paste(fitted, offset, fitted)
        else:
            canvas.paste(fitted, offset)
        return canvas

    def encode(self, image: Image.Image, path: Path, mime: str, quality: int) -> None:
        """Write the image to ``path``.

        The data goes to a temporary file next to the destination first and is
        moved into place once it is complete.
        """
        format = MIME_FORMATS.get(mime.lower())
        if format is None:
            raise EncodeError(f"Unsupported destination mime: {mime}")

        image = self._prepare_for_format(image, format)
        options: dict[str, int | bool] = {}
        if format in LOSSY_FORMATS:
            options["quality"] = quality
        if format in ("JPEG", "PNG"):
            options["optimize"] = True

        tmp_path: Path | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            )
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "wb") as f:
                image.save(f, format=format, **options)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, path)
        except (OSError, ValueError, KeyError) as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise EncodeError(f"Cannot encode {path} as {format}: {e}") from e

    def analyze(self, path: Path) -> ImageAnalysis:
        """Report how canvas mode would treat the given raster."""
        image, format = self.load(path)
        image = self.orient(image)
        transparent = detect_transparency(image, format)
        return ImageAnalysis(
            width=image.width,
            height=image.height,
            format=format,
            mode=image.mode,
            has_transparency=transparent,
            background=None if transparent else infer_background(image),
        )

    @staticmethod
    def fit_size(source: tuple[int, int], box: tuple[int, int]) -> tuple[int, int]:
        """Largest size with the source aspect ratio that fits inside the box."""
        ratio = min(box[0] / source[0], box[1] / source[1])
        return (
            max(1, min(box[0], round(source[0] * ratio))),
            max(1, min(box[1], round(source[1] * ratio))),
        )

    def _prepare_for_format(self, image: Image.Image, format: str) -> Image.Image:
        if format in ALPHA_OUTPUT_FORMATS:
            return image

        # No alpha in the output format: flatten transparent pixels
        if image.mode == "RGBA":
            background = Image.new("RGB", image.size, self._hex_to_rgb(self.config.flatten_color))
            background.paste(image, (0, 0), image)
            return background
        return image.convert("RGB") if image.mode != "RGB" else image

    @staticmethod
    def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
        """Convert hex color to RGB tuple."""
        hex_color = hex_color.lstrip("#")
        return tuple(int(hex_color[i : i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]
