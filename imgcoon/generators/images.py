"""Generators for raster, raw and vector images."""

from __future__ import annotations

import re
from pathlib import Path

import resvg_py

from imgcoon.generators.base import Generator, ToolFailure
from imgcoon.thumbnails.processor import ThumbnailProcessor

VIEWBOX_RE = re.compile(r'viewBox=["\']([^"\']+)["\']')
SVG_TAG_RE = re.compile(r"<svg\b[^>]*>")
DIMENSION_RE = re.compile(r'\s(width|height)=["\']\s*([\d.]+)\s*(?:px)?["\']')


class SvgGenerator(Generator):
    """Render an SVG with resvg."""

    name = "svg"
    description = "Vector image via resvg"
    MIME_PATTERNS = ("image/svg",)

    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        svg_string = source_path.read_text(encoding="utf-8")
        width, height = self.render_size(svg_string, self.box(size))

        png_data = resvg_py.svg_to_bytes(svg_string=svg_string, width=width, height=height)
        intermediate_path.write_bytes(bytes(png_data))
        return self.require_output(intermediate_path)

    def render_size(self, svg_string: str, box: tuple[int, int]) -> tuple[int, int]:
        """Size to render at: the box, oversampled, with the SVG's aspect ratio."""
        factor = self.config.supersample
        target = (box[0] * factor, box[1] * factor)

        native = self.native_size(svg_string)
        if native is None:
            side = max(target)
            return (side, side)
        return ThumbnailProcessor.fit_size(native, target)

    @staticmethod
    def native_size(svg_string: str) -> tuple[int, int] | None:
        """Intrinsic size from the viewBox, or from width/height attributes."""
        tag_match = SVG_TAG_RE.search(svg_string)
        if tag_match is None:
            return None
        root_tag = tag_match.group(0)

        viewbox_match = VIEWBOX_RE.search(root_tag)
        if viewbox_match:
            parts = viewbox_match.group(1).replace(",", " ").split()
            if len(parts) >= 4:
                try:
                    width, height = float(parts[2]), float(parts[3])
                except ValueError:
                    width = height = 0
                if width > 0 and height > 0:
                    return (max(1, round(width)), max(1, round(height)))

        dimensions = {name: float(value) for name, value in DIMENSION_RE.findall(root_tag)}
        if dimensions.get("width", 0) > 0 and dimensions.get("height", 0) > 0:
            return (max(1, round(dimensions["width"])), max(1, round(dimensions["height"])))
        return None


class RawImageGenerator(Generator):
    """Extract the embedded preview of a camera raw file (CR2, NEF, DNG, ...)."""

    name = "raw"
    description = "Camera raw preview via dcraw"
    MIME_PATTERNS = ("image/x-",)

    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        result = self.run_tool([self.tools.dcraw, "-c", "-e", str(source_path)])
        if not result.stdout:
            raise ToolFailure(f"dcraw found no embedded preview in {source_path}")
        intermediate_path.write_bytes(result.stdout)
        return intermediate_path


class ImageGenerator(Generator):
    """Plain raster images are processed directly, without conversion."""

    name = "image"
    description = "Raster image (no conversion)"
    MIME_PATTERNS = ("image",)

    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        if not source_path.is_file():
            raise ToolFailure(f"Source image not found: {source_path}")
        return source_path
