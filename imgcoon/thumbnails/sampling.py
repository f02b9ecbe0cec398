"""Pixel sampling heuristics for canvas compositing.

Both checks look at a handful of fixed points instead of every pixel.
Transparency that only exists away from the sampled points goes unnoticed;
that is a known limitation of the heuristic.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from PIL import Image

# Formats that can carry an alpha channel. Everything else is opaque.
ALPHA_FORMATS = frozenset({"PNG", "GIF", "WEBP", "TIFF", "ICO", "TGA", "AVIF", "JPEG2000"})

NEAR_WHITE_MIN = 240
NEAR_WHITE_SPREAD = 10
WHITE_MAJORITY = 0.6
EDGE_INSET = 2

WHITE = (255, 255, 255)


class SampleColor(BaseModel):
    """RGBA color read from a single pixel. Alpha 255 is fully opaque."""

    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)
    alpha: int = Field(default=255, ge=0, le=255)

    @property
    def hex(self) -> str:
        """Get hex representation (without alpha)."""
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @property
    def is_opaque(self) -> bool:
        return self.alpha == 255

    @property
    def is_near_white(self) -> bool:
        """Bright and nearly unsaturated."""
        channels = (self.r, self.g, self.b)
        return (
            all(c > NEAR_WHITE_MIN for c in channels)
            and max(channels) - min(channels) < NEAR_WHITE_SPREAD
        )

    @classmethod
    def from_tuple(cls, rgba: tuple[int, ...]) -> "SampleColor":
        alpha = rgba[3] if len(rgba) > 3 else 255
        return cls(r=rgba[0], g=rgba[1], b=rgba[2], alpha=alpha)


def has_alpha_channel(image: Image.Image) -> bool:
    """Whether the image mode (or palette) can hold transparent pixels."""
    if image.mode in ("RGBA", "LA", "PA", "RGBa", "La"):
        return True
    return image.mode in ("P", "L", "RGB") and "transparency" in image.info


def sample_pixel(image: Image.Image, x: int, y: int) -> SampleColor:
    """Read one pixel, clamping the coordinate into the image."""
    x = min(max(x, 0), image.width - 1)
    y = min(max(y, 0), image.height - 1)
    return SampleColor.from_tuple(image.getpixel((x, y)))


def transparency_points(width: int, height: int) -> list[tuple[int, int]]:
    """Center and the four corners."""
    return [
        (width // 2, height // 2),
        (0, 0),
        (width - 1, 0),
        (0, height - 1),
        (width - 1, height - 1),
    ]


def background_points(width: int, height: int) -> list[tuple[int, int]]:
    """Four corners and four edge midpoints, inset from the border."""
    left, top = EDGE_INSET, EDGE_INSET
    right, bottom = width - 1 - EDGE_INSET, height - 1 - EDGE_INSET
    mid_x, mid_y = width // 2, height // 2
    return [
        (left, top),
        (right, top),
        (left, bottom),
        (right, bottom),
        (mid_x, top),
        (mid_x, bottom),
        (left, mid_y),
        (right, mid_y),
    ]


def detect_transparency(image: Image.Image, format: str | None) -> bool:
    """Return True if any of the five sampled pixels is not fully opaque.

    Only images of an alpha-capable format that actually carry alpha are
    sampled; anything else counts as opaque.
    """
    if (format or "").upper() not in ALPHA_FORMATS or not has_alpha_channel(image):
        return False

    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    return any(
        not sample_pixel(rgba, x, y).is_opaque
        for x, y in transparency_points(rgba.width, rgba.height)
    )


def infer_background(image: Image.Image) -> SampleColor:
    """Guess a solid background color from the image edges.

    A white majority among the samples gives pure white, so documents and
    photos with white margins do not end up on an off-white canvas.
    Otherwise the rounded mean of the samples is used.
    """
    rgb = image if image.mode == "RGB" else image.convert("RGB")
    samples = [sample_pixel(rgb, x, y) for x, y in background_points(rgb.width, rgb.height)]

    white_count = sum(1 for s in samples if s.is_near_white)
    if white_count / len(samples) >= WHITE_MAJORITY:
        return SampleColor.from_tuple(WHITE)

    count = len(samples)
    return SampleColor(
        r=round(sum(s.r for s in samples) / count),
        g=round(sum(s.g for s in samples) / count),
        b=round(sum(s.b for s in samples) / count),
    )
