"""Conversion request model."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

AUTO_GENERATOR = "auto"


class ThumbnailMode(str, Enum):
    """Geometry applied to the raster before encoding."""

    CROP = "crop"
    BESTFIT = "bestfit"
    CANVAS = "canvas"


class AnchorPoint(str, Enum):
    """Reference point kept when cropping excess content."""

    CENTER = "center"
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def centering(self) -> tuple[float, float]:
        """Horizontal and vertical fractions as used by ``ImageOps.fit``."""
        x = 0.0 if "left" in self.value else 1.0 if "right" in self.value else 0.5
        y = 0.0 if "top" in self.value else 1.0 if "bottom" in self.value else 0.5
        return (x, y)


class ConversionRequest(BaseModel):
    """Everything needed to turn one source file into one thumbnail.

    Instances are frozen; a request never changes during a run.
    """

    model_config = ConfigDict(frozen=True)

    source_path: Path = Field(..., description="Absolute path to the source file")
    source_mime: str = Field(..., description="Mime type of the source file")
    destination_path: Path = Field(..., description="Where the thumbnail is written")
    destination_mime: str = Field(default="image/webp", description="Mime type of the thumbnail")
    width: int = Field(default=600, gt=0, description="Width / max width of the thumbnail")
    height: int = Field(default=600, gt=0, description="Height / max height of the thumbnail")
    quality: int = Field(default=75, description="Encoder quality (0-100)")
    mode: ThumbnailMode = Field(default=ThumbnailMode.CROP)
    anchor: AnchorPoint = Field(default=AnchorPoint.CENTER)
    generator: str = Field(default=AUTO_GENERATOR, description="Generator name or 'auto'")

    @field_validator("quality", mode="before")
    @classmethod
    def _clamp_quality(cls, value: int) -> int:
        try:
            quality = int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"quality must be a number, got {value!r}") from e
        return max(0, min(100, quality))

    @property
    def is_auto(self) -> bool:
        """True when the generator is picked from the source mime."""
        return self.generator == AUTO_GENERATOR
