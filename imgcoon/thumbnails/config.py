"""Thumbnail configuration and external tool settings."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from imgcoon.models.request import AnchorPoint, ThumbnailMode


class ToolConfig(BaseModel):
    """External converters used by the generators."""

    ffmpeg: str = Field(default="ffmpeg", description="ffmpeg binary (video frames, audio covers)")
    dcraw: str = Field(default="dcraw", description="dcraw binary (raw image previews)")
    ebook_meta: str = Field(default="ebook-meta", description="calibre ebook-meta binary")
    freecad_thumbnailer: str = Field(
        default="freecad-thumbnailer", description="FreeCAD thumbnail extractor"
    )
    soffice: str = Field(default="soffice", description="LibreOffice binary (office to PDF)")
    timeout: float = Field(default=60.0, gt=0, description="Seconds before a tool is killed")
    pdf_dpi: int = Field(default=150, gt=0, description="Resolution for rendering PDF pages")


class ThumbnailConfig(BaseModel):
    """Configuration for thumbnail generation."""

    width: int = Field(default=600, gt=0, description="Default thumbnail width")
    height: int = Field(default=600, gt=0, description="Default thumbnail height")
    quality: int = Field(default=75, ge=0, le=100, description="Default encoder quality")
    mode: ThumbnailMode = Field(default=ThumbnailMode.CROP)
    anchor: AnchorPoint = Field(default=AnchorPoint.CENTER)
    destination_mime: str = Field(default="image/webp", description="Default thumbnail mime")
    dir_mode: int = Field(default=0o777, description="Mode for created destination directories")
    flatten_color: str = Field(
        default="#ffffff",
        description="Background for transparent pixels when the output format has no alpha",
    )
    supersample: int = Field(default=2, ge=1, description="Oversampling factor for SVG rendering")
    tools: ToolConfig = Field(default_factory=ToolConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "ThumbnailConfig":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)
