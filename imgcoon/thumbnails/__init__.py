"""Thumbnail post-processing module."""

from imgcoon.thumbnails.config import ThumbnailConfig, ToolConfig
from imgcoon.thumbnails.processor import ImageAnalysis, ThumbnailProcessor
from imgcoon.thumbnails.sampling import (
    SampleColor,
    detect_transparency,
    infer_background,
)

__all__ = [
    "ImageAnalysis",
    "SampleColor",
    "ThumbnailConfig",
    "ThumbnailProcessor",
    "ToolConfig",
    "detect_transparency",
    "infer_background",
]
