"""Data models for imgcoon."""

from imgcoon.models.request import (
    AUTO_GENERATOR,
    AnchorPoint,
    ConversionRequest,
    ThumbnailMode,
)

__all__ = [
    "AUTO_GENERATOR",
    "AnchorPoint",
    "ConversionRequest",
    "ThumbnailMode",
]
