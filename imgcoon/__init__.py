"""Imgcoon - thumbnails for videos, images, PDFs, audio, office documents, CAD files and ebooks."""

from imgcoon.errors import ErrorKind, ThumbnailError
from imgcoon.models import AnchorPoint, ConversionRequest, ThumbnailMode
from imgcoon.thumbnailer import Imgcoon, RunResult, create
from imgcoon.thumbnails import ThumbnailConfig

__version__ = "0.1.0"
__all__ = [
    "AnchorPoint",
    "ConversionRequest",
    "ErrorKind",
    "Imgcoon",
    "RunResult",
    "ThumbnailConfig",
    "ThumbnailError",
    "ThumbnailMode",
    "create",
]
