"""Error kinds and exceptions raised while building thumbnails."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Why a thumbnail run failed."""

    SOURCE_NOT_FOUND = "source_not_found"
    DESTINATION_EXISTS = "destination_exists"
    UNKNOWN_GENERATOR = "unknown_generator"
    NO_SUPPORTED_GENERATOR = "no_supported_generator"
    GENERATOR_TOOL_FAILURE = "generator_tool_failure"
    LOAD_ERROR = "load_error"
    ENCODE_ERROR = "encode_error"
    UNEXPECTED_ERROR = "unexpected_error"


class ThumbnailError(Exception):
    """Base exception for thumbnail processing failures."""

    kind: ErrorKind = ErrorKind.UNEXPECTED_ERROR

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class LoadError(ThumbnailError):
    """The intermediate raster is missing or cannot be decoded."""

    kind = ErrorKind.LOAD_ERROR


class EncodeError(ThumbnailError):
    """The final thumbnail could not be encoded or written."""

    kind = ErrorKind.ENCODE_ERROR
