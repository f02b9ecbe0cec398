"""Generators turning source files into intermediate rasters."""

from imgcoon.generators.base import Generator, GeneratorAttempt, ToolFailure
from imgcoon.generators.cad import CadGenerator
from imgcoon.generators.dispatcher import DispatchResult, Dispatcher
from imgcoon.generators.documents import DocumentGenerator, EbookGenerator, PdfGenerator
from imgcoon.generators.images import ImageGenerator, RawImageGenerator, SvgGenerator
from imgcoon.generators.media import AudioGenerator, VideoGenerator
from imgcoon.generators.registry import GENERATOR_CLASSES, GeneratorRegistry

__all__ = [
    # Base classes
    "Generator",
    "GeneratorAttempt",
    "ToolFailure",
    # Generators
    "AudioGenerator",
    "CadGenerator",
    "DocumentGenerator",
    "EbookGenerator",
    "ImageGenerator",
    "PdfGenerator",
    "RawImageGenerator",
    "SvgGenerator",
    "VideoGenerator",
    # Registry and dispatch
    "GENERATOR_CLASSES",
    "GeneratorRegistry",
    "DispatchResult",
    "Dispatcher",
]
