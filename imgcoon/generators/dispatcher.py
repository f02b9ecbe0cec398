"""Select and run the generator for a request."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from imgcoon.errors import ErrorKind
from imgcoon.generators.base import GeneratorAttempt
from imgcoon.generators.registry import GeneratorRegistry
from imgcoon.models.request import ConversionRequest

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Result of dispatching one request."""

    ok: bool
    path: Path | None = None
    generator: str | None = None
    error: ErrorKind | None = None
    attempts: list[GeneratorAttempt] = field(default_factory=list)

    @property
    def message(self) -> str:
        """Human readable summary of the failed attempts."""
        return "; ".join(f"{a.generator}: {a.error}" for a in self.attempts if not a.ok)


class Dispatcher:
    """Runs the explicitly named generator, or the first matching one that succeeds."""

    def __init__(self, registry: GeneratorRegistry) -> None:
        self.registry = registry

    def select_and_convert(
        self, request: ConversionRequest, work_dir: Path
    ) -> DispatchResult:
        """Produce an intermediate raster for the request inside ``work_dir``.

        An explicit generator name runs only that generator. In auto mode the
        generators claiming the source mime are tried in registry order; a
        failing generator is recorded and the next candidate gets its turn.
        """
        if request.is_auto:
            candidates = self.registry.matching(request.source_mime)
            if not candidates:
                logger.info(f"No generator supports {request.source_mime}")
                return DispatchResult(ok=False, error=ErrorKind.NO_SUPPORTED_GENERATOR)
        else:
            generator = self.registry.get(request.generator)
            if generator is None:
                logger.warning(f"Unknown generator: {request.generator}")
                return DispatchResult(ok=False, error=ErrorKind.UNKNOWN_GENERATOR)
            candidates = [generator]

        attempts: list[GeneratorAttempt] = []
        for generator in candidates:
            logger.debug(f"Trying generator {generator.name} for {request.source_mime}")
            attempt = generator.convert(
                request.source_path,
                request.source_mime,
                work_dir / f"{generator.name}.png",
                request.quality,
                size=(request.width, request.height),
            )
            attempts.append(attempt)
            if attempt.ok:
                return DispatchResult(
                    ok=True,
                    path=attempt.path,
                    generator=generator.name,
                    attempts=attempts,
                )

        return DispatchResult(
            ok=False, error=ErrorKind.GENERATOR_TOOL_FAILURE, attempts=attempts
        )
