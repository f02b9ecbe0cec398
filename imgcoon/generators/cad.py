"""Generator for CAD models via FreeCAD."""

from __future__ import annotations

from pathlib import Path

from imgcoon.generators.base import Generator


class CadGenerator(Generator):
    """Create an image from a CAD file with freecad-thumbnailer."""

    name = "cad"
    description = "CAD model via FreeCAD"
    MIME_PATTERNS = ("model/x-",)
    MIME_TYPES = (
        "application/acad",
        "application/dxf",
        "application/x-extension-fcstd",
    )

    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        cmd = [
            self.tools.freecad_thumbnailer,
            "-s",
            str(max(self.box(size))),
            str(source_path),
            str(intermediate_path),
        ]
        self.run_tool(cmd)
        return self.require_output(intermediate_path)
