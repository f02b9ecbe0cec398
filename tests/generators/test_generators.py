"""Tests for the individual generators."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import fitz
import pytest
from PIL import Image

from imgcoon.generators import (
    AudioGenerator,
    CadGenerator,
    DocumentGenerator,
    EbookGenerator,
    ImageGenerator,
    PdfGenerator,
    RawImageGenerator,
    SvgGenerator,
    VideoGenerator,
)
from imgcoon.thumbnails import ThumbnailConfig

RUN = "imgcoon.generators.base.subprocess.run"


def _completed(cmd, stdout: bytes = b"") -> subprocess.CompletedProcess[bytes]:
    return subprocess.CompletedProcess(cmd, 0, stdout, b"")


def _write_last_arg(cmd, **kwargs) -> subprocess.CompletedProcess[bytes]:
    """Pretend to be a tool that writes its last argument."""
    Image.new("RGB", (8, 8), (1, 2, 3)).save(cmd[-1], format="PNG")
    return _completed(cmd)


class TestSupport:
    """Tests for mime type predicates."""

    @pytest.mark.parametrize(
        ("generator", "mime"),
        [
            (VideoGenerator, "video/mp4"),
            (VideoGenerator, "video/x-matroska"),
            (SvgGenerator, "image/svg+xml"),
            (RawImageGenerator, "image/x-canon-cr2"),
            (ImageGenerator, "image/png"),
            (ImageGenerator, "image/jpeg"),
            (PdfGenerator, "application/pdf"),
            (AudioGenerator, "audio/mpeg"),
            (EbookGenerator, "application/epub+zip"),
            (EbookGenerator, "application/x-mobipocket-ebook"),
            (CadGenerator, "model/x-step"),
            (CadGenerator, "application/dxf"),
            (CadGenerator, "application/x-extension-fcstd"),
            (DocumentGenerator, "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
            (DocumentGenerator, "application/vnd.openxmlformats-officedocument.presentationml.presentation"),
            (DocumentGenerator, "application/vnd.oasis.opendocument.spreadsheet"),
            (DocumentGenerator, "application/vnd.ms-excel.sheet.macroEnabled.12"),
            (DocumentGenerator, "application/msword"),
            (DocumentGenerator, "text/plain"),
            (DocumentGenerator, "text/csv"),
        ],
    )
    def test_supported(self, generator, mime: str) -> None:
        """Test mimes each generator claims."""
        assert generator.is_supported(mime)

    @pytest.mark.parametrize(
        ("generator", "mime"),
        [
            (PdfGenerator, "image/png"),
            (ImageGenerator, "application/pdf"),
            (SvgGenerator, "image/png"),
            (RawImageGenerator, "image/png"),
            (EbookGenerator, "application/zip"),
            (CadGenerator, "application/acad-extended"),  # exact list, not a pattern
            (DocumentGenerator, "text/html"),
            (AudioGenerator, "video/mp4"),
        ],
    )
    def test_not_supported(self, generator, mime: str) -> None:
        """Test mimes each generator rejects."""
        assert not generator.is_supported(mime)


class TestImageGenerator:
    """Tests for plain raster images."""

    def test_returns_source(self, make_image, tmp_path: Path) -> None:
        """Test that raster images pass through unchanged."""
        source = make_image()
        attempt = ImageGenerator().convert(source, "image/png", tmp_path / "image.png", 75)
        assert attempt.ok
        assert attempt.path == source
        assert attempt.generator == "image"

    def test_missing_source(self, tmp_path: Path) -> None:
        """Test a missing source image."""
        attempt = ImageGenerator().convert(tmp_path / "nope.png", "image/png", tmp_path / "i.png", 75)
        assert not attempt.ok
        assert "not found" in attempt.error


class TestSvgGenerator:
    """Tests for SVG rendering."""

    SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 12">
        <rect width="24" height="12" fill="red"/>
    </svg>'''

    def test_native_size_from_viewbox(self) -> None:
        """Test the size from the viewBox."""
        assert SvgGenerator.native_size(self.SVG) == (24, 12)

    def test_native_size_from_attributes(self) -> None:
        """Test the size from width and height attributes."""
        svg = '<svg xmlns="http://www.w3.org/2000/svg" width="300px" height="100"></svg>'
        assert SvgGenerator.native_size(svg) == (300, 100)

    def test_native_size_reads_root_tag_only(self) -> None:
        """Test that sizes of child elements are ignored."""
        svg = (
            '<?xml version="1.0"?>\n'
            '<svg height="50" xmlns="http://www.w3.org/2000/svg"\n width="200">\n'
            '  <rect width="10" height="10"/>\n'
            '  <svg viewBox="0 0 5 5"></svg>\n'
            "</svg>"
        )
        assert SvgGenerator.native_size(svg) == (200, 50)

    def test_render_size_from_attributes(self) -> None:
        """Test the render size of an SVG sized by attributes."""
        generator = SvgGenerator(ThumbnailConfig(supersample=1))
        svg = '<svg xmlns="http://www.w3.org/2000/svg" width="300" height="100"></svg>'
        assert generator.render_size(svg, (60, 60)) == (60, 20)

    def test_native_size_unknown(self) -> None:
        """Test an SVG without any size information."""
        assert SvgGenerator.native_size('<svg xmlns="http://www.w3.org/2000/svg"></svg>') is None

    def test_render_size_keeps_aspect(self) -> None:
        """Test that the render size keeps the SVG aspect ratio."""
        generator = SvgGenerator(ThumbnailConfig(supersample=2))
        assert generator.render_size(self.SVG, (64, 64)) == (128, 64)

    def test_render_size_square_fallback(self) -> None:
        """Test square rendering when the SVG has no size."""
        generator = SvgGenerator(ThumbnailConfig(supersample=1))
        svg = '<svg xmlns="http://www.w3.org/2000/svg"></svg>'
        assert generator.render_size(svg, (64, 32)) == (64, 64)

    def test_convert(self, tmp_path: Path) -> None:
        """Test rendering an SVG file."""
        source = tmp_path / "icon.svg"
        source.write_text(self.SVG)
        intermediate = tmp_path / "svg.png"

        attempt = SvgGenerator().convert(source, "image/svg+xml", intermediate, 75, size=(64, 64))

        assert attempt.ok
        with Image.open(attempt.path) as image:
            assert image.size == (128, 64)
            assert image.convert("RGB").getpixel((64, 32)) == (255, 0, 0)


class TestPdfGenerator:
    """Tests for PDF first-page rendering."""

    def test_convert(self, tmp_path: Path) -> None:
        """Test rendering the first PDF page."""
        source = tmp_path / "doc.pdf"
        doc = fitz.open()
        doc.new_page(width=200, height=100)
        doc.save(str(source))
        doc.close()

        config = ThumbnailConfig(tools={"pdf_dpi": 72})
        attempt = PdfGenerator(config).convert(source, "application/pdf", tmp_path / "pdf.png", 75)

        assert attempt.ok
        with Image.open(attempt.path) as image:
            assert image.size == (200, 100)

    def test_corrupt_pdf(self, tmp_path: Path) -> None:
        """Test a corrupt PDF."""
        source = tmp_path / "doc.pdf"
        source.write_bytes(b"%PDF-1.4 garbage")
        attempt = PdfGenerator().convert(source, "application/pdf", tmp_path / "pdf.png", 75)
        assert not attempt.ok


class TestToolGenerators:
    """Tests for generators backed by external tools."""

    def test_video_command(self, config: ThumbnailConfig, tmp_path: Path) -> None:
        """Test the ffmpeg frame command."""
        source = tmp_path / "clip.mp4"
        source.write_bytes(b"video")
        intermediate = tmp_path / "video.png"

        with patch(RUN, side_effect=_write_last_arg) as run:
            attempt = VideoGenerator(config).convert(source, "video/mp4", intermediate, 75)

        assert attempt.ok
        assert attempt.path == intermediate
        cmd = run.call_args.args[0]
        assert cmd[0] == "ffmpeg"
        assert str(source) in cmd
        assert cmd[cmd.index("-vf") + 1] == "thumbnail"
        assert run.call_args.kwargs["timeout"] == 5
        assert run.call_args.kwargs["check"] is True

    def test_audio_command(self, config: ThumbnailConfig, tmp_path: Path) -> None:
        """Test the ffmpeg cover art command."""
        with patch(RUN, side_effect=_write_last_arg) as run:
            attempt = AudioGenerator(config).convert(
                tmp_path / "song.mp3", "audio/mpeg", tmp_path / "audio.png", 75
            )

        assert attempt.ok
        cmd = run.call_args.args[0]
        assert cmd[cmd.index("-map") + 1] == "0:v:0"

    def test_custom_binary(self, tmp_path: Path) -> None:
        """Test a configured ffmpeg binary."""
        config = ThumbnailConfig(tools={"ffmpeg": "/opt/bin/ffmpeg"})
        with patch(RUN, side_effect=_write_last_arg) as run:
            VideoGenerator(config).convert(tmp_path / "a.mp4", "video/mp4", tmp_path / "v.png", 75)
        assert run.call_args.args[0][0] == "/opt/bin/ffmpeg"

    @pytest.mark.parametrize(
        "error",
        [
            subprocess.CalledProcessError(1, ["ffmpeg"], b"", b"Invalid data"),
            subprocess.TimeoutExpired(["ffmpeg"], 5),
            FileNotFoundError("ffmpeg"),
        ],
    )
    def test_tool_errors_become_failed_attempts(self, config, tmp_path: Path, error) -> None:
        """Test that tool errors become failed attempts."""
        with patch(RUN, side_effect=error):
            attempt = VideoGenerator(config).convert(
                tmp_path / "clip.mp4", "video/mp4", tmp_path / "video.png", 75
            )

        assert not attempt.ok
        assert attempt.path is None
        assert attempt.error

    def test_missing_output_is_a_failure(self, config, tmp_path: Path) -> None:
        """Test that a tool without output fails."""
        with patch(RUN, side_effect=lambda cmd, **kw: _completed(cmd)):
            attempt = VideoGenerator(config).convert(
                tmp_path / "clip.mp4", "video/mp4", tmp_path / "video.png", 75
            )

        assert not attempt.ok
        assert "No output" in attempt.error

    def test_raw_preview_from_stdout(self, config, tmp_path: Path) -> None:
        """Test that dcraw stdout becomes the raster."""
        intermediate = tmp_path / "raw.png"
        with patch(RUN, side_effect=lambda cmd, **kw: _completed(cmd, b"\xff\xd8jpeg")) as run:
            attempt = RawImageGenerator(config).convert(
                tmp_path / "photo.cr2", "image/x-canon-cr2", intermediate, 75
            )

        assert attempt.ok
        assert intermediate.read_bytes() == b"\xff\xd8jpeg"
        assert run.call_args.args[0][:3] == ["dcraw", "-c", "-e"]

    def test_raw_without_preview(self, config, tmp_path: Path) -> None:
        """Test dcraw output without an embedded preview."""
        with patch(RUN, side_effect=lambda cmd, **kw: _completed(cmd)):
            attempt = RawImageGenerator(config).convert(
                tmp_path / "photo.cr2", "image/x-canon-cr2", tmp_path / "raw.png", 75
            )
        assert not attempt.ok

    def test_ebook_command(self, config, tmp_path: Path) -> None:
        """Test the calibre cover extraction command."""
        intermediate = tmp_path / "ebook.png"

        def write_cover(cmd, **kwargs):
            Image.new("RGB", (4, 6)).save(intermediate, format="JPEG")
            return _completed(cmd)

        with patch(RUN, side_effect=write_cover) as run:
            attempt = EbookGenerator(config).convert(
                tmp_path / "book.epub", "application/epub+zip", intermediate, 75
            )

        assert attempt.ok
        cmd = run.call_args.args[0]
        assert cmd[0] == "ebook-meta"
        assert f"--get-cover={intermediate}" in cmd

    def test_cad_uses_requested_size(self, config, tmp_path: Path) -> None:
        """Test that freecad-thumbnailer gets the larger box side."""
        with patch(RUN, side_effect=_write_last_arg) as run:
            attempt = CadGenerator(config).convert(
                tmp_path / "part.fcstd",
                "application/x-extension-fcstd",
                tmp_path / "cad.png",
                75,
                size=(128, 64),
            )

        assert attempt.ok
        cmd = run.call_args.args[0]
        assert cmd[:3] == ["freecad-thumbnailer", "-s", "128"]

    def test_document_converts_through_pdf(self, config, tmp_path: Path) -> None:
        """Test office documents rendered through an intermediate PDF."""
        source = tmp_path / "report.docx"
        source.write_bytes(b"docx")
        intermediate = tmp_path / "document.png"

        def soffice(cmd, **kwargs):
            out_dir = Path(cmd[cmd.index("--outdir") + 1])
            doc = fitz.open()
            doc.new_page(width=50, height=70)
            doc.save(str(out_dir / "report.pdf"))
            doc.close()
            return _completed(cmd)

        with patch(RUN, side_effect=soffice) as run:
            attempt = DocumentGenerator(config).convert(
                source,
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                intermediate,
                75,
            )

        assert attempt.ok
        cmd = run.call_args.args[0]
        assert cmd[0] == "soffice"
        assert "--headless" in cmd
        assert cmd[cmd.index("--convert-to") + 1] == "pdf"
        with Image.open(intermediate) as image:
            assert image.width > 0
        # The LibreOffice scratch directory is removed
        assert {p.name for p in tmp_path.iterdir()} == {"report.docx", "document.png"}

    def test_document_without_pdf_output(self, config, tmp_path: Path) -> None:
        """Test a LibreOffice run that writes no PDF."""
        with patch(RUN, side_effect=lambda cmd, **kw: _completed(cmd)):
            attempt = DocumentGenerator(config).convert(
                tmp_path / "report.odt",
                "application/vnd.oasis.opendocument.text",
                tmp_path / "document.png",
                75,
            )
        assert not attempt.ok
