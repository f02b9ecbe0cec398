"""Generators for PDFs, office documents and ebooks."""

from __future__ import annotations

import tempfile
from pathlib import Path

import fitz  # PyMuPDF

from imgcoon.generators.base import Generator, ToolFailure

# Matched anywhere inside the mime string, so every sub-type of a family
# (e.g. all openxmlformats-officedocument variants) is covered.
LIBRE_OFFICE_MIME_TYPES = (
    # Modern standard
    "application/vnd.oasis.opendocument",  # .odt / .ods / .odp / .odg ...
    "application/vnd.openxmlformats-officedocument",  # .docx / .xlsx / .pptx
    # Classic files
    "application/rtf",
    "text/plain",
    "text/csv",
    # Legacy formats
    "application/vnd.sun.xml",  # old OpenOffice, .sx* / .st*
    "application/vnd.lotus-wordpro",  # .lwp
    "application/wordperfect",  # .wpd
    "application/x-staroffice",
    "application/msword",  # .doc
    "application/vnd.ms-word",  # .docm
    "application/vnd.ms-excel",  # .xls / .xlsm
    "application/vnd.ms-powerpoint",  # .ppt
)


def render_first_page(pdf_path: Path, output_path: Path, dpi: int) -> Path:
    """Rasterise page one of a PDF to PNG."""
    doc = fitz.open(str(pdf_path))
    try:
        if doc.page_count <= 0:
            raise ToolFailure(f"No pages in PDF: {pdf_path}")
        page = doc.load_page(0)
        zoom = dpi / 72
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        pix.save(str(output_path), output="png")
    finally:
        doc.close()
    return output_path


class PdfGenerator(Generator):
    """Render the first page of a PDF."""

    name = "pdf"
    description = "First PDF page via PyMuPDF"
    MIME_PATTERNS = ("application/pdf",)

    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        render_first_page(source_path, intermediate_path, self.tools.pdf_dpi)
        return self.require_output(intermediate_path)


class DocumentGenerator(Generator):
    """Convert office documents to PDF with LibreOffice, then render page one."""

    name = "document"
    description = "Office document via LibreOffice"
    MIME_PATTERNS = LIBRE_OFFICE_MIME_TYPES

    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        with tempfile.TemporaryDirectory(dir=intermediate_path.parent) as tmp_dir:
            out_dir = Path(tmp_dir)
            # Private profile, so parallel conversions don't fight over the lock
            profile = (out_dir / "profile").as_uri()
            cmd = [
                self.tools.soffice,
                f"-env:UserInstallation={profile}",
                "--headless",
                "--norestore",
                "--convert-to",
                "pdf",
                "--outdir",
                str(out_dir),
                str(source_path),
            ]
            self.run_tool(cmd)
            pdf_path = self.require_output(out_dir / f"{source_path.stem}.pdf")
            render_first_page(pdf_path, intermediate_path, self.tools.pdf_dpi)
        return self.require_output(intermediate_path)


class EbookGenerator(Generator):
    """Extract the cover of an ebook with calibre."""

    name = "ebook"
    description = "Ebook cover via calibre ebook-meta"
    MIME_PATTERNS = ("ebook",)
    MIME_TYPES = ("application/epub+zip",)

    def _convert(
        self,
        source_path: Path,
        source_mime: str,
        intermediate_path: Path,
        quality: int,
        size: tuple[int, int] | None,
    ) -> Path:
        self.run_tool([self.tools.ebook_meta, str(source_path), f"--get-cover={intermediate_path}"])
        return self.require_output(intermediate_path)
