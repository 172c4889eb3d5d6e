import io

import pdfplumber

from docflow.pdf.base import BasePdfEngine, PdfDocumentHandle

_PDF_POINTS_PER_INCH = 72


class _PdfPlumberDocument(PdfDocumentHandle):
    def __init__(self, pdf: pdfplumber.PDF) -> None:
        self._pdf = pdf

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def page_text(self, index: int) -> str:
        return self._pdf.pages[index].extract_text() or ""

    def render_page_png(self, index: int, scale: float) -> bytes:
        page_image = self._pdf.pages[index].to_image(
            resolution=int(_PDF_POINTS_PER_INCH * scale)
        )
        buf = io.BytesIO()
        page_image.original.save(buf, format="PNG")
        return buf.getvalue()

    def close(self) -> None:
        self._pdf.close()


class PdfPlumberEngine(BasePdfEngine):
    """Reads PDFs with pdfplumber; rasterizes through its pypdfium2 backend."""

    name = "pdfplumber"

    def _open(self, pdf_bytes: bytes) -> PdfDocumentHandle:
        pdf = pdfplumber.open(io.BytesIO(pdf_bytes))
        return _PdfPlumberDocument(pdf)
