import pymupdf

from docflow.pdf.base import BasePdfEngine, PdfDocumentHandle


class _PyMuPdfDocument(PdfDocumentHandle):
    def __init__(self, document: pymupdf.Document) -> None:
        self._document = document

    @property
    def page_count(self) -> int:
        return int(self._document.page_count)

    def page_text(self, index: int) -> str:
        return self._document[index].get_text() or ""

    def render_page_png(self, index: int, scale: float) -> bytes:
        matrix = pymupdf.Matrix(scale, scale)
        pixmap = self._document[index].get_pixmap(matrix=matrix)
        return pixmap.tobytes("png")

    def close(self) -> None:
        self._document.close()


class PyMuPdfEngine(BasePdfEngine):
    """Reads and rasterizes PDFs with PyMuPDF."""

    name = "pymupdf"

    def _on_initialize(self) -> None:
        # Keep MuPDF syntax warnings off stderr.
        pymupdf.TOOLS.mupdf_display_errors(False)

    def _on_shutdown(self) -> None:
        pymupdf.TOOLS.store_shrink(100)

    def _open(self, pdf_bytes: bytes) -> PdfDocumentHandle:
        document = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        return _PyMuPdfDocument(document)
