from abc import ABC, abstractmethod
from types import TracebackType

from docflow.extraction.exceptions import PdfExtractionError


class PdfDocumentHandle(ABC):
    """An opened PDF. Pages are addressed by zero-based index."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages in the document."""

    @abstractmethod
    def page_text(self, index: int) -> str:
        """Digital text content of one page ('' when the page has none)."""

    @abstractmethod
    def render_page_png(self, index: int, scale: float) -> bytes:
        """Rasterize one page to PNG bytes at ``scale`` times its natural size."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying document."""

    def __enter__(self) -> "PdfDocumentHandle":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class BasePdfEngine(ABC):
    """Contract for PDF engines.

    An engine is a process-wide resource owned by whoever builds the pipeline:
    call ``initialize()`` once before use and ``shutdown()`` when done.
    """

    name: str = "base"

    def __init__(self) -> None:
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        if self._initialized:
            return
        self._on_initialize()
        self._initialized = True

    def shutdown(self) -> None:
        if not self._initialized:
            return
        self._on_shutdown()
        self._initialized = False

    def open(self, pdf_bytes: bytes) -> PdfDocumentHandle:
        """Open PDF bytes.

        Raises:
            RuntimeError: if the engine has not been initialized.
            PdfExtractionError: if the bytes cannot be opened as a PDF.
        """
        if not self._initialized:
            raise RuntimeError(f"PDF engine '{self.name}' used before initialize()")
        try:
            return self._open(pdf_bytes)
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"{self.name} could not open PDF: {exc}") from exc

    @abstractmethod
    def _open(self, pdf_bytes: bytes) -> PdfDocumentHandle:
        raise NotImplementedError

    def _on_initialize(self) -> None:
        return None

    def _on_shutdown(self) -> None:
        return None
