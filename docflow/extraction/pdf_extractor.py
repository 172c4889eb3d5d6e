"""Portable-document extraction with OCR fallback for scanned files.

Digital text is read page by page. When the average number of characters
per page falls below a threshold the document is treated as scanned: the
first pages are rasterized and sent to OCR in one batch, and the OCR text
replaces the digital text only when it is longer.
"""

import anyio

from docflow.extraction.base import (
    BaseExtractor,
    ProgressCallback,
    failure_from,
    no_progress,
)
from docflow.extraction.exceptions import PdfExtractionError
from docflow.extraction.models import ExtractionMethod, ExtractionResult, SourceFile
from docflow.logging.logger import Log
from docflow.pdf.base import BasePdfEngine, PdfDocumentHandle
from docflow.services.client_base import BaseOcrClient

DEFAULT_MIN_CHARS_PER_PAGE = 100
DEFAULT_MAX_OCR_PAGES = 10
DEFAULT_RENDER_SCALE = 2.0
PAGE_SEPARATOR = "\n\n"


def average_chars_per_page(text: str, page_count: int) -> float:
    if page_count <= 0:
        return 0.0
    return len(text) / page_count


def looks_scanned(text: str, page_count: int, min_chars_per_page: int) -> bool:
    return not text or average_chars_per_page(text, page_count) < min_chars_per_page


class PdfExtractor(BaseExtractor):
    def __init__(
        self,
        engine: BasePdfEngine,
        ocr_client: BaseOcrClient,
        *,
        min_chars_per_page: int = DEFAULT_MIN_CHARS_PER_PAGE,
        max_ocr_pages: int = DEFAULT_MAX_OCR_PAGES,
        render_scale: float = DEFAULT_RENDER_SCALE,
        document_type: str = "general",
    ) -> None:
        self._engine = engine
        self._ocr_client = ocr_client
        self._min_chars_per_page = min_chars_per_page
        self._max_ocr_pages = max_ocr_pages
        self._render_scale = render_scale
        self._document_type = document_type

    async def extract(
        self,
        source: SourceFile,
        progress: ProgressCallback | None = None,
    ) -> ExtractionResult:
        notify = progress or no_progress
        notify("Extracting text from PDF...")
        try:
            handle = await anyio.to_thread.run_sync(self._engine.open, source.data)
        except PdfExtractionError as exc:
            Log.warning(f"PDF {source.file_name} could not be opened: {exc}")
            return ExtractionResult(
                text="",
                method=ExtractionMethod.DIGITAL_TEXT,
                warnings=[str(exc)],
            )
        try:
            return await self._extract_from(handle, source, notify)
        finally:
            handle.close()

    async def _extract_from(
        self,
        handle: PdfDocumentHandle,
        source: SourceFile,
        notify: ProgressCallback,
    ) -> ExtractionResult:
        try:
            page_count = handle.page_count
            pages = [
                await anyio.to_thread.run_sync(handle.page_text, index)
                for index in range(page_count)
            ]
        except Exception as exc:
            Log.warning(f"PDF text extraction failed for {source.file_name}: {exc}")
            return ExtractionResult(
                text="",
                method=ExtractionMethod.DIGITAL_TEXT,
                warnings=[f"PDF text extraction failed: {exc}"],
            )

        text = PAGE_SEPARATOR.join(page.strip() for page in pages).strip()
        digital = ExtractionResult(text=text, method=ExtractionMethod.DIGITAL_TEXT)
        average = average_chars_per_page(text, page_count)
        Log.info(
            f"Extracted {len(text)} chars from {page_count} page(s) of {source.file_name} "
            f"({average:.1f} chars/page)"
        )

        if not looks_scanned(text, page_count, self._min_chars_per_page):
            return digital
        if page_count == 0:
            digital.warnings.append("PDF has no pages")
            return digital

        notify("PDF appears scanned, using AI OCR...")
        Log.info(f"PDF {source.file_name} appears scanned, attempting OCR")
        return await self._ocr_fallback(handle, digital, page_count, notify)

    async def _ocr_fallback(
        self,
        handle: PdfDocumentHandle,
        digital: ExtractionResult,
        page_count: int,
        notify: ProgressCallback,
    ) -> ExtractionResult:
        pages_to_render = min(page_count, self._max_ocr_pages)
        images: list[bytes] = []
        for index in range(pages_to_render):
            notify(f"Rendering page {index + 1} of {pages_to_render} for OCR...")
            try:
                images.append(
                    await anyio.to_thread.run_sync(
                        handle.render_page_png, index, self._render_scale
                    )
                )
            except Exception as exc:
                Log.warning(f"Rendering page {index + 1} failed: {exc}")
                digital.warnings.append(f"page {index + 1} could not be rendered: {exc}")
                break
        if not images:
            return digital

        notify("Running AI OCR on pages...")
        try:
            ocr = await self._ocr_client.recognize(
                images,
                media_type="image/png",
                document_type=self._document_type,
            )
        except Exception as exc:
            failure = failure_from(exc)
            Log.warning(f"OCR fallback failed, keeping digital text: {failure.message}")
            digital.warnings.append(f"OCR failed: {failure.message}")
            digital.failure = failure
            return digital

        ocr_text = ocr.text.strip()
        warnings = [*digital.warnings, f"ocr latency: {ocr.latency_ms}ms"]
        if len(ocr_text) > len(digital.text):
            Log.info(f"OCR extracted {len(ocr_text)} chars (vs {len(digital.text)} digital)")
            return ExtractionResult(text=ocr_text, method=ExtractionMethod.OCR, warnings=warnings)

        Log.info("OCR text was not longer than digital text, keeping digital text")
        digital.warnings = [*warnings, "OCR output shorter than digital text; kept digital text"]
        return digital
