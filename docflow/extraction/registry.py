from collections.abc import Mapping

from docflow.classification.format_family import FormatFamily
from docflow.config.settings import Settings
from docflow.extraction.base import BaseExtractor
from docflow.extraction.media_extractors import AudioTranscriptionExtractor, ImageOcrExtractor
from docflow.extraction.pdf_extractor import PdfExtractor
from docflow.extraction.text_decoder import TextDecoder
from docflow.extraction.word_extractor import WordDocumentExtractor
from docflow.pdf.base import BasePdfEngine
from docflow.services.client_base import BaseOcrClient, BaseTranscriptionClient


class ExtractorRegistry:
    """Strategy table with exactly one extractor per format family."""

    def __init__(self, extractors: Mapping[FormatFamily, BaseExtractor]) -> None:
        missing = [family.value for family in FormatFamily if family not in extractors]
        if missing:
            raise ValueError(f"No extraction strategy registered for: {missing}")
        self._extractors = dict(extractors)

    def for_family(self, family: FormatFamily) -> BaseExtractor:
        return self._extractors[family]

    @classmethod
    def build(
        cls,
        settings: Settings,
        *,
        pdf_engine: BasePdfEngine,
        ocr_client: BaseOcrClient,
        transcription_client: BaseTranscriptionClient,
    ) -> "ExtractorRegistry":
        return cls(
            {
                FormatFamily.TEXT: TextDecoder(),
                FormatFamily.WORD: WordDocumentExtractor(),
                FormatFamily.LEGACY_WORD: WordDocumentExtractor(legacy=True),
                FormatFamily.PDF: PdfExtractor(
                    pdf_engine,
                    ocr_client,
                    min_chars_per_page=settings.scan_min_chars_per_page,
                    max_ocr_pages=settings.ocr_max_pages,
                    render_scale=settings.ocr_render_scale,
                    document_type=settings.ocr_document_type,
                ),
                FormatFamily.IMAGE: ImageOcrExtractor(
                    ocr_client,
                    document_type=settings.ocr_document_type,
                ),
                FormatFamily.AUDIO: AudioTranscriptionExtractor(transcription_client),
            }
        )
