from docflow.classification.format_family import infer_audio_media_type
from docflow.extraction.base import (
    BaseExtractor,
    ProgressCallback,
    failure_from,
    no_progress,
)
from docflow.extraction.models import ExtractionMethod, ExtractionResult, SourceFile
from docflow.logging.logger import Log
from docflow.services.client_base import BaseOcrClient, BaseTranscriptionClient


def _empty_file(method: ExtractionMethod) -> ExtractionResult:
    return ExtractionResult(text="", method=method, warnings=["file is empty"])


class ImageOcrExtractor(BaseExtractor):
    """Single OCR call for a raster image."""

    def __init__(self, ocr_client: BaseOcrClient, *, document_type: str = "general") -> None:
        self._ocr_client = ocr_client
        self._document_type = document_type

    async def extract(
        self,
        source: SourceFile,
        progress: ProgressCallback | None = None,
    ) -> ExtractionResult:
        if not source.data:
            return _empty_file(ExtractionMethod.OCR)
        (progress or no_progress)("Extracting text from image with AI OCR...")
        declared = (source.media_type or "").strip().lower()
        media_type = declared if declared.startswith("image/") else "image/jpeg"
        try:
            result = await self._ocr_client.recognize(
                [source.data],
                media_type=media_type,
                document_type=self._document_type,
            )
        except Exception as exc:
            # Extraction never raises; every call failure becomes a typed result.
            failure = failure_from(exc)
            Log.error(f"Image OCR failed for {source.file_name}: {failure.message}")
            return ExtractionResult(
                text="",
                method=ExtractionMethod.OCR,
                warnings=[f"image OCR failed: {failure.message}"],
                failure=failure,
            )
        Log.info(f"Image OCR complete: {len(result.text)} chars in {result.latency_ms}ms")
        return ExtractionResult(
            text=result.text,
            method=ExtractionMethod.OCR,
            warnings=[f"ocr latency: {result.latency_ms}ms"],
        )


class AudioTranscriptionExtractor(BaseExtractor):
    """Single speech-to-text call for an audio file."""

    def __init__(self, transcription_client: BaseTranscriptionClient) -> None:
        self._transcription_client = transcription_client

    async def extract(
        self,
        source: SourceFile,
        progress: ProgressCallback | None = None,
    ) -> ExtractionResult:
        if not source.data:
            return _empty_file(ExtractionMethod.TRANSCRIPTION)
        (progress or no_progress)("Transcribing audio file with AI...")
        media_type = infer_audio_media_type(source.file_name, source.media_type)
        try:
            result = await self._transcription_client.transcribe(
                source.data,
                media_type=media_type,
                file_name=source.file_name,
            )
        except Exception as exc:
            failure = failure_from(exc)
            Log.error(f"Transcription failed for {source.file_name}: {failure.message}")
            return ExtractionResult(
                text="",
                method=ExtractionMethod.TRANSCRIPTION,
                warnings=[f"transcription failed: {failure.message}"],
                failure=failure,
            )
        Log.info(
            f"Transcription complete: {len(result.text)} chars in {result.latency_ms}ms"
        )
        return ExtractionResult(
            text=result.text,
            method=ExtractionMethod.TRANSCRIPTION,
            warnings=[f"transcription latency: {result.latency_ms}ms"],
        )
