"""End-to-end runs through the real steps with in-memory storage and fake AI services."""

import uuid
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from docflow.config.settings import Settings
from docflow.database.repositories.document_activity_repository import DocumentActivityRepository
from docflow.database.repositories.editor_documents_repository import EditorDocumentsRepository
from docflow.database.repositories.source_documents_repository import SourceDocumentsRepository
from docflow.extraction.models import ExtractionMethod, SourceFile
from docflow.extraction.registry import ExtractorRegistry
from docflow.pdf.pymupdf_adapter import PyMuPdfEngine
from docflow.pipeline.exceptions import EditorDocumentNotFoundError
from docflow.pipeline.models import EditorDocumentDraft, PipelineRequest, RequestContext
from docflow.pipeline.processor import Processor, build_steps
from docflow.provenance.models import ActivityEvent
from docflow.provenance.recorder import ProvenanceRecorder
from docflow.services.client_base import (
    BaseCompletionClient,
    BaseOcrClient,
    BaseTranscriptionClient,
)
from docflow.services.example_client_adapter import ExampleCompletionAdapter
from docflow.services.models import ServiceText
from docflow.structuring.engine import StructuringEngine
from docflow.structuring.models import Heading, Paragraph, StructuringMethod


class InMemoryEditorDocuments(EditorDocumentsRepository):
    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}

    async def create(self, draft: EditorDocumentDraft) -> str:
        document_id = str(uuid.uuid4())
        self.documents[document_id] = {
            "title": draft.title,
            "content_json": draft.content_json,
            "content_plain": draft.content_plain,
        }
        return document_id

    async def update_content(
        self, document_id: str, content_json: dict[str, Any], content_plain: str
    ) -> None:
        if document_id not in self.documents:
            raise EditorDocumentNotFoundError(f"Editor document {document_id} not found")
        self.documents[document_id]["content_json"] = content_json
        self.documents[document_id]["content_plain"] = content_plain


class InMemoryActivity(DocumentActivityRepository):
    def __init__(self) -> None:
        self.events: list[ActivityEvent] = []

    async def append(self, event: ActivityEvent) -> int:
        self.events.append(event)
        return len(self.events)


class Services:
    def __init__(self, completion_response: str = "{}") -> None:
        self.ocr = MagicMock(spec=BaseOcrClient)
        self.ocr.recognize = AsyncMock(return_value=ServiceText(text="", latency_ms=1))
        self.transcription = MagicMock(spec=BaseTranscriptionClient)
        self.transcription.transcribe = AsyncMock(
            return_value=ServiceText(text="Remember to call the supplier.", latency_ms=1)
        )
        self.completion = MagicMock(spec=BaseCompletionClient)
        self.completion.complete = AsyncMock(return_value=completion_response)


def _processor(services: Services, editor: InMemoryEditorDocuments) -> Processor:
    settings = Settings(ai_provider="example")
    engine = PyMuPdfEngine()
    registry = ExtractorRegistry.build(
        settings,
        pdf_engine=engine,
        ocr_client=services.ocr,
        transcription_client=services.transcription,
    )
    steps = build_steps(
        settings,
        registry=registry,
        engine=StructuringEngine.build(settings, services.completion),
        source_repo=MagicMock(spec=SourceDocumentsRepository),
        editor_repo=editor,
        recorder=ProvenanceRecorder(InMemoryActivity()),
    )
    processor = Processor(steps, pdf_engine=engine)
    processor.initialize()
    return processor


def _request(data: bytes, media_type: str, file_name: str, plan: str = "free") -> PipelineRequest:
    return PipelineRequest(
        context=RequestContext(workspace_id="ws-1", user_id="u-1", plan=plan),
        source_file=SourceFile(data=data, media_type=media_type, file_name=file_name),
    )


class TestPlainTextScenario:
    async def test_heading_then_one_paragraph_per_line(self) -> None:
        editor = InMemoryEditorDocuments()
        processor = _processor(Services(), editor)

        outcome = await processor.process(_request(b"Hello\n\nWorld", "text/plain", "notes.txt"))

        assert outcome.structuring_method is StructuringMethod.HEURISTIC
        assert outcome.structured_document.children == [
            Heading(level=1, text="notes"),
            Paragraph("Hello"),
            Paragraph("World"),
        ]
        stored = editor.documents[outcome.new_document_id]
        assert stored["title"] == "notes"
        assert stored["content_json"] == outcome.structured_document.to_dict()
        processor.shutdown()


class TestPdfScenarios:
    async def test_digital_pdf_skips_ocr(self, digital_pdf_bytes: bytes) -> None:
        services = Services()
        processor = _processor(services, InMemoryEditorDocuments())

        outcome = await processor.process(
            _request(digital_pdf_bytes, "application/pdf", "report.pdf")
        )

        assert outcome.extraction_method is ExtractionMethod.DIGITAL_TEXT
        assert "Quarterly report for the northern region" in outcome.plain_text
        assert "A follow-up review is scheduled" in outcome.plain_text
        services.ocr.recognize.assert_not_called()
        processor.shutdown()

    async def test_scanned_pdf_uses_one_ocr_call(self, scanned_pdf_bytes: bytes) -> None:
        services = Services()
        services.ocr.recognize = AsyncMock(
            return_value=ServiceText(text="Invoice 2024-001\nTotal: 120 EUR", latency_ms=3)
        )
        processor = _processor(services, InMemoryEditorDocuments())

        outcome = await processor.process(
            _request(scanned_pdf_bytes, "application/pdf", "scan.pdf")
        )

        assert outcome.extraction_method is ExtractionMethod.OCR
        assert outcome.plain_text == "Invoice 2024-001\nTotal: 120 EUR"
        services.ocr.recognize.assert_awaited_once()
        images = services.ocr.recognize.call_args.args[0]
        assert len(images) == 2
        assert all(image.startswith(b"\x89PNG") for image in images)
        processor.shutdown()


class TestAudioScenario:
    async def test_transcript_is_prefixed(self) -> None:
        services = Services()
        processor = _processor(services, InMemoryEditorDocuments())

        outcome = await processor.process(_request(b"ID3...", "audio/mpeg", "memo.mp3"))

        assert outcome.extraction_method is ExtractionMethod.TRANSCRIPTION
        assert outcome.plain_text == (
            "# Audio Transcription: memo.mp3\n\nRemember to call the supplier."
        )
        assert outcome.structured_document.children[0] == Heading(level=1, text="memo")
        processor.shutdown()


class TestAIFallbackScenario:
    async def test_malformed_ai_response_falls_back_to_heuristic(
        self, digital_pdf_bytes: bytes
    ) -> None:
        services = Services(completion_response="Sure! Here is your document: {oops")
        editor = InMemoryEditorDocuments()
        processor = _processor(services, editor)

        outcome = await processor.process(
            _request(digital_pdf_bytes, "application/pdf", "report.pdf", plan="team-pro")
        )

        services.completion.complete.assert_awaited_once()
        assert outcome.structuring_method is StructuringMethod.HEURISTIC
        assert outcome.structured_document.children[0] == Heading(level=1, text="report")
        assert outcome.content_committed is True
        stored = editor.documents[outcome.new_document_id]
        assert stored["content_json"] == outcome.structured_document.to_dict()
        processor.shutdown()

    async def test_valid_ai_response_is_used(self, digital_pdf_bytes: bytes) -> None:
        services = Services()
        services.completion = ExampleCompletionAdapter()
        processor = _processor(services, InMemoryEditorDocuments())

        outcome = await processor.process(
            _request(digital_pdf_bytes, "application/pdf", "report.pdf", plan="team-pro")
        )

        assert outcome.structuring_method is StructuringMethod.AI
        first = outcome.structured_document.children[0]
        assert isinstance(first, Paragraph)
        assert first.text.startswith("Quarterly report for the northern region")
        processor.shutdown()
