from docflow.config.settings import Settings
from docflow.database.repositories.document_activity_repository import DocumentActivityRepository
from docflow.database.repositories.editor_documents_repository import EditorDocumentsRepository
from docflow.database.repositories.source_documents_repository import SourceDocumentsRepository
from docflow.extraction.base import ProgressCallback, no_progress
from docflow.extraction.registry import ExtractorRegistry
from docflow.logging.logger import Log
from docflow.pdf.base import BasePdfEngine
from docflow.pdf.factory import PdfEngineFactory
from docflow.pipeline.exceptions import OpenInEditorError
from docflow.pipeline.in_flight import InFlightRegistry, caller_key, content_key
from docflow.pipeline.models import PipelineOutcome, PipelineRequest
from docflow.pipeline.pipeline import PipelineContext, PipelineStep
from docflow.pipeline.plan_gate import PlanGate
from docflow.pipeline.steps import (
    ClassifyStep,
    CommitContentStep,
    CreateDraftStep,
    EmptyTextGuardStep,
    ExtractStep,
    LoadSourceStep,
    RecordActivityStep,
    StructureGateStep,
    StructureStep,
)
from docflow.provenance.recorder import ProvenanceRecorder
from docflow.services.factory import AIClientFactory
from docflow.structuring.engine import StructuringEngine

UNSUPPORTED_MESSAGE = "Failed to open document in editor. The file format may not be supported."


class Processor:
    """Orchestrates one ingestion run.

    Pipeline: load -> classify -> extract -> empty-text guard -> structuring
    gate -> create draft -> structure -> commit -> record activity.

    Failures before the draft exists surface as a single OpenInEditorError.
    Once it exists every later step degrades instead of failing, so the
    caller always gets a usable document.
    """

    def __init__(
        self,
        steps: list[PipelineStep],
        *,
        pdf_engine: BasePdfEngine | None = None,
        in_flight: InFlightRegistry[PipelineOutcome] | None = None,
    ) -> None:
        self._steps = steps
        self._pdf_engine = pdf_engine
        self._in_flight = in_flight or InFlightRegistry()

    def initialize(self) -> None:
        if self._pdf_engine is not None:
            self._pdf_engine.initialize()

    def shutdown(self) -> None:
        if self._pdf_engine is not None:
            self._pdf_engine.shutdown()

    async def process(
        self,
        request: PipelineRequest,
        progress: ProgressCallback | None = None,
    ) -> PipelineOutcome:
        """Run the pipeline, joining an identical run already in progress."""
        return await self._in_flight.run(
            self._run_key(request),
            lambda: self._process(request, progress or no_progress),
        )

    @staticmethod
    def _run_key(request: PipelineRequest) -> str:
        """Deduplication key. Only identical requests from the same caller share a run."""
        caller = request.context
        scope = caller_key(
            caller.workspace_id,
            caller.user_id,
            caller.user_name,
            caller.plan.strip().lower(),
            *sorted(request.tags),
        )
        if request.source_document_id is not None:
            return f"{scope}/source:{request.source_document_id}"
        source = request.source_file
        if source is None:
            raise ValueError("PipelineRequest carries no source file")
        return f"{scope}/{content_key(source.data, source.file_name)}"

    async def _process(self, request: PipelineRequest, progress: ProgressCallback) -> PipelineOutcome:
        context = PipelineContext(request=request, progress=progress)
        Log.info(f"Processing {self._run_key(request)}")
        try:
            for step in self._steps:
                context = await step.run(context)
        except OpenInEditorError:
            raise
        except Exception as exc:
            if context.new_document_id is not None:
                raise
            Log.exception(f"Pipeline failed before a document was created: {exc}")
            raise OpenInEditorError(UNSUPPORTED_MESSAGE) from exc
        return self._outcome(context)

    @staticmethod
    def _outcome(context: PipelineContext) -> PipelineOutcome:
        if (
            context.new_document_id is None
            or context.structuring is None
            or context.extraction is None
        ):
            raise ValueError("Pipeline finished without a structured document")
        Log.info(
            f"Document {context.new_document_id} ready "
            f"({context.extraction.method.value} -> {context.structuring.method.value}, "
            f"committed={context.content_committed})"
        )
        return PipelineOutcome(
            structured_document=context.structuring.document,
            plain_text=context.text,
            structuring_method=context.structuring.method,
            extraction_method=context.extraction.method,
            new_document_id=context.new_document_id,
            source_document_id=context.source_document_id,
            warnings=list(context.warnings),
            content_committed=context.content_committed,
        )


def build_steps(
    settings: Settings,
    *,
    registry: ExtractorRegistry,
    engine: StructuringEngine,
    source_repo: SourceDocumentsRepository,
    editor_repo: EditorDocumentsRepository,
    recorder: ProvenanceRecorder,
) -> list[PipelineStep]:
    return [
        LoadSourceStep(source_repo),
        ClassifyStep(),
        ExtractStep(registry),
        EmptyTextGuardStep(),
        StructureGateStep(
            PlanGate(settings.ai_plan_names()),
            min_chars=settings.structuring_min_chars,
        ),
        CreateDraftStep(editor_repo),
        StructureStep(engine),
        CommitContentStep(editor_repo),
        RecordActivityStep(recorder),
    ]


def build_processor(settings: Settings) -> Processor:
    """Build a Processor with all required adapters. Call initialize() before use."""
    pdf_engine = PdfEngineFactory.create(settings)
    clients = AIClientFactory.create(settings)
    registry = ExtractorRegistry.build(
        settings,
        pdf_engine=pdf_engine,
        ocr_client=clients.ocr,
        transcription_client=clients.transcription,
    )
    steps = build_steps(
        settings,
        registry=registry,
        engine=StructuringEngine.build(settings, clients.completion),
        source_repo=SourceDocumentsRepository(),
        editor_repo=EditorDocumentsRepository(),
        recorder=ProvenanceRecorder(
            DocumentActivityRepository(),
            window=settings.activity_window,
        ),
    )
    return Processor(steps, pdf_engine=pdf_engine)
