from docflow.classification.format_family import (
    FormatFamily,
    benefits_from_restructuring,
    classify,
    strip_extension,
)
from docflow.database.repositories.editor_documents_repository import EditorDocumentsRepository
from docflow.database.repositories.source_documents_repository import SourceDocumentsRepository
from docflow.extraction.registry import ExtractorRegistry
from docflow.logging.logger import Log
from docflow.pipeline.exceptions import OpenInEditorError
from docflow.pipeline.models import EditorDocumentDraft
from docflow.pipeline.pipeline import PipelineContext, PipelineStep
from docflow.pipeline.plan_gate import PlanGate
from docflow.provenance.recorder import ProvenanceRecorder
from docflow.structuring.engine import StructuringEngine
from docflow.structuring.models import placeholder_document

CREATE_FAILED_MESSAGE = "Failed to open document in editor"

_TEXT_PREFIXES: dict[FormatFamily, str] = {
    FormatFamily.AUDIO: "# Audio Transcription: {name}\n\n",
    FormatFamily.IMAGE: "# Text from Image: {name}\n\n",
}


def empty_text_placeholder(file_name: str) -> str:
    return (
        f"[Document: {file_name}]\n\n"
        "No text could be extracted from this document. It may be a scanned image "
        "or have content that cannot be read as text."
    )


class LoadSourceStep(PipelineStep):
    def __init__(self, source_repo: SourceDocumentsRepository) -> None:
        self._source_repo = source_repo

    async def run(self, context: PipelineContext) -> PipelineContext:
        request = context.request
        context.tags = list(request.tags)
        if request.source_document_id is not None:
            document = await self._source_repo.find_by_id(request.source_document_id)
            context.source_file = document.to_source_file()
            context.source_document_id = document.id
            context.tags = list(document.tags) or context.tags
        else:
            context.source_file = request.source_file
        if context.source_file is None:
            raise ValueError("PipelineRequest carries no source file")
        Log.info(
            f"Loaded {len(context.source_file.data)} bytes for {context.source_file.file_name}"
        )
        return context


class ClassifyStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.source_file is None:
            raise ValueError("PipelineContext.source_file must be set before classification")
        source = context.source_file
        context.family = classify(source.media_type, source.file_name)
        Log.info(
            f"Classified {source.file_name} ({source.media_type or 'no media type'}) "
            f"as {context.family.value}"
        )
        context.progress(f"Reading {context.family.value} file...")
        return context


class ExtractStep(PipelineStep):
    def __init__(self, registry: ExtractorRegistry) -> None:
        self._registry = registry

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.source_file is None or context.family is None:
            raise ValueError("PipelineContext.family must be set before extraction")
        source = context.source_file
        extractor = self._registry.for_family(context.family)
        result = await extractor.extract(source, context.progress)
        context.extraction = result
        context.warnings.extend(result.warnings)

        text = result.text
        prefix = _TEXT_PREFIXES.get(context.family)
        if prefix is not None and not result.is_blank:
            text = prefix.format(name=source.file_name) + text
        context.text = text
        Log.info(
            f"Extracted {len(result.text)} chars from {source.file_name} "
            f"via {result.method.value}"
        )
        if result.failure is not None:
            Log.warning(
                f"Extraction service failure ({result.failure.kind}): {result.failure.message}"
            )
        return context


class EmptyTextGuardStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.text.strip():
            return context
        if context.source_file is None:
            raise ValueError("PipelineContext.source_file must be set before the empty-text guard")
        context.text = empty_text_placeholder(context.source_file.file_name)
        Log.info(f"No text extracted from {context.source_file.file_name}, using placeholder")
        return context


class StructureGateStep(PipelineStep):
    def __init__(self, plan_gate: PlanGate, *, min_chars: int) -> None:
        self._plan_gate = plan_gate
        self._min_chars = min_chars

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.family is None:
            raise ValueError("PipelineContext.family must be set before the structuring gate")
        context.allow_ai = (
            self._plan_gate.allows_ai(context.request.context.plan)
            and benefits_from_restructuring(context.family)
            and len(context.text) > self._min_chars
        )
        Log.debug(f"AI structuring {'enabled' if context.allow_ai else 'disabled'}")
        return context


class CreateDraftStep(PipelineStep):
    def __init__(self, editor_repo: EditorDocumentsRepository) -> None:
        self._editor_repo = editor_repo

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.source_file is None:
            raise ValueError("PipelineContext.source_file must be set before creating a draft")
        request_context = context.request.context
        draft = EditorDocumentDraft(
            workspace_id=request_context.workspace_id,
            owner_id=request_context.user_id,
            title=strip_extension(context.source_file.file_name),
            content_json=placeholder_document().to_dict(),
            content_plain=context.text,
            tags=list(context.tags),
        )
        context.progress("Creating document...")
        try:
            context.new_document_id = await self._editor_repo.create(draft)
        except Exception as exc:
            Log.exception(f"Creating editor document for {draft.title} failed: {exc}")
            raise OpenInEditorError(CREATE_FAILED_MESSAGE) from exc
        Log.info(f"Created editor document {context.new_document_id}")
        return context


class StructureStep(PipelineStep):
    def __init__(self, engine: StructuringEngine) -> None:
        self._engine = engine

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.source_file is None:
            raise ValueError("PipelineContext.source_file must be set before structuring")
        context.progress(
            "Formatting document with AI..." if context.allow_ai else "Formatting document..."
        )
        context.structuring = await self._engine.structure(
            context.text,
            context.source_file.file_name,
            context.allow_ai,
        )
        Log.info(f"Structured document via {context.structuring.method.value}")
        return context


class CommitContentStep(PipelineStep):
    def __init__(self, editor_repo: EditorDocumentsRepository) -> None:
        self._editor_repo = editor_repo

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.new_document_id is None or context.structuring is None:
            raise ValueError("PipelineContext.structuring must be set before committing")
        try:
            await self._editor_repo.update_content(
                context.new_document_id,
                context.structuring.document.to_dict(),
                context.text,
            )
        except Exception as exc:
            # The placeholder document stays usable.
            Log.exception(f"Updating editor document {context.new_document_id} failed: {exc}")
            context.content_committed = False
            context.warnings.append(f"structured content was not saved: {exc}")
            return context
        context.content_committed = True
        Log.info(f"Committed content to editor document {context.new_document_id}")
        return context


class RecordActivityStep(PipelineStep):
    def __init__(self, recorder: ProvenanceRecorder) -> None:
        self._recorder = recorder

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.source_document_id is None:
            return context
        await self._recorder.record(context.source_document_id, context.request.context)
        return context
