from dataclasses import dataclass, field
from typing import Any

from docflow.extraction.models import ExtractionMethod, SourceFile
from docflow.structuring.models import DocumentNode, StructuringMethod


@dataclass(frozen=True)
class RequestContext:
    """Who is asking. Workspace and user are optional; plan gates AI structuring."""

    workspace_id: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    plan: str = ""


@dataclass(frozen=True)
class SourceDocument:
    """Domain model for a stored upload (subset of DB columns)."""

    id: str
    file_name: str
    media_type: str
    content: bytes
    tags: list[str] = field(default_factory=list)
    workspace_id: str | None = None

    def to_source_file(self) -> SourceFile:
        return SourceFile(data=self.content, media_type=self.media_type, file_name=self.file_name)


@dataclass(frozen=True)
class PipelineRequest:
    """One pipeline run: either a stored source document or an inline file."""

    context: RequestContext
    source_document_id: str | None = None
    source_file: SourceFile | None = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if (self.source_document_id is None) == (self.source_file is None):
            raise ValueError("Exactly one of source_document_id or source_file is required")


@dataclass(frozen=True)
class EditorDocumentDraft:
    """Fields of a new editor document."""

    workspace_id: str | None
    owner_id: str | None
    title: str
    content_json: dict[str, Any]
    content_plain: str
    doc_type: str = "brief"
    visibility: str = "team"
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PipelineOutcome:
    structured_document: DocumentNode
    plain_text: str
    structuring_method: StructuringMethod
    extraction_method: ExtractionMethod
    new_document_id: str
    source_document_id: str | None = None
    warnings: list[str] = field(default_factory=list)
    content_committed: bool = True
