from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from docflow.classification.format_family import FormatFamily
from docflow.extraction.base import ProgressCallback, no_progress
from docflow.extraction.models import ExtractionResult, SourceFile
from docflow.pipeline.models import PipelineRequest
from docflow.structuring.models import StructuringOutcome


@dataclass(slots=True)
class PipelineContext:
    request: PipelineRequest
    progress: ProgressCallback = no_progress
    source_file: SourceFile | None = None
    source_document_id: str | None = None
    tags: list[str] = field(default_factory=list)
    family: FormatFamily | None = None
    extraction: ExtractionResult | None = None
    text: str = ""
    allow_ai: bool = False
    new_document_id: str | None = None
    structuring: StructuringOutcome | None = None
    content_committed: bool = False
    warnings: list[str] = field(default_factory=list)


class PipelineStep(ABC):
    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
