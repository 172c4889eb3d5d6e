import base64
import binascii
from dataclasses import dataclass, field
from enum import Enum


class ExtractionMethod(str, Enum):
    DIGITAL_TEXT = "digital_text"
    OCR = "ocr"
    CONTAINER_EXTRACTION = "container_extraction"
    TRANSCRIPTION = "transcription"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class SourceFile:
    """Uploaded file handed to the pipeline for one run. Never persisted."""

    data: bytes
    media_type: str
    file_name: str

    @classmethod
    def from_base64(cls, content: str, media_type: str, file_name: str) -> "SourceFile":
        """Build from a base64 payload; content that is not base64 is taken as text."""
        try:
            data = base64.b64decode(content, validate=True)
        except (binascii.Error, ValueError):
            data = content.encode("utf-8")
        return cls(data=data, media_type=media_type, file_name=file_name)


@dataclass(frozen=True)
class ServiceFailure:
    """Typed failure reported by an external OCR or transcription call."""

    kind: str  # "network" or "response"
    message: str


@dataclass
class ExtractionResult:
    """Output of an extraction strategy. ``text`` is always a string."""

    text: str
    method: ExtractionMethod
    markup: str | None = None
    warnings: list[str] = field(default_factory=list)
    failure: ServiceFailure | None = None

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()
