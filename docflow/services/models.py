from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceText:
    """Text returned by an OCR or transcription service."""

    text: str
    latency_ms: int


ChatMessage = dict[str, str]
