"""Offline service adapters.

No network calls. They answer deterministically, which makes them useful for
local development, tests, and as a template for new provider adapters:
implement the matching client base and register the provider in AIClientFactory.
"""

import json

from docflow.services.client_base import (
    BaseCompletionClient,
    BaseOcrClient,
    BaseTranscriptionClient,
)
from docflow.services.models import ChatMessage, ServiceText

# Structuring prompts carry the document after the first blank line.
_BODY_SEPARATOR = "\n\n"


class ExampleCompletionAdapter(BaseCompletionClient):
    """Echoes the submitted document back as one paragraph per non-empty line."""

    async def complete(
        self,
        *,
        messages: list[ChatMessage],
        temperature: float,
        max_tokens: int,
        model: str,
    ) -> str:
        _ = temperature, max_tokens, model
        user_content = next(
            (m.get("content", "") for m in reversed(messages) if m.get("role") == "user"),
            "",
        )
        _, _, body = user_content.partition(_BODY_SEPARATOR)
        nodes = [
            {"type": "paragraph", "content": [{"type": "text", "text": line}]}
            for line in body.splitlines()
            if line.strip()
        ]
        return json.dumps({"type": "doc", "content": nodes})


class ExampleOcrAdapter(BaseOcrClient):
    """Returns an empty recognition for every image."""

    async def recognize(
        self,
        images: list[bytes],
        *,
        media_type: str,
        document_type: str,
    ) -> ServiceText:
        _ = images, media_type, document_type
        return ServiceText(text="", latency_ms=0)


class ExampleTranscriptionAdapter(BaseTranscriptionClient):
    """Returns a fixed transcript naming the file."""

    async def transcribe(
        self,
        audio: bytes,
        *,
        media_type: str,
        file_name: str,
    ) -> ServiceText:
        _ = audio, media_type
        return ServiceText(text=f"Example transcript of {file_name}.", latency_ms=0)
