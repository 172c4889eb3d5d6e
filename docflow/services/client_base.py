from abc import ABC, abstractmethod

from docflow.services.models import ChatMessage, ServiceText


class BaseCompletionClient(ABC):
    """Contract for language-model completion providers."""

    @abstractmethod
    async def complete(
        self,
        *,
        messages: list[ChatMessage],
        temperature: float,
        max_tokens: int,
        model: str,
    ) -> str:
        """Return the raw completion text. No schema is enforced on it.

        Raises:
            ServiceNetworkError: on connection, timeout or API errors.
            ServiceResponseError: on an empty response.
        """


class BaseOcrClient(ABC):
    """Contract for optical character recognition providers."""

    @abstractmethod
    async def recognize(
        self,
        images: list[bytes],
        *,
        media_type: str,
        document_type: str,
    ) -> ServiceText:
        """Recognize text on a batch of images in one call, in image order."""


class BaseTranscriptionClient(ABC):
    """Contract for speech-to-text providers."""

    @abstractmethod
    async def transcribe(
        self,
        audio: bytes,
        *,
        media_type: str,
        file_name: str,
    ) -> ServiceText:
        """Transcribe one audio blob."""
