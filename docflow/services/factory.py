from dataclasses import dataclass
from typing import ClassVar

from docflow.config.settings import Settings
from docflow.services.client_base import (
    BaseCompletionClient,
    BaseOcrClient,
    BaseTranscriptionClient,
)
from docflow.services.example_client_adapter import (
    ExampleCompletionAdapter,
    ExampleOcrAdapter,
    ExampleTranscriptionAdapter,
)
from docflow.services.openai_client_adapter import (
    OpenAICompletionAdapter,
    OpenAITranscriptionAdapter,
    OpenAIVisionOcrAdapter,
    build_async_client,
)


@dataclass(frozen=True)
class AIClients:
    completion: BaseCompletionClient
    ocr: BaseOcrClient
    transcription: BaseTranscriptionClient


class AIClientFactory:
    """Creates the configured completion, OCR and transcription clients."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "groq": "https://api.groq.com/openai/v1",
        "openrouter": "https://openrouter.ai/api/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> AIClients:
        provider = settings.ai_provider.lower()
        if provider == "example":
            return AIClients(
                completion=ExampleCompletionAdapter(),
                ocr=ExampleOcrAdapter(),
                transcription=ExampleTranscriptionAdapter(),
            )
        client = build_async_client(
            # Local OpenAI-compatible servers accept any key; the SDK rejects an empty one.
            api_key=settings.ai_api_key or "EMPTY",
            timeout_seconds=settings.ai_timeout_seconds or 60,
            base_url=cls._resolve_base_url(provider, settings),
        )
        return AIClients(
            completion=OpenAICompletionAdapter(client),
            ocr=OpenAIVisionOcrAdapter(
                client,
                model=settings.ocr_model,
                batch_size=settings.ocr_batch_size,
            ),
            transcription=OpenAITranscriptionAdapter(
                client,
                model=settings.transcription_model,
            ),
        )

    @classmethod
    def providers(cls) -> list[str]:
        return ["example", "openai", "openai_compatible", *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS)]

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        """Endpoint for the OpenAI SDK; None selects the SDK default (api.openai.com)."""
        hosted = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if hosted is not None:
            return hosted
        custom = settings.ai_base_url.strip()
        if provider == "openai_compatible" and custom:
            return custom
        if provider == "openai_compatible":
            raise ValueError("ai_base_url is required for a self-hosted openai_compatible endpoint")
        if provider != "openai":
            raise ValueError(f"Unknown AI provider '{provider}'. Choose from: {cls.providers()}")
        return None
