import asyncio
import base64
import time

import httpx
import openai

from docflow.logging.logger import Log
from docflow.services.client_base import (
    BaseCompletionClient,
    BaseOcrClient,
    BaseTranscriptionClient,
)
from docflow.services.exceptions import ServiceNetworkError, ServiceResponseError
from docflow.services.models import ChatMessage, ServiceText
from docflow.services.ocr_prompts import ocr_prompt

PAGE_BREAK = "\n\n--- Page Break ---\n\n"

_NETWORK_ERRORS = (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException)


def build_async_client(
    *,
    api_key: str,
    timeout_seconds: int,
    base_url: str | None = None,
) -> openai.AsyncOpenAI:
    return openai.AsyncOpenAI(
        api_key=api_key,
        timeout=timeout_seconds,
        base_url=base_url,
    )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class OpenAICompletionAdapter(BaseCompletionClient):
    """Completion client built on the OpenAI-compatible chat API."""

    def __init__(self, client: openai.AsyncOpenAI) -> None:
        self._client = client

    async def complete(
        self,
        *,
        messages: list[ChatMessage],
        temperature: float,
        max_tokens: int,
        model: str,
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=messages,  # type: ignore[arg-type]
            )
        except _NETWORK_ERRORS as exc:
            raise ServiceNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ServiceNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise ServiceResponseError("AI returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise ServiceResponseError("AI returned empty response")
        return content


class OpenAIVisionOcrAdapter(BaseOcrClient):
    """OCR through a vision-capable chat model, one request per image.

    Images in a batch are sent concurrently, ``batch_size`` at a time; page
    texts are joined with a page-break marker in image order.
    """

    def __init__(
        self,
        client: openai.AsyncOpenAI,
        *,
        model: str,
        batch_size: int = 5,
        max_tokens: int = 4096,
    ) -> None:
        self._client = client
        self._model = model
        self._batch_size = max(1, batch_size)
        self._max_tokens = max_tokens

    async def recognize(
        self,
        images: list[bytes],
        *,
        media_type: str,
        document_type: str,
    ) -> ServiceText:
        started = time.perf_counter()
        prompt = ocr_prompt(document_type)
        texts: list[str] = []
        for start in range(0, len(images), self._batch_size):
            batch = images[start : start + self._batch_size]
            texts.extend(
                await asyncio.gather(
                    *(self._recognize_one(image, media_type, prompt) for image in batch)
                )
            )
        latency_ms = _elapsed_ms(started)
        Log.debug(f"OCR of {len(images)} image(s) took {latency_ms}ms")
        return ServiceText(text=PAGE_BREAK.join(texts), latency_ms=latency_ms)

    async def _recognize_one(self, image: bytes, media_type: str, prompt: str) -> str:
        data_url = f"data:{media_type};base64,{base64.b64encode(image).decode('ascii')}"
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                temperature=0.0,
                max_tokens=self._max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    }
                ],
            )
        except _NETWORK_ERRORS as exc:
            raise ServiceNetworkError(f"OCR provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ServiceNetworkError(f"OCR provider API error: {exc}") from exc

        if not response.choices:
            raise ServiceResponseError("OCR returned no choices")
        return response.choices[0].message.content or ""


class OpenAITranscriptionAdapter(BaseTranscriptionClient):
    """Speech-to-text through the OpenAI-compatible audio transcription API."""

    def __init__(self, client: openai.AsyncOpenAI, *, model: str) -> None:
        self._client = client
        self._model = model

    async def transcribe(
        self,
        audio: bytes,
        *,
        media_type: str,
        file_name: str,
    ) -> ServiceText:
        started = time.perf_counter()
        try:
            response = await self._client.audio.transcriptions.create(
                model=self._model,
                file=(file_name or "audio", audio, media_type),
            )
        except _NETWORK_ERRORS as exc:
            raise ServiceNetworkError(f"Transcription provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ServiceNetworkError(f"Transcription provider API error: {exc}") from exc

        text = getattr(response, "text", None)
        if text is None:
            raise ServiceResponseError("Transcription returned no text")
        return ServiceText(text=text, latency_ms=_elapsed_ms(started))
