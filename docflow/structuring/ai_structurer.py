"""Language-model structuring of raw text into a document tree."""

from pathlib import Path

from docflow.logging.logger import Log
from docflow.services.client_base import BaseCompletionClient
from docflow.services.exceptions import ServiceError
from docflow.structuring.exceptions import StructuringError, StructuringValidationError
from docflow.structuring.heuristic import line_paragraphs
from docflow.structuring.json_repair import extract_json_object
from docflow.structuring.models import (
    DocumentNode,
    Structured,
    StructuringFailure,
    StructuringResult,
)
from docflow.structuring.prompt_loader import load_system_prompt
from docflow.structuring.validator import build_document

USER_PROMPT_PREFIX = "Convert this extracted document text to rich-editor JSON:\n\n"


def visible_chars(text: str) -> set[str]:
    return {char for char in text if not char.isspace()}


def missing_chars(source: str, document: DocumentNode) -> set[str]:
    """Non-whitespace characters of ``source`` that never appear in the tree."""
    return visible_chars(source) - visible_chars(document.plain_text())


class AIStructurer:
    """Asks a completion service for a document tree and validates the answer.

    Never raises: every failure is returned as a ``StructuringFailure`` so the
    caller decides what to fall back to. Only the first ``max_input_chars``
    characters are sent; anything beyond is appended to the returned tree as
    one paragraph per line.
    """

    def __init__(
        self,
        client: BaseCompletionClient,
        *,
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 8000,
        max_input_chars: int = 12000,
        require_full_coverage: bool = True,
        system_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._max_input_chars = max_input_chars
        self._require_full_coverage = require_full_coverage
        self._system_prompt = load_system_prompt(system_prompt_path)

    async def structure(self, text: str) -> StructuringResult:
        excerpt = text[: self._max_input_chars]
        remainder = text[self._max_input_chars :]
        messages = [
            {"role": "system", "content": self._system_prompt},
            {"role": "user", "content": USER_PROMPT_PREFIX + excerpt},
        ]
        Log.debug(f"Structuring prompt ({len(excerpt)} chars of {len(text)})")

        try:
            raw = await self._client.complete(
                messages=messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                model=self._model,
            )
        except ServiceError as exc:
            return StructuringFailure(reason="service_error", detail=str(exc))
        except Exception as exc:
            Log.exception(f"Unexpected completion client failure: {exc}")
            return StructuringFailure(reason="service_error", detail=f"{type(exc).__name__}: {exc}")
        Log.debug(f"AI raw response:\n{raw}")

        try:
            document = build_document(extract_json_object(raw))
        except StructuringValidationError as exc:
            return StructuringFailure(reason="schema_mismatch", detail=str(exc))
        except StructuringError as exc:
            return StructuringFailure(reason="invalid_json", detail=str(exc))

        if self._require_full_coverage:
            lost = missing_chars(excerpt, document)
            if lost:
                sample = "".join(sorted(lost)[:20])
                return StructuringFailure(
                    reason="content_loss",
                    detail=f"{len(lost)} character(s) missing from the tree: {sample!r}",
                )

        if remainder.strip():
            Log.info(f"Appending {len(remainder)} chars beyond the structured excerpt")
            document = document.extended(line_paragraphs(remainder))
        return Structured(document=document)
