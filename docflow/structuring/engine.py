from docflow.config.settings import Settings
from docflow.logging.logger import Log
from docflow.services.client_base import BaseCompletionClient
from docflow.structuring.ai_structurer import AIStructurer
from docflow.structuring.heuristic import HeuristicStructurer
from docflow.structuring.models import (
    Structured,
    StructuringMethod,
    StructuringOutcome,
)


class StructuringEngine:
    """Chooses between AI and heuristic structuring. Always returns a valid tree."""

    def __init__(
        self,
        heuristic: HeuristicStructurer,
        ai: AIStructurer | None = None,
        *,
        min_chars: int = 50,
    ) -> None:
        self._heuristic = heuristic
        self._ai = ai
        self._min_chars = min_chars

    async def structure(self, text: str, file_name: str, allow_ai: bool) -> StructuringOutcome:
        if not allow_ai or self._ai is None or len(text) <= self._min_chars:
            return self._heuristic_outcome(text, file_name)

        result = await self._ai.structure(text)
        if isinstance(result, Structured):
            Log.info(f"AI structuring produced {len(result.document.children)} nodes")
            return StructuringOutcome(document=result.document, method=StructuringMethod.AI)

        Log.warning(
            f"AI structuring failed, using heuristic: {result.reason}",
            detail=result.detail,
        )
        outcome = self._heuristic_outcome(text, file_name)
        return StructuringOutcome(
            document=outcome.document,
            method=StructuringMethod.HEURISTIC,
            failure=result,
        )

    def _heuristic_outcome(self, text: str, file_name: str) -> StructuringOutcome:
        document = self._heuristic.structure(text, file_name)
        Log.info(f"Heuristic structuring produced {len(document.children)} nodes")
        return StructuringOutcome(document=document, method=StructuringMethod.HEURISTIC)

    @classmethod
    def build(cls, settings: Settings, client: BaseCompletionClient) -> "StructuringEngine":
        ai = AIStructurer(
            client,
            model=settings.structuring_model,
            temperature=settings.structuring_temperature,
            max_tokens=settings.structuring_max_tokens,
            max_input_chars=settings.structuring_max_input_chars,
            require_full_coverage=settings.structuring_require_full_coverage,
        )
        return cls(HeuristicStructurer(), ai, min_chars=settings.structuring_min_chars)
