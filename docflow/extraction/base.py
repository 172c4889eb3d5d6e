from abc import ABC, abstractmethod
from collections.abc import Callable

from docflow.extraction.models import ExtractionResult, ServiceFailure, SourceFile
from docflow.services.exceptions import ServiceError, ServiceNetworkError

ProgressCallback = Callable[[str], None]


def no_progress(_status: str) -> None:
    return None


def failure_from(exc: Exception) -> ServiceFailure:
    """Typed failure for a service call; errors outside ServiceError count as bad responses."""
    kind = "network" if isinstance(exc, ServiceNetworkError) else "response"
    message = str(exc) if isinstance(exc, ServiceError) else f"{type(exc).__name__}: {exc}"
    return ServiceFailure(kind=kind, message=message)


class BaseExtractor(ABC):
    """Contract for all extraction strategies."""

    @abstractmethod
    async def extract(
        self,
        source: SourceFile,
        progress: ProgressCallback | None = None,
    ) -> ExtractionResult:
        """Extract readable text (and markup, where the format has it).

        Args:
            source: The uploaded file.
            progress: Optional observer for human-readable status updates.

        Returns:
            ExtractionResult whose ``text`` is always a string, possibly empty.
            Malformed input and service failures are reported through
            ``warnings`` and ``failure`` rather than raised.
        """
