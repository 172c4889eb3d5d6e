import asyncio
import hashlib
import json
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from docflow.logging.logger import Log

T = TypeVar("T")


def content_key(data: bytes, file_name: str) -> str:
    """Deduplication key for an inline upload."""
    digest = hashlib.sha256(data).hexdigest()
    return f"inline:{file_name}:{digest}"


def caller_key(*parts: str | None) -> str:
    """Stable digest of the caller fields a run depends on; None and "" differ."""
    encoded = json.dumps(parts, separators=(",", ":"))
    return "caller:" + hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:16]


class InFlightRegistry(Generic[T]):
    """At most one running task per key within this process.

    A caller arriving while a run for the same key is in progress awaits
    that run's result instead of starting a second one. Keys are released
    as soon as the run finishes, successfully or not. When the caller that
    started a run is cancelled, a waiting caller starts the run again.
    """

    def __init__(self) -> None:
        self._running: dict[str, asyncio.Future[T]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._running

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        while True:
            existing = self._running.get(key)
            if existing is None:
                return await self._start(key, factory)
            Log.info(f"Joining in-flight run for {key}")
            try:
                return await asyncio.shield(existing)
            except asyncio.CancelledError:
                if not self._abandoned(existing):
                    raise
            Log.warning(f"In-flight run for {key} was cancelled, taking it over")

    @staticmethod
    def _abandoned(joined: asyncio.Future[T]) -> bool:
        """True when the joined run was cancelled but the waiting task was not."""
        task = asyncio.current_task()
        return joined.cancelled() and (task is None or task.cancelling() == 0)

    async def _start(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._running[key] = future
        try:
            result = await factory()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unjoined failure is not reported at GC.
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            del self._running[key]
