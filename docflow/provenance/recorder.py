from typing import Any

from docflow.database.repositories.document_activity_repository import DocumentActivityRepository
from docflow.logging.logger import Log
from docflow.pipeline.models import RequestContext
from docflow.provenance.models import ActivityAction, ActivityEvent

DEFAULT_ACTIVITY_WINDOW = 80
PIPELINE_DETAILS: dict[str, Any] = {"editedInEditor": True}


class ProvenanceRecorder:
    """Best-effort activity log for source documents.

    Recording never fails the caller: missing workspace or user context makes
    it a no-op, and storage errors are logged and dropped.
    """

    def __init__(
        self,
        activity_repo: DocumentActivityRepository,
        *,
        window: int = DEFAULT_ACTIVITY_WINDOW,
    ) -> None:
        self._activity_repo = activity_repo
        self._window = window

    async def record(
        self,
        source_document_id: str,
        context: RequestContext,
        action: ActivityAction = ActivityAction.VIEWED,
        details: dict[str, Any] | None = None,
    ) -> ActivityEvent | None:
        if not context.workspace_id or not context.user_id:
            Log.debug(f"Skipping {action.value} activity for {source_document_id}: no workspace/user")
            return None
        event = ActivityEvent(
            document_id=source_document_id,
            workspace_id=context.workspace_id,
            user_id=context.user_id,
            user_name=context.user_name,
            action=action,
            details=dict(PIPELINE_DETAILS if details is None else details),
        )
        try:
            event_id = await self._activity_repo.append(event)
        except Exception as exc:
            Log.warning(f"Failed to record {action.value} activity for {source_document_id}: {exc}")
            return None
        Log.info(f"Recorded {action.value} activity {event_id} for {source_document_id}")
        return event

    async def recent(self, workspace_id: str) -> list[ActivityEvent]:
        """Most recent activity of a workspace, newest first."""
        return await self._activity_repo.list_recent(workspace_id, self._window)
