from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docflow.database.connection import get_connection
from docflow.provenance.models import ActivityAction, ActivityEvent


class DocumentActivityRepository:
    """Database operations for the document_activity table."""

    async def append(self, event: ActivityEvent) -> int:
        """Insert one activity row and return its ID."""
        async with get_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO document_activity
                    (document_id, workspace_id, user_id, user_name, action, details)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING id
                    """,
                    (
                        event.document_id,
                        event.workspace_id,
                        event.user_id,
                        event.user_name,
                        event.action.value,
                        Jsonb(event.details),
                    ),
                )
                row = await cur.fetchone()
            await conn.commit()
        if row is None:
            raise RuntimeError("Insert into document_activity returned no id")
        return int(row[0])

    async def list_recent(self, workspace_id: str, limit: int) -> list[ActivityEvent]:
        """Newest events of a workspace first, at most ``limit`` rows."""
        async with get_connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    """
                    SELECT id, document_id, workspace_id, user_id, user_name,
                           action, details, created_at
                    FROM document_activity
                    WHERE workspace_id = %s
                    ORDER BY created_at DESC, id DESC
                    LIMIT %s
                    """,
                    (workspace_id, limit),
                )
                rows = await cur.fetchall()

        return [
            ActivityEvent(
                id=row["id"],
                document_id=row["document_id"],
                workspace_id=row["workspace_id"],
                user_id=row["user_id"],
                user_name=row["user_name"],
                action=ActivityAction(row["action"]),
                details=dict(row["details"] or {}),
                created_at=row["created_at"],
            )
            for row in rows
        ]
