from typing import Any

from psycopg.types.json import Jsonb

from docflow.database.connection import get_connection
from docflow.pipeline.exceptions import EditorDocumentNotFoundError, PipelineError
from docflow.pipeline.models import EditorDocumentDraft


class EditorDocumentsRepository:
    """Database operations for the editor_documents table."""

    async def create(self, draft: EditorDocumentDraft) -> str:
        """Insert a new editor document and return its ID."""
        async with get_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO editor_documents
                    (workspace_id, owner_id, title, doc_type, visibility, tags,
                     content_json, content_plain)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING id::text
                    """,
                    (
                        draft.workspace_id,
                        draft.owner_id,
                        draft.title,
                        draft.doc_type,
                        draft.visibility,
                        list(draft.tags),
                        Jsonb(draft.content_json),
                        draft.content_plain,
                    ),
                )
                row = await cur.fetchone()
            await conn.commit()

        if row is None:
            raise PipelineError("Insert into editor_documents returned no id")
        return row[0]

    async def update_content(
        self,
        document_id: str,
        content_json: dict[str, Any],
        content_plain: str,
    ) -> None:
        """Replace the content tree and plain text of an editor document.

        Raises:
            EditorDocumentNotFoundError: if no document with this ID exists.
        """
        async with get_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    UPDATE editor_documents
                    SET content_json = %s,
                        content_plain = %s,
                        updated_at = NOW()
                    WHERE id::text = %s
                    """,
                    (Jsonb(content_json), content_plain, document_id),
                )
                if cur.rowcount == 0:
                    raise EditorDocumentNotFoundError(f"Editor document {document_id} not found")
            await conn.commit()
