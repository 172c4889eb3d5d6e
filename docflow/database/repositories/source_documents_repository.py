from psycopg.rows import dict_row

from docflow.database.connection import get_connection
from docflow.pipeline.exceptions import SourceDocumentNotFoundError
from docflow.pipeline.models import SourceDocument


class SourceDocumentsRepository:
    """Read access to the source_documents table."""

    async def find_by_id(self, source_document_id: str) -> SourceDocument:
        """Load a stored upload with its bytes.

        Raises:
            SourceDocumentNotFoundError: if no document with this ID exists.
        """
        async with get_connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    """
                    SELECT id::text AS id, workspace_id, file_name, media_type,
                           content, tags
                    FROM source_documents
                    WHERE id::text = %s
                    """,
                    (source_document_id,),
                )
                row = await cur.fetchone()

        if row is None:
            raise SourceDocumentNotFoundError(
                f"Source document {source_document_id} not found"
            )

        return SourceDocument(
            id=row["id"],
            workspace_id=row["workspace_id"],
            file_name=row["file_name"],
            media_type=row["media_type"],
            content=bytes(row["content"]),
            tags=list(row["tags"] or []),
        )
