from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from docflow.database.repositories.document_activity_repository import DocumentActivityRepository
from docflow.database.repositories.editor_documents_repository import EditorDocumentsRepository
from docflow.database.repositories.source_documents_repository import SourceDocumentsRepository
from docflow.pipeline.exceptions import (
    EditorDocumentNotFoundError,
    PipelineError,
    SourceDocumentNotFoundError,
)
from docflow.pipeline.models import EditorDocumentDraft, SourceDocument
from docflow.provenance.models import ActivityAction, ActivityEvent


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up an async mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_cursor.execute = AsyncMock()
    mock_cursor.fetchone = AsyncMock(return_value=None)
    mock_cursor.fetchall = AsyncMock(return_value=[])
    mock_conn = MagicMock()
    mock_conn.commit = AsyncMock()
    mock_conn.cursor.return_value.__aenter__.return_value = mock_cursor
    mock_get_conn.return_value.__aenter__.return_value = mock_conn
    return mock_conn, mock_cursor


def _draft() -> EditorDocumentDraft:
    return EditorDocumentDraft(
        workspace_id="ws-1",
        owner_id="u-1",
        title="notes",
        content_json={"type": "doc", "content": []},
        content_plain="Hello",
        tags=["inbox"],
    )


class TestSourceDocumentsFindById:
    @patch("docflow.database.repositories.source_documents_repository.get_connection")
    async def test_returns_source_document_when_found(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {
            "id": "src-1",
            "workspace_id": "ws-1",
            "file_name": "report.pdf",
            "media_type": "application/pdf",
            "content": memoryview(b"%PDF-1.4"),
            "tags": None,
        }

        result = await SourceDocumentsRepository().find_by_id("src-1")

        assert result == SourceDocument(
            id="src-1",
            workspace_id="ws-1",
            file_name="report.pdf",
            media_type="application/pdf",
            content=b"%PDF-1.4",
            tags=[],
        )
        assert mock_cursor.execute.call_args.args[1] == ("src-1",)

    @patch("docflow.database.repositories.source_documents_repository.get_connection")
    async def test_raises_not_found_when_missing(self, mock_get_conn: MagicMock) -> None:
        _mock_connection(mock_get_conn)

        with pytest.raises(SourceDocumentNotFoundError, match="Source document nope not found"):
            await SourceDocumentsRepository().find_by_id("nope")


class TestEditorDocumentsCreate:
    @patch("docflow.database.repositories.editor_documents_repository.get_connection")
    async def test_inserts_and_commits(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ("doc-1",)

        result = await EditorDocumentsRepository().create(_draft())

        assert result == "doc-1"
        params = mock_cursor.execute.call_args.args[1]
        assert params[:6] == ("ws-1", "u-1", "notes", "brief", "team", ["inbox"])
        assert params[6].obj == {"type": "doc", "content": []}
        assert params[7] == "Hello"
        mock_conn.commit.assert_awaited_once()

    @patch("docflow.database.repositories.editor_documents_repository.get_connection")
    async def test_raises_when_no_id_returned(self, mock_get_conn: MagicMock) -> None:
        _mock_connection(mock_get_conn)

        with pytest.raises(PipelineError, match="returned no id"):
            await EditorDocumentsRepository().create(_draft())


class TestEditorDocumentsUpdateContent:
    @patch("docflow.database.repositories.editor_documents_repository.get_connection")
    async def test_updates_and_commits(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        await EditorDocumentsRepository().update_content("doc-1", {"type": "doc"}, "plain")

        params = mock_cursor.execute.call_args.args[1]
        assert params[0].obj == {"type": "doc"}
        assert params[1:] == ("plain", "doc-1")
        mock_conn.commit.assert_awaited_once()

    @patch("docflow.database.repositories.editor_documents_repository.get_connection")
    async def test_raises_not_found_when_no_rows_updated(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        with pytest.raises(EditorDocumentNotFoundError, match="Editor document doc-9 not found"):
            await EditorDocumentsRepository().update_content("doc-9", {}, "")
        mock_conn.commit.assert_not_called()


class TestDocumentActivity:
    @patch("docflow.database.repositories.document_activity_repository.get_connection")
    async def test_append_returns_new_id(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (7,)
        event = ActivityEvent(
            document_id="src-1",
            workspace_id="ws-1",
            user_id="u-1",
            user_name="Sam",
            action=ActivityAction.VIEWED,
            details={"editedInEditor": True},
        )

        result = await DocumentActivityRepository().append(event)

        assert result == 7
        params = mock_cursor.execute.call_args.args[1]
        assert params[:5] == ("src-1", "ws-1", "u-1", "Sam", "viewed")
        assert params[5].obj == {"editedInEditor": True}
        mock_conn.commit.assert_awaited_once()

    @patch("docflow.database.repositories.document_activity_repository.get_connection")
    async def test_list_recent_maps_rows(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        created = datetime(2024, 5, 1, tzinfo=timezone.utc)
        mock_cursor.fetchall.return_value = [
            {
                "id": 3,
                "document_id": "src-1",
                "workspace_id": "ws-1",
                "user_id": "u-1",
                "user_name": None,
                "action": "shared",
                "details": None,
                "created_at": created,
            }
        ]

        events = await DocumentActivityRepository().list_recent("ws-1", 80)

        assert events == [
            ActivityEvent(
                id=3,
                document_id="src-1",
                workspace_id="ws-1",
                user_id="u-1",
                action=ActivityAction.SHARED,
                created_at=created,
            )
        ]
        assert mock_cursor.execute.call_args.args[1] == ("ws-1", 80)
