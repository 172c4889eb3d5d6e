import os
from collections.abc import AsyncGenerator
from typing import Any

import psycopg
import pytest

from docflow.config.settings import Settings
from docflow.database.connection import apply_schema, close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docflow_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture
async def integration_pool(test_settings: Settings) -> AsyncGenerator[None, None]:
    try:
        await init_pool(test_settings)
        await apply_schema()
    except Exception as e:
        await close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run it.")
    try:
        yield
    finally:
        await close_pool()


@pytest.fixture
async def db_conn(integration_pool: None) -> AsyncGenerator[psycopg.AsyncConnection[Any], None]:
    async with get_connection() as conn:
        yield conn


@pytest.fixture
async def integration_cleanup(
    integration_pool: None,
) -> AsyncGenerator[list[tuple[str, str]], None]:
    cleanup: list[tuple[str, str]] = []
    yield cleanup
    if not cleanup:
        return
    async with get_connection() as conn:
        async with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "editor_documents":
                    await cur.execute("DELETE FROM editor_documents WHERE id::text = %s", (row_id,))
                elif table == "source_documents":
                    await cur.execute("DELETE FROM source_documents WHERE id::text = %s", (row_id,))
                elif table == "document_activity":
                    await cur.execute(
                        "DELETE FROM document_activity WHERE workspace_id = %s", (row_id,)
                    )
        await conn.commit()


@pytest.fixture
async def seed_source_document(
    db_conn: psycopg.AsyncConnection[Any],
    integration_cleanup: list[tuple[str, str]],
) -> str:
    async with db_conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO source_documents (workspace_id, file_name, media_type, content, tags)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id::text
            """,
            ("ws-it", "notes.txt", "text/plain", b"Hello\n\nWorld", ["seeded"]),
        )
        row = await cur.fetchone()
        assert row is not None
        source_id = row[0]
    await db_conn.commit()
    integration_cleanup.append(("source_documents", source_id))
    return source_id
