"""Postgres implementation of the content store."""

from datetime import datetime
from typing import List, Optional, Sequence, Set, Tuple

from psycopg import sql
from psycopg_pool import AsyncConnectionPool

from ..models import (
    Asset,
    AssetInput,
    Document,
    Extraction,
    ExtractionWithSource,
    Source,
    TemplateOverride,
    TenantSettings,
)
from .store import ContentStore, check_timestamp_field


class PostgresStore(ContentStore):
    """Content store backed by a psycopg async connection pool."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self.pool = pool

    async def list_tenants(self) -> List[TenantSettings]:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT * FROM user_settings ORDER BY created_at")
                rows = await cur.fetchall()
        return [TenantSettings(**row) for row in rows]

    async def list_active_sources(self, user_id: str) -> List[Source]:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    SELECT * FROM trend_sources
                    WHERE user_id = %s AND status = 'active'
                    ORDER BY updated_at ASC
                    """,
                    (user_id,),
                )
                rows = await cur.fetchall()
        return [Source(**row) for row in rows]

    async def touch_source(self, source_id: str, at: datetime) -> None:
        async with self.pool.connection() as conn:
            await conn.execute(
                "UPDATE trend_sources SET updated_at = %s WHERE id = %s",
                (at, source_id),
            )
            await conn.commit()

    async def insert_document_if_absent(self, document: Document) -> Optional[Document]:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                # Single statement so the URL/hash check and the insert see the same snapshot
                await cur.execute(
                    """
                    INSERT INTO documents (
                        user_id, trend_source_id, url, title, author,
                        published_at, raw_text, dedupe_hash, status
                    )
                    SELECT %(user_id)s, %(trend_source_id)s, %(url)s, %(title)s, %(author)s,
                           %(published_at)s::timestamptz, %(raw_text)s, %(dedupe_hash)s, %(status)s
                    WHERE NOT EXISTS (
                        SELECT 1 FROM documents
                        WHERE user_id = %(user_id)s
                          AND (url = %(url)s OR dedupe_hash = %(dedupe_hash)s)
                    )
                    ON CONFLICT (user_id, url) DO NOTHING
                    RETURNING *
                    """,
                    {
                        "user_id": document.user_id,
                        "trend_source_id": document.trend_source_id,
                        "url": document.url,
                        "title": document.title,
                        "author": document.author,
                        "published_at": document.published_at,
                        "raw_text": document.raw_text,
                        "dedupe_hash": document.dedupe_hash,
                        "status": document.status.value,
                    },
                )
                row = await cur.fetchone()
            await conn.commit()
        return Document(**row) if row else None

    async def list_extracted_document_ids(self, user_id: str) -> Set[str]:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    SELECT document_id FROM extractions
                    WHERE user_id = %s AND document_id IS NOT NULL
                    """,
                    (user_id,),
                )
                rows = await cur.fetchall()
        return {row["document_id"] for row in rows}

    async def list_documents_for_extraction(
        self,
        user_id: str,
        exclude_ids: Set[str],
        limit: int,
    ) -> List[Document]:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    SELECT * FROM documents
                    WHERE user_id = %s
                      AND status = 'parsed'
                      AND raw_text IS NOT NULL AND raw_text <> ''
                      AND NOT (id = ANY(%s))
                    ORDER BY created_at ASC
                    LIMIT %s
                    """,
                    (user_id, list(exclude_ids), limit),
                )
                rows = await cur.fetchall()
        return [Document(**row) for row in rows]

    async def insert_extraction(self, extraction: Extraction) -> Extraction:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO extractions (
                        user_id, document_id, source_material_id,
                        summary, key_points, topics, model
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING *
                    """,
                    (
                        extraction.user_id,
                        extraction.document_id,
                        extraction.source_material_id,
                        extraction.summary,
                        extraction.key_points,
                        extraction.topics,
                        extraction.model,
                    ),
                )
                row = await cur.fetchone()
            await conn.commit()
        return Extraction(**_without_nulls(row, ("key_points", "topics")))

    async def list_recent_extractions(
        self,
        user_id: str,
        since: datetime,
        limit: int,
    ) -> List[ExtractionWithSource]:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    SELECT
                        e.*,
                        COALESCE(d.title, sm.title) AS source_title,
                        CASE WHEN e.document_id IS NOT NULL THEN 'document'
                             ELSE sm.type END AS source_type
                    FROM extractions e
                    LEFT JOIN documents d ON e.document_id = d.id
                    LEFT JOIN source_materials sm ON e.source_material_id = sm.id
                    WHERE e.user_id = %s
                      AND e.archived_at IS NULL
                      AND e.created_at >= %s
                    ORDER BY e.created_at DESC
                    LIMIT %s
                    """,
                    (user_id, since, limit),
                )
                rows = await cur.fetchall()
        return [
            ExtractionWithSource(**_without_nulls(row, ("key_points", "topics")))
            for row in rows
        ]

    async def insert_asset(self, asset: Asset, inputs: Sequence[AssetInput] = ()) -> Asset:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO assets (user_id, type, title, content, status)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING *
                    """,
                    (asset.user_id, asset.type.value, asset.title, asset.content, asset.status.value),
                )
                row = await cur.fetchone()
                for item in inputs:
                    await cur.execute(
                        """
                        INSERT INTO asset_inputs (
                            user_id, asset_id, document_id, source_material_id, note
                        ) VALUES (%s, %s, %s, %s, %s)
                        """,
                        (item.user_id, row["id"], item.document_id, item.source_material_id, item.note),
                    )
            await conn.commit()
        return Asset(**row)

    async def get_template_override(self, template_key: str) -> Optional[TemplateOverride]:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT * FROM templates WHERE template_key = %s",
                    (template_key,),
                )
                row = await cur.fetchone()
        return TemplateOverride(**row) if row else None

    async def update_tenant_timestamp(self, user_id: str, field: str, at: datetime) -> None:
        check_timestamp_field(field)
        query = sql.SQL(
            "UPDATE user_settings SET {field} = %s, updated_at = NOW() WHERE user_id = %s"
        ).format(field=sql.Identifier(field))
        async with self.pool.connection() as conn:
            await conn.execute(query, (at, user_id))
            await conn.commit()

    async def delete_documents_before(self, cutoff: datetime) -> Tuple[int, int]:
        async with self.pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        DELETE FROM extractions
                        WHERE document_id IN (
                            SELECT id FROM documents WHERE created_at < %s
                        )
                        """,
                        (cutoff,),
                    )
                    extractions_deleted = cur.rowcount
                    await cur.execute(
                        "DELETE FROM documents WHERE created_at < %s",
                        (cutoff,),
                    )
                    documents_deleted = cur.rowcount
        return documents_deleted, extractions_deleted


def _without_nulls(row: dict, fields: Tuple[str, ...]) -> dict:
    """Replace NULL array columns with empty lists."""
    cleaned = dict(row)
    for field in fields:
        if cleaned.get(field) is None:
            cleaned[field] = []
    return cleaned
