"""Database initialization and schema management."""

from psycopg.errors import DatabaseError
from psycopg_pool import AsyncConnectionPool
from rich.console import Console
from rich.markup import escape

console = Console()

SCHEMA_SQL = """
CREATE EXTENSION IF NOT EXISTS pgcrypto;

-- Per-user settings
CREATE TABLE IF NOT EXISTS user_settings (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    user_id TEXT NOT NULL UNIQUE,
    crawl_enabled BOOLEAN NOT NULL DEFAULT TRUE,
    crawl_schedule VARCHAR(50) NOT NULL DEFAULT 'daily',
    generation_enabled BOOLEAN NOT NULL DEFAULT TRUE,
    generation_schedule VARCHAR(50) NOT NULL DEFAULT 'weekly_sunday',
    generation_time TIME NOT NULL DEFAULT '08:00',
    content_formats TEXT[] NOT NULL DEFAULT ARRAY['linkedin_post'],
    timezone VARCHAR(50) NOT NULL DEFAULT 'America/New_York',
    last_crawl_at TIMESTAMPTZ,
    last_generation_at TIMESTAMPTZ,
    content_pillars TEXT[] NOT NULL DEFAULT ARRAY[]::TEXT[],
    professional_background TEXT,
    target_audience TEXT,
    voice_tone TEXT,
    unique_angle TEXT,
    signature_elements TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Crawl targets
CREATE TABLE IF NOT EXISTS trend_sources (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    domain TEXT,
    feed_url TEXT,
    sitemap_url TEXT,
    crawl_method VARCHAR(20) NOT NULL DEFAULT 'rss',
    tier INTEGER NOT NULL DEFAULT 1,
    status VARCHAR(20) NOT NULL DEFAULT 'active'
        CHECK (status IN ('active', 'paused', 'blocked')),
    notes TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Fetched documents
CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    user_id TEXT NOT NULL,
    trend_source_id TEXT REFERENCES trend_sources(id) ON DELETE SET NULL,
    url TEXT NOT NULL,
    canonical_url TEXT,
    title TEXT,
    author TEXT,
    published_at TIMESTAMPTZ,
    fetched_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    raw_text TEXT,
    dedupe_hash TEXT,
    status VARCHAR(20) NOT NULL DEFAULT 'fetched',
    archived_at TIMESTAMPTZ,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (user_id, url)
);

-- Meetings, voice notes and manual notes
CREATE TABLE IF NOT EXISTS source_materials (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    user_id TEXT NOT NULL,
    type VARCHAR(20) NOT NULL,
    title TEXT,
    content TEXT NOT NULL,
    source_url TEXT,
    occurred_at TIMESTAMPTZ,
    archived_at TIMESTAMPTZ,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Extracted insight
CREATE TABLE IF NOT EXISTS extractions (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    user_id TEXT NOT NULL,
    source_material_id TEXT REFERENCES source_materials(id),
    document_id TEXT REFERENCES documents(id),
    summary TEXT,
    key_points TEXT[],
    topics TEXT[],
    model TEXT,
    archived_at TIMESTAMPTZ,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CHECK ((document_id IS NULL) <> (source_material_id IS NULL))
);

-- Generated assets
CREATE TABLE IF NOT EXISTS assets (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    user_id TEXT NOT NULL,
    type VARCHAR(30) NOT NULL,
    title TEXT,
    content TEXT NOT NULL,
    status VARCHAR(20) NOT NULL DEFAULT 'draft'
        CHECK (status IN ('draft', 'ready', 'scheduled', 'published', 'archived')),
    publish_date TIMESTAMPTZ,
    published_url TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Asset provenance
CREATE TABLE IF NOT EXISTS asset_inputs (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    user_id TEXT NOT NULL,
    asset_id TEXT NOT NULL REFERENCES assets(id) ON DELETE CASCADE,
    document_id TEXT REFERENCES documents(id) ON DELETE SET NULL,
    source_material_id TEXT REFERENCES source_materials(id) ON DELETE SET NULL,
    note TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Prompt template overrides
CREATE TABLE IF NOT EXISTS templates (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    template_key TEXT NOT NULL UNIQUE,
    name TEXT,
    prompt TEXT,
    active BOOLEAN NOT NULL DEFAULT TRUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Create indexes
CREATE INDEX IF NOT EXISTS idx_trend_sources_user_status ON trend_sources(user_id, status);
CREATE INDEX IF NOT EXISTS idx_documents_user_hash ON documents(user_id, dedupe_hash);
CREATE INDEX IF NOT EXISTS idx_documents_created_at ON documents(created_at);
CREATE INDEX IF NOT EXISTS idx_extractions_document ON extractions(document_id);
CREATE INDEX IF NOT EXISTS idx_extractions_user_created ON extractions(user_id, created_at);
CREATE INDEX IF NOT EXISTS idx_assets_user ON assets(user_id);
CREATE INDEX IF NOT EXISTS idx_asset_inputs_asset ON asset_inputs(asset_id);
"""


async def validate_connection(pool: AsyncConnectionPool) -> bool:
    """Validate database connection."""
    try:
        async with pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1 AS ok")
                result = await cur.fetchone()
                return result is not None and result["ok"] == 1
    except Exception as e:
        console.print(f"[red]Database connection failed: {escape(str(e))}[/red]")
        return False


async def init_database(pool: AsyncConnectionPool) -> None:
    """Initialize database schema."""
    try:
        async with pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(SCHEMA_SQL)
            await conn.commit()
        console.print("Database schema initialized successfully")
    except DatabaseError as e:
        console.print(f"[red]Failed to initialize database schema: {escape(str(e))}[/red]")
        raise
