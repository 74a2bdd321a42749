"""Configuration models."""

from typing import Optional

from pydantic import BaseModel, Field


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("contentmill", description="Database name")
    user: str = Field("contentmill", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")
    min_pool_size: int = Field(1, ge=1, le=50)
    max_pool_size: int = Field(10, ge=1, le=100)


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = Field("openai", description="LLM provider (openai, mock)")
    extraction_model: str = Field("gpt-4o-mini", description="Model used for insight extraction")
    generation_model: str = Field("gpt-4o", description="Model used for content generation")
    api_key_env: Optional[str] = Field("OPENAI_API_KEY", description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    base_url: Optional[str] = Field(None, description="Base URL for API (e.g., for Ollama)")
    timeout: float = Field(120.0, description="Request timeout in seconds", gt=0)


class PipelineConfig(BaseModel):
    """Limits and windows for the background pipeline stages."""

    sources_per_run: int = Field(8, description="Max sources crawled per tenant per run", ge=1, le=100)
    items_per_source: int = Field(5, description="Max items fetched per source", ge=1, le=100)
    extractions_per_run: int = Field(10, description="Max documents extracted per tenant per run", ge=1, le=200)
    generation_extractions: int = Field(10, description="Extractions fed into each generation", ge=1, le=100)
    extraction_window_days: int = Field(7, description="Trailing window of extractions used for generation", ge=1)
    retention_days: int = Field(30, description="Documents older than this are deleted", ge=1)
    inter_source_delay: float = Field(5.0, description="Seconds to wait between sources", ge=0.0)
    history_size: int = Field(20, description="Run results kept in memory", ge=1)


class FetcherConfig(BaseModel):
    """Third-party fetcher configuration."""

    timeout: float = Field(30.0, description="HTTP timeout in seconds", gt=0)
    user_agent: str = Field("ContentMill/0.1 (content aggregation)", description="HTTP User-Agent")
    apify_token_env: Optional[str] = Field("APIFY_API_KEY", description="Environment variable for Apify token")
    apify_token: Optional[str] = Field(None, description="Apify token (prefer apify_token_env)")
    apify_actor: str = Field("apidojo~twitter-scraper-lite", description="Apify actor used for tweets")
    apify_max_wait: float = Field(120.0, description="Max seconds to wait for an Apify run", gt=0)
    apify_poll_interval: float = Field(5.0, description="Seconds between Apify status polls", gt=0)
    reddit_min_score: int = Field(0, description="Minimum Reddit post score", ge=0)
    twitter_min_likes: int = Field(0, description="Minimum tweet likes", ge=0)


class SchedulerConfig(BaseModel):
    """Periodic tick configuration."""

    tick_cron: str = Field("0 * * * *", description="Cron expression for the periodic tick")
    run_on_start: bool = Field(False, description="Run a tick immediately when serving starts")


class ConfigModel(BaseModel):
    """Main configuration model."""

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    fetchers: FetcherConfig = Field(default_factory=FetcherConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
