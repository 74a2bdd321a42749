"""Generation stage: draft assets from recent extractions."""

from datetime import datetime
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape

from ..db import ContentStore
from ..generation import (
    LLMProvider,
    TemplateLibrary,
    assemble_prompt,
    build_extraction_context,
    build_profile_context,
)
from ..models import Asset, AssetInput, AssetStatus, TenantSettings
from .results import GenerationResult
from .schedule import as_utc, should_generate

console = Console()


class GenerationStage:
    """Generate one draft asset per configured format for each due tenant."""

    def __init__(
        self,
        store: ContentStore,
        generator: LLMProvider,
        templates: TemplateLibrary,
        extraction_limit: int = 10,
        window_days: int = 7,
    ) -> None:
        self.store = store
        self.generator = generator
        self.templates = templates
        self.extraction_limit = extraction_limit
        self.window_days = window_days

    async def run(
        self,
        tenants: Sequence[TenantSettings],
        now: Optional[datetime] = None,
        force_user_id: Optional[str] = None,
    ) -> GenerationResult:
        """
        Generate for admitted tenants.

        Args:
            tenants: Tenant settings to consider
            now: Current time (default: now)
            force_user_id: Tenant whose admission check is bypassed

        Returns:
            Counts and labeled errors
        """
        now = as_utc(now)
        result = GenerationResult()

        for tenant in tenants:
            forced = force_user_id is not None and tenant.user_id == force_user_id
            if not forced and not should_generate(tenant, now):
                continue
            await self.generate_for_tenant(tenant, now, result)

        return result

    async def generate_for_tenant(self, tenant: TenantSettings, now: datetime, result: GenerationResult) -> None:
        """Generate every configured format for one tenant."""
        since = as_utc(now).subtract(days=self.window_days)
        try:
            extractions = await self.store.list_recent_extractions(tenant.user_id, since, self.extraction_limit)
        except Exception as e:
            result.errors.append(f"{tenant.user_id}: failed to load extractions: {e}")
            return

        if not extractions:
            console.print(f"[dim]No recent extractions for {escape(tenant.user_id)}, skipping generation[/dim]")
            return

        result.tenants += 1
        profile_context = build_profile_context(tenant)
        extraction_context = build_extraction_context(extractions)
        inputs = [
            AssetInput(
                user_id=tenant.user_id,
                document_id=e.document_id,
                source_material_id=e.source_material_id,
            )
            for e in extractions
        ]

        for fmt in tenant.content_formats:
            try:
                prompt = await self.templates.render_prompt(fmt, tenant.user_id)
                if prompt is None:
                    result.errors.append(f"{fmt.value}: no prompt template available")
                    continue

                generated = await self.generator.generate(
                    assemble_prompt(profile_context, prompt, extraction_context)
                )
                await self.store.insert_asset(
                    Asset(
                        user_id=tenant.user_id,
                        type=fmt.asset_type,
                        title=generated.title,
                        content=generated.content,
                        status=AssetStatus.DRAFT,
                    ),
                    inputs,
                )
            except Exception as e:
                msg = f"{fmt.value}: {e}"
                console.print(f"[red]Generation error for {escape(tenant.user_id)}: {escape(msg)}[/red]")
                result.errors.append(msg)
            else:
                result.generated += 1

        try:
            await self.store.update_tenant_timestamp(tenant.user_id, "last_generation_at", now)
        except Exception as e:
            result.errors.append(f"{tenant.user_id}: failed to update last_generation_at: {e}")
