"""Tests for domain models and prompt assembly."""

from datetime import time

import pytest

from contentmill.generation import (
    DEFAULT_TEMPLATES,
    TemplateLibrary,
    assemble_prompt,
    build_profile_context,
)
from contentmill.generation.llm_provider import parse_json_response
from contentmill.models import (
    AssetType,
    ContentFormat,
    Extraction,
    TemplateOverride,
)

from .conftest import make_tenant


def test_every_format_maps_to_an_asset_type_and_template():
    for fmt in ContentFormat:
        assert isinstance(fmt.asset_type, AssetType)
        assert fmt.template_key in DEFAULT_TEMPLATES


def test_format_mapping():
    assert ContentFormat.LINKEDIN_POV.asset_type == AssetType.LINKEDIN_POST
    assert ContentFormat.TWITTER_THREAD.asset_type == AssetType.TWITTER_POST
    assert ContentFormat.parse(" Newsletter ") == ContentFormat.NEWSLETTER
    with pytest.raises(ValueError):
        ContentFormat.parse("carousel")


def test_unknown_and_duplicate_formats_are_dropped():
    tenant = make_tenant(content_formats=["blog_post", "carousel", "newsletter", "blog_post"])

    assert tenant.content_formats == [ContentFormat.BLOG_POST, ContentFormat.NEWSLETTER]


def test_generation_time_accepts_time_values():
    assert make_tenant(generation_time=time(7, 30)).generation_time == "07:30"


def test_extraction_needs_exactly_one_parent():
    with pytest.raises(ValueError):
        Extraction(user_id="user-1")
    with pytest.raises(ValueError):
        Extraction(user_id="user-1", document_id="d", source_material_id="m")

    assert Extraction(user_id="user-1", source_material_id="m").document_id is None


def test_empty_profile_renders_nothing():
    assert build_profile_context(make_tenant()) == ""
    assert assemble_prompt("", "PROMPT", "CONTEXT") == "PROMPT\n\nCONTEXT"


def test_profile_lists_filled_fields_only():
    context = build_profile_context(make_tenant(content_pillars=["AI", "  "], target_audience="CTOs"))

    assert "  - AI" in context
    assert "**Target Audience:**\nCTOs" in context
    assert "Voice & Tone" not in context


async def test_template_override_resolution(store):
    library = TemplateLibrary(store)

    assert await library.render_prompt(ContentFormat.BLOG_POST, "user-1") == DEFAULT_TEMPLATES["blog_post"].default_prompt

    store.overrides["blog_post"] = TemplateOverride(template_key="blog_post", prompt="")
    assert await library.render_prompt(ContentFormat.BLOG_POST, "user-1") == DEFAULT_TEMPLATES["blog_post"].default_prompt

    store.overrides["blog_post"] = TemplateOverride(template_key="blog_post", active=False)
    assert await library.render_prompt(ContentFormat.BLOG_POST, "user-1") is None


def test_parse_json_response_tolerates_fences():
    assert parse_json_response('```json\n{"title": "t", "content": "c"}\n```') == {"title": "t", "content": "c"}
    with pytest.raises(ValueError):
        parse_json_response("no json here")
