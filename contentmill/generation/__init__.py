"""Insight extraction and content generation."""

from .context import assemble_prompt, build_extraction_context
from .llm_provider import LLMProvider, MockLLMProvider, OpenAIProvider, get_llm_provider
from .models import GeneratedContent, Insight
from .profile import build_profile_context
from .templates import DEFAULT_TEMPLATES, TemplateDefinition, TemplateLibrary

__all__ = [
    "DEFAULT_TEMPLATES",
    "GeneratedContent",
    "Insight",
    "LLMProvider",
    "MockLLMProvider",
    "OpenAIProvider",
    "TemplateDefinition",
    "TemplateLibrary",
    "assemble_prompt",
    "build_extraction_context",
    "build_profile_context",
    "get_llm_provider",
]
