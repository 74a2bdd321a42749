"""LLM provider interface and implementations."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError
from rich.console import Console

from ..config import Config
from ..errors import ConfigurationError, ExtractionError, GenerationError
from .models import GeneratedContent, Insight

console = Console()

EXTRACTION_PROMPT = """You are analyzing content to extract key information. Given the following content, provide:

1. A concise summary (2-3 paragraphs max)
2. Key points (5-10 bullet points of the most important takeaways)
3. Topics (3-7 topic tags that categorize this content)

Respond in JSON format exactly like this:
{
  "summary": "...",
  "key_points": ["point 1", "point 2"],
  "topics": ["topic1", "topic2"]
}

Content to analyze:
"""

KIND_HINTS = {
    "meeting": "[This is a meeting transcript. Focus on decisions, action items, and key discussion points.]",
    "voice_note": "[This is a personal voice note. Focus on the main ideas and any actionable thoughts.]",
    "trend": "[This is a trend/signal from external sources. Focus on the main insight and why it matters.]",
    "manual_note": "[This is a manually written note. Extract the core message and key points.]",
    "document": "[This is a document/article. Summarize the main argument and key takeaways.]",
}

JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def parse_json_response(text: str) -> Dict[str, Any]:
    """Pull the first JSON object out of a model response."""
    match = JSON_OBJECT.search(text or "")
    if not match:
        raise ValueError("Could not parse JSON from response")
    return json.loads(match.group(0))


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Implements both the insight extractor and the content generator.
    """

    model_id: str = "unknown"

    @abstractmethod
    async def extract(self, text: str, kind_hint: str) -> Insight:
        """
        Extract a summary, key points and topics from content.

        Args:
            text: Raw content
            kind_hint: Content kind (document, meeting, voice_note, trend, manual_note)

        Returns:
            Extracted insight

        Raises:
            ExtractionError: If the model response is unusable
        """

    @abstractmethod
    async def generate(self, prompt: str) -> GeneratedContent:
        """
        Generate a titled piece of content from a fully rendered prompt.

        Raises:
            GenerationError: If the model response is unusable
        """


class OpenAIProvider(LLMProvider):
    """OpenAI-compatible implementation of LLM provider."""

    max_content_chars = 24000

    def __init__(
        self,
        api_key: Optional[str],
        extraction_model: str = "gpt-4o-mini",
        generation_model: str = "gpt-4o",
        base_url: Optional[str] = None,
        timeout: float = 120.0,
    ) -> None:
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            extraction_model: Model used for extraction
            generation_model: Model used for generation
            base_url: Custom base URL (for Ollama or testing)
            timeout: Request timeout in seconds
        """
        if not api_key:
            raise ConfigurationError("Missing OpenAI API key")

        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.extraction_model = extraction_model
        self.generation_model = generation_model
        self.model_id = extraction_model

    async def _complete(self, model: str, prompt: str, max_tokens: int, temperature: float) -> str:
        response = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ValueError("No text response from model")
        return content

    async def extract(self, text: str, kind_hint: str) -> Insight:
        """Extract insight using OpenAI."""
        if len(text) > self.max_content_chars:
            text = text[: self.max_content_chars] + "..."

        prompt = f"{EXTRACTION_PROMPT}{KIND_HINTS.get(kind_hint, '')}\n\n{text}"
        try:
            raw = await self._complete(self.extraction_model, prompt, max_tokens=2000, temperature=0.3)
            return Insight(**parse_json_response(raw))
        except (OpenAIError, ValueError, ValidationError) as e:
            raise ExtractionError(str(e)) from e

    async def generate(self, prompt: str) -> GeneratedContent:
        """Generate content using OpenAI."""
        try:
            raw = await self._complete(self.generation_model, prompt, max_tokens=4000, temperature=0.7)
            return GeneratedContent(**parse_json_response(raw))
        except (OpenAIError, ValueError, ValidationError) as e:
            raise GenerationError(str(e)) from e


class MockLLMProvider(LLMProvider):
    """Mock LLM provider for local runs and testing."""

    model_id = "mock"

    def __init__(self) -> None:
        """Initialize mock provider."""
        self.calls: List[tuple] = []

    async def extract(self, text: str, kind_hint: str) -> Insight:
        """Mock insight extraction."""
        self.calls.append(("extract", kind_hint))
        first_line = next((line.strip() for line in text.splitlines() if line.strip()), "")
        return Insight(
            summary=f"Mock summary of '{first_line[:50]}'",
            key_points=["Key technical details and implications", "Business impact and next steps"],
            topics=[kind_hint],
        )

    async def generate(self, prompt: str) -> GeneratedContent:
        """Mock content generation."""
        self.calls.append(("generate", len(prompt)))
        return GeneratedContent(
            title="Mock draft",
            content="[Mock content based on this week's extractions]",
        )


def get_llm_provider(config: Config) -> LLMProvider:
    """Build the configured LLM provider; missing credentials fail here."""
    llm_config = config.get_llm_config()
    provider = llm_config.get("provider")

    if provider == "openai":
        return OpenAIProvider(
            api_key=llm_config.get("api_key"),
            extraction_model=llm_config["extraction_model"],
            generation_model=llm_config["generation_model"],
            base_url=llm_config.get("base_url"),
            timeout=llm_config["timeout"],
        )
    if provider == "mock":
        console.print("[yellow]Warning: Using mock LLM provider.[/yellow]")
        return MockLLMProvider()

    raise ConfigurationError(f"Unknown LLM provider: {provider}")
