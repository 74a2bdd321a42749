"""Assemble generation prompts from extractions."""

from typing import Sequence

from ..models import ExtractionWithSource


def build_extraction_context(extractions: Sequence[ExtractionWithSource]) -> str:
    """Render extractions as numbered blocks separated by rules."""
    blocks = []
    for i, extraction in enumerate(extractions, start=1):
        header = f"[{i}] {extraction.source_title or 'Untitled'} ({extraction.source_type or 'unknown'})"
        key_points = "\n".join(f"  - {p}" for p in extraction.key_points)
        topics = ", ".join(extraction.topics)
        blocks.append(
            f"{header}\nSummary: {extraction.summary or ''}\nKey Points:\n{key_points}\nTopics: {topics}"
        )
    return "\n\n---\n\n".join(blocks)


def assemble_prompt(profile_context: str, prompt: str, extraction_context: str) -> str:
    """Profile first, then the format prompt, then the material."""
    full_prompt = f"{profile_context}\n" if profile_context else ""
    return f"{full_prompt}{prompt}\n\n{extraction_context}"
