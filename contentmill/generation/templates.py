"""Prompt templates: code defaults with database override."""

from typing import Dict, NamedTuple, Optional

from rich.console import Console
from rich.markup import escape

from ..db import ContentStore
from ..models import ContentFormat

console = Console()

JSON_SINGLE = """
Respond in JSON format:
{
  "title": "%s",
  "content": "%s"
}

Content to transform:"""


class TemplateDefinition(NamedTuple):
    key: str
    name: str
    description: str
    default_prompt: str


DEFAULT_TEMPLATES: Dict[str, TemplateDefinition] = {
    t.key: t
    for t in (
        TemplateDefinition(
            "linkedin_post",
            "LinkedIn Post",
            "Professional post with hook, insight, and CTA",
            """You are creating a LinkedIn post from the provided content.

The post should:
- Be 150-300 words
- Start with a hook that grabs attention
- Provide genuine value or insight
- End with an engagement prompt or call to action
- Use short paragraphs for mobile readability
- Use at most 3 hashtags, at the end
"""
            + JSON_SINGLE % ("Brief topic/hook (for internal reference)", "Full post content"),
        ),
        TemplateDefinition(
            "linkedin_pov",
            "LinkedIn POV Post",
            "Opinion-driven post with personal perspective",
            """You are creating a LinkedIn point-of-view post from personal experience content.

The post should:
- Lead with a strong opinion
- Back it up with a specific experience or observation
- Explain why it matters
- Be 150-250 words
- End with a question that invites discussion
"""
            + JSON_SINGLE % ("The core POV (for internal reference)", "Full post content"),
        ),
        TemplateDefinition(
            "twitter_post",
            "Twitter/X Post",
            "Concise tweet or short thread",
            """You are creating a Twitter/X post from the provided content.

Write either a single tweet under 280 characters or a thread of 2-4 tweets
separated by ---. Focus on one key insight and keep it punchy.
"""
            + JSON_SINGLE % ("Brief topic (for internal reference)", "Tweet or thread (separate tweets with ---)"),
        ),
        TemplateDefinition(
            "twitter_thread",
            "Twitter/X Thread",
            "Multi-tweet thread breaking down a topic",
            """You are creating a Twitter/X thread from the provided content.

The thread should be 4-8 tweets separated by ---. The first tweet is a hook
that stands alone, the middle tweets break the idea down, the last one gives
the takeaway or a question.
"""
            + JSON_SINGLE % ("Thread topic (for internal reference)", "Full thread (separate tweets with ---)"),
        ),
        TemplateDefinition(
            "blog_post",
            "Blog Post",
            "Long-form article with SEO-friendly structure",
            """You are writing a blog post based on the provided extractions.

The blog post should:
- Have an SEO-friendly title
- Focus on the most compelling theme or insight
- Be 800-1200 words with H2 headers
- End with clear takeaways
"""
            + JSON_SINGLE % ("Blog post title", "Full blog post content in markdown"),
        ),
        TemplateDefinition(
            "newsletter",
            "Weekly Newsletter",
            "Four-section newsletter: Signal, Lever, Market Pulse, Next Move",
            """You are writing a weekly newsletter with exactly four sections:

## The Signal - a personal insight or point of view (150-300 words)
## The Lever - a tool, tactic or system that delivers practical value (100-250 words)
## The Market Pulse - a trend or pattern across external sources (100-200 words)
## The Next Move - a question, resource or light call to action (50-100 words)

Use personal sources (meetings, voice notes, notes) for The Signal and
external sources (documents, trends) for The Market Pulse.
"""
            + JSON_SINGLE % ("Newsletter subject line", "Full newsletter content in markdown"),
        ),
        TemplateDefinition(
            "video_script",
            "Short Video Script",
            "30-90 second script with hook, setup, core and closer",
            """You are writing a short-form video script (30-90 seconds, 75-225 words).

Structure it as HOOK, SETUP, CORE and CLOSER, delivering one clear insight
in a conversational, energetic voice.
"""
            + JSON_SINGLE % ("Video topic", "Full script with sections and markers"),
        ),
        TemplateDefinition(
            "podcast_segment",
            "Podcast Segment",
            "Conversational audio segment outline and script",
            """You are writing a 3-5 minute podcast segment from the provided content.

Open with a cold open, walk through the main story with examples, and close
with a takeaway for the listener. Write for the ear: short sentences, no
visual formatting.
"""
            + JSON_SINGLE % ("Segment title", "Full segment script"),
        ),
    )
}


class TemplateLibrary:
    """Resolve the prompt for a content format."""

    def __init__(self, store: ContentStore) -> None:
        self.store = store

    async def render_prompt(self, fmt: ContentFormat, user_id: str) -> Optional[str]:
        """
        Get the prompt for a format.

        An active database override wins over the code default; an inactive
        override disables the format.

        Returns:
            Prompt text, or None if the format is unknown or disabled
        """
        default = DEFAULT_TEMPLATES.get(fmt.template_key)
        if default is None:
            return None

        override = await self.store.get_template_override(fmt.template_key)
        if override is not None:
            if not override.active:
                console.print(f"[dim]Template {fmt.template_key} disabled (user {escape(user_id)})[/dim]")
                return None
            if override.prompt:
                return override.prompt

        return default.default_prompt
