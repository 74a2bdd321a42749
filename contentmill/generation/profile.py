"""Content profile context prepended to generation prompts."""

from ..models import TenantSettings


def build_profile_context(settings: TenantSettings) -> str:
    """Render the tenant's content-creator profile, or '' if it is empty."""
    fields = [
        ("Professional Background", settings.professional_background),
        ("Target Audience", settings.target_audience),
        ("Voice & Tone", settings.voice_tone),
        ("Unique Angle", settings.unique_angle),
        ("Signature Elements", settings.signature_elements),
    ]
    pillars = [p for p in settings.content_pillars if p.strip()]
    filled = [(label, value.strip()) for label, value in fields if value and value.strip()]

    if not pillars and not filled:
        return ""

    sections = [
        "=== CONTENT CREATOR PROFILE ===",
        "Use this profile to shape the voice, perspective, and focus of the generated content.\n",
    ]

    if pillars:
        sections.append("**Content Pillars** (core topics to focus on):")
        sections.append("\n".join(f"  - {p}" for p in pillars))
        sections.append("")

    for label, value in filled:
        sections.append(f"**{label}:**")
        sections.append(value)
        sections.append("")

    sections.append("=== END PROFILE ===\n")
    return "\n".join(sections)
