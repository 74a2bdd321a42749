"""Content formats and the asset types they produce."""

from enum import Enum


class AssetType(str, Enum):
    """Kinds of generated asset."""

    NEWSLETTER = "newsletter"
    BLOG_POST = "blog_post"
    LINKEDIN_POST = "linkedin_post"
    TWITTER_POST = "twitter_post"
    VIDEO_SCRIPT = "video_script"
    PODCAST_SEGMENT = "podcast_segment"


class ContentFormat(str, Enum):
    """A format a tenant can ask to have generated.

    Every member knows which asset type it is stored as and which prompt
    template renders it, so a configured format can never be unmapped.
    """

    def __new__(cls, key: str, asset_type: AssetType) -> "ContentFormat":
        obj = str.__new__(cls, key)
        obj._value_ = key
        obj.asset_type = asset_type
        obj.template_key = key
        return obj

    LINKEDIN_POST = ("linkedin_post", AssetType.LINKEDIN_POST)
    LINKEDIN_POV = ("linkedin_pov", AssetType.LINKEDIN_POST)
    TWITTER_POST = ("twitter_post", AssetType.TWITTER_POST)
    TWITTER_THREAD = ("twitter_thread", AssetType.TWITTER_POST)
    BLOG_POST = ("blog_post", AssetType.BLOG_POST)
    NEWSLETTER = ("newsletter", AssetType.NEWSLETTER)
    VIDEO_SCRIPT = ("video_script", AssetType.VIDEO_SCRIPT)
    PODCAST_SEGMENT = ("podcast_segment", AssetType.PODCAST_SEGMENT)

    @classmethod
    def parse(cls, key: str) -> "ContentFormat":
        """Look up a format by its key, raising ValueError if unknown."""
        return cls(key.strip().lower())
