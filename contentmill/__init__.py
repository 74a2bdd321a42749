"""Content Mill - background crawl, extraction and generation pipeline."""

__version__ = "0.1.0"
