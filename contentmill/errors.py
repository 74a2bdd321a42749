"""Exceptions raised by Content Mill."""


class ContentmillError(Exception):
    """Base class for all Content Mill errors."""


class ConfigurationError(ContentmillError):
    """Missing credentials or invalid configuration."""


class RunInProgressError(ContentmillError):
    """A pipeline run is already in flight."""

    def __init__(self, message: str = "Job already running") -> None:
        super().__init__(message)


class FetchError(ContentmillError):
    """A source could not be fetched."""


class ExtractionError(ContentmillError):
    """The insight extractor returned no usable result."""


class GenerationError(ContentmillError):
    """The content generator returned no usable result."""
