"""Fetcher interface and content hashing."""

import hashlib
from abc import ABC, abstractmethod
from typing import List

from ..models import Source
from .models import FetchedItem


def normalize_text(text: str) -> str:
    """Normalize text for hashing."""
    # Remove extra whitespace and normalize line endings
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return "\n".join(lines).lower()


def compute_content_hash(text: str) -> str:
    """Compute hash of normalized text."""
    return hashlib.sha256(normalize_text(text).encode()).hexdigest()


class Fetcher(ABC):
    """Fetches a bounded list of items from a source."""

    @abstractmethod
    async def fetch(self, source: Source, limit: int) -> List[FetchedItem]:
        """
        Fetch items from a source.

        Args:
            source: Source to fetch
            limit: Maximum number of items to return

        Returns:
            At most ``limit`` fetched items
        """
