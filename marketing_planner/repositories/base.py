"""
Base repository interfaces.
"""

from abc import ABC, abstractmethod
from typing import Optional


class DraftMedium(ABC):
    """Abstract string-keyed store that questionnaire drafts are written to."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the raw text stored under a key.

        Args:
            key: Draft key

        Returns:
            Stored text, or None if nothing is stored

        Raises:
            Any backend error; callers decide how to recover.
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> bool:
        """
        Store text under a key, replacing any previous value.

        Args:
            key: Draft key
            value: Serialized draft

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove the value stored under a key."""
        pass

    async def close(self):
        """Release backend resources, if any."""
        return None

    def generate_draft_key(self, prefix: str, *args) -> str:
        """Generate a draft key from prefix and arguments."""
        key_parts = [prefix] + [str(arg) for arg in args]
        return ":".join(key_parts)
