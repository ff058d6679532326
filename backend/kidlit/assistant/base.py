from abc import ABC, abstractmethod
from typing import Any


class ContentGenerator(ABC):
    """Anything that turns a single prompt into a provider-native payload."""

    @abstractmethod
    async def generate(self, content: str) -> Any:
        """Send ``content`` as one prompt part and return the decoded response body."""
        pass
