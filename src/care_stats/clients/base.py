"""Interface for external text-generation services.

The statistics summary only needs "prompt in, text out". Each concrete client
translates its service's failures into the exceptions below so callers can
handle them uniformly.
"""

from abc import ABC, abstractmethod


class TextGenerationError(Exception):
    """Base exception for text-generation failures."""
    pass


class AuthenticationError(TextGenerationError):
    """The service rejected the credentials."""
    pass


class RateLimitError(TextGenerationError):
    """Quota or rate limit exceeded."""
    pass


class NetworkError(TextGenerationError):
    """Transport failure, timeout, or unexpected HTTP status."""
    pass


class ResponseFormatError(TextGenerationError):
    """The service answered but the reply carried no usable text."""
    pass


class TextGenerator(ABC):
    """Base class for text-generation clients."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate text for a plain-text prompt.

        Raises:
            TextGenerationError: If the service cannot produce a reply
        """
        pass

    async def aclose(self) -> None:
        """Release any held resources."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
