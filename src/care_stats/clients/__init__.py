"""External service clients."""

from .base import (
    TextGenerator,
    TextGenerationError,
    AuthenticationError,
    RateLimitError,
    NetworkError,
    ResponseFormatError,
)
from .gemini import GeminiClient

__all__ = [
    "TextGenerator",
    "TextGenerationError",
    "AuthenticationError",
    "RateLimitError",
    "NetworkError",
    "ResponseFormatError",
    "GeminiClient",
]
