"""Gemini client for generating caregiver-facing summaries."""

import logging
from typing import Any, Dict, Optional

import httpx

from .base import (
    AuthenticationError,
    NetworkError,
    RateLimitError,
    ResponseFormatError,
    TextGenerator,
)


logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = (
    "You are a compassionate, empathetic, and knowledgeable AI nurse assistant "
    "specialized in Alzheimer's care. You help caregivers with advice, coping "
    "strategies, and medical information (with disclaimers). You speak in a warm, "
    "encouraging tone."
)


class GeminiClient(TextGenerator):
    """Thin async client for the Gemini ``generateContent`` endpoint."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/"
    DEFAULT_MODEL = "gemini-2.0-flash"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL,
                 timeout: float = 30.0, base_url: Optional[str] = None,
                 client: Optional[httpx.AsyncClient] = None):
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name, e.g. ``gemini-2.0-flash``
            timeout: Request timeout in seconds
            base_url: Override for the API root
            client: Pre-built httpx client (used by tests)
        """
        if not api_key:
            raise AuthenticationError("Gemini API key is not configured")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url or self.BASE_URL
        headers = {"x-goog-api-key": api_key}
        if client is None:
            client = httpx.AsyncClient(timeout=timeout, headers=headers)
        else:
            client.headers.update(headers)
        self.client = client

    async def aclose(self) -> None:
        await self.client.aclose()

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }

    async def generate(self, prompt: str) -> str:
        """Send ``prompt`` and return the first candidate's text.

        Raises:
            AuthenticationError: If the key is rejected
            RateLimitError: If the quota is exhausted
            NetworkError: If the request fails or times out
            ResponseFormatError: If the reply holds no text
        """
        url = f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"
        logger.debug("Sending prompt to Gemini model %s", self.model)

        try:
            response = await self.client.post(url, json=self._build_payload(prompt))
        except httpx.TimeoutException:
            raise NetworkError("Gemini request timed out")
        except httpx.RequestError as e:
            raise NetworkError(f"Gemini request failed: {e}")

        if response.status_code in (401, 403):
            raise AuthenticationError("Gemini API key was rejected")
        elif response.status_code == 429:
            raise RateLimitError("Gemini API rate limit reached")
        elif response.status_code >= 400:
            raise NetworkError(f"Gemini API error {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError:
            raise ResponseFormatError("Gemini returned a non-JSON body")

        text = self._extract_text(data)
        if not text:
            raise ResponseFormatError("Gemini response contained no text")

        logger.debug("Gemini response received")
        return text

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        """Join the text parts of the first candidate."""
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()
