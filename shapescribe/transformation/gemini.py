"""Gemini REST engine for sending prompts and streaming responses."""

import json
import asyncio
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import aiohttp

from ..errors import NetworkError, ProviderError, StreamError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


def inline_audio_part(data: str, mime_type: str) -> Dict[str, Any]:
    return {"inlineData": {"mimeType": mime_type, "data": data}}


def extract_text(payload: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate in a response payload."""
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)


class GeminiEngine:
    """Thin client for the Gemini ``generateContent`` endpoints."""

    def __init__(self,
                 api_key: str,
                 model: str = DEFAULT_MODEL,
                 base_url: str = DEFAULT_BASE_URL,
                 timeout: float = 120.0):
        """Initialize Gemini engine.

        Args:
            api_key: Gemini API key
            model: Model identifier
            base_url: API root, up to and including the version segment
            timeout: Seconds to wait for any single read from the provider
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=None, sock_connect=30, sock_read=timeout)

        logger.info(f"GeminiEngine initialized with model: {model}")

    def _headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _body(self, parts: List[Dict[str, Any]], system_instruction: Optional[str]) -> Dict[str, Any]:
        body: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if system_instruction:
            body["systemInstruction"] = {"parts": [text_part(system_instruction)]}
        return body

    async def generate_content(self, parts: List[Dict[str, Any]], system_instruction: Optional[str] = None) -> str:
        """Send a single-shot request and return the full response text.

        Raises:
            ProviderError: If the API answers with a non-success status
            NetworkError: If the API cannot be reached
        """
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, headers=self._headers(), json=self._body(parts, system_instruction)) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise ProviderError(f"Gemini API error: {response.status} - {error_text}", response.status)
                    payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Gemini request failed: {e}") from e

        return extract_text(payload)

    async def stream_generate_content(
        self,
        parts: List[Dict[str, Any]],
        system_instruction: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """Stream text deltas as the provider produces them.

        Closing the iterator early closes the underlying HTTP response.

        Raises:
            ProviderError: If the API rejects the request
            StreamError: If the stream breaks after it started
        """
        url = f"{self.base_url}/models/{self.model}:streamGenerateContent"
        body = self._body(parts, system_instruction)
        chunks = 0

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, params={"alt": "sse"}, headers=self._headers(), json=body) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise ProviderError(f"Gemini API error: {response.status} - {error_text}", response.status)

                    async for raw_line in response.content:
                        line = raw_line.decode("utf-8").strip()
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:"):].strip()
                        if not data:
                            continue
                        try:
                            payload = json.loads(data)
                        except ValueError as e:
                            raise StreamError(f"Malformed stream event: {data[:80]}") from e
                        if "error" in payload:
                            message = (payload["error"] or {}).get("message", "unknown error")
                            raise StreamError(f"Gemini stream error: {message}")

                        text = extract_text(payload)
                        if text:
                            chunks += 1
                            yield text
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            if chunks:
                raise StreamError(f"Gemini stream interrupted after {chunks} chunks: {e}") from e
            raise NetworkError(f"Gemini request failed: {e}") from e

        logger.debug(f"Gemini stream finished: {chunks} chunks")
