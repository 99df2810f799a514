"""Shared plumbing for the same-origin diarization proxy endpoints."""

import asyncio
import logging

import aiohttp
from pydantic import ValidationError

from ..errors import TokenError
from ..models.wire import ErrorBody, TokenResponse

logger = logging.getLogger(__name__)

TOKEN_PATH = "/api/assembly-token"
UPLOAD_PATH = "/api/assembly-upload"
TRANSCRIBE_PATH = "/api/assembly-transcribe"
STATUS_PATH = "/api/assembly-status"

# Transport failures surfaced as NetworkError, or TokenError for token requests
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class DiarizationProxyClient:
    """Base client for the proxy that shields the diarization provider's credentials."""

    def __init__(self, base_url: str = "", timeout: float = 60.0):
        """Initialize the proxy client.

        Args:
            base_url: Origin serving the ``/api/assembly-*`` endpoints
            timeout: Total timeout for each HTTP request in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(timeout=self.timeout)

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse, default: str) -> str:
        """Extract the provider's ``error`` field from a failed response, if any."""
        try:
            body = ErrorBody.model_validate(await response.json(content_type=None))
        except (ValueError, TypeError):
            return default
        return body.error or default

    async def get_realtime_token(self) -> str:
        """Get a temporary token for realtime streaming.

        Raises:
            TokenError: If the proxy refuses, is unreachable or returns no token
        """
        try:
            async with self._session() as session:
                async with session.post(self._url(TOKEN_PATH), json={}) as response:
                    if response.status >= 400:
                        raise TokenError(await self._error_message(response, "Failed to get realtime token"))
                    payload = await response.json(content_type=None)
        except TRANSPORT_ERRORS as e:
            raise TokenError(f"Failed to get realtime token: {e}") from e

        try:
            return TokenResponse.model_validate(payload).token
        except ValidationError as e:
            raise TokenError("Failed to get realtime token") from e

    async def check_available(self) -> bool:
        """Check whether the proxy is configured by asking it for a token."""
        try:
            async with self._session() as session:
                async with session.post(self._url(TOKEN_PATH), json={}) as response:
                    available = response.status < 400
        except TRANSPORT_ERRORS as e:
            logger.info(f"Diarization proxy unavailable: {e}")
            return False
        logger.info(f"Diarization proxy available: {available}")
        return available
