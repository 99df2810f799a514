"""Batch speaker diarization through the upload → transcribe → poll workflow."""

import time
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Iterator, Optional, Union

import aiohttp
from pydantic import ValidationError

from .base import (
    DiarizationProxyClient,
    TRANSPORT_ERRORS,
    UPLOAD_PATH,
    TRANSCRIBE_PATH,
    STATUS_PATH,
)
from ..errors import (
    NetworkError,
    UploadError,
    JobStartError,
    TranscriptionError,
    PollTimeoutError,
)
from ..models.transcription import DiarizedTranscript, Utterance
from ..models.wire import UploadResponse, JobResponse, StatusResponse

logger = logging.getLogger(__name__)

AudioSource = Union[bytes, bytearray, str, Path]
ProgressCallback = Callable[[str], None]


@dataclass
class PollPolicy:
    """Delay schedule for job status polling.

    The defaults poll every ``interval`` seconds until the job reaches a
    terminal status. Setting ``backoff`` above 1 multiplies each following
    delay up to ``max_interval``, and a ``max_duration`` makes polling give
    up with PollTimeoutError once the next sleep would pass it.
    """
    interval: float = 3.0
    backoff: float = 1.0
    max_interval: float = 3.0
    max_duration: Optional[float] = None

    def delays(self) -> Iterator[float]:
        delay = self.interval
        while True:
            yield delay
            delay = min(delay * self.backoff, max(self.max_interval, self.interval))


class BatchTranscriptionClient(DiarizationProxyClient):
    """Uploads audio, starts a diarization job and polls it to completion."""

    def __init__(self,
                 base_url: str = "",
                 poll_policy: Optional[PollPolicy] = None,
                 timeout: float = 60.0,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize the batch client.

        Args:
            base_url: Origin serving the proxy endpoints
            poll_policy: Delay schedule for status polling
            timeout: Per-request timeout in seconds
            sleep: Coroutine used to wait between polls
            clock: Monotonic clock used for the polling deadline
        """
        super().__init__(base_url, timeout)
        self.poll_policy = poll_policy or PollPolicy()
        self._sleep = sleep
        self._clock = clock

    async def upload(self, audio: AudioSource) -> str:
        """Upload raw audio bytes and return the provider's upload reference."""
        async with self._session() as session:
            return await self._upload(session, _read_audio(audio))

    async def start_job(self, upload_url: str) -> str:
        """Start a diarization job for an uploaded file and return its id."""
        async with self._session() as session:
            return await self._start_job(session, upload_url)

    async def poll(self, job_id: str) -> StatusResponse:
        """Poll a job until it completes.

        Raises:
            TranscriptionError: The job reported ``error`` or polling was rejected
            PollTimeoutError: The job outlived ``poll_policy.max_duration``
            NetworkError: The proxy could not be reached
        """
        async with self._session() as session:
            return await self._poll(session, job_id)

    async def transcribe_with_diarization(
        self,
        audio: AudioSource,
        on_progress: Optional[ProgressCallback] = None,
    ) -> DiarizedTranscript:
        """Run upload, job start and polling in sequence.

        Failures never propagate: any error is returned as a transcript with
        ``ERROR`` status carrying the message. Callers branch on
        ``result.status``.

        Args:
            audio: Raw audio bytes or a path to an audio file
            on_progress: Receives a human-readable label before each stage

        Returns:
            Completed or failed DiarizedTranscript
        """
        def report(stage: str) -> None:
            logger.info(stage)
            if on_progress:
                on_progress(stage)

        try:
            data = _read_audio(audio)
            async with self._session() as session:
                report("Uploading audio...")
                upload_url = await self._upload(session, data)

                report("Starting speaker detection...")
                job_id = await self._start_job(session, upload_url)

                report("Processing audio (this may take a moment)...")
                result = await self._poll(session, job_id)
        except Exception as e:
            logger.error(f"Diarized transcription failed: {e}")
            return DiarizedTranscript.failed(str(e))

        utterances = [
            Utterance(
                speaker=u.speaker,
                text=u.text,
                start=u.start,
                end=u.end,
                confidence=u.confidence,
            )
            for u in (result.utterances or [])
        ]
        transcript = DiarizedTranscript.completed(result.text or "", utterances)
        logger.info(f"Diarization complete: {len(transcript.utterances)} utterances, "
                    f"speakers={list(transcript.speakers)}")
        return transcript

    async def _upload(self, session: aiohttp.ClientSession, data: bytes) -> str:
        logger.debug(f"Uploading {len(data)} bytes")
        try:
            async with session.post(self._url(UPLOAD_PATH), data=data) as response:
                if response.status >= 400:
                    raise UploadError(await self._error_message(response, "Upload failed"))
                payload = await response.json(content_type=None)
        except TRANSPORT_ERRORS as e:
            raise NetworkError(f"Upload failed: {e}") from e

        try:
            return UploadResponse.model_validate(payload).upload_url
        except ValidationError as e:
            raise UploadError("Upload response did not include an upload_url") from e

    async def _start_job(self, session: aiohttp.ClientSession, upload_url: str) -> str:
        try:
            async with session.post(self._url(TRANSCRIBE_PATH), json={"audio_url": upload_url}) as response:
                if response.status >= 400:
                    raise JobStartError(await self._error_message(response, "Transcription start failed"))
                payload = await response.json(content_type=None)
        except TRANSPORT_ERRORS as e:
            raise NetworkError(f"Transcription start failed: {e}") from e

        try:
            job_id = JobResponse.model_validate(payload).id
        except ValidationError as e:
            raise JobStartError("Transcription start response did not include an id") from e
        logger.info(f"Started diarization job {job_id}")
        return job_id

    async def _fetch_status(self, session: aiohttp.ClientSession, job_id: str) -> StatusResponse:
        try:
            async with session.get(self._url(STATUS_PATH), params={"id": job_id}) as response:
                if response.status >= 400:
                    raise TranscriptionError(await self._error_message(response, "Polling failed"))
                payload = await response.json(content_type=None)
        except TRANSPORT_ERRORS as e:
            raise NetworkError(f"Polling failed: {e}") from e

        try:
            return StatusResponse.model_validate(payload)
        except ValidationError as e:
            raise TranscriptionError("Polling returned an unreadable status") from e

    async def _poll(self, session: aiohttp.ClientSession, job_id: str) -> StatusResponse:
        policy = self.poll_policy
        started = self._clock()
        delays = policy.delays()
        polls = 0

        while True:
            status = await self._fetch_status(session, job_id)
            polls += 1

            if status.status == "completed":
                logger.info(f"Job {job_id} completed after {polls} polls")
                return status
            if status.status == "error":
                raise TranscriptionError(f"Transcription failed: {status.error}")

            delay = next(delays)
            elapsed = self._clock() - started
            if policy.max_duration is not None and elapsed + delay > policy.max_duration:
                raise PollTimeoutError(
                    f"Transcription did not finish within {policy.max_duration:.0f}s "
                    f"(last status: {status.status})"
                )
            logger.debug(f"Job {job_id} status={status.status}; next poll in {delay:.1f}s")
            await self._sleep(delay)


def _read_audio(audio: AudioSource) -> bytes:
    if isinstance(audio, (bytes, bytearray)):
        return bytes(audio)
    return Path(audio).read_bytes()
