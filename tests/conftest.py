"""Pytest configuration and fixtures for ShapeScribe tests."""

import asyncio
import json
import logging
import uuid
from pathlib import Path
from unittest.mock import Mock, patch

import numpy as np
import pytest
import yaml
from aiohttp import web
from aiohttp.test_utils import TestServer


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network or hardware")
    config.addinivalue_line("markers", "integration: tests that run several components against local fake services")


@pytest.fixture
def temp_data_dir(tmp_path):
    """Temporary directory for test data."""
    return str(tmp_path)


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML config file and return its path.

    The returned function merges ``overrides`` section by section on top of a
    minimal working configuration.
    """
    def _write(overrides=None, name="shapescribe.yaml"):
        config = {
            "gemini": {"api_key": "test-key", "model": "gemini-2.0-flash"},
            "assembly": {"proxy_base_url": "http://127.0.0.1:1"},
            "audio": {"sample_rate": 16000, "chunk_size": 4096, "channels": 1},
            "transform": {"format": "EMAIL", "summary_length": "MEDIUM", "tone": "professional", "language": "en"},
            "output": {"directory": "output"},
            "logging": {"level": "INFO", "file_path": "logs/shapescribe.log", "console_output": False},
        }
        for section, values in (overrides or {}).items():
            config.setdefault(section, {}).update(values)
        path = tmp_path / name
        path.write_text(yaml.safe_dump(config), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def sample_float_frame():
    """One 4096-sample float32 frame of a 440 Hz sine wave at half scale."""
    sample_rate = 16000
    t = np.arange(4096) / sample_rate
    return (0.5 * np.sin(2 * np.pi * 440 * t)).astype(np.float32)


@pytest.fixture
def unique_topic():
    """A pub/sub topic name no other test uses."""
    return f"test_{uuid.uuid4().hex}"


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Silent float32 audio
        mock_stream.read.return_value = np.zeros(1024, dtype=np.float32).tobytes()
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def serve():
    """Run ``scenario(base_url)`` against an aiohttp app on a local port.

    Returns whatever the scenario coroutine returns.
    """
    def _serve(app: web.Application, scenario):
        async def main():
            server = TestServer(app)
            await server.start_server()
            try:
                return await scenario(f"http://{server.host}:{server.port}")
            finally:
                await server.close()

        return asyncio.run(main())

    return _serve


@pytest.fixture
def eventually():
    """Await until ``predicate()`` holds, failing after ``timeout`` seconds."""
    async def _eventually(predicate, timeout=3.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.01)

    return _eventually


class FakeProxy:
    """In-memory stand-in for the ``/api/assembly-*`` proxy endpoints."""

    def __init__(self, statuses=None, token="rt-token"):
        self.statuses = list(statuses or [{"status": "completed", "text": "", "utterances": []}])
        self.token = token
        self.uploads = []
        self.jobs = []
        self.polls = 0
        self.upload_response = None
        self.token_response = None

    def add_routes(self, app: web.Application) -> None:
        app.router.add_post("/api/assembly-token", self.handle_token)
        app.router.add_post("/api/assembly-upload", self.handle_upload)
        app.router.add_post("/api/assembly-transcribe", self.handle_transcribe)
        app.router.add_get("/api/assembly-status", self.handle_status)

    def app(self) -> web.Application:
        app = web.Application()
        self.add_routes(app)
        return app

    async def handle_token(self, request):
        if self.token_response is not None:
            return self.token_response
        return web.json_response({"token": self.token})

    async def handle_upload(self, request):
        self.uploads.append(await request.read())
        if self.upload_response is not None:
            return self.upload_response
        return web.json_response({"upload_url": "https://cdn.example.com/upload/abc"})

    async def handle_transcribe(self, request):
        self.jobs.append(await request.json())
        return web.json_response({"id": "job-1"})

    async def handle_status(self, request):
        assert request.query["id"] == "job-1"
        index = min(self.polls, len(self.statuses) - 1)
        self.polls += 1
        return web.json_response(self.statuses[index])


class FakeGemini:
    """In-memory stand-in for the Gemini ``generateContent`` endpoints."""

    def __init__(self, fragments=None, full_text=None):
        self.fragments = list(fragments or [])
        self.full_text = full_text if full_text is not None else "".join(self.fragments)
        self.requests = []
        self.stream_events = None

    def add_routes(self, app: web.Application) -> None:
        app.router.add_post("/v1beta/models/{action}", self.handle)

    def app(self) -> web.Application:
        app = web.Application()
        self.add_routes(app)
        return app

    @staticmethod
    def payload(text):
        return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}

    async def handle(self, request):
        body = await request.json()
        self.requests.append({
            "action": request.match_info["action"],
            "query": dict(request.query),
            "api_key": request.headers.get("x-goog-api-key"),
            "body": body,
        })
        if request.match_info["action"].endswith(":streamGenerateContent"):
            return await self._stream(request)
        if not self.full_text:
            return web.json_response({"candidates": []})
        return web.json_response(self.payload(self.full_text))

    async def _stream(self, request):
        response = web.StreamResponse(headers={"Content-Type": "text/event-stream"})
        await response.prepare(request)
        events = self.stream_events
        if events is None:
            events = [self.payload(fragment) for fragment in self.fragments]
        for event in events:
            data = event if isinstance(event, str) else json.dumps(event)
            await response.write(f"data: {data}\r\n\r\n".encode("utf-8"))
        await response.write_eof()
        return response


@pytest.fixture
def fake_proxy():
    return FakeProxy


@pytest.fixture
def fake_gemini():
    return FakeGemini


class FakeCapture:
    """Capture double that records lifecycle calls and emits frames on demand."""

    def __init__(self, error=None):
        self.error = error
        self.callback = None
        self.started = False
        self.detached = False
        self.stop_calls = 0
        self.chunks = 0

    def factory(self, callback):
        self.callback = callback
        return self

    def start_recording(self):
        if self.error is not None:
            raise self.error
        self.started = True

    def detach(self):
        self.detached = True

    def stop_recording(self):
        self.stop_calls += 1

    def get_recording_stats(self):
        from shapescribe.models.audio import AudioStats
        return AudioStats(
            is_recording=self.started and self.stop_calls == 0,
            duration_seconds=self.chunks * 0.256,
            sample_rate=16000,
            chunk_size=4096,
            total_chunks=self.chunks,
        )

    def emit(self, samples, sequence_number=1):
        from shapescribe.models.events import AudioEvent
        self.chunks += 1
        self.callback(AudioEvent(
            chunk_id=f"chunk_{sequence_number}",
            samples=np.asarray(samples, dtype=np.float32),
            timestamp=0.0,
            sequence_number=sequence_number,
        ))


@pytest.fixture
def fake_capture():
    return FakeCapture
