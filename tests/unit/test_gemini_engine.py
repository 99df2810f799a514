"""Unit tests for the Gemini REST engine against a local fake API."""

import pytest
from aiohttp import web

from shapescribe.errors import ProviderError, StreamError
from shapescribe.transformation.gemini import GeminiEngine, extract_text, inline_audio_part, text_part


def _engine(base_url, **kwargs):
    return GeminiEngine("test-key", base_url=f"{base_url}/v1beta", **kwargs)


async def _collect(stream):
    return [fragment async for fragment in stream]


@pytest.mark.unit
class TestExtractText:
    """Test cases for response payload parsing."""

    def test_joins_parts_of_first_candidate(self):
        payload = {"candidates": [
            {"content": {"parts": [{"text": "Hello "}, {"text": "world"}]}},
            {"content": {"parts": [{"text": "ignored"}]}},
        ]}
        assert extract_text(payload) == "Hello world"

    def test_no_candidates(self):
        assert extract_text({}) == ""
        assert extract_text({"candidates": [{"finishReason": "SAFETY"}]}) == ""


@pytest.mark.unit
class TestGenerateContent:
    """Test cases for single-shot requests."""

    def test_returns_text_and_sends_request(self, serve, fake_gemini):
        api = fake_gemini(full_text="Done.")

        async def scenario(base_url):
            return await _engine(base_url).generate_content([text_part("hi")], "Be brief.")

        assert serve(api.app(), scenario) == "Done."
        request = api.requests[0]
        assert request["action"] == "gemini-2.0-flash:generateContent"
        assert request["api_key"] == "test-key"
        assert request["body"]["contents"] == [{"role": "user", "parts": [{"text": "hi"}]}]
        assert request["body"]["systemInstruction"] == {"parts": [{"text": "Be brief."}]}

    def test_omits_empty_system_instruction(self, serve, fake_gemini):
        api = fake_gemini(full_text="ok")

        async def scenario(base_url):
            return await _engine(base_url).generate_content([inline_audio_part("AAAA", "audio/wav")])

        serve(api.app(), scenario)

        body = api.requests[0]["body"]
        assert "systemInstruction" not in body
        assert body["contents"][0]["parts"] == [{"inlineData": {"mimeType": "audio/wav", "data": "AAAA"}}]

    def test_non_success_status(self, serve):
        async def reject(request):
            return web.json_response({"error": {"message": "API key not valid"}}, status=400)

        app = web.Application()
        app.router.add_post("/v1beta/models/{action}", reject)

        async def scenario(base_url):
            with pytest.raises(ProviderError) as excinfo:
                await _engine(base_url).generate_content([text_part("hi")])
            return excinfo.value

        error = serve(app, scenario)
        assert error.status == 400
        assert "API key not valid" in str(error)


@pytest.mark.unit
class TestStreamGenerateContent:
    """Test cases for SSE streaming."""

    def test_yields_fragments_in_order(self, serve, fake_gemini):
        api = fake_gemini(fragments=["Subject: Launch", "\n\nHi team,", " the date moved."])

        async def scenario(base_url):
            return await _collect(_engine(base_url).stream_generate_content([text_part("x")], "sys"))

        fragments = serve(api.app(), scenario)

        assert fragments == ["Subject: Launch", "\n\nHi team,", " the date moved."]
        assert api.requests[0]["action"] == "gemini-2.0-flash:streamGenerateContent"
        assert api.requests[0]["query"] == {"alt": "sse"}

    def test_skips_events_without_text(self, serve, fake_gemini):
        api = fake_gemini()
        api.stream_events = [
            fake_gemini.payload("one"),
            {"candidates": [{"finishReason": "STOP"}]},
            fake_gemini.payload("two"),
        ]

        async def scenario(base_url):
            return await _collect(_engine(base_url).stream_generate_content([text_part("x")]))

        assert serve(api.app(), scenario) == ["one", "two"]

    def test_error_event_raises_stream_error(self, serve, fake_gemini):
        api = fake_gemini()
        api.stream_events = [fake_gemini.payload("partial"), {"error": {"message": "quota exceeded"}}]
        received = []

        async def scenario(base_url):
            with pytest.raises(StreamError, match="quota exceeded"):
                async for fragment in _engine(base_url).stream_generate_content([text_part("x")]):
                    received.append(fragment)

        serve(api.app(), scenario)
        assert received == ["partial"]

    def test_malformed_event_raises_stream_error(self, serve, fake_gemini):
        api = fake_gemini()
        api.stream_events = ["{not json"]

        async def scenario(base_url):
            with pytest.raises(StreamError):
                await _collect(_engine(base_url).stream_generate_content([text_part("x")]))

        serve(api.app(), scenario)
