import asyncio
import json

import httpx
import pytest

from officer_records import llm_client
from officer_records.llm_client import TextGenerationClient, TextGenerationError


def make_client(handler, provider="openai", **kwargs):
    return TextGenerationClient(
        "test-key",
        provider=provider,
        model="test-model",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def generate(client, prompt="Summarize", max_tokens=500):
    async def go():
        try:
            return await client.generate(prompt, max_tokens=max_tokens)
        finally:
            await client.aclose()

    return asyncio.run(go())


class TestChatCompletions:
    def test_sends_single_user_message(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "Well done"}}]})

        assert generate(make_client(handler), max_tokens=800) == "Well done"
        assert seen["url"] == "https://api.openai.com/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"] == {
            "model": "test-model",
            "messages": [{"role": "user", "content": "Summarize"}],
            "max_tokens": 800,
        }

    def test_custom_base_url(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

        generate(make_client(handler, base_url="http://llm.local/v1/chat/completions"))

        assert urls == ["http://llm.local/v1/chat/completions"]

    def test_no_choices_is_empty_text(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        assert generate(make_client(handler)) == ""

    def test_null_content_is_empty_text(self):
        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": {"content": None}}]})

        assert generate(make_client(handler)) == ""

    def test_http_error_raises(self):
        def handler(request):
            return httpx.Response(429, json={"error": "rate limited"})

        with pytest.raises(TextGenerationError, match="429"):
            generate(make_client(handler))

    def test_non_json_raises(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(TextGenerationError):
            generate(make_client(handler))

    def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TextGenerationError):
            generate(make_client(handler))


class TestGemini:
    def test_parses_first_candidate(self):
        seen = {}

        def handler(request):
            seen["key"] = request.url.params.get("key")
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "candidates": [{"content": {"parts": [{"text": "Gemini says hi"}]}}],
            })

        assert generate(make_client(handler, provider="gemini"), max_tokens=500) == "Gemini says hi"
        assert seen["key"] == "test-key"
        assert seen["path"].endswith("/models/test-model:generateContent")
        assert seen["body"]["generationConfig"] == {"maxOutputTokens": 500}
        assert seen["body"]["contents"][0]["parts"][0]["text"] == "Summarize"

    def test_no_candidates_is_empty_text(self):
        def handler(request):
            return httpx.Response(200, json={"candidates": []})

        assert generate(make_client(handler, provider="gemini")) == ""


class TestConfiguration:
    def test_missing_key_rejected(self, monkeypatch):
        monkeypatch.setattr(llm_client.settings, "llm_api_key", None)

        with pytest.raises(ValueError):
            TextGenerationClient()

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValueError):
            TextGenerationClient("k", provider="carrier-pigeon")

    def test_dependency_yields_none_without_key(self, monkeypatch):
        monkeypatch.setattr(llm_client.settings, "llm_api_key", None)

        async def first():
            gen = llm_client.get_text_client()
            value = await gen.__anext__()
            await gen.aclose()
            return value

        assert asyncio.run(first()) is None
