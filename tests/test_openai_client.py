"""
Tests for the OpenAI Responses clients and API key resolution, against httpx.MockTransport.
"""

import base64
import json

import httpx
import pytest

from app.core.credentials import CredentialResolver
from app.core.errors import MissingCredential, NetworkFailure, NoContent
from app.services.openai_responses import OpenAIImageClient, OpenAIResponsesClient
from tests.conftest import PNG_BYTES, make_settings


def message_output(text):
    return {
        "output": [
            {"type": "file_search_call", "status": "completed"},
            {"type": "message", "content": [{"type": "output_text", "text": text}]},
        ]
    }


def attached_files(payload):
    return [c["file_id"] for c in payload["input"][0]["content"] if c["type"] == "input_file"]


def text_client(settings, handler):
    transport = httpx.MockTransport(handler)
    return OpenAIResponsesClient(settings, CredentialResolver(settings), transport=transport)


class TestNarrowingPlan:
    def test_two_files(self):
        assert OpenAIResponsesClient.narrowing_plan(["a", "b"], 3) == [["a", "b"], ["a"], []]

    def test_single_file_kept_on_second_attempt(self):
        assert OpenAIResponsesClient.narrowing_plan(["a"], 3) == [["a"], ["a"], []]

    def test_extra_attempts_use_no_files(self):
        assert OpenAIResponsesClient.narrowing_plan(["a", "b"], 4)[3] == []


class TestGenerateText:
    @pytest.mark.asyncio
    async def test_success_returns_message_text(self):
        settings = make_settings()
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=message_output('{"diet": "Chouta"}'))

        text = await text_client(settings, handler).generate_text("prompt")

        assert text == '{"diet": "Chouta"}'
        assert len(requests) == 1
        assert requests[0].headers["Authorization"] == "Bearer test-key"
        payload = json.loads(requests[0].content)
        assert payload["model"] == "gpt-5"
        assert payload["reasoning"] == {"effort": "medium"}
        assert payload["tools"][0]["type"] == "file_search"
        assert payload["tools"][0]["max_num_results"] == 15
        assert payload["input"][0]["content"][0] == {"type": "input_text", "text": "prompt"}
        assert attached_files(payload) == ["file-lore"]
        assert "Return ONLY a valid JSON object" in payload["instructions"]

    @pytest.mark.asyncio
    async def test_retries_narrow_reference_files(self):
        settings = make_settings(BIO_REFERENCE_FILE_IDS=["file-a", "file-b"])
        payloads = []

        def handler(request):
            payloads.append(json.loads(request.content))
            if len(payloads) < 3:
                return httpx.Response(500, text="upstream busy")
            return httpx.Response(200, json=message_output("{}"))

        assert await text_client(settings, handler).generate_text("prompt") == "{}"
        assert [attached_files(p) for p in payloads] == [["file-a", "file-b"], ["file-a"], []]

    @pytest.mark.asyncio
    async def test_all_attempts_failing_raises_network_failure(self):
        settings = make_settings()
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(429, text="rate limited")

        with pytest.raises(NetworkFailure) as exc_info:
            await text_client(settings, handler).generate_text("prompt")

        assert len(calls) == 3
        assert exc_info.value.status == 429
        assert "after 3 attempts" in str(exc_info.value)
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self):
        settings = make_settings()
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json=message_output("ok"))

        assert await text_client(settings, handler).generate_text("prompt") == "ok"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_reply_without_message_is_no_content(self):
        settings = make_settings()

        def handler(request):
            return httpx.Response(200, json={"output": [{"type": "reasoning"}]})

        with pytest.raises(NoContent):
            await text_client(settings, handler).generate_text("prompt")

    @pytest.mark.asyncio
    async def test_non_object_output_items_are_skipped(self):
        settings = make_settings()

        def handler(request):
            return httpx.Response(200, json={"output": ["reasoning", None, 7]})

        with pytest.raises(NoContent):
            await text_client(settings, handler).generate_text("prompt")

    @pytest.mark.asyncio
    async def test_message_found_after_non_object_items(self):
        settings = make_settings()

        def handler(request):
            body = message_output('{"diet": "Flatbread"}')
            body["output"].insert(0, "noise")
            return httpx.Response(200, json=body)

        assert await text_client(settings, handler).generate_text("prompt") == '{"diet": "Flatbread"}'

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_any_request(self):
        settings = make_settings(OPENAI_API_KEY="")
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=message_output("{}"))

        with pytest.raises(MissingCredential):
            await text_client(settings, handler).generate_text("prompt")
        assert calls == []


class TestImageClient:
    @pytest.mark.asyncio
    async def test_decodes_generated_image(self):
        settings = make_settings()
        payloads = []

        def handler(request):
            payloads.append(json.loads(request.content))
            return httpx.Response(200, json={
                "output": [{"type": "image_generation_call", "result": base64.b64encode(PNG_BYTES).decode()}]
            })

        client = OpenAIImageClient(settings, CredentialResolver(settings), transport=httpx.MockTransport(handler))
        assert await client.generate_image("portrait prompt") == PNG_BYTES
        assert payloads[0]["model"] == "gpt-5-nano"
        assert payloads[0]["input"] == "portrait prompt"
        assert payloads[0]["tools"] == [{"type": "image_generation"}]

    @pytest.mark.asyncio
    async def test_reference_image_sent_as_data_url(self):
        settings = make_settings()
        payloads = []

        def handler(request):
            payloads.append(json.loads(request.content))
            return httpx.Response(200, json={
                "output": [{"type": "image_generation_call", "result": base64.b64encode(b"img").decode()}]
            })

        client = OpenAIImageClient(settings, CredentialResolver(settings), transport=httpx.MockTransport(handler))
        await client.generate_image("refine", reference_image=b"\xff\xd8ref", reference_mime="image/jpeg")

        content = payloads[0]["input"][0]["content"]
        assert content[0] == {"type": "input_text", "text": "refine"}
        assert content[1]["type"] == "input_image"
        assert content[1]["image_url"].startswith("data:image/jpeg;base64,")

    @pytest.mark.asyncio
    async def test_failure_is_not_retried(self):
        settings = make_settings()
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, text="boom")

        client = OpenAIImageClient(settings, CredentialResolver(settings), transport=httpx.MockTransport(handler))
        with pytest.raises(NetworkFailure):
            await client.generate_image("portrait")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_no_image_in_reply(self):
        settings = make_settings()

        def handler(request):
            return httpx.Response(200, json={"output": [{"type": "message", "content": []}]})

        client = OpenAIImageClient(settings, CredentialResolver(settings), transport=httpx.MockTransport(handler))
        with pytest.raises(NoContent):
            await client.generate_image("portrait")

    @pytest.mark.asyncio
    async def test_non_object_output_items_in_image_reply(self):
        settings = make_settings()

        def handler(request):
            return httpx.Response(200, json={"output": [["image_generation_call"], "done"]})

        client = OpenAIImageClient(settings, CredentialResolver(settings), transport=httpx.MockTransport(handler))
        with pytest.raises(NoContent):
            await client.generate_image("portrait")


class TestCredentialResolver:
    @pytest.mark.asyncio
    async def test_configured_key_wins(self):
        resolver = CredentialResolver(make_settings(OPENAI_API_KEY="  sk-configured \n"))
        assert await resolver.get_api_key() == "sk-configured"

    @pytest.mark.asyncio
    async def test_key_fetched_once_from_endpoint(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"apiKey": "sk-from-endpoint"})

        settings = make_settings(OPENAI_API_KEY="", API_KEY_ENDPOINT="https://forge.example/.netlify/functions/get-api-key")
        resolver = CredentialResolver(settings, transport=httpx.MockTransport(handler))

        assert await resolver.get_api_key() == "sk-from-endpoint"
        assert await resolver.get_api_key() == "sk-from-endpoint"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_endpoint_failure_is_missing_credential(self):
        def handler(request):
            return httpx.Response(500, text="no")

        settings = make_settings(OPENAI_API_KEY="", API_KEY_ENDPOINT="https://forge.example/key")
        resolver = CredentialResolver(settings, transport=httpx.MockTransport(handler))
        with pytest.raises(MissingCredential):
            await resolver.get_api_key()

    @pytest.mark.asyncio
    async def test_nothing_configured(self):
        with pytest.raises(MissingCredential):
            await CredentialResolver(make_settings(OPENAI_API_KEY="")).get_api_key()
