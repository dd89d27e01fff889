import httpx
import pytest

from tests.conftest import FAKE_OPENAI_URL
from unified_dash.core.exceptions import CapabilityError
from unified_dash.services.intent.openai_client import OpenAIIntentBackend

PROMPT = "Available services: langfuse: Langfuse (ai)"


@pytest.fixture
def backend(fake_openai_client):
    return OpenAIIntentBackend(
        base_url=FAKE_OPENAI_URL,
        api_key="sk-test",
        model="gpt-5",
        max_tokens=500,
        http_client=fake_openai_client,
    )


class TestClassify:
    async def test_returns_decoded_object(self, backend):
        result = await backend.classify(PROMPT, "open langfuse")
        assert result["intent"] == "open_service"
        assert result["serviceId"] == "langfuse"

    async def test_request_shape(self, backend):
        from tests.mocks.fake_openai import app as fake_app

        await backend.classify(PROMPT, "how are things?")
        sent = fake_app.state.requests[-1]
        assert sent["model"] == "gpt-5"
        assert sent["response_format"] == {"type": "json_object"}
        assert sent["max_completion_tokens"] == 500
        assert sent["messages"][0] == {"role": "system", "content": PROMPT}
        assert sent["messages"][1] == {"role": "user", "content": "how are things?"}

    async def test_empty_object_passes_through(self, backend):
        assert await backend.classify(PROMPT, "sparse") == {}

    async def test_non_json_content(self, backend):
        with pytest.raises(CapabilityError, match="malformed JSON"):
            await backend.classify(PROMPT, "garbage")

    async def test_non_object_json(self, backend):
        with pytest.raises(CapabilityError, match="non-object"):
            await backend.classify(PROMPT, "list them")

    async def test_server_error(self, backend):
        with pytest.raises(CapabilityError, match="500"):
            await backend.classify(PROMPT, "explode")

    async def test_connection_refused(self):
        backend = OpenAIIntentBackend(base_url="http://127.0.0.1:1/v1", api_key="sk-test")
        try:
            with pytest.raises(CapabilityError):
                await backend.classify(PROMPT, "open langfuse")
        finally:
            await backend.close()

    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        backend = OpenAIIntentBackend(base_url=FAKE_OPENAI_URL, api_key="sk-test", http_client=client)
        with pytest.raises(CapabilityError, match="timed out"):
            await backend.classify(PROMPT, "status")
        await client.aclose()

    async def test_missing_choices(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"choices": []})))
        backend = OpenAIIntentBackend(base_url=FAKE_OPENAI_URL, api_key="sk-test", http_client=client)
        with pytest.raises(CapabilityError, match="no choices"):
            await backend.classify(PROMPT, "status")
        await client.aclose()

    async def test_sends_bearer_token(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["authorization"]
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"choices": [{"message": {"content": "{}"}}]})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        backend = OpenAIIntentBackend(base_url="http://llm.local/v1/", api_key="sk-abc", http_client=client)
        await backend.classify(PROMPT, "status")
        assert seen["auth"] == "Bearer sk-abc"
        assert seen["url"] == "http://llm.local/v1/chat/completions"
        await client.aclose()


class TestClose:
    async def test_shared_client_left_open(self, backend, fake_openai_client):
        await backend.close()
        assert not fake_openai_client.is_closed
