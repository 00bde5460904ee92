"""Unit tests for BaseLLMClient retry and error handling."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from casegraph.core.base_llm_client import BaseLLMClient
from casegraph.core.exceptions import APIClientError, APITimeoutError

URL = "https://llm.example.com/v1/chat/completions"


@pytest.fixture
def client():
    return BaseLLMClient(api_key="test-key", base_url=URL, model="test-model", max_retries=3, retry_delay=0)


def _response(status_code: int, payload=None) -> httpx.Response:
    return httpx.Response(status_code, json=payload or {}, request=httpx.Request("POST", URL))


class TestBaseLLMClient:

    @pytest.mark.asyncio
    async def test_complete_returns_message_content(self, client):
        """Test the assistant text is pulled from the first choice."""
        client.call_api = AsyncMock(return_value={"choices": [{"message": {"content": "{\"entities\": []}"}}]})

        content = await client.complete("system", "user")

        assert content == "{\"entities\": []}"
        payload = client.call_api.call_args.kwargs["payload"]
        assert payload["model"] == "test-model"
        assert payload["messages"][1] == {"role": "user", "content": "user"}

    @pytest.mark.asyncio
    async def test_complete_rejects_empty_choices(self, client):
        client.call_api = AsyncMock(return_value={"choices": []})

        with pytest.raises(APIClientError):
            await client.complete("system", "user")

    @pytest.mark.asyncio
    async def test_retries_timeouts_then_succeeds(self, client):
        """Test a timeout is retried."""
        post = AsyncMock(side_effect=[httpx.ReadTimeout("slow"), _response(200, {"ok": True})])
        with patch.object(httpx.AsyncClient, "post", post):
            data = await client.call_api(payload={})

        assert data == {"ok": True}
        assert post.call_count == 2

    @pytest.mark.asyncio
    async def test_timeout_after_last_attempt(self, client):
        post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with patch.object(httpx.AsyncClient, "post", post):
            with pytest.raises(APITimeoutError):
                await client.call_api(payload={})

        assert post.call_count == 3

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, client):
        """Test 4xx responses other than 429 fail immediately."""
        post = AsyncMock(return_value=_response(401))
        with patch.object(httpx.AsyncClient, "post", post):
            with pytest.raises(APIClientError):
                await client.call_api(payload={})

        assert post.call_count == 1

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self, client):
        post = AsyncMock(side_effect=[_response(429), _response(200, {"ok": True})])
        with patch.object(httpx.AsyncClient, "post", post):
            assert await client.call_api(payload={}) == {"ok": True}

        assert post.call_count == 2
