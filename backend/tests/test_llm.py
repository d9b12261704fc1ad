"""
Unit tests for the LLM module.
Tests LLMMessage, LLMResponse, providers, and factory.
"""

import pytest
from unittest.mock import AsyncMock, patch, MagicMock

import httpx

from l2coach.llm.base import LLMMessage, LLMResponse
from l2coach.llm.openai_provider import OpenAIProvider
from l2coach.llm.volcengine_provider import VolcEngineProvider
from l2coach.llm.factory import create_llm_provider


def mock_http_client(mock_client, response):
    mock_instance = AsyncMock()
    mock_instance.post.return_value = response
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    mock_client.return_value = mock_instance
    return mock_instance


class TestLLMMessage:
    """Tests for LLMMessage dataclass."""

    def test_text_message(self):
        msg = LLMMessage.text("user", "Hello")
        assert msg.role == "user"
        assert msg.content == "Hello"

    def test_multimodal_with_data_url(self):
        msg = LLMMessage.multimodal("user", "Read this tape.",
                                    image_urls=["data:image/png;base64,abc123"])
        assert isinstance(msg.content, list)
        assert len(msg.content) == 2
        assert msg.content[0]["type"] == "image_url"
        assert msg.content[0]["image_url"]["url"] == "data:image/png;base64,abc123"
        assert msg.content[1] == {"type": "text", "text": "Read this tape."}

    def test_multimodal_with_multiple_images(self):
        msg = LLMMessage.multimodal("user", "Compare these", image_urls=["url1", "url2"])
        assert len(msg.content) == 3  # 2 images + 1 text

    def test_multimodal_text_only(self):
        msg = LLMMessage.multimodal("user", "Just text")
        assert len(msg.content) == 1
        assert msg.content[0]["type"] == "text"


class TestLLMResponse:
    """Tests for LLMResponse dataclass."""

    def test_basic_response(self):
        resp = LLMResponse(content="Hello!", model="gpt-4o")
        assert resp.content == "Hello!"
        assert resp.usage == {}
        assert resp.raw is None


class TestOpenAIProvider:
    """Tests for OpenAI-compatible provider."""

    def test_init_defaults(self):
        provider = OpenAIProvider(api_key="test-key")
        assert provider.model == "gpt-4o"
        assert provider.base_url == "https://api.openai.com/v1"
        assert provider.default_temperature == 0.2

    def test_format_messages(self):
        provider = OpenAIProvider(api_key="test")
        formatted = provider._format_messages([
            LLMMessage.text("system", "sys prompt"),
            LLMMessage.text("user", "hello"),
        ])
        assert formatted == [
            {"role": "system", "content": "sys prompt"},
            {"role": "user", "content": "hello"},
        ]

    def test_headers(self):
        headers = OpenAIProvider(api_key="sk-test123")._get_headers()
        assert headers["Authorization"] == "Bearer sk-test123"
        assert headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_chat_completion_success(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "choices": [{"message": {"content": "> TL;DR ANALYSIS"}}],
            "model": "gpt-4o",
            "usage": {"prompt_tokens": 10, "completion_tokens": 5}
        }

        with patch("httpx.AsyncClient") as mock_client:
            client = mock_http_client(mock_client, mock_response)
            result = await provider.chat_completion([LLMMessage.text("user", "Hello")], max_tokens=50)

        assert result.content == "> TL;DR ANALYSIS"
        assert result.usage["prompt_tokens"] == 10
        url = client.post.await_args.args[0]
        payload = client.post.await_args.kwargs["json"]
        assert url == "https://api.openai.com/v1/chat/completions"
        assert payload["model"] == "gpt-4o"
        assert payload["max_tokens"] == 50
        assert payload["temperature"] == 0.2

    @pytest.mark.asyncio
    async def test_chat_completion_http_error_propagates(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "429 Too Many Requests", request=MagicMock(), response=MagicMock()
        )

        with patch("httpx.AsyncClient") as mock_client:
            mock_http_client(mock_client, mock_response)
            with pytest.raises(httpx.HTTPStatusError):
                await provider.chat_completion([LLMMessage.text("user", "Hello")])


class TestVolcEngineProvider:
    """Tests for Volcano Engine provider."""

    def test_init_defaults(self):
        provider = VolcEngineProvider(api_key="test-key")
        assert provider.model == "doubao-1-5-vision-pro-32k-250115"
        assert "volces.com" in provider.base_url
        assert provider.provider_name == "volcengine"

    @pytest.mark.asyncio
    async def test_chat_completion_success(self):
        provider = VolcEngineProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "choices": [{"message": {"content": "STATUS: SELLERS IN CONTROL"}}],
            "model": "doubao-1-5-vision-pro-32k-250115",
            "usage": {}
        }

        with patch("httpx.AsyncClient") as mock_client:
            client = mock_http_client(mock_client, mock_response)
            result = await provider.chat_completion([LLMMessage.text("user", "Read")])

        assert result.content == "STATUS: SELLERS IN CONTROL"
        assert client.post.await_args.args[0] == "https://ark.cn-beijing.volces.com/api/v3/chat/completions"


class TestLLMFactory:
    """Tests for LLM provider factory."""

    def test_create_openai_provider(self):
        provider = create_llm_provider(provider="openai", api_key="test-key", model="gpt-4o-mini")
        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "gpt-4o-mini"

    def test_create_volcengine_provider(self):
        provider = create_llm_provider(provider="volcengine", api_key="test-key")
        assert isinstance(provider, VolcEngineProvider)

    def test_no_api_key_returns_none(self):
        assert create_llm_provider(provider="openai", api_key="") is None

    def test_unsupported_provider_raises(self):
        with pytest.raises(ValueError, match="Unsupported"):
            create_llm_provider(provider="unsupported", api_key="key")

    def test_custom_base_url(self):
        provider = create_llm_provider(provider="openai", api_key="key", base_url="https://custom.api.com/v1")
        assert provider.base_url == "https://custom.api.com/v1"
