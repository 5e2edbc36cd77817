"""
Tests for LLM providers — selection, availability and the mock provider.

No network: real providers are only constructed without API keys.
"""

import json

from deadref.config import Config, LLMConfig
from deadref.services.providers import (
    ClaudeProvider, OpenAIProvider, LLMResponse, MockProvider, MOCK_ANALYSIS,
    get_provider, get_provider_status,
)


class TestLLMResponse:
    """Token accounting."""

    def test_total_and_format(self):
        response = LLMResponse(text="x", input_tokens=10, output_tokens=5)
        assert response.total_tokens == 15
        assert response.format_tokens() == "in:10 out:5 total:15"


class TestMockProvider:
    """Deterministic provider for tests."""

    def test_default_response_is_valid_analysis(self):
        response = MockProvider().complete("system", "user")
        assert json.loads(response.text) == MOCK_ANALYSIS

    def test_records_prompts(self):
        provider = MockProvider("{}")
        provider.complete("sys", "usr", max_tokens=10)

        assert provider.last_system == "sys"
        assert provider.last_user == "usr"
        assert provider.calls == 1
        assert provider.is_available


class TestProviderSelection:
    """get_provider() falls back to the mock without credentials."""

    def test_no_api_key_uses_mock(self):
        assert isinstance(get_provider(Config()), MockProvider)

    def test_openai_without_key_uses_mock(self):
        config = Config(llm=LLMConfig(provider="openai"))
        assert isinstance(get_provider(config), MockProvider)

    def test_unknown_provider_uses_mock(self):
        config = Config(llm=LLMConfig(provider="nonexistent"))
        assert isinstance(get_provider(config), MockProvider)

    def test_real_providers_unavailable_without_key(self):
        assert not ClaudeProvider(LLMConfig(provider="claude")).is_available
        assert not OpenAIProvider(LLMConfig(provider="openai")).is_available


class TestProviderStatus:
    """Human-readable status."""

    def test_missing_key(self):
        status = get_provider_status(Config())
        assert status == "LLM not configured (set ANTHROPIC_API_KEY environment variable)"

    def test_missing_openai_key(self):
        status = get_provider_status(Config(llm=LLMConfig(provider="openai")))
        assert "OPENAI_API_KEY" in status
