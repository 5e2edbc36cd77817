"""
LLM Providers — Abstraction for multiple AI providers

Supports: Claude, OpenAI
All providers implement the same completion interface; the deletion
client in backends.py turns completions into analysis results.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..config import Config, LLMConfig

logger = logging.getLogger(__name__)


DEFAULT_TEMPERATURE = 0.1  # Low temperature for consistent analysis

MOCK_ANALYSIS = {
    "orphaned_references": [],
    "safe_deletions": [],
    "warnings": [],
    "summary": "Mock provider",
    "confidence": 0.5,
}


@dataclass
class LLMResponse:
    """Response from LLM including token usage."""
    text: str
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def format_tokens(self) -> str:
        """Format token usage for logs."""
        return f"in:{self.input_tokens} out:{self.output_tokens} total:{self.total_tokens}"


class LLMProvider(ABC):
    """Abstract base for LLM providers."""

    @abstractmethod
    def complete(self, system: str, user: str, max_tokens: int = 2048) -> LLMResponse:
        """
        Get completion from LLM.

        Args:
            system: System prompt
            user: User message
            max_tokens: Maximum tokens in response

        Returns:
            LLMResponse with text and token usage
        """
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is configured and ready."""
        pass


class ClaudeProvider(LLMProvider):
    """Anthropic Claude provider."""

    def __init__(self, config: LLMConfig, temperature: float = DEFAULT_TEMPERATURE):
        self.config = config
        self.temperature = temperature
        self._client = None
        self._init_client()

    def _init_client(self):
        if not self.config.api_key:
            return
        try:
            import anthropic
        except ImportError:
            logger.debug("anthropic package not installed; Claude provider unavailable")
            return
        self._client = anthropic.Anthropic(api_key=self.config.api_key)

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def complete(self, system: str, user: str, max_tokens: int = 2048) -> LLMResponse:
        if not self._client:
            raise RuntimeError("Claude client not initialized")

        message = self._client.messages.create(
            model=self.config.effective_model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            system=system,
            messages=[{"role": "user", "content": user}]
        )

        input_tokens = getattr(message.usage, 'input_tokens', 0)
        output_tokens = getattr(message.usage, 'output_tokens', 0)

        # Concatenate text blocks; other block types carry no analysis
        text = "".join(getattr(block, 'text', '') for block in message.content)

        return LLMResponse(
            text=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens
        )


class OpenAIProvider(LLMProvider):
    """OpenAI GPT provider."""

    def __init__(self, config: LLMConfig, temperature: float = DEFAULT_TEMPERATURE):
        self.config = config
        self.temperature = temperature
        self._client = None
        self._init_client()

    def _init_client(self):
        if not self.config.api_key:
            return
        try:
            import openai
        except ImportError:
            logger.debug("openai package not installed; OpenAI provider unavailable")
            return
        self._client = openai.OpenAI(api_key=self.config.api_key)

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def complete(self, system: str, user: str, max_tokens: int = 2048) -> LLMResponse:
        if not self._client:
            raise RuntimeError("OpenAI client not initialized")

        response = self._client.chat.completions.create(
            model=self.config.effective_model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user}
            ]
        )

        usage = getattr(response, 'usage', None)
        input_tokens = getattr(usage, 'prompt_tokens', 0) if usage else 0
        output_tokens = getattr(usage, 'completion_tokens', 0) if usage else 0

        return LLMResponse(
            text=response.choices[0].message.content or "",
            input_tokens=input_tokens,
            output_tokens=output_tokens
        )


class MockProvider(LLMProvider):
    """
    Mock provider for testing.

    Returns an empty analysis by default, or a fixed response text.
    Records the last prompts it was given.
    """

    def __init__(self, response: Optional[str] = None):
        self._available = True
        self.response = response if response is not None else json.dumps(MOCK_ANALYSIS)
        self.last_system: Optional[str] = None
        self.last_user: Optional[str] = None
        self.calls = 0

    @property
    def is_available(self) -> bool:
        return self._available

    def complete(self, system: str, user: str, max_tokens: int = 2048) -> LLMResponse:
        self.last_system = system
        self.last_user = user
        self.calls += 1
        return LLMResponse(text=self.response, input_tokens=0, output_tokens=0)


PROVIDER_CLASSES = {
    "claude": ClaudeProvider,
    "openai": OpenAIProvider,
}


def get_provider(config: Config) -> LLMProvider:
    """
    Get LLM provider based on configuration.

    Args:
        config: Application configuration

    Returns:
        Configured provider, or MockProvider if none available
    """
    provider_class = PROVIDER_CLASSES.get(config.llm.provider)
    if provider_class is not None:
        provider = provider_class(config.llm)
        if provider.is_available:
            return provider

    logger.info("LLM provider %s unavailable, using mock provider", config.llm.provider)
    return MockProvider()


def get_provider_status(config: Config) -> str:
    """Get human-readable provider status."""
    llm = config.llm

    if not llm.api_key:
        return f"LLM not configured (set {llm.api_key_env} environment variable)"

    package_map = {
        "claude": ("anthropic", "pip install anthropic"),
        "openai": ("openai", "pip install openai"),
    }

    if llm.provider in package_map:
        module_name, install_cmd = package_map[llm.provider]
        try:
            __import__(module_name)
        except ImportError:
            return f"LLM package missing: {install_cmd}"

    provider = get_provider(config)
    if isinstance(provider, MockProvider):
        return "LLM unavailable (check configuration)"

    return f"{llm.provider.title()}: {llm.effective_model}"
