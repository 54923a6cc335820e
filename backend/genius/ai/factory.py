"""
Chat dispatcher construction.
Builds one client per catalog provider from an explicit AIProviderConfig
at process start; request handlers receive the dispatcher as a dependency.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from fastapi import Request

from genius.ai.anthropic_provider import AnthropicProvider
from genius.ai.base import ChatMessage, ChatProvider, ChatResponse
from genius.ai.gemini_provider import GeminiProvider
from genius.ai.groq_provider import GroqProvider
from genius.ai.image_provider import ImageGenerator
from genius.ai.openai_provider import OpenAIProvider
from genius.exceptions import ProviderCallError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIProviderConfig:
    """API credentials for every provider, captured once at startup."""
    gemini_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    groq_api_key: Optional[str] = None
    anthropic_max_tokens: int = 4096

    @classmethod
    def from_settings(cls, settings) -> "AIProviderConfig":
        return cls(
            gemini_api_key=settings.gemini_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            openai_api_key=settings.openai_api_key,
            groq_api_key=settings.groq_api_key,
            anthropic_max_tokens=settings.anthropic_max_tokens,
        )


class ChatDispatcher:
    """Routes a resolved (provider, model) pair to the matching client."""

    def __init__(self, providers: Dict[str, ChatProvider]):
        self.providers = dict(providers)

    @classmethod
    def from_config(cls, config: AIProviderConfig) -> "ChatDispatcher":
        """
        Factory building every provider client from config.

        Providers without a key are still registered; calling them raises
        ProviderCallError, which the request handler reports as a failure.
        """
        providers: Dict[str, ChatProvider] = {
            "gemini": GeminiProvider(config.gemini_api_key),
            "anthropic": AnthropicProvider(config.anthropic_api_key, config.anthropic_max_tokens),
            "openai": OpenAIProvider(config.openai_api_key),
            "groq": GroqProvider(config.groq_api_key),
        }
        for provider_id, provider in providers.items():
            if not provider.is_configured():
                logger.warning(f"{provider_id} provider has no API key configured")
        return cls(providers)

    def get_provider(self, provider_id: str) -> ChatProvider:
        provider = self.providers.get(provider_id)
        if provider is None:
            raise ProviderCallError(provider_id, "No client registered for provider")
        return provider

    async def generate(
        self,
        provider_id: str,
        model_id: str,
        messages: Sequence[ChatMessage],
    ) -> ChatResponse:
        """
        Send messages to the provider's model.

        Raises:
            ProviderCallError: Unknown provider, missing key, or API failure
        """
        return await self.get_provider(provider_id).chat(messages, model_id)


def build_image_generator(config: AIProviderConfig) -> ImageGenerator:
    return ImageGenerator(config.gemini_api_key)


def get_chat_dispatcher(request: Request) -> ChatDispatcher:
    """FastAPI dependency: the dispatcher created in the app lifespan."""
    return request.app.state.chat_dispatcher


def get_image_generator(request: Request) -> ImageGenerator:
    """FastAPI dependency: the image generator created in the app lifespan."""
    return request.app.state.image_generator
