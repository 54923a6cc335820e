"""
OpenAI provider implementation.
Uses the OpenAI SDK (AsyncOpenAI) for chat completions.
This is the paid fallback; requests are billed against the user's wallet.
"""
from typing import Optional, Sequence

from openai import AsyncOpenAI

from genius.ai.base import ChatProvider, ChatMessage, ChatResponse


class OpenAIProvider(ChatProvider):
    """
    OpenAI LLM provider implementation.

    API keys come from AIProviderConfig and are never exposed to clients.
    """

    name = "openai"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key
        self.client = AsyncOpenAI(api_key=api_key) if api_key else None

    def is_configured(self) -> bool:
        """Check if OpenAI API key is configured."""
        return bool(self.api_key) and self.client is not None

    async def _complete(self, messages: Sequence[ChatMessage], model: str) -> ChatResponse:
        response = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": m.role, "content": m.content} for m in messages],
        )

        choice = response.choices[0] if response.choices else None
        return ChatResponse(
            content=(choice.message.content if choice else None) or "",
            model=model,
            tokens_used=response.usage.total_tokens if response.usage else None,
        )
