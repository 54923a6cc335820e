"""
Groq provider for fast open-model chat (Llama, Mixtral).
Uses the Groq SDK (AsyncGroq), whose chat API mirrors OpenAI's.
"""
from typing import Optional, Sequence

from groq import AsyncGroq

from genius.ai.base import ChatProvider, ChatMessage, ChatResponse


class GroqProvider(ChatProvider):
    """
    Groq chat provider.

    Groq provides very fast inference with a generous free tier.
    """

    name = "groq"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key
        self.client = AsyncGroq(api_key=api_key) if api_key else None

    def is_configured(self) -> bool:
        """Check if Groq API key is configured."""
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
