"""
Anthropic Claude provider.
Uses the anthropic SDK (AsyncAnthropic) Messages API.
"""
from typing import Optional, Sequence

from anthropic import AsyncAnthropic

from genius.ai.base import ChatProvider, ChatMessage, ChatResponse, split_system


class AnthropicProvider(ChatProvider):
    """Claude chat. The system prompt goes in the dedicated system field."""

    name = "anthropic"

    def __init__(self, api_key: Optional[str] = None, max_tokens: int = 4096):
        self.api_key = api_key
        self.max_tokens = max_tokens
        self.client = AsyncAnthropic(api_key=api_key) if api_key else None

    def is_configured(self) -> bool:
        return bool(self.api_key) and self.client is not None

    async def _complete(self, messages: Sequence[ChatMessage], model: str) -> ChatResponse:
        system, turns = split_system(messages)
        params = {
            "model": model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": m.role, "content": m.content} for m in turns],
        }
        if system:
            params["system"] = system

        response = await self.client.messages.create(**params)

        text = next((block.text for block in response.content if block.type == "text"), "")
        usage = response.usage
        return ChatResponse(
            content=text,
            model=model,
            tokens_used=(usage.input_tokens + usage.output_tokens) if usage else None,
        )
