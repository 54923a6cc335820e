"""
Google Gemini provider.
Uses the google-genai SDK (async client) for chat completions.
"""
from typing import Optional, Sequence

from google import genai
from google.genai import types

from genius.ai.base import ChatProvider, ChatMessage, ChatResponse, split_system


class GeminiProvider(ChatProvider):
    """Gemini chat via google-genai. Assistant turns map to the "model" role."""

    name = "gemini"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key
        self.client = genai.Client(api_key=api_key) if api_key else None

    def is_configured(self) -> bool:
        return bool(self.api_key) and self.client is not None

    async def _complete(self, messages: Sequence[ChatMessage], model: str) -> ChatResponse:
        system, turns = split_system(messages)
        contents = [
            types.Content(
                role="user" if m.role == "user" else "model",
                parts=[types.Part(text=m.content)],
            )
            for m in turns
        ]
        config = types.GenerateContentConfig(system_instruction=system) if system else None

        response = await self.client.aio.models.generate_content(
            model=model,
            contents=contents,
            config=config,
        )

        usage = getattr(response, "usage_metadata", None)
        return ChatResponse(
            content=response.text or "",
            model=model,
            tokens_used=getattr(usage, "total_token_count", None) if usage else None,
        )
