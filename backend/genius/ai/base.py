"""
Base class for chat providers.
All providers implement the same interface so the dispatcher can route a
request to any of them without knowing which SDK sits underneath.
"""
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from genius.exceptions import ProviderCallError
from genius.utils.logging import log_provider_request, log_provider_failure
from genius.utils.metrics import (
    ai_provider_requests_total,
    ai_provider_failures_total,
    ai_provider_latency_seconds,
    ai_provider_tokens_total,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatMessage:
    """One message in provider-neutral form."""
    role: str  # "system", "user" or "assistant"
    content: str


@dataclass(frozen=True)
class ChatResponse:
    """Normalized provider reply."""
    content: str
    model: str
    tokens_used: Optional[int] = None


def split_system(messages: Sequence[ChatMessage]):
    """Separate the system prompt from the conversation turns."""
    system = next((m.content for m in messages if m.role == "system"), None)
    turns: List[ChatMessage] = [m for m in messages if m.role != "system"]
    return system, turns


class ChatProvider(ABC):
    """
    Abstract base class for chat providers.

    Subclasses implement _complete() against their SDK; chat() adds the
    configuration check, metrics, structured logging, and converts any
    SDK exception into ProviderCallError.
    """

    name: str = "unknown"

    @abstractmethod
    def is_configured(self) -> bool:
        """
        Check if provider is properly configured (API key present, etc.).

        Returns:
            True if provider can be used, False otherwise
        """
        pass

    @abstractmethod
    async def _complete(self, messages: Sequence[ChatMessage], model: str) -> ChatResponse:
        """Call the vendor SDK. May raise any exception."""
        pass

    async def chat(self, messages: Sequence[ChatMessage], model: str) -> ChatResponse:
        """
        Generate a completion for the conversation.

        Args:
            messages: System prompt (optional) followed by conversation turns
            model: Provider model id

        Returns:
            ChatResponse with the reply text

        Raises:
            ProviderCallError: If not configured or the API call fails
        """
        if not self.is_configured():
            raise ProviderCallError(self.name, f"{self.name.upper()}_API_KEY is not configured")

        start_time = time.time()
        ai_provider_requests_total.labels(provider=self.name, operation="chat").inc()

        try:
            response = await self._complete(messages, model)
        except Exception as e:
            duration = time.time() - start_time
            ai_provider_failures_total.labels(provider=self.name, operation="chat").inc()
            ai_provider_latency_seconds.labels(provider=self.name, operation="chat").observe(duration)
            log_provider_failure(
                logger,
                provider=self.name,
                operation="chat",
                error=str(e),
                duration_ms=duration * 1000,
                model=model,
            )
            raise ProviderCallError(self.name, str(e)) from e

        duration = time.time() - start_time
        ai_provider_latency_seconds.labels(provider=self.name, operation="chat").observe(duration)
        if response.tokens_used:
            ai_provider_tokens_total.labels(provider=self.name, operation="chat").inc(response.tokens_used)

        log_provider_request(
            logger,
            provider=self.name,
            operation="chat",
            duration_ms=duration * 1000,
            model=model,
            tokens_used=response.tokens_used,
        )
        return response
