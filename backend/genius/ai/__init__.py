"""
AI provider abstraction module.
Provides the provider catalog and a unified interface over the chat SDKs.
"""
from genius.ai.base import ChatMessage, ChatProvider, ChatResponse
from genius.ai.catalog import AIModel, AIProvider, ProviderCatalog, default_catalog
from genius.ai.factory import AIProviderConfig, ChatDispatcher

__all__ = [
    "AIModel",
    "AIProvider",
    "AIProviderConfig",
    "ChatDispatcher",
    "ChatMessage",
    "ChatProvider",
    "ChatResponse",
    "ProviderCatalog",
    "default_catalog",
]
