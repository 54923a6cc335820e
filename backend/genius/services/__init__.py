"""
Business logic services.
"""
from genius.services.quota_manager import QuotaManager, QuotaLedger, RoutingDecision
from genius.services.wallet_service import WalletService
from genius.services.conversation_service import ConversationService
from genius.services.chat_service import ChatService, ChatResult
from genius.services.image_service import ImageService

__all__ = [
    "QuotaManager",
    "QuotaLedger",
    "RoutingDecision",
    "WalletService",
    "ConversationService",
    "ChatService",
    "ChatResult",
    "ImageService",
]
