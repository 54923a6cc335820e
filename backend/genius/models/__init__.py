"""
Database models package.
"""
from genius.models.base import Base
from genius.models.user import User
from genius.models.api_quota import ApiQuota
from genius.models.conversation import Conversation
from genius.models.message import Message, MessageRole
from genius.models.generated_image import GeneratedImage
from genius.models.wallet_transaction import WalletTransaction, TransactionType

__all__ = [
    "Base",
    "User",
    "ApiQuota",
    "Conversation",
    "Message",
    "MessageRole",
    "GeneratedImage",
    "WalletTransaction",
    "TransactionType",
]
