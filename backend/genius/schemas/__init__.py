"""
Pydantic schemas for API request/response validation.
"""
from genius.schemas.conversation import (
    ConversationCreate,
    ConversationResponse,
    ConversationDetailResponse,
    MessageResponse,
)
from genius.schemas.chat import ChatRequest, ChatResponse
from genius.schemas.image import ImageGenerateRequest, ImageResponse
from genius.schemas.quota import QuotaStatusItem, QuotaStatusResponse, AIModelResponse
from genius.schemas.wallet import WalletResponse, WalletTransactionResponse

__all__ = [
    "ConversationCreate",
    "ConversationResponse",
    "ConversationDetailResponse",
    "MessageResponse",
    "ChatRequest",
    "ChatResponse",
    "ImageGenerateRequest",
    "ImageResponse",
    "QuotaStatusItem",
    "QuotaStatusResponse",
    "AIModelResponse",
    "WalletResponse",
    "WalletTransactionResponse",
]
