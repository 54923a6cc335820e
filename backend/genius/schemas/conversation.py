"""
Pydantic schemas for conversation endpoints.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from genius.models.message import MessageRole


class ConversationCreate(BaseModel):
    """Schema for creating a new conversation."""
    title: Optional[str] = Field(None, max_length=255, description="Conversation title (defaults to 'New Chat')")
    model: Optional[str] = Field(None, description="Preferred model id")


class MessageResponse(BaseModel):
    """Schema for message response."""
    id: str
    conversation_id: str
    role: MessageRole
    content: str
    model: Optional[str] = None
    tokens_used: int = 0
    cost: Decimal = Decimal("0")
    created_at: datetime

    class Config:
        from_attributes = True


class ConversationResponse(BaseModel):
    """Schema for conversation response."""
    id: str
    user_id: str
    title: str
    model: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ConversationDetailResponse(ConversationResponse):
    """Conversation with its messages, oldest first."""
    messages: List[MessageResponse] = []
