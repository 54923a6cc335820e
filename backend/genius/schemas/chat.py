"""
Pydantic schemas for the chat endpoint.
"""
from pydantic import BaseModel, Field
from typing import Optional

from genius.schemas.conversation import MessageResponse


class ChatRequest(BaseModel):
    """Schema for sending a chat message."""
    conversation_id: Optional[str] = Field(None, description="Conversation to append to")
    message: Optional[str] = Field(None, description="User message text")
    model: Optional[str] = Field(None, description="Requested model id (defaults to the configured default model)")


class ChatResponse(BaseModel):
    """Schema for a chat reply."""
    message: MessageResponse
    used_model: str
    switched_provider: Optional[str] = None
    quota_remaining: Optional[int] = Field(None, description="Free requests left before this one; null when paid")
