"""
Conversation endpoints for listing, creating, reading, and deleting chats.
All endpoints require Firebase JWT authentication.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from genius.auth.dependencies import get_current_user
from genius.database import get_db
from genius.models.user import User
from genius.schemas.conversation import (
    ConversationCreate,
    ConversationDetailResponse,
    ConversationResponse,
    MessageResponse,
)
from genius.services.conversation_service import ConversationService

router = APIRouter()


@router.get("", response_model=List[ConversationResponse])
async def list_conversations(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List the user's conversations, most recent first."""
    conversations = await ConversationService.list_conversations(db, current_user.id)
    return [ConversationResponse.model_validate(c) for c in conversations]


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    data: ConversationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Start a new conversation."""
    conversation = await ConversationService.create_conversation(
        db,
        user_id=current_user.id,
        title=data.title,
        model=data.model,
    )
    return ConversationResponse.model_validate(conversation)


@router.get("/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get a conversation with its messages.
    Returns 404 if not found or doesn't belong to user.
    """
    conversation = await ConversationService.get_conversation(db, conversation_id, current_user.id)
    if not conversation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found"
        )

    messages = await ConversationService.get_messages(db, conversation_id)
    summary = ConversationResponse.model_validate(conversation)
    return ConversationDetailResponse(
        **summary.model_dump(),
        messages=[MessageResponse.model_validate(m) for m in messages],
    )


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Delete a conversation and all its messages.
    Returns 404 if not found or doesn't belong to user.
    """
    try:
        await ConversationService.delete_conversation(db, conversation_id, current_user.id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
