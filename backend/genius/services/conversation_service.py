"""
Conversation service for chat history.
Handles conversation creation, lookup, deletion, and message persistence.
"""
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, update

from genius.models.base import utcnow
from genius.models.conversation import Conversation, DEFAULT_CONVERSATION_TITLE
from genius.models.message import Message, MessageRole

TITLE_MAX_CHARS = 50


class ConversationService:
    """Service for conversation business logic."""

    @staticmethod
    async def create_conversation(
        db: AsyncSession,
        user_id: str,
        title: Optional[str] = None,
        model: Optional[str] = None,
    ) -> Conversation:
        """
        Create a new conversation for the authenticated user.

        Args:
            db: Database session
            user_id: Authenticated user's ID
            title: Optional title (defaults to "New Chat")
            model: Optional model id the user picked
        """
        conversation = Conversation(
            user_id=user_id,
            title=title or DEFAULT_CONVERSATION_TITLE,
        )
        if model:
            conversation.model = model
        db.add(conversation)
        await db.commit()
        await db.refresh(conversation)
        return conversation

    @staticmethod
    async def get_conversation(db: AsyncSession, conversation_id: str, user_id: str) -> Optional[Conversation]:
        """Get a conversation if it belongs to user_id."""
        result = await db.execute(
            select(Conversation).where(
                Conversation.id == conversation_id,
                Conversation.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_conversations(db: AsyncSession, user_id: str) -> List[Conversation]:
        """User's conversations, most recently updated first."""
        result = await db.execute(
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete_conversation(db: AsyncSession, conversation_id: str, user_id: str) -> None:
        """
        Delete a conversation and its messages.

        Raises:
            ValueError: If conversation not found or doesn't belong to user
        """
        conversation = await ConversationService.get_conversation(db, conversation_id, user_id)
        if not conversation:
            raise ValueError(f"Conversation {conversation_id} not found or access denied")

        await db.execute(delete(Message).where(Message.conversation_id == conversation_id))
        await db.execute(delete(Conversation).where(Conversation.id == conversation_id))
        await db.commit()

    @staticmethod
    async def add_message(
        db: AsyncSession,
        conversation_id: str,
        role: MessageRole,
        content: str,
        model: Optional[str] = None,
        tokens_used: int = 0,
        cost: Decimal = Decimal("0"),
    ) -> Message:
        """Append a message and bump the conversation's updated_at in the same commit."""
        message = Message(
            conversation_id=conversation_id,
            role=role,
            content=content,
            model=model,
            tokens_used=tokens_used,
            cost=cost,
        )
        db.add(message)
        await db.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(updated_at=utcnow())
        )
        await db.commit()
        await db.refresh(message)
        return message

    @staticmethod
    async def get_messages(db: AsyncSession, conversation_id: str) -> List[Message]:
        """Conversation history, oldest first."""
        result = await db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at)
        )
        return list(result.scalars().all())

    @staticmethod
    async def retitle_from_message(db: AsyncSession, conversation: Conversation, text: str) -> None:
        """Replace the default title with the start of the first message."""
        if conversation.title != DEFAULT_CONVERSATION_TITLE:
            return
        title = text[:TITLE_MAX_CHARS] + ("..." if len(text) > TITLE_MAX_CHARS else "")
        conversation.title = title
        await db.commit()
