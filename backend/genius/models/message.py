"""
Message model - append-only chat history.
Assistant messages carry the model that actually answered and its cost.
"""
import enum
from decimal import Decimal

from sqlalchemy import Column, String, Integer, Numeric, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from genius.models.base import Base, generate_uuid, utcnow


class MessageRole(str, enum.Enum):
    """Chat message author."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(Base):
    """One chat turn."""

    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    conversation_id = Column(
        String(36), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role = Column(
        Enum(MessageRole, name="messagerole", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    content = Column(Text, nullable=False)
    model = Column(String(100), nullable=True)  # Model id that served (or was routed for) this turn
    tokens_used = Column(Integer, nullable=False, default=0)
    cost = Column(Numeric(10, 6), nullable=False, default=Decimal("0"))  # USD

    created_at = Column(DateTime, nullable=False, default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")

    def __repr__(self):
        return f"<Message(id={self.id}, role={self.role}, model={self.model})>"
