"""
User model with a prepaid wallet for paid AI usage.
Authenticated via Firebase (firebase_uid).
Free-tier usage is tracked per provider in ApiQuota; the wallet is only
charged when routing falls back to a paid provider.
"""
from decimal import Decimal

from sqlalchemy import Column, String, Numeric, Index, DateTime
from sqlalchemy.orm import relationship

from genius.models.base import Base, generate_uuid, utcnow


class User(Base):
    """User model with wallet-based paid AI access."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firebase_uid = Column(String(128), nullable=False, unique=True)  # Firebase user ID
    email = Column(String(255), nullable=True)  # Email from Firebase token
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    wallet_balance = Column(Numeric(12, 6), nullable=False, default=Decimal("0"))  # USD

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Owned rows go away with the account
    api_quotas = relationship("ApiQuota", back_populates="user", cascade="all, delete-orphan")
    conversations = relationship("Conversation", back_populates="user", cascade="all, delete-orphan")
    generated_images = relationship("GeneratedImage", cascade="all, delete-orphan")
    wallet_transactions = relationship("WalletTransaction", cascade="all, delete-orphan")

    # Index on firebase_uid for fast lookups
    __table_args__ = (
        Index("idx_user_firebase_uid", "firebase_uid"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, firebase_uid={self.firebase_uid}, wallet_balance={self.wallet_balance})>"
