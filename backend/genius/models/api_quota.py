"""
ApiQuota model tracking free-tier usage per user per provider per day.
One row per (user, provider). used_today is reset lazily when the
calendar day of last_reset_at is behind the current day.
"""
from decimal import Decimal

from sqlalchemy import Column, String, Integer, Boolean, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from genius.models.base import Base, generate_uuid, utcnow


class ApiQuota(Base):
    """Daily request counter and limit for one user on one provider."""

    __tablename__ = "api_quotas"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    provider = Column(String(32), nullable=False)  # Catalog provider id, e.g. "gemini"

    # Daily counters
    used_today = Column(Integer, nullable=False, default=0)
    daily_limit = Column(Integer, nullable=False, default=0)  # 0 means no free allowance

    # Snapshot of catalog pricing when the row was created
    cost_per_request = Column(Numeric(10, 6), nullable=False, default=Decimal("0"))
    is_free = Column(Boolean, nullable=False, default=True)

    last_reset_at = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="api_quotas")

    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_api_quota_user_provider"),
    )

    def __repr__(self):
        return (
            f"<ApiQuota(user_id={self.user_id}, provider={self.provider}, "
            f"used={self.used_today}/{self.daily_limit})>"
        )
