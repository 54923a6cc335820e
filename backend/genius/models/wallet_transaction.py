"""
WalletTransaction model - audit trail for wallet balance changes.
Every debit for paid AI usage and every deposit is recorded here.
"""
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Enum, Index
import enum

from genius.models.base import Base, generate_uuid, utcnow


class TransactionType(str, enum.Enum):
    """Kind of wallet movement."""
    DEPOSIT = "deposit"
    USAGE = "usage"
    REFUND = "refund"


class WalletTransaction(Base):
    """
    Wallet transaction row.

    Amounts are signed: deposits and refunds are positive,
    usage is negative.
    """

    __tablename__ = "wallet_transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    amount = Column(Numeric(12, 6), nullable=False)  # USD, signed
    type = Column(
        Enum(TransactionType, name="transactiontype", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    description = Column(String(255), nullable=True)  # e.g. "Chat: gpt-4o"

    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_wallet_transaction_user_id", "user_id"),
    )

    def __repr__(self):
        return (
            f"<WalletTransaction(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, type={self.type})>"
        )
