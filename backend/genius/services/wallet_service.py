"""
Wallet service for paid AI usage.
Provides atomic debit/credit operations with safety checks.
Balances are USD Decimals; every movement is recorded as a WalletTransaction.
"""
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from genius.models.user import User
from genius.models.wallet_transaction import WalletTransaction, TransactionType


class WalletService:
    """Service for wallet management with atomic operations."""

    @staticmethod
    async def get_balance(db: AsyncSession, user_id: str) -> Decimal:
        """
        Get current wallet balance for user.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            Current balance (0 if user not found)
        """
        result = await db.execute(
            select(User.wallet_balance).where(User.id == user_id)
        )
        balance = result.scalar_one_or_none()
        return Decimal(balance) if balance is not None else Decimal("0")

    @staticmethod
    async def has_balance(db: AsyncSession, user_id: str, amount: Decimal) -> bool:
        """
        Check if user can cover amount.

        Args:
            db: Database session
            user_id: User ID
            amount: Required amount

        Returns:
            True if balance >= amount
        """
        result = await db.execute(
            select(User.wallet_balance).where(User.id == user_id)
        )
        balance = result.scalar_one_or_none()

        if balance is None:
            return False

        return Decimal(balance) >= amount

    @staticmethod
    async def debit(
        db: AsyncSession,
        user_id: str,
        amount: Decimal,
        description: Optional[str] = None,
    ) -> bool:
        """
        Atomically debit the wallet and record a usage transaction.
        Prevents negative balances.

        Args:
            db: Database session
            user_id: User ID
            amount: Amount to debit
            description: Transaction description (e.g. "Chat: gpt-4o")

        Returns:
            True if debit successful, False if insufficient balance

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError("Cannot debit negative amount")

        # Atomic update: only decrement if balance >= amount
        result = await db.execute(
            update(User)
            .where(User.id == user_id)
            .where(User.wallet_balance >= amount)
            .values(wallet_balance=User.wallet_balance - amount)
        )

        if result.rowcount == 0:
            return False

        db.add(WalletTransaction(
            user_id=user_id,
            amount=-amount,
            type=TransactionType.USAGE,
            description=description,
        ))
        await db.commit()
        return True

    @staticmethod
    async def credit(
        db: AsyncSession,
        user_id: str,
        amount: Decimal,
        description: Optional[str] = None,
        transaction_type: TransactionType = TransactionType.DEPOSIT,
    ) -> None:
        """
        Add funds to the wallet and record the transaction.

        Args:
            db: Database session
            user_id: User ID
            amount: Amount to add (must be positive)
            description: Transaction description
            transaction_type: DEPOSIT (default) or REFUND

        Raises:
            ValueError: If amount is negative or zero
        """
        if amount <= 0:
            raise ValueError("Credit amount must be positive")

        # Atomic increment
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(wallet_balance=User.wallet_balance + amount)
        )
        db.add(WalletTransaction(
            user_id=user_id,
            amount=amount,
            type=transaction_type,
            description=description,
        ))

        await db.commit()

    @staticmethod
    async def list_transactions(db: AsyncSession, user_id: str, limit: int = 100) -> List[WalletTransaction]:
        """Most recent wallet transactions first."""
        result = await db.execute(
            select(WalletTransaction)
            .where(WalletTransaction.user_id == user_id)
            .order_by(WalletTransaction.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
