"""
Pydantic schemas for wallet endpoints.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal

from genius.models.wallet_transaction import TransactionType


class WalletResponse(BaseModel):
    """Response schema for wallet balance."""
    balance: Decimal
    user_id: str


class WalletTransactionResponse(BaseModel):
    """Schema for one wallet transaction."""
    id: str
    amount: Decimal
    type: TransactionType
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
