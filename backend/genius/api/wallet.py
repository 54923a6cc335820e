"""
Wallet endpoints.
Returns the balance used for paid AI fallbacks and its transaction history.
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from genius.auth.dependencies import get_current_user
from genius.database import get_db
from genius.models.user import User
from genius.schemas.wallet import WalletResponse, WalletTransactionResponse
from genius.services.wallet_service import WalletService

router = APIRouter()


@router.get("", response_model=WalletResponse)
async def get_wallet(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get current wallet balance for authenticated user.
    Requires valid Firebase JWT token.
    """
    balance = await WalletService.get_balance(db, current_user.id)
    return WalletResponse(balance=balance, user_id=current_user.id)


@router.get("/transactions", response_model=List[WalletTransactionResponse])
async def list_transactions(
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Most recent wallet movements first."""
    transactions = await WalletService.list_transactions(db, current_user.id, limit=limit)
    return [WalletTransactionResponse.model_validate(t) for t in transactions]
