"""
FastAPI dependencies for authentication.
Verifies the Firebase ID token and returns the matching User, creating it
with an empty wallet on first sign-in.
"""
import logging
from decimal import Decimal
from typing import Optional, Tuple

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from genius.database import get_db
from genius.models.user import User
from genius.auth.firebase import verify_firebase_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _split_name(full_name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    if not full_name:
        return None, None
    first, _, last = full_name.strip().partition(" ")
    return first or None, last or None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Resolve the authenticated user from the Bearer token.

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
    """
    token = credentials.credentials

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        decoded_token = verify_firebase_token(token)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    firebase_uid = decoded_token.get("uid")
    if not firebase_uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing uid"
        )

    result = await db.execute(
        select(User).where(User.firebase_uid == firebase_uid)
    )
    user = result.scalar_one_or_none()

    if not user:
        # Free tiers need no balance; the wallet starts empty
        first_name, last_name = _split_name(decoded_token.get("name"))
        user = User(
            firebase_uid=firebase_uid,
            email=decoded_token.get("email"),
            first_name=first_name,
            last_name=last_name,
            wallet_balance=Decimal("0"),
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info(
            f"Provisioned user {user.id}",
            extra={"event": "user_provisioned", "user_id": user.id},
        )

    return user
