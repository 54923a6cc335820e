"""
Chat endpoint.
Routes each message across AI providers according to the user's daily
free quotas, falling back to paid usage charged to the wallet.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from genius.ai.factory import ChatDispatcher, get_chat_dispatcher
from genius.auth.dependencies import get_current_user
from genius.config import settings
from genius.database import get_db
from genius.exceptions import (
    ConversationNotFoundError,
    InsufficientFundsError,
    ProviderCallError,
    QuotaExhaustedError,
)
from genius.models.user import User
from genius.schemas.chat import ChatRequest, ChatResponse
from genius.schemas.conversation import MessageResponse
from genius.services.chat_service import ChatService
from genius.services.quota_manager import QuotaManager, get_quota_manager

logger = logging.getLogger(__name__)

router = APIRouter()


def quota_exhausted_response(error: QuotaExhaustedError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"message": str(error), "quota_status": error.quota_status},
    )


def insufficient_funds_response(error: InsufficientFundsError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        content={
            "message": str(error),
            "required": str(error.required),
            "balance": str(error.balance),
            "quota_status": error.quota_status,
        },
    )


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    quota_manager: QuotaManager = Depends(get_quota_manager),
    dispatcher: ChatDispatcher = Depends(get_chat_dispatcher),
):
    """
    Send a message and get the assistant's reply.
    Requires valid Firebase JWT token.

    Returns 429 with per-provider quota status when no provider can serve
    the request, and 402 when only a paid provider remains and the wallet
    cannot cover it.
    """
    user_id = current_user.id

    if not request.message or not request.message.strip() or not request.conversation_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message and conversation ID required"
        )

    try:
        result = await ChatService.send_message(
            db,
            quota_manager,
            dispatcher,
            user_id=user_id,
            conversation_id=request.conversation_id,
            content=request.message,
            model_id=request.model or settings.default_model_id,
        )
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except QuotaExhaustedError as e:
        return quota_exhausted_response(e)
    except InsufficientFundsError as e:
        return insufficient_funds_response(e)
    except ProviderCallError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        await db.rollback()
        logger.error(
            f"Chat failed: {str(e)}",
            extra={
                "event": "chat_failed",
                "user_id": user_id,
                "conversation_id": request.conversation_id,
                "error": str(e),
            },
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process chat: {str(e)}"
        )

    return ChatResponse(
        message=MessageResponse.model_validate(result.message),
        used_model=result.used_model,
        switched_provider=result.switched_provider,
        quota_remaining=result.quota_remaining,
    )
