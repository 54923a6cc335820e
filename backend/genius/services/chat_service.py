"""
Chat request handling.
Routes each message through the QuotaManager, calls the chosen provider,
stores both turns, and only then records usage and charges the wallet.
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from genius.ai.base import ChatMessage
from genius.ai.factory import ChatDispatcher
from genius.ai.prompts import WORDPRESS_SYSTEM_PROMPT
from genius.exceptions import (
    ConversationNotFoundError,
    InsufficientFundsError,
    QuotaExhaustedError,
)
from genius.models.message import Message, MessageRole
from genius.services.conversation_service import ConversationService
from genius.services.quota_manager import QuotaManager, RoutingDecision
from genius.services.wallet_service import WalletService
from genius.utils.logging import log_chat_completed, log_wallet_debited
from genius.utils.metrics import wallet_debits_total

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """Stored assistant reply plus how the request was routed."""
    message: Message
    decision: RoutingDecision

    @property
    def used_model(self) -> str:
        return self.decision.model.name

    @property
    def switched_provider(self) -> Optional[str]:
        return self.decision.switched_provider

    @property
    def quota_remaining(self) -> Optional[int]:
        return self.decision.quota_remaining


async def ensure_affordable(
    db: AsyncSession,
    quota_manager: QuotaManager,
    user_id: str,
    decision: RoutingDecision,
) -> None:
    """
    Reject a request nobody can serve or the wallet cannot pay for.

    Raises:
        QuotaExhaustedError: Routing found no provider
        InsufficientFundsError: Paid provider chosen and balance < cost
    """
    if not decision.can_proceed:
        raise QuotaExhaustedError(quota_manager.get_quota_status(decision.ledger))

    if decision.cost > 0 and not await WalletService.has_balance(db, user_id, decision.cost):
        balance = await WalletService.get_balance(db, user_id)
        raise InsufficientFundsError(
            required=decision.cost,
            balance=balance,
            quota_status=quota_manager.get_quota_status(decision.ledger),
        )


class ChatService:
    """Service for chat exchanges."""

    @staticmethod
    async def send_message(
        db: AsyncSession,
        quota_manager: QuotaManager,
        dispatcher: ChatDispatcher,
        user_id: str,
        conversation_id: str,
        content: str,
        model_id: str,
    ) -> ChatResult:
        """
        Answer one user message in a conversation.

        The user's message is stored before the provider is called, so it
        survives a provider failure. Usage is recorded and the wallet charged
        only after the assistant reply is stored.

        Args:
            db: Database session
            quota_manager: Per-request quota manager
            dispatcher: Provider clients
            user_id: Authenticated user's ID
            conversation_id: Target conversation
            content: User message text
            model_id: Model the user asked for

        Returns:
            ChatResult with the stored assistant message and routing decision

        Raises:
            ConversationNotFoundError: Conversation missing or not owned by user
            QuotaExhaustedError: No provider can serve the request
            InsufficientFundsError: Paid fallback the wallet cannot cover
            ProviderCallError: Provider call failed (no usage recorded)
        """
        start_time = time.time()

        conversation = await ConversationService.get_conversation(db, conversation_id, user_id)
        if not conversation:
            raise ConversationNotFoundError(conversation_id)

        decision = await quota_manager.check_and_get_best_provider(user_id, model_id)
        await ensure_affordable(db, quota_manager, user_id, decision)

        await ConversationService.add_message(
            db, conversation_id, MessageRole.USER, content, model=decision.model.id
        )

        history = await ConversationService.get_messages(db, conversation_id)
        prompt = [ChatMessage(role="system", content=WORDPRESS_SYSTEM_PROMPT)]
        prompt.extend(ChatMessage(role=m.role.value, content=m.content) for m in history)

        reply = await dispatcher.generate(decision.provider, decision.model.id, prompt)

        assistant_message = await ConversationService.add_message(
            db,
            conversation_id,
            MessageRole.ASSISTANT,
            reply.content,
            model=decision.model.id,
            tokens_used=reply.tokens_used or 0,
            cost=decision.cost,
        )

        await quota_manager.increment_usage(decision.ledger, decision.provider)

        if decision.cost > 0:
            debited = await WalletService.debit(
                db, user_id, decision.cost, description=f"Chat: {decision.model.id}"
            )
            wallet_debits_total.labels(status="success" if debited else "insufficient").inc()
            log_wallet_debited(
                logger,
                user_id=user_id,
                amount=str(decision.cost),
                success=debited,
                conversation_id=conversation_id,
            )

        # First exchange names the conversation
        if len(history) <= 1:
            await ConversationService.retitle_from_message(db, conversation, content)

        log_chat_completed(
            logger,
            user_id=user_id,
            conversation_id=conversation_id,
            provider=decision.provider,
            model=decision.model.id,
            duration_ms=(time.time() - start_time) * 1000,
            tokens_used=reply.tokens_used,
            cost=str(decision.cost),
        )

        return ChatResult(message=assistant_message, decision=decision)
