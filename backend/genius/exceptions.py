"""
Domain exceptions raised by services and translated to HTTP errors by the API layer.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional


class GeniusError(Exception):
    """Base class for domain errors."""


class QuotaExhaustedError(GeniusError):
    """
    No provider may serve the request: every free tier is used up and
    there is no paid fallback.
    """

    def __init__(self, quota_status: Optional[List[Dict[str, Any]]] = None):
        self.quota_status = quota_status or []
        super().__init__(
            "All free API quotas exhausted. Please add funds to your wallet for paid usage."
        )


class InsufficientFundsError(GeniusError):
    """Routing picked a paid provider but the wallet cannot cover the cost."""

    def __init__(
        self,
        required: Decimal,
        balance: Decimal,
        quota_status: Optional[List[Dict[str, Any]]] = None,
    ):
        self.required = required
        self.balance = balance
        self.quota_status = quota_status or []
        super().__init__(
            f"Free quotas exhausted and wallet balance {balance} is below the "
            f"request cost {required}. Please add funds to your wallet."
        )


class ProviderCallError(GeniusError):
    """The upstream AI provider failed (transport, auth, or empty reply)."""

    def __init__(self, provider: str, detail: str):
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider} request failed: {detail}")


class ConversationNotFoundError(GeniusError):
    """Conversation does not exist or belongs to another user."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation {conversation_id} not found or access denied")
