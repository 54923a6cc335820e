"""
Pydantic schemas for quota status and the model catalog.
"""
from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal


class QuotaStatusItem(BaseModel):
    """Daily usage for one provider."""
    provider: str
    used: int
    limit: int
    remaining: Optional[int] = None  # null for paid providers
    is_free: bool


class QuotaStatusResponse(BaseModel):
    """Per-provider daily usage, in catalog order."""
    quotas: List[QuotaStatusItem]


class AIModelResponse(BaseModel):
    """One model from the provider catalog."""
    id: str
    name: str
    provider: str
    context_window: int
    capabilities: List[str] = []
    cost_per_request: Optional[Decimal] = None
    is_free: bool
