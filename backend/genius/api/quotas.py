"""
Quota status and model catalog endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends

from genius.ai.catalog import default_catalog
from genius.auth.dependencies import get_current_user
from genius.models.user import User
from genius.schemas.quota import AIModelResponse, QuotaStatusItem, QuotaStatusResponse
from genius.services.quota_manager import QuotaManager, get_quota_manager

router = APIRouter()
models_router = APIRouter()


@router.get("", response_model=QuotaStatusResponse)
async def get_quotas(
    current_user: User = Depends(get_current_user),
    quota_manager: QuotaManager = Depends(get_quota_manager),
):
    """
    Today's usage per provider.
    Loading creates missing quota rows and applies the daily reset.
    """
    ledger = await quota_manager.load_quotas(current_user.id)
    return QuotaStatusResponse(
        quotas=[QuotaStatusItem(**item) for item in quota_manager.get_quota_status(ledger)]
    )


@models_router.get("/models", response_model=List[AIModelResponse])
async def list_models():
    """Every model in the provider catalog, in routing order."""
    return [
        AIModelResponse(
            id=model.id,
            name=model.name,
            provider=model.provider,
            context_window=model.context_window,
            capabilities=list(model.capabilities),
            cost_per_request=model.cost_per_request,
            is_free=model.is_free,
        )
        for model in default_catalog.list_all_models()
    ]
