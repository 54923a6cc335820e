"""
API router aggregator.
Includes all route modules.
"""
from fastapi import APIRouter
from genius.api import health, chat, conversations, images, quotas, wallet

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
api_router.include_router(conversations.router, prefix="/conversations", tags=["conversations"])
api_router.include_router(images.router, prefix="/images", tags=["images"])
api_router.include_router(quotas.router, prefix="/quotas", tags=["quotas"])
api_router.include_router(quotas.models_router, prefix="/ai", tags=["models"])
api_router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
