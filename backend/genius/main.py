"""
FastAPI application entry point.
Sets up the API with lifespan events for database, Firebase, and AI clients.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from genius.ai.factory import AIProviderConfig, ChatDispatcher, build_image_generator
from genius.config import settings
from genius.database import init_db
from genius.api.router import api_router
from genius.auth.firebase import initialize_firebase
from genius.middleware.metrics_middleware import MetricsMiddleware
from genius.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: logging, database tables, Firebase Admin SDK, AI clients
    """
    configure_logging('genius-api', settings.log_level)

    await init_db()

    # Local dev may run without Firebase; production must not
    if settings.firebase_project_id:
        try:
            initialize_firebase()
        except Exception as e:
            if settings.environment == "production":
                raise
            logger.warning(f"Firebase initialization failed: {e}")

    # Provider keys are read once here, never per request
    ai_config = AIProviderConfig.from_settings(settings)
    app.state.chat_dispatcher = ChatDispatcher.from_config(ai_config)
    app.state.image_generator = build_image_generator(ai_config)

    yield


app = FastAPI(
    title="Genius API",
    description="WordPress assistant backend with quota-aware AI provider routing",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (must be after CORS to track all requests)
app.add_middleware(MetricsMiddleware)

app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Genius API",
        "version": "0.1.0",
        "environment": settings.environment
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
