"""
Test configuration and fixtures.
Uses in-memory SQLite (aiosqlite) so no database server is needed;
AI providers are replaced by in-process fakes.
"""
import os
import uuid as uuid_module
from decimal import Decimal

# Set test environment before any imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"

import pytest
from typing import AsyncGenerator, List, Optional, Sequence

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from genius.ai.base import ChatMessage, ChatProvider, ChatResponse
from genius.ai.catalog import AIModel, AIProvider, ProviderCatalog
from genius.ai.factory import ChatDispatcher
from genius.ai.image_provider import ImageGenerator
from genius.models.api_quota import ApiQuota
from genius.models.base import Base
from genius.models.conversation import Conversation
from genius.models.user import User
from genius.services.quota_manager import QuotaManager


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeChatProvider(ChatProvider):
    """Chat provider answering from memory; set fail=True to simulate an outage."""

    def __init__(self, name: str, reply: str = "Use add_action('init', ...)"):
        self.name = name
        self.reply = reply
        self.fail = False
        self.calls: List[tuple] = []

    def is_configured(self) -> bool:
        return True

    async def _complete(self, messages: Sequence[ChatMessage], model: str) -> ChatResponse:
        self.calls.append((model, list(messages)))
        if self.fail:
            raise RuntimeError("upstream unavailable")
        return ChatResponse(content=self.reply, model=model, tokens_used=42)


class FakeImageGenerator(ImageGenerator):
    """Image generator returning a fixed data URL."""

    def __init__(self, image_url: Optional[str] = "data:image/png;base64,iVBORw0KGgo="):
        super().__init__(api_key=None)
        self.image_url = image_url
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        return self.image_url


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture(scope="function")
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user with an empty wallet."""
    user = User(
        id=str(uuid_module.uuid4()),
        firebase_uid=f"firebase-test-uid-{uuid_module.uuid4().hex[:8]}",
        email="test@example.com",
        wallet_balance=Decimal("0"),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
async def test_user_with_funds(db_session: AsyncSession) -> User:
    """Create a test user with $1 in the wallet."""
    user = User(
        id=str(uuid_module.uuid4()),
        firebase_uid=f"firebase-funded-{uuid_module.uuid4().hex[:8]}",
        email="funded@example.com",
        wallet_balance=Decimal("1.000000"),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
async def test_conversation(db_session: AsyncSession, test_user: User) -> Conversation:
    """Create an untitled conversation for test_user."""
    conversation = Conversation(
        id=str(uuid_module.uuid4()),
        user_id=test_user.id,
    )
    db_session.add(conversation)
    await db_session.commit()
    await db_session.refresh(conversation)
    return conversation


@pytest.fixture
def fake_provider() -> FakeChatProvider:
    """One fake shared by every provider id."""
    return FakeChatProvider("fake")


@pytest.fixture
def chat_dispatcher(fake_provider: FakeChatProvider) -> ChatDispatcher:
    return ChatDispatcher({
        "gemini": fake_provider,
        "anthropic": fake_provider,
        "groq": fake_provider,
        "openai": fake_provider,
    })


@pytest.fixture
def image_generator() -> FakeImageGenerator:
    return FakeImageGenerator()


@pytest.fixture
def free_only_catalog() -> ProviderCatalog:
    """Two free providers with a limit of 2 and no paid fallback."""
    return ProviderCatalog(tuple(
        AIProvider(
            id=provider_id,
            name=provider_id.title(),
            daily_free_limit=2,
            is_free=True,
            models=(AIModel(id=f"{provider_id}-model", name=provider_id.title(), provider=provider_id, context_window=8000),),
        )
        for provider_id in ("alpha", "beta")
    ))


@pytest.fixture
def set_usage(db_session: AsyncSession):
    """Set used_today for a user's provider, creating quota rows first."""

    async def _set_usage(user_id: str, provider: str, used: int) -> None:
        await QuotaManager(db_session).load_quotas(user_id)
        await db_session.execute(
            update(ApiQuota)
            .where(ApiQuota.user_id == user_id)
            .where(ApiQuota.provider == provider)
            .values(used_today=used)
        )
        await db_session.commit()

    return _set_usage


def get_test_app(
    db_session: AsyncSession,
    user: User,
    dispatcher: ChatDispatcher,
    image_generator: ImageGenerator,
) -> FastAPI:
    """Create a test FastAPI app with overridden dependencies."""
    from genius.main import app
    from genius.database import get_db
    from genius.auth.dependencies import get_current_user
    from genius.ai.factory import get_chat_dispatcher, get_image_generator

    async def override_get_db():
        yield db_session

    user_id = user.id

    async def override_get_current_user():
        return await db_session.get(User, user_id)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_chat_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_image_generator] = lambda: image_generator

    return app


@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    test_user: User,
    chat_dispatcher: ChatDispatcher,
    image_generator: FakeImageGenerator,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = get_test_app(db_session, test_user, chat_dispatcher, image_generator)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client_with_funds(
    db_session: AsyncSession,
    test_user_with_funds: User,
    chat_dispatcher: ChatDispatcher,
    image_generator: FakeImageGenerator,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for a user with wallet funds."""
    app = get_test_app(db_session, test_user_with_funds, chat_dispatcher, image_generator)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
