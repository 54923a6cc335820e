"""
Tests for quota-aware provider routing.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from genius.ai.catalog import AIModel, AIProvider, ProviderCatalog, default_catalog
from genius.models.api_quota import ApiQuota
from genius.models.user import User
from genius.repositories.quota_repository import QuotaRepository
from genius.services.quota_manager import QuotaLedger, QuotaManager


DAY_ONE = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
DAY_TWO = datetime(2026, 3, 11, 9, 0, tzinfo=timezone.utc)


def _free_provider(provider_id: str, name: str, limit: int) -> AIProvider:
    return AIProvider(
        id=provider_id,
        name=name,
        daily_free_limit=limit,
        is_free=True,
        models=(AIModel(id=f"{provider_id}-model", name=f"{name} Model", provider=provider_id, context_window=8000),),
    )


async def _set_used(db: AsyncSession, user_id: str, provider: str, used: int) -> None:
    await db.execute(
        update(ApiQuota)
        .where(ApiQuota.user_id == user_id)
        .where(ApiQuota.provider == provider)
        .values(used_today=used)
    )
    await db.commit()


async def _stored_used(db: AsyncSession, user_id: str, provider: str) -> int:
    quota = await QuotaRepository.get_quota(db, user_id, provider)
    return quota.used_today


class TestLoadQuotas:
    """Tests for quota row creation and daily reset."""

    @pytest.mark.asyncio
    async def test_creates_rows_in_catalog_order(self, db_session: AsyncSession, test_user: User):
        """Test first load creates one zeroed row per provider."""
        manager = QuotaManager(db_session, clock=lambda: DAY_ONE)
        ledger = await manager.load_quotas(test_user.id)

        assert [q.provider for q in ledger.quotas] == ["gemini", "anthropic", "groq", "openai"]
        assert all(q.used_today == 0 for q in ledger.quotas)
        assert ledger.get("groq").daily_limit == 10000
        assert ledger.get("openai").is_free is False

    @pytest.mark.asyncio
    async def test_second_load_keeps_usage(self, db_session: AsyncSession, test_user: User):
        """Test loading again on the same day does not touch counters."""
        manager = QuotaManager(db_session, clock=lambda: DAY_ONE)
        await manager.load_quotas(test_user.id)
        await _set_used(db_session, test_user.id, "gemini", 7)

        ledger = await manager.load_quotas(test_user.id)

        assert ledger.get("gemini").used_today == 7
        result = await db_session.execute(select(ApiQuota).where(ApiQuota.user_id == test_user.id))
        assert len(result.scalars().all()) == 4

    @pytest.mark.asyncio
    async def test_reset_on_new_day(self, db_session: AsyncSession, test_user: User):
        """Test counters return to zero once the calendar day changes."""
        await QuotaManager(db_session, clock=lambda: DAY_ONE).load_quotas(test_user.id)
        await _set_used(db_session, test_user.id, "gemini", 1500)

        ledger = await QuotaManager(db_session, clock=lambda: DAY_TWO).load_quotas(test_user.id)

        assert ledger.get("gemini").used_today == 0
        assert await _stored_used(db_session, test_user.id, "gemini") == 0

    @pytest.mark.asyncio
    async def test_reset_uses_configured_timezone(self, db_session: AsyncSession, test_user: User):
        """Test the day boundary follows the reset timezone, not UTC."""
        evening = datetime(2026, 3, 10, 23, 0, tzinfo=timezone.utc)  # 20:00 in Sao Paulo
        after_utc_midnight = datetime(2026, 3, 11, 1, 0, tzinfo=timezone.utc)  # 22:00 in Sao Paulo
        after_local_midnight = datetime(2026, 3, 11, 4, 0, tzinfo=timezone.utc)  # 01:00 in Sao Paulo

        await QuotaManager(
            db_session, clock=lambda: evening, reset_timezone="America/Sao_Paulo"
        ).load_quotas(test_user.id)
        await _set_used(db_session, test_user.id, "groq", 5)

        same_day = await QuotaManager(
            db_session, clock=lambda: after_utc_midnight, reset_timezone="America/Sao_Paulo"
        ).load_quotas(test_user.id)
        assert same_day.get("groq").used_today == 5

        next_day = await QuotaManager(
            db_session, clock=lambda: after_local_midnight, reset_timezone="America/Sao_Paulo"
        ).load_quotas(test_user.id)
        assert next_day.get("groq").used_today == 0

    @pytest.mark.asyncio
    async def test_reset_dated_after_today(self, db_session: AsyncSession, test_user: User):
        """Test a last reset stamped on a later day still counts as a different day."""
        await QuotaManager(db_session, clock=lambda: DAY_TWO).load_quotas(test_user.id)
        await _set_used(db_session, test_user.id, "gemini", 9)

        manager = QuotaManager(db_session, clock=lambda: DAY_ONE)
        ledger = await manager.load_quotas(test_user.id)
        assert ledger.get("gemini").used_today == 0

        await manager.increment_usage(ledger, "gemini")
        ledger = await manager.load_quotas(test_user.id)
        assert ledger.get("gemini").used_today == 1

    @pytest.mark.asyncio
    async def test_reset_happens_once(self, db_session: AsyncSession, test_user: User):
        """Test usage recorded after a reset survives another load the same day."""
        await QuotaManager(db_session, clock=lambda: DAY_ONE).load_quotas(test_user.id)
        await _set_used(db_session, test_user.id, "gemini", 20)

        manager = QuotaManager(db_session, clock=lambda: DAY_TWO)
        ledger = await manager.load_quotas(test_user.id)
        await manager.increment_usage(ledger, "gemini")

        ledger = await manager.load_quotas(test_user.id)
        assert ledger.get("gemini").used_today == 1

    @pytest.mark.asyncio
    async def test_new_catalog_provider_gets_row(self, db_session: AsyncSession, test_user: User, free_only_catalog):
        """Test providers added to the catalog later get a quota row."""
        await QuotaManager(db_session, catalog=free_only_catalog, clock=lambda: DAY_ONE).load_quotas(test_user.id)

        extended = ProviderCatalog(free_only_catalog.providers + (_free_provider("gamma", "Gamma", 3),))
        ledger = await QuotaManager(db_session, catalog=extended, clock=lambda: DAY_ONE).load_quotas(test_user.id)

        assert [q.provider for q in ledger.quotas] == ["alpha", "beta", "gamma"]
        assert ledger.get("gamma").daily_limit == 3


class TestCheckAndGetBestProvider:
    """Tests for routing decisions."""

    @pytest.mark.asyncio
    async def test_requested_provider_has_quota(self, db_session: AsyncSession, test_user: User):
        """Test the requested model is used while its provider has quota."""
        manager = QuotaManager(db_session)
        decision = await manager.check_and_get_best_provider(test_user.id, "gemini-2.5-pro")

        assert decision.can_proceed is True
        assert decision.provider == "gemini"
        assert decision.model.id == "gemini-2.5-pro"
        assert decision.cost == Decimal("0")
        assert decision.quota_remaining == 1500
        assert decision.switched_provider is None
        assert decision.outcome == "direct"

    @pytest.mark.asyncio
    async def test_switches_to_next_free_provider(self, db_session: AsyncSession, test_user: User, set_usage):
        """Test Gemini and Claude exhausted resolves to Groq's first model."""
        await set_usage(test_user.id, "gemini", 1500)
        await set_usage(test_user.id, "anthropic", 1000)

        decision = await QuotaManager(db_session).check_and_get_best_provider(test_user.id, "gemini-2.5-flash")

        assert decision.can_proceed is True
        assert decision.provider == "groq"
        assert decision.model.id == "llama-3.3-70b-versatile"
        assert decision.switched_provider == "Groq"
        assert decision.quota_remaining == 10000
        assert decision.outcome == "switched"

    @pytest.mark.asyncio
    async def test_fallback_walks_catalog_order(self, db_session: AsyncSession, test_user: User, set_usage):
        """Test the first free provider with quota wins, skipping the requested one."""
        await set_usage(test_user.id, "groq", 10000)

        decision = await QuotaManager(db_session).check_and_get_best_provider(test_user.id, "mixtral-8x7b-32768")

        assert decision.provider == "gemini"
        assert decision.model.id == "gemini-2.5-flash"
        assert decision.switched_provider == "Google Gemini"

    @pytest.mark.asyncio
    async def test_free_provider_preferred_over_paid(self, db_session: AsyncSession, test_user: User, set_usage):
        """Test a free provider with quota is chosen before any paid provider."""
        await set_usage(test_user.id, "anthropic", 1000)
        await set_usage(test_user.id, "gemini", 1500)
        await set_usage(test_user.id, "groq", 9999)

        decision = await QuotaManager(db_session).check_and_get_best_provider(
            test_user.id, "claude-sonnet-4-20250514"
        )

        assert decision.provider == "groq"
        assert decision.quota_remaining == 1
        assert decision.cost == Decimal("0")

    @pytest.mark.asyncio
    async def test_paid_fallback(self, db_session: AsyncSession, test_user: User, set_usage):
        """Test the first paid provider serves once every free tier is used up."""
        await set_usage(test_user.id, "gemini", 1500)
        await set_usage(test_user.id, "anthropic", 1000)
        await set_usage(test_user.id, "groq", 10000)

        decision = await QuotaManager(db_session).check_and_get_best_provider(test_user.id, "gemini-2.5-flash")

        assert decision.can_proceed is True
        assert decision.provider == "openai"
        assert decision.model.id == "gpt-4o"
        assert decision.cost == Decimal("0.002")
        assert decision.quota_remaining is None
        assert decision.is_unbounded
        assert decision.switched_provider == "OpenAI (Paid)"
        assert decision.outcome == "paid"

    @pytest.mark.asyncio
    async def test_paid_model_requested_directly(self, db_session: AsyncSession, test_user: User):
        """Test a paid model can be requested without a switch notice."""
        decision = await QuotaManager(db_session).check_and_get_best_provider(test_user.id, "gpt-4o-mini")

        assert decision.can_proceed is True
        assert decision.provider == "openai"
        assert decision.cost == Decimal("0.0001")
        assert decision.quota_remaining is None
        assert decision.switched_provider is None

    @pytest.mark.asyncio
    async def test_hard_failure_without_paid_provider(self, db_session: AsyncSession, test_user: User, free_only_catalog):
        """Test routing refuses when all free tiers are used and nothing is paid."""
        manager = QuotaManager(db_session, catalog=free_only_catalog, default_model_id="alpha-model")
        await manager.load_quotas(test_user.id)
        await _set_used(db_session, test_user.id, "alpha", 2)
        await _set_used(db_session, test_user.id, "beta", 2)

        decision = await manager.check_and_get_best_provider(test_user.id, "beta-model")

        assert decision.can_proceed is False
        assert decision.quota_remaining == 0
        assert decision.provider == "beta"
        assert decision.outcome == "exhausted"

    @pytest.mark.asyncio
    async def test_unknown_model_uses_default(self, db_session: AsyncSession, test_user: User):
        """Test an unknown model id is routed as the default model."""
        decision = await QuotaManager(db_session).check_and_get_best_provider(test_user.id, "not-a-model")

        assert decision.can_proceed is True
        assert decision.model.id == "gemini-2.5-flash"
        assert decision.switched_provider is None

    @pytest.mark.asyncio
    async def test_missing_row_forbids(self, db_session: AsyncSession, test_user: User):
        """Test a provider without a quota row cannot serve requests."""
        manager = QuotaManager(db_session)
        model, _ = default_catalog.find_model("gemini-2.5-flash")

        decision = manager.check_provider_quota(QuotaLedger(user_id=test_user.id), model)

        assert decision.can_proceed is False
        assert decision.quota_remaining == 0
        assert decision.cost == Decimal("0")


class TestIncrementUsage:
    """Tests for usage recording."""

    @pytest.mark.asyncio
    async def test_increments_accumulate(self, db_session: AsyncSession, test_user: User):
        """Test two increments leave the stored counter at 2."""
        manager = QuotaManager(db_session)
        ledger = await manager.load_quotas(test_user.id)

        ledger = await manager.increment_usage(ledger, "anthropic")
        ledger = await manager.increment_usage(ledger, "anthropic")

        assert ledger.get("anthropic").used_today == 2
        assert await _stored_used(db_session, test_user.id, "anthropic") == 2

    @pytest.mark.asyncio
    async def test_stale_ledger_does_not_lose_updates(self, db_session: AsyncSession, test_user: User):
        """Test increments through two copies of the same ledger both count."""
        manager = QuotaManager(db_session)
        ledger = await manager.load_quotas(test_user.id)

        await manager.increment_usage(ledger, "groq")
        await manager.increment_usage(ledger, "groq")

        assert await _stored_used(db_session, test_user.id, "groq") == 2

    @pytest.mark.asyncio
    async def test_unknown_provider_is_ignored(self, db_session: AsyncSession, test_user: User):
        """Test incrementing a provider not in the ledger changes nothing."""
        manager = QuotaManager(db_session)
        ledger = await manager.load_quotas(test_user.id)

        updated = await manager.increment_usage(ledger, "deepseek")

        assert updated == ledger
        assert await QuotaRepository.get_quota(db_session, test_user.id, "deepseek") is None

    @pytest.mark.asyncio
    async def test_increment_after_routing(self, db_session: AsyncSession, test_user: User):
        """Test remaining quota drops after usage is recorded."""
        manager = QuotaManager(db_session)
        decision = await manager.check_and_get_best_provider(test_user.id, "gemini-2.5-flash")
        await manager.increment_usage(decision.ledger, decision.provider)

        next_decision = await manager.check_and_get_best_provider(test_user.id, "gemini-2.5-flash")
        assert next_decision.quota_remaining == 1499


class TestQuotaStatus:
    """Tests for quota status reporting."""

    @pytest.mark.asyncio
    async def test_status_entries(self, db_session: AsyncSession, test_user: User, set_usage):
        """Test one status entry per provider in catalog order."""
        await set_usage(test_user.id, "gemini", 10)
        manager = QuotaManager(db_session)
        ledger = await manager.load_quotas(test_user.id)

        status = manager.get_quota_status(ledger)

        assert [s["provider"] for s in status] == ["gemini", "anthropic", "groq", "openai"]
        assert status[0] == {"provider": "gemini", "used": 10, "limit": 1500, "remaining": 1490, "is_free": True}
        assert status[3]["remaining"] is None
        assert status[3]["is_free"] is False

    @pytest.mark.asyncio
    async def test_status_is_read_only(self, db_session: AsyncSession, test_user: User):
        """Test reading status twice returns the same data and stores nothing."""
        manager = QuotaManager(db_session)
        ledger = await manager.load_quotas(test_user.id)

        first = manager.get_quota_status(ledger)
        second = manager.get_quota_status(ledger)

        assert first == second
        assert await _stored_used(db_session, test_user.id, "gemini") == 0
