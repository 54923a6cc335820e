"""
Quota-aware provider routing.

Decides which provider serves a (user, requested model) pair: the requested
provider while its free daily quota lasts, then the other free providers in
catalog order, then the first paid provider. Usage is recorded only after a
generation has succeeded and its output is stored.

A QuotaManager is created per request. The user's quota rows travel through
the call chain as an immutable QuotaLedger; nothing is cached on the manager.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from genius.ai.catalog import AIModel, AIProvider, ProviderCatalog, default_catalog
from genius.config import settings
from genius.database import get_db
from genius.repositories.quota_repository import QuotaRepository, QuotaSnapshot
from genius.utils.logging import (
    log_quota_decision,
    log_quota_exhausted,
    log_quotas_initialized,
    log_quotas_reset,
    log_usage_recorded,
)
from genius.utils.metrics import (
    quota_decisions_total,
    quota_resets_total,
    quota_usage_increments_total,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _naive_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class QuotaLedger:
    """A user's quota rows as loaded for one logical operation, in catalog order."""
    user_id: str
    quotas: Tuple[QuotaSnapshot, ...] = ()

    def get(self, provider_id: str) -> Optional[QuotaSnapshot]:
        for quota in self.quotas:
            if quota.provider == provider_id:
                return quota
        return None

    def with_quota(self, snapshot: QuotaSnapshot) -> "QuotaLedger":
        """Copy of the ledger with one provider's row replaced."""
        quotas = tuple(
            snapshot if quota.provider == snapshot.provider else quota
            for quota in self.quotas
        )
        return QuotaLedger(user_id=self.user_id, quotas=quotas)


@dataclass(frozen=True)
class RoutingDecision:
    """
    Outcome of routing one request.

    quota_remaining is None when the provider is paid (unbounded).
    switched_provider names the substitute provider when the requested
    one could not serve the request.
    """
    can_proceed: bool
    provider: str
    model: AIModel
    cost: Decimal
    quota_used: int
    quota_remaining: Optional[int]
    switched_provider: Optional[str] = None
    ledger: Optional[QuotaLedger] = field(default=None, repr=False, compare=False)

    @property
    def is_unbounded(self) -> bool:
        return self.quota_remaining is None

    @property
    def outcome(self) -> str:
        if not self.can_proceed:
            return "exhausted"
        if self.switched_provider is None:
            return "direct"
        return "switched" if self.quota_remaining is not None else "paid"


class QuotaManager:
    """Routes requests across free-tier providers and records usage."""

    def __init__(
        self,
        db: AsyncSession,
        catalog: ProviderCatalog = default_catalog,
        clock: Callable[[], datetime] = _utc_now,
        reset_timezone: Optional[str] = None,
        default_model_id: Optional[str] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.clock = clock
        self.tz = ZoneInfo(reset_timezone or settings.quota_reset_timezone)
        self.default_model_id = default_model_id or settings.default_model_id

    # Day boundaries

    def _local_day(self, naive_utc: datetime):
        return naive_utc.replace(tzinfo=timezone.utc).astimezone(self.tz).date()

    def _day_bounds(self, now: datetime) -> Tuple[datetime, datetime]:
        """Start of now's day and of the following day in the reset timezone, as naive UTC."""
        local_date = now.astimezone(self.tz).date()
        next_date = local_date + timedelta(days=1)
        return (
            _naive_utc(datetime.combine(local_date, time.min, tzinfo=self.tz)),
            _naive_utc(datetime.combine(next_date, time.min, tzinfo=self.tz)),
        )

    def is_new_day(self, last_reset_at: datetime, now: datetime) -> bool:
        return self._local_day(last_reset_at) != self._local_day(_naive_utc(now))

    # Loading

    def _initial_quota(self, provider: AIProvider, now: datetime) -> QuotaSnapshot:
        return QuotaSnapshot(
            provider=provider.id,
            used_today=0,
            daily_limit=provider.daily_free_limit,
            cost_per_request=(
                Decimal("0") if provider.is_free
                else provider.primary_model.cost_per_request or Decimal("0")
            ),
            is_free=provider.is_free,
            last_reset_at=_naive_utc(now),
        )

    def _build_ledger(self, user_id: str, rows: List[QuotaSnapshot]) -> QuotaLedger:
        by_provider: Dict[str, QuotaSnapshot] = {row.provider: row for row in rows}
        ordered = [by_provider.pop(p.id) for p in self.catalog.providers if p.id in by_provider]
        # Rows for providers dropped from the catalog keep their place at the end
        ordered.extend(row for row in rows if row.provider in by_provider)
        return QuotaLedger(user_id=user_id, quotas=tuple(ordered))

    async def load_quotas(self, user_id: str) -> QuotaLedger:
        """
        Load the user's quota rows, creating and resetting them as needed.

        - No rows yet: one row per catalog provider is created.
        - Rows whose last reset falls on an earlier calendar day are zeroed.
        - Providers added to the catalog since the rows were created get a row.

        Args:
            user_id: User ID

        Returns:
            QuotaLedger in catalog order
        """
        now = self.clock()
        rows = await QuotaRepository.get_quotas_for_user(self.db, user_id)

        if not rows:
            for provider in self.catalog.providers:
                await QuotaRepository.upsert_quota(
                    self.db, user_id, self._initial_quota(provider, now), overwrite=False
                )
            log_quotas_initialized(logger, user_id=user_id, providers=[p.id for p in self.catalog.providers])
            rows = await QuotaRepository.get_quotas_for_user(self.db, user_id)
            return self._build_ledger(user_id, rows)

        changed = False
        reset_providers = []
        day_start, day_end = self._day_bounds(now)
        for row in rows:
            if self.is_new_day(row.last_reset_at, now):
                changed = True
                if await QuotaRepository.reset_if_stale(
                    self.db, user_id, row.provider, day_start, day_end, _naive_utc(now)
                ):
                    reset_providers.append(row.provider)
                    quota_resets_total.labels(provider=row.provider).inc()

        known = {row.provider for row in rows}
        for provider in self.catalog.providers:
            if provider.id not in known:
                changed = True
                await QuotaRepository.upsert_quota(
                    self.db, user_id, self._initial_quota(provider, now), overwrite=False
                )

        if reset_providers:
            log_quotas_reset(logger, user_id=user_id, providers=reset_providers)
        if changed:
            rows = await QuotaRepository.get_quotas_for_user(self.db, user_id)

        return self._build_ledger(user_id, rows)

    # Routing

    def default_model(self) -> AIModel:
        found = self.catalog.find_model(self.default_model_id)
        if found:
            return found[0]
        free = self.catalog.list_free_providers()
        if free:
            return free[0].primary_model
        return self.catalog.providers[0].primary_model

    def check_provider_quota(self, ledger: QuotaLedger, model: AIModel) -> RoutingDecision:
        """
        Decide whether model's provider can serve one more request.

        Paid providers always can; free providers while daily_limit - used_today > 0.
        A provider with no ledger row or no catalog entry cannot.
        """
        quota = ledger.get(model.provider)
        provider = self.catalog.find_provider(model.provider)

        if quota is None or provider is None:
            return RoutingDecision(
                can_proceed=False,
                provider=model.provider,
                model=model,
                cost=Decimal("0"),
                quota_used=0,
                quota_remaining=0,
                ledger=ledger,
            )

        if not provider.is_free:
            return RoutingDecision(
                can_proceed=True,
                provider=model.provider,
                model=model,
                cost=model.cost_per_request or Decimal("0"),
                quota_used=quota.used_today,
                quota_remaining=None,
                ledger=ledger,
            )

        remaining = quota.remaining
        return RoutingDecision(
            can_proceed=remaining > 0,
            provider=model.provider,
            model=model,
            cost=Decimal("0"),
            quota_used=quota.used_today,
            quota_remaining=max(remaining, 0),
            ledger=ledger,
        )

    def select_provider(self, ledger: QuotaLedger, requested_model_id: str) -> RoutingDecision:
        """
        Pick the provider for a request against an already loaded ledger.

        Order: requested provider, other free providers (first model each),
        first paid provider (first model). Unknown model ids are replaced by
        the default model.
        """
        found = self.catalog.find_model(requested_model_id)
        requested_model = found[0] if found else self.default_model()

        decision = self.check_provider_quota(ledger, requested_model)
        if decision.can_proceed:
            return decision

        for provider in self.catalog.list_free_providers():
            if provider.id == requested_model.provider:
                continue
            alternative = self.check_provider_quota(ledger, provider.primary_model)
            if alternative.can_proceed:
                return RoutingDecision(
                    can_proceed=True,
                    provider=alternative.provider,
                    model=alternative.model,
                    cost=alternative.cost,
                    quota_used=alternative.quota_used,
                    quota_remaining=alternative.quota_remaining,
                    switched_provider=provider.name,
                    ledger=ledger,
                )

        for provider in self.catalog.list_paid_providers():
            paid_model = provider.primary_model
            return RoutingDecision(
                can_proceed=True,
                provider=provider.id,
                model=paid_model,
                cost=paid_model.cost_per_request or Decimal("0"),
                quota_used=0,
                quota_remaining=None,
                switched_provider=f"{provider.name} (Paid)",
                ledger=ledger,
            )

        return RoutingDecision(
            can_proceed=False,
            provider=requested_model.provider,
            model=requested_model,
            cost=Decimal("0"),
            quota_used=0,
            quota_remaining=0,
            ledger=ledger,
        )

    async def check_and_get_best_provider(self, user_id: str, requested_model_id: str) -> RoutingDecision:
        """
        Load the user's quotas and route the request.

        The returned decision carries the ledger it was made against; pass
        that ledger to increment_usage and get_quota_status.
        """
        ledger = await self.load_quotas(user_id)
        decision = self.select_provider(ledger, requested_model_id)

        quota_decisions_total.labels(provider=decision.provider, outcome=decision.outcome).inc()
        if decision.can_proceed:
            log_quota_decision(
                logger,
                user_id=user_id,
                requested_model=requested_model_id,
                provider=decision.provider,
                model=decision.model.id,
                outcome=decision.outcome,
                quota_remaining=decision.quota_remaining,
                switched_provider=decision.switched_provider,
            )
        else:
            log_quota_exhausted(logger, user_id=user_id, requested_model=requested_model_id)

        return decision

    # Usage

    async def increment_usage(self, ledger: QuotaLedger, provider_id: str) -> QuotaLedger:
        """
        Record one unit of usage for provider_id.

        Call once per successful generation, after its output is stored.
        Providers absent from the ledger are ignored.

        Returns:
            Ledger reflecting the stored counter
        """
        if ledger.get(provider_id) is None:
            return ledger

        updated = await QuotaRepository.increment_used_today(self.db, ledger.user_id, provider_id)
        if updated is None:
            return ledger

        quota_usage_increments_total.labels(provider=provider_id).inc()
        log_usage_recorded(
            logger,
            user_id=ledger.user_id,
            provider=provider_id,
            used_today=updated.used_today,
            daily_limit=updated.daily_limit,
        )
        return ledger.with_quota(updated)

    def get_quota_status(self, ledger: QuotaLedger) -> List[dict]:
        """Per-provider usage for quota meters, in ledger order."""
        status = []
        for quota in ledger.quotas:
            provider = self.catalog.find_provider(quota.provider)
            is_free = provider.is_free if provider else quota.is_free
            status.append({
                "provider": quota.provider,
                "used": quota.used_today,
                "limit": quota.daily_limit,
                "remaining": max(quota.remaining, 0) if is_free else None,
                "is_free": is_free,
            })
        return status


def get_quota_manager(db: AsyncSession = Depends(get_db)) -> QuotaManager:
    """FastAPI dependency: a fresh QuotaManager bound to the request's session."""
    return QuotaManager(db)
