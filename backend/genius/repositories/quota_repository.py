"""
Repository for per-user, per-provider quota rows.

Rows are returned as immutable QuotaSnapshot values so callers never hold
live ORM objects across awaits. Writes that race between concurrent
requests (increment, daily reset) are single SQL statements.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from genius.models.api_quota import ApiQuota


@dataclass(frozen=True)
class QuotaSnapshot:
    """Point-in-time copy of one ApiQuota row."""
    provider: str
    used_today: int
    daily_limit: int
    cost_per_request: Decimal
    is_free: bool
    last_reset_at: datetime

    @property
    def remaining(self) -> int:
        return self.daily_limit - self.used_today

    @classmethod
    def from_row(cls, row: ApiQuota) -> "QuotaSnapshot":
        return cls(
            provider=row.provider,
            used_today=row.used_today or 0,
            daily_limit=row.daily_limit or 0,
            cost_per_request=Decimal(row.cost_per_request or 0),
            is_free=bool(row.is_free),
            last_reset_at=row.last_reset_at,
        )


def _insert_for(db: AsyncSession):
    """Dialect-specific INSERT supporting ON CONFLICT."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


class QuotaRepository:
    """Repository for quota database operations."""

    @staticmethod
    async def get_quotas_for_user(db: AsyncSession, user_id: str) -> List[QuotaSnapshot]:
        """
        Fetch every quota row for a user.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            List of snapshots, oldest row first
        """
        result = await db.execute(
            select(ApiQuota)
            .where(ApiQuota.user_id == user_id)
            .order_by(ApiQuota.created_at)
            .execution_options(populate_existing=True)
        )
        return [QuotaSnapshot.from_row(row) for row in result.scalars().all()]

    @staticmethod
    async def get_quota(db: AsyncSession, user_id: str, provider: str) -> Optional[QuotaSnapshot]:
        """Fetch one quota row, or None."""
        result = await db.execute(
            select(ApiQuota)
            .where(
                ApiQuota.user_id == user_id,
                ApiQuota.provider == provider,
            )
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return QuotaSnapshot.from_row(row) if row else None

    @staticmethod
    async def upsert_quota(
        db: AsyncSession,
        user_id: str,
        quota: QuotaSnapshot,
        overwrite: bool = True,
    ) -> QuotaSnapshot:
        """
        Insert a quota row, or merge used_today/daily_limit/last_reset_at
        into the existing (user_id, provider) row.

        Args:
            db: Database session
            user_id: User ID
            quota: Desired row state
            overwrite: If False an existing row is left untouched, so lazy
                creation cannot clobber a concurrent request's increments

        Returns:
            Row state as stored
        """
        insert = _insert_for(db)
        stmt = insert(ApiQuota).values(
            user_id=user_id,
            provider=quota.provider,
            used_today=quota.used_today,
            daily_limit=quota.daily_limit,
            cost_per_request=quota.cost_per_request,
            is_free=quota.is_free,
            last_reset_at=quota.last_reset_at,
        )
        if overwrite:
            stmt = stmt.on_conflict_do_update(
                index_elements=[ApiQuota.user_id, ApiQuota.provider],
                set_={
                    "used_today": stmt.excluded.used_today,
                    "daily_limit": stmt.excluded.daily_limit,
                    "last_reset_at": stmt.excluded.last_reset_at,
                },
            )
        else:
            stmt = stmt.on_conflict_do_nothing(
                index_elements=[ApiQuota.user_id, ApiQuota.provider],
            )
        await db.execute(stmt)
        await db.commit()

        stored = await QuotaRepository.get_quota(db, user_id, quota.provider)
        return stored

    @staticmethod
    async def reset_if_stale(
        db: AsyncSession,
        user_id: str,
        provider: str,
        day_start: datetime,
        day_end: datetime,
        now: datetime,
    ) -> bool:
        """
        Zero used_today if the row was last reset on any other day.

        A last reset outside [day_start, day_end) is stale, including one
        dated after today (clock skew or a changed reset timezone). The
        staleness test is part of the UPDATE, so two requests crossing
        the day boundary together reset the row once and later increments
        are kept.

        Args:
            db: Database session
            user_id: User ID
            provider: Provider ID
            day_start: Start of the current day (naive UTC)
            day_end: Start of the following day (naive UTC)
            now: Reset timestamp (naive UTC)

        Returns:
            True if this call performed the reset
        """
        result = await db.execute(
            update(ApiQuota)
            .where(ApiQuota.user_id == user_id)
            .where(ApiQuota.provider == provider)
            .where(or_(ApiQuota.last_reset_at < day_start, ApiQuota.last_reset_at >= day_end))
            .values(used_today=0, last_reset_at=now)
        )
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    async def increment_used_today(
        db: AsyncSession,
        user_id: str,
        provider: str,
        amount: int = 1,
    ) -> Optional[QuotaSnapshot]:
        """
        Atomically add to used_today and return the row as stored.

        Args:
            db: Database session
            user_id: User ID
            provider: Provider ID
            amount: Units to add (default: 1)

        Returns:
            Updated snapshot, or None if the row does not exist
        """
        if amount < 0:
            raise ValueError("Cannot increment usage by a negative amount")

        result = await db.execute(
            update(ApiQuota)
            .where(ApiQuota.user_id == user_id)
            .where(ApiQuota.provider == provider)
            .values(used_today=ApiQuota.used_today + amount)
        )
        await db.commit()

        if result.rowcount == 0:
            return None
        return await QuotaRepository.get_quota(db, user_id, provider)
