"""Payment persistence helpers."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.models import Payment, PaymentStatus


class PaymentsRepository:
    """Query helpers for group payment rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_group(self, group_id: UUID) -> list[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.group_id == group_id)
            .order_by(Payment.created_at, Payment.id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, *, group_id: UUID, user_id: UUID) -> Payment | None:
        stmt = (
            select(Payment)
            .where(Payment.group_id == group_id, Payment.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_missing(
        self, *, group_id: UUID, user_ids: Sequence[UUID], now: datetime
    ) -> int:
        """Insert an UNPAID row for every user without one; existing rows are untouched."""

        existing = {payment.user_id for payment in await self.list_for_group(group_id)}
        created = [
            Payment(
                group_id=group_id,
                user_id=user_id,
                status=PaymentStatus.UNPAID,
                confirmed_by_owner=False,
                created_at=now,
                updated_at=now,
            )
            for user_id in dict.fromkeys(user_ids)
            if user_id not in existing
        ]
        if created:
            self._session.add_all(created)
            await self._session.flush()
        return len(created)

    async def all_settled(self, group_id: UUID) -> bool:
        """True when the group has payment rows and every one is PAID and owner-confirmed."""

        payments = await self.list_for_group(group_id)
        return bool(payments) and all(
            p.status == PaymentStatus.PAID and p.confirmed_by_owner for p in payments
        )


__all__ = ["PaymentsRepository"]
