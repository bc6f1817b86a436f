"""Business logic for settling payments inside closed groups."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.common.time import utc_now
from lunch_api.features.groups.exceptions import (
    GroupStillOpenError,
    NotGroupMemberError,
    NotGroupOwnerError,
)
from lunch_api.features.groups.lifecycle import load_group
from lunch_api.models import Group, Payment, PaymentStatus

from .exceptions import PaymentAlreadySettledError, PaymentNotFoundError
from .repository import PaymentsRepository
from .schemas import GroupPayments, PaymentOut, PaymentStatistics

logger = logging.getLogger(__name__)


def payment_out(payment: Payment) -> PaymentOut:
    return PaymentOut(
        id=payment.id,
        group_id=payment.group_id,
        user_id=payment.user_id,
        user_name=payment.user.name,
        status=payment.status,
        confirmed_by_owner=payment.confirmed_by_owner,
        confirmed_at=payment.confirmed_at,
        updated_at=payment.updated_at,
    )


def payment_statistics(payments: Sequence[Payment]) -> PaymentStatistics:
    by_status = {status: 0 for status in PaymentStatus}
    for payment in payments:
        by_status[PaymentStatus(payment.status)] += 1
    return PaymentStatistics(
        total=len(payments),
        paid=by_status[PaymentStatus.PAID],
        unpaid=by_status[PaymentStatus.UNPAID],
        pending=by_status[PaymentStatus.PENDING],
        all_confirmed=bool(payments)
        and all(p.status == PaymentStatus.PAID and p.confirmed_by_owner for p in payments),
    )


class PaymentsService:
    """Track who paid the group owner.

    Members may only self-report ``pending``; the owner confirms any status,
    which is how a payment reaches ``paid``.
    """

    def __init__(
        self,
        *,
        session: AsyncSession,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session = session
        self._now = now
        self._repo = PaymentsRepository(session)

    async def get_group_payments(self, group_id: UUID, *, user_id: UUID) -> GroupPayments:
        group = await load_group(self._session, group_id, now=self._now())
        if group.owner_id != user_id and not group.is_member(user_id):
            raise NotGroupMemberError()
        payments = await self._repo.list_for_group(group.id)
        return GroupPayments(
            group_id=group.id,
            payments=[payment_out(p) for p in payments],
            statistics=payment_statistics(payments),
        )

    async def update_payment_status(
        self,
        group_id: UUID,
        *,
        target_user_id: UUID,
        owner_id: UUID,
        status: PaymentStatus,
    ) -> PaymentOut:
        """Owner sets a member's payment status; the change counts as owner-confirmed."""

        group = await self._closed_group(group_id)
        if group.owner_id != owner_id:
            raise NotGroupOwnerError()
        if not group.is_member(target_user_id):
            raise NotGroupMemberError()

        payment = await self._require_payment(group, target_user_id)
        now = self._now()
        payment.status = PaymentStatus(status)
        payment.confirmed_by_owner = True
        payment.confirmed_at = now
        payment.updated_at = now
        await self._session.flush()

        logger.info(
            "payment.status.updated",
            extra=log_context(
                group_id=group.id,
                user_id=target_user_id,
                status=payment.status.value,
                confirmed_by=str(owner_id),
            ),
        )
        return payment_out(payment)

    async def mark_as_pending(self, group_id: UUID, *, user_id: UUID) -> PaymentOut:
        """Member reports having paid; awaits owner confirmation."""

        group = await self._closed_group(group_id)
        if not group.is_member(user_id):
            raise NotGroupMemberError()

        payment = await self._require_payment(group, user_id)
        if payment.status == PaymentStatus.PAID:
            raise PaymentAlreadySettledError()

        payment.status = PaymentStatus.PENDING
        payment.confirmed_by_owner = False
        payment.confirmed_at = None
        payment.updated_at = self._now()
        await self._session.flush()

        logger.info(
            "payment.pending.reported",
            extra=log_context(group_id=group.id, user_id=user_id),
        )
        return payment_out(payment)

    async def initialize_payments(self, group_id: UUID) -> int:
        """Create missing UNPAID rows for every member; returns how many were added."""

        group = await load_group(self._session, group_id, now=self._now(), lazy_close=False)
        member_ids = [group.owner_id, *(m.user_id for m in group.members)]
        return await self._repo.create_missing(
            group_id=group.id, user_ids=member_ids, now=self._now()
        )

    async def can_delete_group(self, group_id: UUID) -> bool:
        return await self._repo.all_settled(group_id)

    async def _closed_group(self, group_id: UUID) -> Group:
        group = await load_group(self._session, group_id, now=self._now())
        if not group.is_closed:
            raise GroupStillOpenError()
        return group

    async def _require_payment(self, group: Group, user_id: UUID) -> Payment:
        payment = await self._repo.get(group_id=group.id, user_id=user_id)
        if payment is None:
            raise PaymentNotFoundError()
        return payment


__all__ = ["PaymentsService", "payment_out", "payment_statistics"]
