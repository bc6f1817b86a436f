"""Group closing rules shared by the group, cart and payment services.

A group is open until its owner closes it or ``end_at`` passes. Closing
creates one UNPAID payment row per member; repeating it never duplicates rows.
Expired groups that nobody closed yet are closed lazily the next time they
are loaded through :func:`load_group`. That close is kept even when the
request that found it is then rejected (joining or adding to the cart of an
expired group).
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.common.time import normalize_utc
from lunch_api.db import keep_on_domain_error
from lunch_api.features.payments.repository import PaymentsRepository
from lunch_api.models import Group

from .exceptions import GroupNotFoundError
from .repository import GroupsRepository

logger = logging.getLogger(__name__)


def is_expired(group: Group, now: datetime) -> bool:
    return normalize_utc(group.end_at) <= normalize_utc(now)


async def close_group(session: AsyncSession, group: Group, *, now: datetime, reason: str) -> int:
    """Close ``group`` and initialize its payments; returns the number of rows created."""

    was_open = not group.is_closed
    if was_open:
        group.is_closed = True
        group.updated_at = now
        if reason == "expired":
            # Callers usually reject the request right after an expiry close.
            keep_on_domain_error(session)
    member_ids = [group.owner_id, *(member.user_id for member in group.members)]
    created = await PaymentsRepository(session).create_missing(
        group_id=group.id, user_ids=member_ids, now=now
    )
    await session.flush()
    if was_open:
        logger.info(
            "group.closed",
            extra=log_context(group_id=group.id, reason=reason, payments_created=created),
        )
    return created


async def load_group(
    session: AsyncSession,
    group_id: UUID,
    *,
    now: datetime,
    lazy_close: bool = True,
) -> Group:
    """Fetch a group, closing it first when it expired while still open."""

    group = await GroupsRepository(session).get(group_id)
    if group is None:
        raise GroupNotFoundError()
    if lazy_close and not group.is_closed and is_expired(group, now):
        await close_group(session, group, now=now, reason="expired")
    return group


__all__ = ["close_group", "is_expired", "load_group"]
