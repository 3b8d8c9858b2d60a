"""SubscriptionDAO — subscriptions table operations."""

import os
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depwatch.dao.base import BaseDAO
from depwatch.models.subscription import Subscription


class SubscriptionDAO(BaseDAO[Subscription]):
    model = Subscription

    async def list_due_for_notification(
        self, session: AsyncSession, limit: int = 50
    ) -> list[Subscription]:
        """Return subscriptions whose report is due.

        Criteria:
        - last_notified_at is NULL or older than DEPWATCH_NOTIFY_INTERVAL seconds
        """
        interval = float(os.environ.get("DEPWATCH_NOTIFY_INTERVAL", "86400"))
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=interval)
        stmt = (
            select(Subscription)
            .where(
                (Subscription.last_notified_at.is_(None))
                | (Subscription.last_notified_at < cutoff)
            )
            .order_by(Subscription.created_at, Subscription.id)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
