"""NotificationRunner — email each subscriber its outdated-dependency report."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from depwatch.engines.dependency_resolver.errors import ResolutionError
from depwatch.engines.dependency_resolver.resolver import DependencyResolver
from depwatch.engines.notification.mailer import Mailer
from depwatch.engines.notification.template import render_report
from depwatch.models.subscription import Subscription
from depwatch.services.subscription_service import SubscriptionService

log = structlog.get_logger("depwatch.engine.notification")


class NotificationRunner:
    """Poll due subscriptions, resolve them and mail the report."""

    def __init__(
        self,
        subscription_service: SubscriptionService,
        resolver: DependencyResolver,
        mailer: Mailer,
    ) -> None:
        self._service = subscription_service
        self._resolver = resolver
        self._mailer = mailer

    async def notify_one(self, session: AsyncSession, subscription: Subscription) -> bool:
        """Resolve and mail one subscription. Returns True if an email was sent.

        A resolution failure is logged and the subscription is still stamped,
        so it is retried on the next interval rather than every cycle.
        Reports without outdated dependencies are not mailed.
        """
        sent = False
        try:
            report = await self._resolver.resolve_report(subscription.repository_url)
        except ResolutionError as exc:
            log.warning(
                "notification.resolution_failed",
                subscription_id=str(subscription.id),
                repository_url=subscription.repository_url,
                error=str(exc),
                error_type=type(exc).__name__,
            )
        else:
            if report.outdated:
                subject, html_body = render_report(subscription, report)
                # One message per address; recipients never see each other.
                for address in subscription.emails:
                    await self._mailer.send(address, subject, html_body)
                sent = True
                log.info(
                    "notification.sent",
                    subscription_id=str(subscription.id),
                    recipients=len(subscription.emails),
                    outdated=len(report.outdated),
                )

        await self._service.mark_notified(session, subscription.id, datetime.now(timezone.utc))
        return sent

    async def run_batch(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        limit: int = 20,
    ) -> int:
        """Notify due subscriptions, each in its own session.

        Returns the number of emails sent.
        """
        async with session_factory() as session:
            pending = await self._service.list_due_for_notification(session, limit)
        if not pending:
            return 0

        sent = 0
        for subscription in pending:
            try:
                async with session_factory() as session:
                    if await self.notify_one(session, subscription):
                        sent += 1
                    await session.commit()
            except Exception:
                log.error(
                    "notification.batch_failed",
                    subscription_id=str(subscription.id),
                    exc_info=True,
                )

        return sent
