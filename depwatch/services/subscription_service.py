"""SubscriptionService — subscription management and on-demand resolution."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from depwatch.dao.subscription_dao import SubscriptionDAO
from depwatch.engines.dependency_resolver.models import OutdatedDependency
from depwatch.engines.dependency_resolver.resolver import DependencyResolver
from depwatch.engines.dependency_resolver.url_parser import parse_repository_url
from depwatch.models.subscription import Subscription
from depwatch.services import SubscriptionNotFound, ValidationError


class SubscriptionService:
    """Stateless service for subscription CRUD.

    The resolver is passed per call so that HTTP clients stay owned by the
    application lifespan.
    """

    def __init__(self, subscription_dao: SubscriptionDAO) -> None:
        self._dao = subscription_dao

    async def create(
        self,
        session: AsyncSession,
        *,
        repository_url: str,
        emails: list[str],
    ) -> Subscription:
        """Validate and persist a subscription.

        Raises :class:`InvalidRepositoryUrl` for a URL the resolver cannot
        handle and :class:`ValidationError` for an empty email list.
        """
        repository_url = repository_url.strip()
        parse_repository_url(repository_url)

        unique_emails = list(dict.fromkeys(e.strip() for e in emails if e.strip()))
        if not unique_emails:
            raise ValidationError("at least one email is required")

        return await self._dao.create(
            session, repository_url=repository_url, emails=unique_emails
        )

    async def get(self, session: AsyncSession, subscription_id: uuid.UUID) -> Subscription:
        """Raises :class:`SubscriptionNotFound` if the subscription does not exist."""
        subscription = await self._dao.get_by_id(session, subscription_id)
        if subscription is None:
            raise SubscriptionNotFound(subscription_id)
        return subscription

    async def delete(self, session: AsyncSession, subscription_id: uuid.UUID) -> None:
        if not await self._dao.delete(session, subscription_id):
            raise SubscriptionNotFound(subscription_id)

    async def outdated_dependencies(
        self,
        session: AsyncSession,
        subscription_id: uuid.UUID,
        resolver: DependencyResolver,
    ) -> list[OutdatedDependency]:
        """Resolve the subscription's repository. Resolver errors propagate."""
        subscription = await self.get(session, subscription_id)
        return await resolver.resolve(subscription.repository_url)

    async def list_due_for_notification(
        self, session: AsyncSession, limit: int = 50
    ) -> list[Subscription]:
        return await self._dao.list_due_for_notification(session, limit)

    async def mark_notified(
        self, session: AsyncSession, subscription_id: uuid.UUID, at: datetime
    ) -> None:
        updated = await self._dao.update(session, subscription_id, last_notified_at=at)
        if updated is None:
            raise SubscriptionNotFound(subscription_id)
