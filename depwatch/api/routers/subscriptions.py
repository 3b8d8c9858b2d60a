"""Subscriptions router."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from depwatch.api.deps import get_dependency_resolver, get_session, get_subscription_service
from depwatch.api.schemas.subscription import (
    CreateSubscriptionRequest,
    OutdatedDependencyResponse,
    SubscriptionResponse,
)
from depwatch.engines.dependency_resolver.resolver import DependencyResolver
from depwatch.services.subscription_service import SubscriptionService

router = APIRouter()


@router.post("", response_model=SubscriptionResponse, status_code=201)
async def create_subscription(
    body: CreateSubscriptionRequest,
    session: AsyncSession = Depends(get_session),
    svc: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    subscription = await svc.create(
        session,
        repository_url=body.repository_url,
        emails=[str(e) for e in body.emails],
    )
    return SubscriptionResponse.model_validate(subscription)


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
async def get_subscription(
    subscription_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    svc: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    subscription = await svc.get(session, subscription_id)
    return SubscriptionResponse.model_validate(subscription)


@router.delete("/{subscription_id}", status_code=204)
async def delete_subscription(
    subscription_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    svc: SubscriptionService = Depends(get_subscription_service),
) -> None:
    await svc.delete(session, subscription_id)


@router.get(
    "/{subscription_id}/outdated-dependencies",
    response_model=list[OutdatedDependencyResponse],
)
async def list_outdated_dependencies(
    subscription_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    svc: SubscriptionService = Depends(get_subscription_service),
    resolver: DependencyResolver = Depends(get_dependency_resolver),
) -> list[OutdatedDependencyResponse]:
    outdated = await svc.outdated_dependencies(session, subscription_id, resolver)
    return [OutdatedDependencyResponse.model_validate(dep) for dep in outdated]
