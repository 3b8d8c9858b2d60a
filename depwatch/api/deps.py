"""Dependency injection — session, HTTP clients, and service singletons."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from depwatch.core.database import create_engine
from depwatch.core.retry import RetryPolicy
from depwatch.dao.subscription_dao import SubscriptionDAO
from depwatch.engines.dependency_resolver.providers import build_provider_table
from depwatch.engines.dependency_resolver.providers.github import GitHubProvider
from depwatch.engines.dependency_resolver.providers.gitlab import GitLabProvider
from depwatch.engines.dependency_resolver.registry_client import RegistryClient
from depwatch.engines.dependency_resolver.resolver import DependencyResolver
from depwatch.services.subscription_service import SubscriptionService

# ---------------------------------------------------------------------------
# DAO / service singletons
# ---------------------------------------------------------------------------
_subscription_dao = SubscriptionDAO()
_subscription_service = SubscriptionService(_subscription_dao)

# ---------------------------------------------------------------------------
# Engine / session factory (initialised by app lifespan)
# ---------------------------------------------------------------------------
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_session_factory(database_url: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Create the async engine and session factory. Called once at startup."""
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_engine(database_url)
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    """Dispose the async engine, closing all pooled connections."""
    global _engine  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("call init_session_factory() before using the engine")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("call init_session_factory() before handling requests")
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a per-request session with automatic commit/rollback."""
    factory = get_session_factory()
    async with factory() as session:
        async with session.begin():
            yield session


# ---------------------------------------------------------------------------
# Outbound HTTP clients (initialised by app lifespan)
# ---------------------------------------------------------------------------
_github_provider: GitHubProvider | None = None
_registry_client: RegistryClient | None = None
_resolver: DependencyResolver | None = None


def init_resolver() -> DependencyResolver:
    """Create the pooled provider/registry clients and the resolver."""
    global _github_provider, _registry_client, _resolver  # noqa: PLW0603
    policy = RetryPolicy.from_env()
    _github_provider = GitHubProvider(policy=policy)
    _registry_client = RegistryClient(policy=policy)
    providers = build_provider_table(_github_provider, GitLabProvider())
    _resolver = DependencyResolver(providers, _registry_client)
    return _resolver


async def close_resolver() -> None:
    """Close the pooled HTTP clients."""
    global _github_provider, _registry_client, _resolver  # noqa: PLW0603
    if _github_provider is not None:
        await _github_provider.close()
        _github_provider = None
    if _registry_client is not None:
        await _registry_client.close()
        _registry_client = None
    _resolver = None


# ---------------------------------------------------------------------------
# Getters (for Depends())
# ---------------------------------------------------------------------------


def get_dependency_resolver() -> DependencyResolver:
    if _resolver is None:
        raise RuntimeError("call init_resolver() before handling requests")
    return _resolver


def get_subscription_service() -> SubscriptionService:
    return _subscription_service
