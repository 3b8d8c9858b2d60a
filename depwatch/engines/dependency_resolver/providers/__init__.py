"""Hosting-provider clients — one per :class:`Host`, behind a common contract."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from depwatch.engines.dependency_resolver.models import Host, RepositoryReference


@runtime_checkable
class ProviderClient(Protocol):
    """Interface that every hosting-provider client must satisfy."""

    host: Host

    async def list_root_files(self, ref: RepositoryReference) -> set[str]: ...

    async def get_file(self, ref: RepositoryReference, path: str) -> str: ...


ProviderTable = dict[Host, ProviderClient]


def build_provider_table(*providers: ProviderClient) -> ProviderTable:
    """Index provider clients by host. Later entries replace earlier ones."""
    return {provider.host: provider for provider in providers}
