"""GitLab provider — manifest retrieval is not available yet."""

from __future__ import annotations

from depwatch.engines.dependency_resolver.errors import ProviderNotImplemented
from depwatch.engines.dependency_resolver.models import Host, RepositoryReference


class GitLabProvider:
    """Placeholder GitLab client.

    Every call fails with :class:`ProviderNotImplemented`, which the API
    reports as ``500 {"message": "Method not implemented."}``.
    """

    host = Host.GITLAB

    async def list_root_files(self, ref: RepositoryReference) -> set[str]:
        raise ProviderNotImplemented()

    async def get_file(self, ref: RepositoryReference, path: str) -> str:
        raise ProviderNotImplemented()
