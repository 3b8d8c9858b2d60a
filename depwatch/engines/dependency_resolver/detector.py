"""Package-manager detection from the manifests at the repository root."""

from __future__ import annotations

from depwatch.engines.dependency_resolver.ecosystems import detection_order
from depwatch.engines.dependency_resolver.models import PackageManagerKind, RepositoryReference
from depwatch.engines.dependency_resolver.providers import ProviderClient


async def detect_package_manager(
    provider: ProviderClient, ref: RepositoryReference
) -> PackageManagerKind:
    """Return the first ecosystem whose manifest exists at the repository root.

    npm/yarn (``package.json``) is checked before composer (``composer.json``).
    Returns :attr:`PackageManagerKind.UNSUPPORTED` when no manifest matches.
    """
    root_files = await provider.list_root_files(ref)
    for ecosystem in detection_order():
        if ecosystem.manifest_file in root_files:
            return ecosystem.kind
    return PackageManagerKind.UNSUPPORTED
