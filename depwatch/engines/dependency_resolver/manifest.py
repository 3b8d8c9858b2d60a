"""Manifest fetching — provider file content parsed into declared dependencies."""

from __future__ import annotations

import structlog

from depwatch.engines.dependency_resolver.ecosystems import get_ecosystem
from depwatch.engines.dependency_resolver.errors import ResolutionError
from depwatch.engines.dependency_resolver.models import (
    DeclaredDependency,
    PackageManagerKind,
    RepositoryReference,
)
from depwatch.engines.dependency_resolver.providers import ProviderTable

log = structlog.get_logger("depwatch.engine.manifest")


class ManifestFetcher:
    """Fetch and parse the manifest of a detected ecosystem."""

    def __init__(self, providers: ProviderTable) -> None:
        self._providers = providers

    async def fetch(
        self, ref: RepositoryReference, kind: PackageManagerKind
    ) -> list[DeclaredDependency]:
        """Return the dependencies declared in *ref*'s manifest for *kind*.

        Raises :class:`ManifestNotFound`, :class:`ManifestParseError`,
        :class:`ProviderUnavailable` or :class:`ProviderNotImplemented`.
        """
        provider = self._providers.get(ref.host)
        if provider is None:
            raise ResolutionError(f"no provider configured for {ref.host.value}")
        ecosystem = get_ecosystem(kind)

        content = await provider.get_file(ref, ecosystem.manifest_file)
        declared = ecosystem.parse_manifest(content)
        log.debug(
            "manifest.parsed",
            repo=ref.full_name,
            manifest=ecosystem.manifest_file,
            declared=len(declared),
        )
        return declared
