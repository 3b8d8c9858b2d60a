"""DependencyResolver — repository URL to outdated-dependency report."""

from __future__ import annotations

import asyncio
import os

import structlog

from depwatch.engines.dependency_resolver.detector import detect_package_manager
from depwatch.engines.dependency_resolver.errors import (
    PackageNotFound,
    RegistryError,
    ResolutionError,
)
from depwatch.engines.dependency_resolver.manifest import ManifestFetcher
from depwatch.engines.dependency_resolver.models import (
    DeclaredDependency,
    OutdatedDependency,
    PackageManagerKind,
    ResolutionReport,
)
from depwatch.engines.dependency_resolver.providers import ProviderTable
from depwatch.engines.dependency_resolver.registry_client import RegistryClient
from depwatch.engines.dependency_resolver.url_parser import parse_repository_url
from depwatch.engines.dependency_resolver.versioning import is_outdated

log = structlog.get_logger("depwatch.engine")


class DependencyResolver:
    """Parse URL -> detect package manager -> fetch manifest -> query registry.

    Steps up to the manifest are sequential and abort on error. Registry
    lookups run concurrently and are best-effort: a failing package is
    left out of the result and counted in the report.
    """

    def __init__(
        self,
        providers: ProviderTable,
        registry: RegistryClient,
        *,
        concurrency: int | None = None,
    ) -> None:
        self._providers = providers
        self._fetcher = ManifestFetcher(providers)
        self._registry = registry
        self._concurrency = concurrency or int(
            os.environ.get("DEPWATCH_REGISTRY_CONCURRENCY", "10")
        )

    async def resolve(self, repository_url: str) -> list[OutdatedDependency]:
        """Return the outdated dependencies of *repository_url*, sorted by name."""
        report = await self.resolve_report(repository_url)
        return report.outdated

    async def resolve_report(self, repository_url: str) -> ResolutionReport:
        """Full pipeline, returning the outdated list together with counters."""
        ref = parse_repository_url(repository_url)
        provider = self._providers.get(ref.host)
        if provider is None:
            raise ResolutionError(f"no provider configured for {ref.host.value}")

        kind = await detect_package_manager(provider, ref)
        report = ResolutionReport(repository=ref, kind=kind)
        if kind is PackageManagerKind.UNSUPPORTED:
            log.info("resolver.unsupported", repo=ref.full_name, host=ref.host.value)
            return report

        declared = await self._fetcher.fetch(ref, kind)
        report.checked = len(declared)

        sem = asyncio.Semaphore(self._concurrency)
        outcomes = await asyncio.gather(*(self._lookup(kind, dep, sem) for dep in declared))

        for dep, outcome in zip(declared, outcomes):
            if isinstance(outcome, PackageNotFound):
                report.skipped += 1
            elif isinstance(outcome, RegistryError):
                report.failed.append(dep.name)
            elif is_outdated(dep.version_range, outcome):
                report.outdated.append(
                    OutdatedDependency(
                        name=dep.name, version=dep.version_range, latest_version=outcome
                    )
                )

        report.outdated.sort(key=lambda d: d.name)
        log.info(
            "resolver.done",
            repo=ref.full_name,
            host=ref.host.value,
            ecosystem=kind.value,
            checked=report.checked,
            outdated=len(report.outdated),
            skipped=report.skipped,
            failed=len(report.failed),
        )
        return report

    async def _lookup(
        self,
        kind: PackageManagerKind,
        dep: DeclaredDependency,
        sem: asyncio.Semaphore,
    ) -> str | RegistryError:
        async with sem:
            try:
                return await self._registry.latest_version(kind, dep.name)
            except PackageNotFound as exc:
                log.debug("registry.package_not_found", package=dep.name, error=str(exc))
                return exc
            except RegistryError as exc:
                log.warning("registry.lookup_failed", package=dep.name, error=str(exc))
                return exc
