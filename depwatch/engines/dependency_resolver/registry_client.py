"""Package registry client — latest published version per ecosystem."""

from __future__ import annotations

import httpx
import structlog

from depwatch.core.retry import RetryExhaustedError, RetryPolicy
from depwatch.engines.dependency_resolver.ecosystems import get_ecosystem
from depwatch.engines.dependency_resolver.errors import PackageNotFound, RegistryUnavailable
from depwatch.engines.dependency_resolver.models import PackageManagerKind

log = structlog.get_logger("depwatch.engine.registry")


class RegistryClient:
    """Stateless lookup of the latest version on npm / Packagist.

    One shared ``httpx.AsyncClient`` serves every registry; absolute URLs
    come from the ecosystem table.
    """

    def __init__(
        self,
        *,
        policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._policy = policy or RetryPolicy.from_env()
        self._client = client or httpx.AsyncClient(
            timeout=self._policy.timeout,
            headers={"User-Agent": "depwatch"},
            follow_redirects=True,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def latest_version(self, kind: PackageManagerKind, package_name: str) -> str:
        """Return the latest published version of *package_name*.

        Raises :class:`PackageNotFound` when the registry has no such package
        and :class:`RegistryUnavailable` when it keeps failing.
        """
        ecosystem = get_ecosystem(kind)
        url = ecosystem.registry_url(package_name)
        try:
            resp = await self._policy.get(
                self._client, url, headers=ecosystem.registry_headers, label="registry"
            )
        except RetryExhaustedError as exc:
            raise RegistryUnavailable(f"{kind.value} registry unavailable for {package_name}") from exc

        if resp.status_code == 404:
            raise PackageNotFound(f"{package_name} not found in {kind.value} registry")
        if resp.status_code != 200:
            raise RegistryUnavailable(
                f"{kind.value} registry returned {resp.status_code} for {package_name}"
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise RegistryUnavailable(
                f"{kind.value} registry returned invalid JSON for {package_name}"
            ) from exc

        latest = ecosystem.extract_latest(package_name, payload)
        if latest is None:
            raise PackageNotFound(f"{package_name} has no published version")
        log.debug("registry.latest", ecosystem=kind.value, package=package_name, latest=latest)
        return latest
