"""Tests for npm / Packagist latest-version lookups."""

from __future__ import annotations

import httpx
import pytest

from depwatch.engines.dependency_resolver.errors import PackageNotFound, RegistryUnavailable
from depwatch.engines.dependency_resolver.models import PackageManagerKind
from depwatch.engines.dependency_resolver.registry_client import RegistryClient


@pytest.fixture
def make_registry(mock_client, fast_policy):
    def _make(handler):
        return RegistryClient(policy=fast_policy, client=mock_client(handler))

    return _make


class TestNpm:
    async def test_latest_from_dist_tags(self, make_registry):
        def handler(request):
            assert request.url.host == "registry.npmjs.org"
            assert request.url.raw_path == b"/@nestjs%2Fcore"
            assert "application/vnd.npm.install-v1+json" in request.headers["Accept"]
            return httpx.Response(200, json={"dist-tags": {"latest": "10.4.1"}})

        async with make_registry(handler) as registry:
            assert await registry.latest_version(PackageManagerKind.NPM_OR_YARN, "@nestjs/core") == "10.4.1"

    async def test_unknown_package(self, make_registry):
        async with make_registry(lambda request: httpx.Response(404)) as registry:
            with pytest.raises(PackageNotFound):
                await registry.latest_version(PackageManagerKind.NPM_OR_YARN, "no-such-pkg")

    async def test_no_latest_tag(self, make_registry):
        async with make_registry(lambda request: httpx.Response(200, json={"dist-tags": {}})) as registry:
            with pytest.raises(PackageNotFound):
                await registry.latest_version(PackageManagerKind.NPM_OR_YARN, "unpublished")

    async def test_registry_down(self, make_registry):
        async with make_registry(lambda request: httpx.Response(500)) as registry:
            with pytest.raises(RegistryUnavailable):
                await registry.latest_version(PackageManagerKind.NPM_OR_YARN, "express")

    async def test_unexpected_status(self, make_registry):
        async with make_registry(lambda request: httpx.Response(401)) as registry:
            with pytest.raises(RegistryUnavailable):
                await registry.latest_version(PackageManagerKind.NPM_OR_YARN, "express")

    async def test_invalid_json(self, make_registry):
        async with make_registry(lambda request: httpx.Response(200, text="oops")) as registry:
            with pytest.raises(RegistryUnavailable):
                await registry.latest_version(PackageManagerKind.NPM_OR_YARN, "express")

    async def test_corrupt_gzip_body(self, make_registry):
        def handler(request):
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not-gzip")

        async with make_registry(handler) as registry:
            with pytest.raises(RegistryUnavailable):
                await registry.latest_version(PackageManagerKind.NPM_OR_YARN, "express")


class TestPackagist:
    async def test_latest_stable(self, make_registry):
        def handler(request):
            assert str(request.url) == "https://repo.packagist.org/p2/symfony/console.json"
            return httpx.Response(
                200,
                json={
                    "packages": {
                        "symfony/console": [{"version": "v7.2.0-BETA1"}, {"version": "v7.1.5"}]
                    }
                },
            )

        async with make_registry(handler) as registry:
            latest = await registry.latest_version(PackageManagerKind.COMPOSER, "symfony/console")
        assert latest == "v7.1.5"

    async def test_unknown_package(self, make_registry):
        async with make_registry(lambda request: httpx.Response(404)) as registry:
            with pytest.raises(PackageNotFound):
                await registry.latest_version(PackageManagerKind.COMPOSER, "acme/missing")


async def test_unsupported_kind_rejected(make_registry):
    async with make_registry(lambda request: httpx.Response(200)) as registry:
        with pytest.raises(ValueError):
            await registry.latest_version(PackageManagerKind.UNSUPPORTED, "anything")
