"""Composer ecosystem — composer.json and Packagist."""

from __future__ import annotations

import re
from typing import Any

from depwatch.engines.dependency_resolver.ecosystems.base import (
    load_json_object,
    read_section,
    register_ecosystem,
)
from depwatch.engines.dependency_resolver.models import DeclaredDependency, PackageManagerKind

PACKAGIST_URL = "https://repo.packagist.org"

_PLATFORM_PACKAGES = frozenset(
    {
        "php",
        "php-64bit",
        "php-ipv6",
        "php-zts",
        "php-debug",
        "hhvm",
        "composer",
        "composer-plugin-api",
        "composer-runtime-api",
    }
)
_PLATFORM_PREFIXES = ("ext-", "lib-")
_UNSTABLE_RE = re.compile(r"dev|alpha|beta|rc", re.IGNORECASE)


class ComposerEcosystem:
    kind = PackageManagerKind.COMPOSER
    manifest_file = "composer.json"
    detection_priority = 20
    registry_headers: dict[str, str] = {}

    def parse_manifest(self, content: str) -> list[DeclaredDependency]:
        data = load_json_object(content, self.manifest_file)

        merged: dict[str, str] = {}
        for section in ("require", "require-dev"):
            for name, spec in read_section(data, section, self.manifest_file).items():
                if spec and not _is_platform_package(name):
                    merged.setdefault(name, spec)

        return [DeclaredDependency(name=name, version_range=spec) for name, spec in merged.items()]

    def registry_url(self, package_name: str) -> str:
        return f"{PACKAGIST_URL}/p2/{package_name.lower()}.json"

    def extract_latest(self, package_name: str, payload: Any) -> str | None:
        """Return the newest stable release, else the newest release of any kind.

        Packagist lists releases newest first.
        """
        if not isinstance(payload, dict):
            return None
        packages = payload.get("packages") or {}
        releases = packages.get(package_name.lower()) if isinstance(packages, dict) else None
        if not isinstance(releases, list):
            return None

        versions = [
            r["version"] for r in releases if isinstance(r, dict) and isinstance(r.get("version"), str)
        ]
        for version in versions:
            if not _UNSTABLE_RE.search(version):
                return version
        return versions[0] if versions else None


def _is_platform_package(name: str) -> bool:
    lowered = name.lower()
    if lowered in _PLATFORM_PACKAGES or lowered.startswith(_PLATFORM_PREFIXES):
        return True
    return "/" not in lowered


register_ecosystem(ComposerEcosystem())
