"""npm / yarn ecosystem — package.json and the npm registry."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from depwatch.engines.dependency_resolver.ecosystems.base import (
    load_json_object,
    read_section,
    register_ecosystem,
)
from depwatch.engines.dependency_resolver.models import DeclaredDependency, PackageManagerKind

NPM_REGISTRY_URL = "https://registry.npmjs.org"

# Specs that resolve outside the registry (local paths, VCS, tarballs, aliases).
_NON_REGISTRY_PREFIXES = (
    "file:",
    "link:",
    "portal:",
    "patch:",
    "workspace:",
    "npm:",
    "git:",
    "git+",
    "github:",
    "gitlab:",
    "bitbucket:",
    "http:",
    "https:",
)


class NpmEcosystem:
    kind = PackageManagerKind.NPM_OR_YARN
    manifest_file = "package.json"
    detection_priority = 10
    # Abbreviated metadata: carries dist-tags without the full version history.
    registry_headers = {
        "Accept": "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8",
    }

    def parse_manifest(self, content: str) -> list[DeclaredDependency]:
        data = load_json_object(content, self.manifest_file)

        merged: dict[str, str] = {}
        for section in ("dependencies", "devDependencies"):
            for name, spec in read_section(data, section, self.manifest_file).items():
                if _is_registry_spec(spec):
                    merged.setdefault(name, spec)

        return [DeclaredDependency(name=name, version_range=spec) for name, spec in merged.items()]

    def registry_url(self, package_name: str) -> str:
        # Scoped packages are addressed as @scope%2Fname.
        return f"{NPM_REGISTRY_URL}/{quote(package_name, safe='@')}"

    def extract_latest(self, package_name: str, payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return None
        dist_tags = payload.get("dist-tags") or {}
        latest = dist_tags.get("latest") if isinstance(dist_tags, dict) else None
        return latest if isinstance(latest, str) and latest else None


def _is_registry_spec(spec: str) -> bool:
    if not spec:
        return False
    lowered = spec.lower()
    if lowered.startswith(_NON_REGISTRY_PREFIXES):
        return False
    # "user/repo" GitHub shorthand; semver ranges never contain a slash.
    return "/" not in spec


register_ecosystem(NpmEcosystem())
