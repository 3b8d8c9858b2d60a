"""Ecosystem table — manifest layout and registry lookup per package manager."""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

from depwatch.engines.dependency_resolver.errors import ManifestParseError
from depwatch.engines.dependency_resolver.models import DeclaredDependency, PackageManagerKind


@runtime_checkable
class Ecosystem(Protocol):
    """Interface that every package ecosystem handler must satisfy."""

    kind: PackageManagerKind
    manifest_file: str
    detection_priority: int
    registry_headers: dict[str, str]

    def parse_manifest(self, content: str) -> list[DeclaredDependency]: ...

    def registry_url(self, package_name: str) -> str: ...

    def extract_latest(self, package_name: str, payload: Any) -> str | None: ...


ECOSYSTEMS: dict[PackageManagerKind, Ecosystem] = {}


def register_ecosystem(ecosystem: Ecosystem) -> None:
    """Register an ecosystem handler by its kind."""
    ECOSYSTEMS[ecosystem.kind] = ecosystem


def get_ecosystem(kind: PackageManagerKind) -> Ecosystem:
    """Return the handler for *kind*.

    Raises ``ValueError`` for :attr:`PackageManagerKind.UNSUPPORTED` or an
    unregistered kind.
    """
    try:
        return ECOSYSTEMS[kind]
    except KeyError:
        raise ValueError(f"no ecosystem registered for {kind.value!r}") from None


def detection_order() -> list[Ecosystem]:
    """Registered ecosystems in the order their manifests are checked."""
    return sorted(ECOSYSTEMS.values(), key=lambda e: e.detection_priority)


def load_json_object(content: str, filename: str) -> dict[str, Any]:
    """Decode *content* as a JSON object, raising :class:`ManifestParseError`."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(f"{filename} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestParseError(f"{filename} must contain a JSON object")
    return data


def read_section(data: dict[str, Any], section: str, filename: str) -> dict[str, str]:
    """Return the ``name -> version`` mapping stored under *section*.

    Missing or null sections are empty. Entries whose value is not a string
    are dropped.
    """
    block = data.get(section)
    if block is None:
        return {}
    if not isinstance(block, dict):
        raise ManifestParseError(f"{filename}: {section!r} must be an object")
    return {
        name: spec.strip()
        for name, spec in block.items()
        if isinstance(name, str) and isinstance(spec, str)
    }
