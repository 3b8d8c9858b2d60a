"""Data models for the dependency resolver engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Host(str, enum.Enum):
    """Supported source-code hosting providers."""

    GITHUB = "github"
    GITLAB = "gitlab"


class PackageManagerKind(str, enum.Enum):
    """Package ecosystem detected from the manifests at the repository root."""

    NPM_OR_YARN = "npm_or_yarn"
    COMPOSER = "composer"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class RepositoryReference:
    """A parsed repository URL.

    For GitLab, *owner* may be a nested group path such as ``group/subgroup``.
    """

    host: Host
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class DeclaredDependency:
    """A dependency as declared in a manifest file."""

    name: str
    version_range: str


@dataclass(frozen=True)
class OutdatedDependency:
    """A declared dependency whose version differs from the registry's latest."""

    name: str
    version: str
    latest_version: str


@dataclass
class ResolutionReport:
    """Result of one resolution run, with counters for logging and notifications."""

    repository: RepositoryReference
    kind: PackageManagerKind
    outdated: list[OutdatedDependency] = field(default_factory=list)
    checked: int = 0
    skipped: int = 0
    failed: list[str] = field(default_factory=list)
