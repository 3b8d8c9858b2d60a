"""Dependency resolver engine — outdated dependencies of a hosted repository."""

from depwatch.engines.dependency_resolver.models import (
    DeclaredDependency,
    Host,
    OutdatedDependency,
    PackageManagerKind,
    RepositoryReference,
    ResolutionReport,
)
from depwatch.engines.dependency_resolver.resolver import DependencyResolver

__all__ = [
    "DeclaredDependency",
    "DependencyResolver",
    "Host",
    "OutdatedDependency",
    "PackageManagerKind",
    "RepositoryReference",
    "ResolutionReport",
]
