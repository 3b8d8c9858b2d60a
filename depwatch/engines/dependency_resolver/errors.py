"""Typed errors raised while resolving a repository's outdated dependencies."""


class ResolutionError(Exception):
    """Base resolver exception."""


class InvalidRepositoryUrl(ResolutionError):
    """The repository URL is malformed or points at an unsupported host (-> HTTP 400)."""


class ProviderNotImplemented(ResolutionError):
    """The hosting provider has no implementation for this step (-> HTTP 500)."""

    MESSAGE = "Method not implemented."

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)


class ProviderUnavailable(ResolutionError):
    """The hosting provider API kept failing after retries (-> HTTP 503)."""


class ManifestError(ResolutionError):
    """Base for manifest-level failures (-> HTTP 502)."""


class ManifestNotFound(ManifestError):
    """The expected manifest file is missing from the repository."""


class RepositoryNotFound(ManifestNotFound):
    """The repository itself does not exist or is private."""


class ManifestParseError(ManifestError):
    """The manifest file is not valid JSON or has an unexpected structure."""


class RegistryError(ResolutionError):
    """Base for per-dependency registry failures, absorbed by the resolver."""


class PackageNotFound(RegistryError):
    """The registry does not know the package."""


class RegistryUnavailable(RegistryError):
    """The registry kept failing after retries."""
