"""Repository URL parsing — URL string to :class:`RepositoryReference`."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from depwatch.engines.dependency_resolver.errors import InvalidRepositoryUrl
from depwatch.engines.dependency_resolver.models import Host, RepositoryReference

_HOST_DOMAINS: dict[str, Host] = {
    "github.com": Host.GITHUB,
    "gitlab.com": Host.GITLAB,
}

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def parse_repository_url(url: str) -> RepositoryReference:
    """Parse an ``http(s)`` repository URL into a :class:`RepositoryReference`.

    Handles:
      - https://github.com/owner/repo
      - https://github.com/owner/repo/
      - https://github.com/owner/repo.git
      - https://gitlab.com/group/subgroup/repo

    Raises :class:`InvalidRepositoryUrl` for anything else.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidRepositoryUrl("repository URL must be a non-empty string")

    raw = url.strip()
    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError as exc:
        raise InvalidRepositoryUrl(f"malformed repository URL: {raw!r}") from exc

    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidRepositoryUrl(f"repository URL must use http or https: {raw!r}")
    if parts.username or parts.password or port is not None:
        raise InvalidRepositoryUrl(f"malformed repository URL: {raw!r}")
    if parts.query or parts.fragment:
        raise InvalidRepositoryUrl(f"repository URL must not carry a query or fragment: {raw!r}")

    hostname = (parts.hostname or "").lower().removeprefix("www.")
    host = _HOST_DOMAINS.get(hostname)
    if host is None:
        raise InvalidRepositoryUrl(f"unsupported repository host: {hostname or raw!r}")

    path = parts.path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]
    segments = path.split("/") if path else []

    if len(segments) < 2 or not all(_is_valid_segment(s) for s in segments):
        raise InvalidRepositoryUrl(f"repository URL must point at owner/name: {raw!r}")
    if host is Host.GITHUB and len(segments) != 2:
        raise InvalidRepositoryUrl(f"repository URL must point at owner/name: {raw!r}")

    return RepositoryReference(host=host, owner="/".join(segments[:-1]), name=segments[-1])


def _is_valid_segment(segment: str) -> bool:
    return bool(_SEGMENT_RE.match(segment)) and segment not in (".", "..", "-")
