"""Declared-vs-latest version comparison.

A declared range is reduced to its base release (``^1.2.0`` -> ``1.2.0``,
``~6.4`` -> ``6.4``, ``>=2.1 <3`` -> ``2.1``) and compared with the latest
release component-wise, padding missing components with zeros. Range
satisfaction is not evaluated: ``^1.0.0`` is outdated when ``1.5.0`` is out.
Wildcards only pin the components before them, so ``6.4.*`` is current
against ``6.4.9``.
"""

from __future__ import annotations

import re

_RELEASE_RE = re.compile(r"v?(\d+(?:\.(?:\d+|[xX*]))*)")


def base_release(spec: str) -> tuple[tuple[int, ...], bool] | None:
    """Return ``(release, has_wildcard)`` for the first alternative in *spec*.

    Returns None for specs with no numeric base, such as ``*``, ``latest``
    or ``dev-main``.
    """
    first = re.split(r"\|\|?", spec, maxsplit=1)[0].strip()
    match = _RELEASE_RE.search(first) if first else None
    if match is None:
        return None
    release: list[int] = []
    wildcard = False
    for part in match.group(1).split("."):
        if not part.isdigit():
            wildcard = True
            break
        release.append(int(part))
    return tuple(release), wildcard


def is_outdated(declared: str, latest: str) -> bool:
    """True when the base release of *declared* differs from *latest*."""
    declared_parsed = base_release(declared)
    latest_parsed = base_release(latest)
    if declared_parsed is None or latest_parsed is None:
        return False
    declared_release, wildcard = declared_parsed
    latest_release, _ = latest_parsed

    if wildcard:
        width = len(declared_release)
    else:
        width = max(len(declared_release), len(latest_release))
    return _pad(declared_release, width)[:width] != _pad(latest_release, width)[:width]


def _pad(release: tuple[int, ...], width: int) -> tuple[int, ...]:
    return release + (0,) * max(width - len(release), 0)
