#!/usr/bin/env python3
"""Standalone outdated-dependency check, no database required.

Usage:
    python check_deps.py https://github.com/org/repo
    python check_deps.py https://github.com/symfony/symfony --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from depwatch.core.logging import setup_logging
from depwatch.core.retry import RetryPolicy
from depwatch.engines.dependency_resolver.errors import ResolutionError
from depwatch.engines.dependency_resolver.models import ResolutionReport
from depwatch.engines.dependency_resolver.providers import build_provider_table
from depwatch.engines.dependency_resolver.providers.github import GitHubProvider
from depwatch.engines.dependency_resolver.providers.gitlab import GitLabProvider
from depwatch.engines.dependency_resolver.registry_client import RegistryClient
from depwatch.engines.dependency_resolver.resolver import DependencyResolver


def _print_report(report: ResolutionReport, as_json: bool) -> None:
    if as_json:
        rows = [
            {"name": d.name, "version": d.version, "latestVersion": d.latest_version}
            for d in report.outdated
        ]
        print(json.dumps(rows, indent=2))
        return

    repo = report.repository.full_name
    print(f"{repo}  ({report.kind.value})")
    if not report.outdated:
        print(f"  No outdated dependencies ({report.checked} checked).")
    else:
        width = max(len(d.name) for d in report.outdated)
        for d in report.outdated:
            print(f"  {d.name:<{width}}  {d.version} -> {d.latest_version}")
        print(f"\n{len(report.outdated)} outdated of {report.checked} checked.")
    if report.failed:
        print(f"Could not check: {', '.join(report.failed)}", file=sys.stderr)


async def _check(repository_url: str, as_json: bool) -> None:
    policy = RetryPolicy.from_env()
    async with GitHubProvider(policy=policy) as github, RegistryClient(policy=policy) as registry:
        resolver = DependencyResolver(build_provider_table(github, GitLabProvider()), registry)
        report = await resolver.resolve_report(repository_url)
    _print_report(report, as_json)


def main() -> None:
    parser = argparse.ArgumentParser(description="List a repository's outdated dependencies")
    parser.add_argument("repository_url", help="GitHub or GitLab repository URL")
    parser.add_argument("--json", action="store_true", dest="as_json", help="Output as JSON")
    args = parser.parse_args()

    setup_logging()
    try:
        asyncio.run(_check(args.repository_url, args.as_json))
    except ResolutionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
