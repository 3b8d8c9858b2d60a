"""Async GitHub contents API client with retries and rate-limit handling."""

from __future__ import annotations

import base64
import binascii
import os
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from depwatch.core.retry import RetryExhaustedError, RetryPolicy
from depwatch.engines.dependency_resolver.errors import (
    ManifestNotFound,
    ManifestParseError,
    ProviderUnavailable,
    RepositoryNotFound,
)
from depwatch.engines.dependency_resolver.models import Host, RepositoryReference

log = structlog.get_logger("depwatch.engine.github")

GITHUB_API_URL = "https://api.github.com"


class GitHubProvider:
    """Thin async wrapper around the GitHub repository contents API."""

    host = Host.GITHUB

    def __init__(
        self,
        token: str | None = None,
        *,
        policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._policy = policy or RetryPolicy.from_env()
        if client is None:
            resolved_token = token or os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
            headers: dict[str, str] = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "depwatch",
            }
            if resolved_token:
                headers["Authorization"] = f"token {resolved_token}"
            client = httpx.AsyncClient(
                base_url=GITHUB_API_URL,
                headers=headers,
                timeout=self._policy.timeout,
            )
        self._client = client

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubProvider:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def list_root_files(self, ref: RepositoryReference) -> set[str]:
        """Return the names of the files at the repository root."""
        resp = await self._get(f"/repos/{ref.full_name}/contents/")
        if resp.status_code == 404:
            raise RepositoryNotFound(f"repository not found: {ref.full_name}")
        data = self._json(resp, ref)
        if not isinstance(data, list):
            raise ProviderUnavailable(f"unexpected contents listing for {ref.full_name}")
        return {
            item["name"]
            for item in data
            if isinstance(item, dict) and item.get("type") == "file" and "name" in item
        }

    async def get_file(self, ref: RepositoryReference, path: str) -> str:
        """Return the decoded text content of *path* on the default branch."""
        resp = await self._get(f"/repos/{ref.full_name}/contents/{quote(path)}")
        if resp.status_code == 404:
            raise ManifestNotFound(f"{path} not found in {ref.full_name}")
        data = self._json(resp, ref)
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise ManifestNotFound(f"{path} is not a file in {ref.full_name}")

        if data.get("encoding") == "base64":
            try:
                content = base64.b64decode(data.get("content", ""))
            except (binascii.Error, ValueError) as exc:
                raise ProviderUnavailable(
                    f"undecodable content for {path} in {ref.full_name}"
                ) from exc
            return self._text(content, path, ref)

        # Files above 1 MB come back with encoding "none"; follow download_url.
        download_url = data.get("download_url")
        if not download_url:
            raise ManifestNotFound(f"{path} has no downloadable content in {ref.full_name}")
        raw = await self._get(download_url)
        if raw.status_code == 404:
            raise ManifestNotFound(f"{path} not found in {ref.full_name}")
        if raw.status_code != 200:
            raise ProviderUnavailable(f"github returned {raw.status_code} for {download_url}")
        return self._text(raw.content, path, ref)

    # ── internal ───────────────────────────────────────────────────────────

    async def _get(self, url: str) -> httpx.Response:
        try:
            return await self._policy.get(self._client, url, label="github")
        except RetryExhaustedError as exc:
            raise ProviderUnavailable(f"github unavailable: {exc}") from exc

    @staticmethod
    def _text(content: bytes, path: str, ref: RepositoryReference) -> str:
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ManifestParseError(f"{path} in {ref.full_name} is not valid UTF-8") from exc

    @staticmethod
    def _json(resp: httpx.Response, ref: RepositoryReference) -> Any:
        if resp.status_code != 200:
            log.warning("github.unexpected_status", repo=ref.full_name, status=resp.status_code)
            raise ProviderUnavailable(
                f"github returned {resp.status_code} for {ref.full_name}"
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderUnavailable(f"github returned invalid JSON for {ref.full_name}") from exc
