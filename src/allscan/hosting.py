# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Hosted-repository metadata lookups (GitHub language breakdowns)."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Final

import httpx

from .constants import GITHUB_TOKEN_ENV, HOSTED_LANGUAGE_NAMES
from .errors import LanguageMetadataUnavailable

GITHUB_API_ROOT: Final[str] = "https://api.github.com"
GITHUB_API_VERSION: Final[str] = "2022-11-28"
LANGUAGE_LOOKUP_TIMEOUT: Final[float] = 10.0

_HTTPS_PATTERN: Final[re.Pattern[str]] = re.compile(r"github\.com/([^/]+)/([^/.]+)")
_SSH_PATTERN: Final[re.Pattern[str]] = re.compile(r"github\.com:([^/]+)/([^/.]+)")


def parse_github_url(url: str) -> tuple[str, str] | None:
    """Return ``(owner, repo)`` for HTTPS or SSH GitHub URLs."""

    for pattern in (_HTTPS_PATTERN, _SSH_PATTERN):
        if match := pattern.search(url):
            return match.group(1), match.group(2)
    return None


def canonical_language(name: str) -> str:
    """Map a GitHub linguist name onto the detector vocabulary."""

    return HOSTED_LANGUAGE_NAMES.get(name, name.lower())


class GitHubLanguageClient:
    """Fetch per-language byte counts from the GitHub REST API."""

    def __init__(
        self,
        *,
        token: str | None = None,
        env: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: float = LANGUAGE_LOOKUP_TIMEOUT,
    ) -> None:
        environment = env if env is not None else os.environ
        self._token = token if token is not None else environment.get(GITHUB_TOKEN_ENV, "")
        self._transport = transport
        self._timeout = timeout

    def fetch(self, url: str) -> dict[str, int]:
        """Return canonical language names mapped to byte counts for ``url``.

        Args:
            url: GitHub repository URL.

        Returns:
            dict[str, int]: Byte counts keyed by canonical language name.

        Raises:
            LanguageMetadataUnavailable: When the URL is not hosted on GitHub,
                no token is configured, or the request or payload is invalid.
        """

        parsed = parse_github_url(url)
        if parsed is None:
            raise LanguageMetadataUnavailable(f"not a GitHub URL: {url}")
        if not self._token:
            raise LanguageMetadataUnavailable(f"{GITHUB_TOKEN_ENV} not set")
        owner, repo = parsed
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        endpoint = f"{GITHUB_API_ROOT}/repos/{owner}/{repo}/languages"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(endpoint, headers=headers)
        except httpx.HTTPError as exc:
            raise LanguageMetadataUnavailable(f"API request failed: {exc}") from exc
        if response.status_code != httpx.codes.OK:
            raise LanguageMetadataUnavailable(f"API returned status {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise LanguageMetadataUnavailable(f"parsing response: {exc}") from exc
        if not isinstance(payload, dict):
            raise LanguageMetadataUnavailable("unexpected language payload")
        weights: dict[str, int] = {}
        for name, size in payload.items():
            if not isinstance(size, int):
                raise LanguageMetadataUnavailable(f"unexpected byte count for {name!r}")
            language = canonical_language(name)
            weights[language] = weights.get(language, 0) + size
        return weights


__all__ = ["GitHubLanguageClient", "canonical_language", "parse_github_url"]
