# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Language detection for deciding which scanners apply to a repository."""

from __future__ import annotations

import logging
import os
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from .constants import ALWAYS_EXCLUDE_DIRS, EXTENSION_LANGUAGES, LOCAL_URL_SCHEME, MANIFEST_LANGUAGES
from .errors import LanguageMetadataUnavailable
from .hosting import GitHubLanguageClient

LOGGER = logging.getLogger(__name__)


class LanguageSource(str, Enum):
    """Where a language breakdown came from."""

    REMOTE_METADATA = "github-api"
    LOCAL_SCAN = "filesystem"


@dataclass(frozen=True, slots=True)
class DetectedLanguageSet:
    """Languages present in a repository and their relative weight.

    Attributes:
        languages: Canonical lowercase language names.
        weights: Byte counts (remote metadata) or file counts (local scan).
        source: Origin of the weights.
    """

    languages: tuple[str, ...]
    weights: Mapping[str, int] = field(default_factory=dict)
    source: LanguageSource = LanguageSource.LOCAL_SCAN

    @classmethod
    def from_weights(cls, weights: Mapping[str, int], source: LanguageSource) -> DetectedLanguageSet:
        """Build a set ordered by descending weight then name."""

        ordered = sorted(weights, key=lambda name: (-weights[name], name))
        return cls(languages=tuple(ordered), weights=MappingProxyType(dict(weights)), source=source)

    def percentages(self) -> dict[str, float] | None:
        """Return each language's share of the total weight in percent.

        Returns:
            dict[str, float] | None: Shares in the ``0..100`` range, or ``None``
            when nothing was weighed.
        """

        total = sum(self.weights.values())
        if not self.weights or total == 0:
            return None
        return {language: count * 100.0 / total for language, count in self.weights.items()}

    def __bool__(self) -> bool:
        return bool(self.languages)


def classify_file(filename: str) -> str | None:
    """Return the language implied by ``filename``; manifests beat extensions."""

    if language := MANIFEST_LANGUAGES.get(filename):
        return language
    suffix = os.path.splitext(filename)[1]
    if not suffix:
        return None
    return EXTENSION_LANGUAGES.get(suffix)


def detect_languages_from_filesystem(root: Path) -> DetectedLanguageSet:
    """Count files per language beneath ``root``.

    Hidden directories and common dependency or build output directories are
    pruned from the walk.

    Args:
        root: Working copy to scan.

    Returns:
        DetectedLanguageSet: File counts per detected language.
    """

    counts: Counter[str] = Counter()
    for _dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if not name.startswith(".") and name not in ALWAYS_EXCLUDE_DIRS]
        for filename in filenames:
            if language := classify_file(filename):
                counts[language] += 1
    return DetectedLanguageSet.from_weights(counts, LanguageSource.LOCAL_SCAN)


@dataclass(slots=True)
class LanguageDetector:
    """Prefer hosted language metadata and fall back to a local walk."""

    client: GitHubLanguageClient | None = None

    def detect(self, repo_path: Path, repo_url: str) -> DetectedLanguageSet:
        """Detect languages for the working copy at ``repo_path``.

        Args:
            repo_path: Local checkout used for the filesystem fallback.
            repo_url: Remote URL; ``local://`` and empty URLs skip the lookup.

        Returns:
            DetectedLanguageSet: Detected languages and weights.
        """

        if repo_url and not repo_url.startswith(LOCAL_URL_SCHEME):
            client = self.client or GitHubLanguageClient()
            try:
                return DetectedLanguageSet.from_weights(client.fetch(repo_url), LanguageSource.REMOTE_METADATA)
            except LanguageMetadataUnavailable as exc:
                LOGGER.debug("hosted language metadata unavailable for %s: %s", repo_url, exc)
        return detect_languages_from_filesystem(repo_path)


__all__ = [
    "DetectedLanguageSet",
    "LanguageDetector",
    "LanguageSource",
    "classify_file",
    "detect_languages_from_filesystem",
]
