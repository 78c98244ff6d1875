# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for scanner catalogs and repository targets."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from .constants import (
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_RESULTS_DIR,
    DEFAULT_SCANNER_TIMEOUT,
    DEFAULT_WORKSPACE,
    SBOM_DIR_NAME,
)
from .errors import ConfigError, RepositoryConfigError

COMMIT_HASH_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F]{7,40}$")

_DURATION_PART: Final[re.Pattern[str]] = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS: Final[dict[str, float]] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> float:
    """Parse a Go-style duration string such as ``"1h30m"`` into seconds.

    Args:
        value: Duration expression made of ``<number><unit>`` pairs.

    Returns:
        float: Duration in seconds.

    Raises:
        ValueError: If ``value`` is not a well-formed duration.
    """

    text = value.strip()
    if text == "0":
        return 0.0
    if not text:
        raise ValueError("empty duration")
    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return total


class GlobalSettings(BaseModel):
    """Run-wide settings shared by every repository scan."""

    model_config = ConfigDict(validate_assignment=True)

    workspace: Path = Path(DEFAULT_WORKSPACE)
    results_dir: Path = Path(DEFAULT_RESULTS_DIR)
    upload_endpoint: str = ""
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    fail_fast: bool = False

    @property
    def sbom_dir(self) -> Path:
        """Return the directory holding generated SBOM artifacts."""

        return self.results_dir / SBOM_DIR_NAME


class ScannerConfig(BaseModel):
    """Static catalog entry describing one external scanner."""

    model_config = ConfigDict(frozen=True)

    name: str
    enabled: bool = False
    command: str
    args: list[str] = Field(default_factory=list)
    args_local: list[str] = Field(default_factory=list)
    file_patterns: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    languages_conditional: list[str] = Field(default_factory=list)
    timeout: str = DEFAULT_SCANNER_TIMEOUT
    dojo_scan_type: str = ""
    required_env: list[str] = Field(default_factory=list)

    @property
    def is_universal(self) -> bool:
        """Return ``True`` when the scanner applies to every language."""

        return not self.languages

    @property
    def timeout_seconds(self) -> float:
        """Return the parsed execution timeout in seconds.

        Raises:
            ConfigError: If the configured timeout is malformed.
        """

        try:
            return parse_duration(self.timeout or DEFAULT_SCANNER_TIMEOUT)
        except ValueError as exc:
            raise ConfigError(f"invalid timeout for {self.name}: {exc}") from exc

    def arguments_for(self, *, local: bool) -> list[str]:
        """Return the argument template for normal or local-mode runs."""

        if local and self.args_local:
            return list(self.args_local)
        return list(self.args)


class RepositorySpec(BaseModel):
    """Repository target plus at most one explicit ref selector."""

    model_config = ConfigDict(frozen=True)

    url: str
    branch: str | None = None
    version: str | None = None
    commit: str | None = None
    scanners: list[str] = Field(default_factory=list)


class Config(BaseModel):
    """Aggregate scanner configuration loaded from disk."""

    model_config = ConfigDict(validate_assignment=True)

    settings: GlobalSettings = Field(default_factory=GlobalSettings)
    scanners: list[ScannerConfig] = Field(default_factory=list)
    repositories: list[RepositorySpec] = Field(default_factory=list)

    def enabled_scanners(self) -> list[ScannerConfig]:
        """Return the enabled scanners in catalog order."""

        return [scanner for scanner in self.scanners if scanner.enabled]


def validate_repository_spec(spec: RepositorySpec) -> None:
    """Validate a repository entry before any network or disk work happens.

    Args:
        spec: Repository entry to validate.

    Raises:
        RepositoryConfigError: If the URL is missing, no ref selector is set, or
            the commit hash has the wrong shape.
    """

    if not spec.url:
        raise RepositoryConfigError("repository URL is required")
    if not (spec.branch or spec.version or spec.commit):
        raise RepositoryConfigError("at least one of branch, version, or commit must be specified")
    if spec.commit and not COMMIT_HASH_PATTERN.fullmatch(spec.commit):
        raise RepositoryConfigError(f"invalid commit hash {spec.commit!r}: must be 7-40 hexadecimal characters")


__all__ = [
    "COMMIT_HASH_PATTERN",
    "Config",
    "ConfigError",
    "GlobalSettings",
    "RepositoryConfigError",
    "RepositorySpec",
    "ScannerConfig",
    "parse_duration",
    "validate_repository_spec",
]
