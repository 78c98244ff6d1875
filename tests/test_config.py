# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for configuration models and repository validation."""

from __future__ import annotations

import pytest

from allscan.config import Config, RepositorySpec, ScannerConfig, parse_duration, validate_repository_spec
from allscan.errors import ConfigError, RepositoryConfigError

URL = "https://github.com/acme/widgets"


@pytest.mark.parametrize(
    "spec",
    [
        RepositorySpec(url=URL, branch="main"),
        RepositorySpec(url=URL, version="v1.0.0"),
        RepositorySpec(url=URL, commit="abcdef0"),
        RepositorySpec(url=URL, commit="ABCDEF0123456789abcdef0123456789abcdef01"),
        RepositorySpec(url=URL, version="v1", commit="abc1234"),
    ],
)
def test_valid_repository_specs(spec: RepositorySpec) -> None:
    validate_repository_spec(spec)


@pytest.mark.parametrize(
    ("spec", "message"),
    [
        (RepositorySpec(url=""), "URL is required"),
        (RepositorySpec(url=URL), "at least one of branch, version, or commit"),
        (RepositorySpec(url=URL, commit="abc123"), "invalid commit hash"),
        (RepositorySpec(url=URL, commit="g" * 7), "invalid commit hash"),
        (RepositorySpec(url=URL, commit="a" * 41), "invalid commit hash"),
        (RepositorySpec(url=URL, branch="main", commit="abcdef0\n"), "invalid commit hash"),
    ],
)
def test_invalid_repository_specs(spec: RepositorySpec, message: str) -> None:
    with pytest.raises(RepositoryConfigError, match=message):
        validate_repository_spec(spec)


@pytest.mark.parametrize(
    ("text", "seconds"),
    [
        ("30s", 30.0),
        ("5m", 300.0),
        ("1h30m", 5400.0),
        ("1.5h", 5400.0),
        ("250ms", 0.25),
        ("0", 0.0),
    ],
)
def test_parse_duration(text: str, seconds: float) -> None:
    assert parse_duration(text) == pytest.approx(seconds)


@pytest.mark.parametrize("text", ["", "5", "m5", "5 minutes", "1h-30m"])
def test_parse_duration_rejects_malformed_values(text: str) -> None:
    with pytest.raises(ValueError):
        parse_duration(text)


def test_scanner_timeout_defaults_and_errors() -> None:
    assert ScannerConfig(name="grype", command="grype").timeout_seconds == 300.0
    with pytest.raises(ConfigError, match="invalid timeout for grype"):
        _ = ScannerConfig(name="grype", command="grype", timeout="soon").timeout_seconds


def test_universal_scanner_and_local_arguments() -> None:
    scanner = ScannerConfig(name="osv", command="osv-scanner", args=["-r", "."], args_local=["--local"])

    assert scanner.is_universal
    assert scanner.arguments_for(local=False) == ["-r", "."]
    assert scanner.arguments_for(local=True) == ["--local"]
    assert ScannerConfig(name="x", command="x", args=["a"]).arguments_for(local=True) == ["a"]


def test_enabled_scanners_keep_catalog_order() -> None:
    config = Config(
        scanners=[
            ScannerConfig(name="b", command="b", enabled=True),
            ScannerConfig(name="a", command="a"),
            ScannerConfig(name="c", command="c", enabled=True),
        ],
    )

    assert [scanner.name for scanner in config.enabled_scanners()] == ["b", "c"]
    assert config.settings.sbom_dir.name == "sboms"
