# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the command-line interface."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest
from typer.testing import CliRunner

from allscan.cli import app
from allscan.config import RepositorySpec

runner = CliRunner()

QUIET = ["--no-emoji", "--no-color"]


def _write_config(root: Path, scanners: str) -> Path:
    path = root / "allscan.toml"
    text = dedent(
        f"""
        [global]
        workspace = "{root / 'workspace'}"
        results_dir = "{root / 'results'}"
        """
    )
    path.write_text(text + dedent(scanners), encoding="utf-8")
    return path


BINARY_SCANNER = """
[[scanners]]
name = "binary-detector"
enabled = true
command = "builtin:binary-detector"
"""

GRYPE_SCANNER = """
[[scanners]]
name = "grype"
enabled = true
command = "grype"
args = ["sbom:{{sbom}}", "-o", "json", "--file", "{{output}}"]
args_local = ["dir:.", "-o", "json", "--file", "{{output}}"]
timeout = "10m"
"""


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    return tmp_path


def test_dry_run_reads_repositories_file(workdir: Path) -> None:
    _write_config(workdir, GRYPE_SCANNER)
    (workdir / "repositories.toml").write_text(
        dedent(
            """
            [[repositories]]
            url = "https://github.com/acme/widgets"
            version = "v1.2.0"
            """
        ),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["scan", "--dry-run", *QUIET])

    assert result.exit_code == 0, result.output
    assert "DRY RUN MODE - No scans will be executed" in result.output
    assert "Target repos: 1" in result.output
    assert "- https://github.com/acme/widgets (ref: v1.2.0)" in result.output
    assert "Command: grype sbom:{{sbom}} -o json --file {{output}}" in result.output
    assert not (workdir / "results").exists()


def test_local_dry_run_uses_local_arguments(workdir: Path) -> None:
    _write_config(workdir, GRYPE_SCANNER)

    result = runner.invoke(app, ["scan", "--local", "--dry-run", *QUIET])

    assert result.exit_code == 0, result.output
    assert f"Local mode: scanning {workdir}" in result.output
    assert "Command: grype dir:. -o json --file {{output}}" in result.output


def test_missing_config_exits_with_config_error(workdir: Path) -> None:
    result = runner.invoke(app, ["scan", "--config", "absent.toml", *QUIET])

    assert result.exit_code == 2
    assert "Failed to load config" in result.output


def test_no_repositories_configured(workdir: Path) -> None:
    _write_config(workdir, GRYPE_SCANNER)

    result = runner.invoke(app, ["scan", "--dry-run", *QUIET])

    assert result.exit_code == 2
    assert "No repositories configured" in result.output


def test_missing_environment_prompts(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SOCKET_TOKEN", raising=False)
    _write_config(
        workdir,
        """
        [[scanners]]
        name = "socket"
        enabled = true
        command = "socket"
        required_env = ["SOCKET_TOKEN"]
        """,
    )

    declined = runner.invoke(app, ["scan", "--local", "--dry-run", *QUIET], input="n\n")
    accepted = runner.invoke(app, ["scan", "--local", "--dry-run", "--yes", *QUIET])

    assert declined.exit_code == 1
    assert "Socket requires SOCKET_TOKEN" in declined.output
    assert "Aborted: missing required environment variables" in declined.output
    assert accepted.exit_code == 0, accepted.output


def test_scan_runs_scanners_and_prints_summary(workdir: Path, origin_repo: Path) -> None:
    _write_config(workdir, BINARY_SCANNER)
    repos = workdir / "targets.toml"
    repos.write_text(f'[[repositories]]\nurl = "{origin_repo.as_uri()}"\nbranch = "main"\n', encoding="utf-8")

    result = runner.invoke(app, ["scan", "--repos", str(repos), *QUIET])

    assert result.exit_code == 0, result.output
    assert "SCAN RESULTS SUMMARY" in result.output
    assert "binary-detector (Binary)" in result.output
    assert "Successful:     1" in result.output
    assert list((workdir / "results").glob("widgets_binary-detector_*.json"))


def test_scan_exits_non_zero_when_a_scanner_fails(workdir: Path, origin_repo: Path) -> None:
    _write_config(
        workdir,
        """
        [[scanners]]
        name = "gosec"
        enabled = true
        command = "allscan-missing-gosec"
        """,
    )
    repos = workdir / "targets.toml"
    repos.write_text(f'[[repositories]]\nurl = "{origin_repo.as_uri()}"\nbranch = "main"\n', encoding="utf-8")

    result = runner.invoke(app, ["scan", "--repos", str(repos), *QUIET])

    assert result.exit_code == 1
    assert "gosec: FAILED - scanner not found: allscan-missing-gosec" in result.output


def test_resolve_prints_pinned_version(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_resolve(url: str, *, logger: object = None) -> RepositorySpec:
        return RepositorySpec(url=url, version="v1.2.0", commit="abc1234")

    monkeypatch.setattr(sys.modules["allscan.cli.app"], "resolve_remote_target", fake_resolve)

    result = runner.invoke(app, ["resolve", "https://github.com/acme/widgets", "--no-emoji"])

    assert result.exit_code == 0, result.output
    assert "version: v1.2.0" in result.output
    assert "commit: abc1234" in result.output


def test_resolve_falls_back_to_main(origin_repo: Path, git: Callable[..., str]) -> None:
    git(origin_repo, "tag", "-d", "v1.0.0")

    result = runner.invoke(app, ["resolve", origin_repo.as_uri(), "--no-emoji"])

    assert result.exit_code == 0, result.output
    assert "branch: main" in result.output


def test_languages_reports_local_breakdown(tmp_path: Path) -> None:
    (tmp_path / "main.go").write_text("package main\n", encoding="utf-8")
    (tmp_path / "tool.py").write_text("print('hi')\n", encoding="utf-8")

    result = runner.invoke(app, ["languages", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "source: filesystem" in result.output
    assert "go: 50.0%" in result.output
    assert "python: 50.0%" in result.output


def test_languages_rejects_missing_directory(tmp_path: Path) -> None:
    result = runner.invoke(app, ["languages", str(tmp_path / "absent")])

    assert result.exit_code == 2


def test_languages_empty_directory(tmp_path: Path) -> None:
    result = runner.invoke(app, ["languages", str(tmp_path)])

    assert result.exit_code == 0
    assert "No languages detected" in result.output
