# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for running individual scanners."""

from __future__ import annotations

import json
import os
import shutil
import stat
from datetime import datetime
from pathlib import Path

import pytest

from allscan.config import ScannerConfig
from allscan.execution import ScannerRunner, missing_env, render_arguments

FAKE_SCANNER = """#!/bin/sh
# fake scanner: --out FILE --repo URL --sbom PATH
out="$2"
if [ -z "$FAKE_NO_OUTPUT" ]; then
  printf '{"argv": "%s", "cwd": "%s"}' "$*" "$(pwd)" > "$out"
fi
echo "fake scanner diagnostics"
exit "${FAKE_EXIT:-0}"
"""

STAMP = datetime(2024, 5, 17, 12, 30, 45)
URL = "https://github.com/acme/widgets"


@pytest.fixture
def fake_scanner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    if shutil.which("sh") is None:
        pytest.skip("POSIX shell required")
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "fake-scanner"
    script.write_text(FAKE_SCANNER, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    sleeper = bin_dir / "slow-scanner"
    sleeper.write_text("#!/bin/sh\nexec sleep 5\n", encoding="utf-8")
    sleeper.chmod(0o755)
    noisy = bin_dir / "noisy-scanner"
    noisy.write_text("#!/bin/sh\nprintf '\\377\\376bad bytes'\nexit 3\n", encoding="utf-8")
    noisy.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.delenv("FAKE_EXIT", raising=False)
    monkeypatch.delenv("FAKE_NO_OUTPUT", raising=False)
    return "fake-scanner"


def _scanner(**overrides: object) -> ScannerConfig:
    values: dict[str, object] = {
        "name": "fake",
        "command": "fake-scanner",
        "enabled": True,
        "args": ["--out", "{{output}}", "--repo", "{{repo}}", "--sbom", "{{sbom}}"],
        "dojo_scan_type": "Fake Scan",
    }
    values.update(overrides)
    return ScannerConfig.model_validate(values)


def _runner(tmp_path: Path, *, local: bool = False, env: dict[str, str] | None = None) -> ScannerRunner:
    return ScannerRunner(
        tmp_path / "results",
        local=local,
        env=env if env is not None else os.environ,
        clock=lambda: STAMP,
    )


def _repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir(exist_ok=True)
    return repo


def test_render_arguments_substitutes_placeholders() -> None:
    rendered = render_arguments(
        ["sbom:{{sbom}}", "--file={{output}}", "{{repo}}", "{{other}}"],
        output=Path("/out/report.json"),
        repo_url=URL,
        sbom=None,
    )

    assert rendered == ["sbom:", "--file=/out/report.json", URL, "{{other}}"]


def test_missing_env_reports_first_unset_variable() -> None:
    scanner = _scanner(required_env=["SOCKET_TOKEN", "OTHER_TOKEN"])

    assert missing_env(scanner, {}) == "SOCKET_TOKEN"
    assert missing_env(scanner, {"SOCKET_TOKEN": "x"}) == "OTHER_TOKEN"
    assert missing_env(scanner, {"SOCKET_TOKEN": "x", "OTHER_TOKEN": "y"}) is None


def test_successful_run_writes_timestamped_report(tmp_path: Path, fake_scanner: str) -> None:
    repo = _repo(tmp_path)
    sbom = tmp_path / "widgets.cdx.json"

    result = _runner(tmp_path).run(
        _scanner(),
        repo_url=URL,
        repo_name="widgets",
        repo_path=repo,
        commit_hash="abc1234",
        branch_tag="v1.0.0",
        sbom_path=sbom,
    )

    assert result.success
    assert result.error is None
    assert result.output_path == (tmp_path / "results").resolve() / "widgets_fake_20240517-123045.json"
    report = json.loads(result.output_path.read_text(encoding="utf-8"))
    assert URL in report["argv"]
    assert str(sbom) in report["argv"]
    assert Path(report["cwd"]).resolve() == repo.resolve()
    assert (result.dojo_scan_type, result.commit_hash, result.branch_tag) == ("Fake Scan", "abc1234", "v1.0.0")
    assert result.duration >= 0


def test_nonzero_exit_with_report_counts_as_success(
    tmp_path: Path,
    fake_scanner: str,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("FAKE_EXIT", "1")

    result = _runner(tmp_path).run(_scanner(), repo_url=URL, repo_name="widgets", repo_path=_repo(tmp_path))

    assert result.success


def test_nonzero_exit_without_report_fails(tmp_path: Path, fake_scanner: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FAKE_EXIT", "2")
    monkeypatch.setenv("FAKE_NO_OUTPUT", "1")

    result = _runner(tmp_path).run(_scanner(), repo_url=URL, repo_name="widgets", repo_path=_repo(tmp_path))

    assert not result.success
    assert result.error == "exit status 2"


def test_undecodable_output_still_yields_failed_result(
    tmp_path: Path, fake_scanner: str, capsys: pytest.CaptureFixture[str]
) -> None:
    scanner = _scanner(name="noisy", command="noisy-scanner", args=[])

    result = _runner(tmp_path).run(scanner, repo_url=URL, repo_name="widgets", repo_path=_repo(tmp_path))

    assert not result.success
    assert result.error == "exit status 3"
    assert "\ufffd\ufffdbad bytes" in capsys.readouterr().out


def test_timeout_marks_result_failed(tmp_path: Path, fake_scanner: str) -> None:
    scanner = _scanner(name="slow", command="slow-scanner", args=[], timeout="200ms")

    result = _runner(tmp_path).run(scanner, repo_url=URL, repo_name="widgets", repo_path=_repo(tmp_path))

    assert not result.success
    assert result.duration < 5


def test_missing_command_fails(tmp_path: Path) -> None:
    scanner = _scanner(command="definitely-not-installed-scanner")

    result = _runner(tmp_path).run(scanner, repo_url=URL, repo_name="widgets", repo_path=_repo(tmp_path))

    assert not result.success
    assert result.error == "scanner not found: definitely-not-installed-scanner"


def test_missing_required_env_skips_execution(tmp_path: Path) -> None:
    scanner = _scanner(required_env=["SOCKET_SECURITY_API_KEY"])

    result = _runner(tmp_path, env={}).run(scanner, repo_url=URL, repo_name="widgets", repo_path=_repo(tmp_path))

    assert not result.success
    assert result.output_path is None
    assert result.error == "required environment variable SOCKET_SECURITY_API_KEY not set"
    assert not (tmp_path / "results").exists()


def test_local_mode_prefers_local_arguments(tmp_path: Path, fake_scanner: str) -> None:
    scanner = _scanner(args_local=["--out", "{{output}}", "--local-mode"])

    result = _runner(tmp_path, local=True).run(
        scanner,
        repo_url=f"local://{tmp_path}",
        repo_name="repo",
        repo_path=_repo(tmp_path),
    )

    assert result.output_path is not None
    assert "--local-mode" in json.loads(result.output_path.read_text(encoding="utf-8"))["argv"]


def test_builtin_binary_detector_runs_in_process(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    (repo / "tool.exe").write_bytes(b"MZ")
    scanner = _scanner(name="binary-detector", command="builtin:binary-detector", args=[])

    result = _runner(tmp_path).run(scanner, repo_url=URL, repo_name="widgets", repo_path=repo)

    assert result.success
    assert result.output_path is not None
    assert json.loads(result.output_path.read_text(encoding="utf-8"))["total"] == 1


def test_unknown_builtin_fails(tmp_path: Path) -> None:
    scanner = _scanner(name="mystery", command="builtin:mystery", args=[])

    result = _runner(tmp_path).run(scanner, repo_url=URL, repo_name="widgets", repo_path=_repo(tmp_path))

    assert not result.success
    assert "unknown built-in scanner" in (result.error or "")
