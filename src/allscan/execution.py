# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Execute one scanner against one working copy."""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Final

from .binary_detector import BUILTIN_NAME, run_binary_detector
from .config import ScannerConfig
from .constants import BUILTIN_COMMAND_PREFIX
from .core.logging import ConsoleLogger
from .core.process import CommandOptions, CommandTimeoutError, resolve_executable, run_command
from .results import ScanResult

OUTPUT_PLACEHOLDER: Final[str] = "{{output}}"
REPO_PLACEHOLDER: Final[str] = "{{repo}}"
SBOM_PLACEHOLDER: Final[str] = "{{sbom}}"
TIMESTAMP_FORMAT: Final[str] = "%Y%m%d-%H%M%S"
OUTPUT_TAIL_CHARS: Final[int] = 2000


def missing_env(scanner: ScannerConfig, env: Mapping[str, str]) -> str | None:
    """Return the first required environment variable absent from ``env``."""

    for name in scanner.required_env:
        if not env.get(name):
            return name
    return None


def render_arguments(arguments: list[str], *, output: Path, repo_url: str, sbom: Path | None) -> list[str]:
    """Substitute ``{{output}}``, ``{{repo}}`` and ``{{sbom}}`` in ``arguments``."""

    rendered: list[str] = []
    for argument in arguments:
        argument = argument.replace(OUTPUT_PLACEHOLDER, str(output))
        argument = argument.replace(REPO_PLACEHOLDER, repo_url)
        argument = argument.replace(SBOM_PLACEHOLDER, str(sbom) if sbom is not None else "")
        rendered.append(argument)
    return rendered


@dataclass(slots=True)
class ScannerRunner:
    """Run scanners and capture their outcome as :class:`ScanResult` records."""

    results_dir: Path
    local: bool = False
    env: Mapping[str, str] = field(default_factory=lambda: os.environ)
    logger: ConsoleLogger = field(default_factory=ConsoleLogger)
    clock: Callable[[], datetime] = datetime.now

    def output_path(self, repo_name: str, scanner: ScannerConfig) -> Path:
        """Return the timestamped report path for ``scanner`` on ``repo_name``."""

        stamp = self.clock().strftime(TIMESTAMP_FORMAT)
        return self.results_dir.resolve() / f"{repo_name}_{scanner.name}_{stamp}.json"

    def run(
        self,
        scanner: ScannerConfig,
        *,
        repo_url: str,
        repo_name: str,
        repo_path: Path,
        commit_hash: str = "",
        branch_tag: str = "",
        sbom_path: Path | None = None,
    ) -> ScanResult:
        """Execute ``scanner`` inside ``repo_path``.

        A non-zero exit still counts as success when the report file exists,
        since many scanners signal findings through their exit status.

        Args:
            scanner: Scanner to execute.
            repo_url: Repository URL substituted for ``{{repo}}``.
            repo_name: Short repository name used in the report filename.
            repo_path: Working copy the scanner runs in.
            commit_hash: Short commit of the checkout.
            branch_tag: Branch, tag or commit label of the checkout.
            sbom_path: SBOM substituted for ``{{sbom}}`` when available.

        Returns:
            ScanResult: Outcome of the run; failures never raise.
        """

        started = time.monotonic()

        def finish(success: bool, output: Path | None, error: str | None = None) -> ScanResult:
            return ScanResult(
                scanner=scanner.name,
                repository=repo_url,
                output_path=output,
                success=success,
                error=error,
                duration=time.monotonic() - started,
                dojo_scan_type=scanner.dojo_scan_type,
                commit_hash=commit_hash,
                branch_tag=branch_tag,
            )

        if variable := missing_env(scanner, self.env):
            self.logger.warn(f"Skipping {scanner.name}: required environment variable {variable} not set")
            return finish(False, None, f"required environment variable {variable} not set")

        self.results_dir.mkdir(parents=True, exist_ok=True)
        output = self.output_path(repo_name, scanner)
        self.logger.info(f"Running {scanner.name}...")

        if scanner.command.startswith(BUILTIN_COMMAND_PREFIX):
            return self._run_builtin(scanner, repo_path, output, finish)

        if resolve_executable(scanner.command) is None:
            self.logger.fail(f"Scanner {scanner.command} not found in PATH")
            return finish(False, output, f"scanner not found: {scanner.command}")

        arguments = render_arguments(
            scanner.arguments_for(local=self.local),
            output=output,
            repo_url=repo_url,
            sbom=sbom_path,
        )
        options = CommandOptions(cwd=repo_path, check=False, timeout=scanner.timeout_seconds, merge_stderr=True)
        try:
            completed = run_command([scanner.command, *arguments], options=options)
        except CommandTimeoutError as exc:
            self.logger.fail(f"{scanner.name} timed out after {scanner.timeout}")
            return finish(False, output, str(exc))
        except OSError as exc:
            self.logger.fail(f"{scanner.name} failed to start: {exc}")
            return finish(False, output, str(exc))

        if completed.returncode != 0:
            if output.exists():
                self.logger.ok(f"{scanner.name} completed (with findings)")
                return finish(True, output)
            self.logger.fail(f"{scanner.name} failed with exit status {completed.returncode}")
            if completed.stdout.strip():
                self.logger.info(f"Output: {completed.stdout.strip()[-OUTPUT_TAIL_CHARS:]}")
            return finish(False, output, f"exit status {completed.returncode}")

        result = finish(True, output)
        self.logger.ok(f"{scanner.name} completed in {result.duration:.1f}s")
        return result

    def _run_builtin(
        self,
        scanner: ScannerConfig,
        repo_path: Path,
        output: Path,
        finish: Callable[..., ScanResult],
    ) -> ScanResult:
        builtin = scanner.command.removeprefix(BUILTIN_COMMAND_PREFIX)
        if builtin != BUILTIN_NAME:
            self.logger.fail(f"Unknown built-in scanner {scanner.command}")
            return finish(False, output, f"unknown built-in scanner: {builtin}")
        try:
            count = run_binary_detector(repo_path, output)
        except OSError as exc:
            self.logger.fail(f"{scanner.name} failed: {exc}")
            return finish(False, output, str(exc))
        suffix = f" (found {count} binaries)" if count else ""
        self.logger.ok(f"{scanner.name} completed{suffix}")
        return finish(True, output)


__all__ = ["ScannerRunner", "missing_env", "render_arguments"]
