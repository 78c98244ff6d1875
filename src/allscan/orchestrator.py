# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Drive the per-repository scan pipeline from checkout to results."""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Final

from .config import Config, RepositorySpec, validate_repository_spec
from .constants import LOCAL_URL_SCHEME, RESULT_RETENTION_DAYS, UPLOAD_TOKEN_ENV
from .core.logging import ConsoleLogger
from .errors import CheckoutError, GitCommandError, RepositoryConfigError, SBOMGenerationError
from .execution import ScannerRunner, missing_env
from .hosting import GitHubLanguageClient
from .languages import DetectedLanguageSet, LanguageDetector
from .results import RepoScanContext, ScanResult
from .sbom import SBOMCache, SBOMGenerator, SBOMKey, run_syft
from .selection import ScannerSelector
from .targets import CheckoutManager, GitRunner, repository_name, run_git

LOCAL_LABEL: Final[str] = "local"
UNKNOWN_COMMIT: Final[str] = "unknown"
UPLOAD_REQUIREMENT: Final[str] = "DefectDojo upload"
SECONDS_PER_DAY: Final[int] = 24 * 60 * 60


def missing_required_env(config: Config, *, local: bool, env: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return the first missing environment variable per consumer.

    Args:
        config: Loaded configuration.
        local: ``True`` when uploads are skipped for a local run.
        env: Environment to inspect; defaults to ``os.environ``.

    Returns:
        dict[str, str]: Scanner name (or the upload step) mapped to the first
        variable it needs that is unset.
    """

    environment = env if env is not None else os.environ
    missing: dict[str, str] = {}
    for scanner in config.enabled_scanners():
        if variable := missing_env(scanner, environment):
            missing[scanner.name] = variable
    if not local and config.settings.upload_endpoint and not environment.get(UPLOAD_TOKEN_ENV):
        missing[UPLOAD_REQUIREMENT] = UPLOAD_TOKEN_ENV
    return missing


def cleanup_old_results(
    results_dir: Path,
    *,
    now: float | None = None,
    max_age_days: int = RESULT_RETENTION_DAYS,
) -> int:
    """Delete top-level ``*.json`` reports older than ``max_age_days``.

    Args:
        results_dir: Directory holding scanner reports.
        now: Reference POSIX timestamp; defaults to the current time.
        max_age_days: Retention window in days.

    Returns:
        int: Number of reports removed.
    """

    if not results_dir.is_dir():
        return 0
    cutoff = (time.time() if now is None else now) - max_age_days * SECONDS_PER_DAY
    removed = 0
    for entry in results_dir.iterdir():
        if entry.suffix != ".json" or not entry.is_file():
            continue
        try:
            if entry.stat().st_mtime < cutoff:
                entry.unlink()
                removed += 1
        except FileNotFoundError:
            continue
    return removed


def describe_languages(detected: DetectedLanguageSet) -> str:
    """Return ``python (62%), go (38%)`` style text for ``detected``."""

    if not detected:
        return "none"
    percentages = detected.percentages() or {}
    parts = []
    for language in detected.languages:
        share = percentages.get(language)
        parts.append(f"{language} ({share:.0f}%)" if share is not None else language)
    return ", ".join(parts)


@dataclass(slots=True)
class ScanOrchestrator:
    """Run every selected scanner against each repository in turn.

    Repositories are processed sequentially. With ``fail_fast`` set the run
    stops after the first failed scanner, including across repositories.
    """

    config: Config
    logger: ConsoleLogger = field(default_factory=ConsoleLogger)
    git: GitRunner = run_git
    env: Mapping[str, str] = field(default_factory=lambda: os.environ)
    detector: LanguageDetector | None = None
    sbom_generator: SBOMGenerator = run_syft
    clock: Callable[[], datetime] = datetime.now
    stopped: bool = field(default=False, init=False)

    def setup_directories(self) -> None:
        """Create the workspace, results and SBOM directories."""

        settings = self.config.settings
        for directory in (settings.workspace, settings.results_dir, settings.sbom_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def run(self, repositories: Sequence[RepositorySpec]) -> list[RepoScanContext]:
        """Scan ``repositories`` and return one context per processed repository.

        Invalid specs and failed checkouts are logged and skipped.
        """

        contexts: list[RepoScanContext] = []
        for spec in repositories:
            context = self.scan_repository(spec)
            if context is not None:
                contexts.append(context)
            if self.stopped:
                break
        return contexts

    def scan_repository(self, spec: RepositorySpec) -> RepoScanContext | None:
        """Check out ``spec`` and run its selected scanners.

        Returns:
            RepoScanContext | None: Scan context, or ``None`` when the spec is
            invalid or the checkout failed.
        """

        self.logger.section(f"📦 Processing repository: {spec.url}")
        try:
            validate_repository_spec(spec)
        except RepositoryConfigError as exc:
            self.logger.fail(f"Invalid repository config for {spec.url}: {exc}")
            return None
        manager = CheckoutManager(self.config.settings.workspace, runner=self.git, logger=self.logger)
        try:
            target = manager.checkout(spec)
        except CheckoutError as exc:
            self.logger.fail(f"Failed to check out {spec.url}: {exc}")
            return None
        name = repository_name(spec.url)
        sbom_path = self._ensure_sbom(SBOMKey(name, target.branch_tag, target.commit_hash), target.repo_path)
        return self._scan(
            spec,
            repo_path=target.repo_path,
            repo_name=name,
            commit_hash=target.commit_hash,
            branch_tag=target.branch_tag,
            sbom_path=sbom_path,
            local=False,
        )

    def scan_local(self, path: Path) -> RepoScanContext:
        """Scan the working directory ``path`` in place without cloning."""

        path = path.resolve()
        self.logger.section(f"📂 Scanning local directory: {path}")
        commit_hash = self.local_commit_hash(path)
        sbom_path = self._ensure_sbom(SBOMKey(path.name, LOCAL_LABEL, commit_hash), path)
        spec = RepositorySpec(url=f"{LOCAL_URL_SCHEME}{path}", branch=LOCAL_LABEL)
        return self._scan(
            spec,
            repo_path=path,
            repo_name=path.name,
            commit_hash=commit_hash,
            branch_tag=LOCAL_LABEL,
            sbom_path=sbom_path,
            local=True,
        )

    def local_commit_hash(self, path: Path) -> str:
        """Return the short ``HEAD`` of ``path`` or ``unknown`` outside git."""

        try:
            lines = self.git(["rev-parse", "--short", "HEAD"], path)
        except GitCommandError:
            return UNKNOWN_COMMIT
        return lines[0].strip() if lines and lines[0].strip() else UNKNOWN_COMMIT

    def _ensure_sbom(self, key: SBOMKey, repo_path: Path) -> Path | None:
        cache = SBOMCache(self.config.settings.sbom_dir, generator=self.sbom_generator)
        try:
            artifact = cache.ensure(key, repo_path)
        except SBOMGenerationError as exc:
            self.logger.warn(f"SBOM generation failed: {exc}")
            return None
        if artifact.reused:
            self.logger.info(f"Reusing SBOM {artifact.path.name}")
        else:
            self.logger.ok(f"Generated SBOM {artifact.path.name}")
        return artifact.path

    def _scan(
        self,
        spec: RepositorySpec,
        *,
        repo_path: Path,
        repo_name: str,
        commit_hash: str,
        branch_tag: str,
        sbom_path: Path | None,
        local: bool,
    ) -> RepoScanContext:
        detector = self.detector or LanguageDetector(client=GitHubLanguageClient(env=self.env))
        detected = detector.detect(repo_path, spec.url)
        self.logger.info(f"Detected languages: {describe_languages(detected)}")
        selection = ScannerSelector(self.config.scanners, logger=self.logger).select(spec, detected)
        context = RepoScanContext(
            repo_url=spec.url,
            languages=detected,
            scanners=list(selection.scanners),
            sbom_path=sbom_path,
        )
        runner = ScannerRunner(
            self.config.settings.results_dir,
            local=local,
            env=self.env,
            logger=self.logger,
            clock=self.clock,
        )
        for scanner in selection.scanners:
            result: ScanResult = runner.run(
                scanner,
                repo_url=spec.url,
                repo_name=repo_name,
                repo_path=repo_path,
                commit_hash=commit_hash,
                branch_tag=branch_tag,
                sbom_path=sbom_path,
            )
            context.results.append(result)
            if not result.success and self.config.settings.fail_fast:
                self.logger.warn("Fail-fast enabled, stopping after error")
                self.stopped = True
                break
        return context


def print_dry_run(
    config: Config,
    repositories: Sequence[RepositorySpec],
    logger: ConsoleLogger,
    *,
    local: bool = False,
) -> None:
    """Describe what a run would do without touching the network or disk."""

    settings = config.settings
    logger.section("DRY RUN")
    if not local:
        logger.info("Global Configuration:")
        logger.info(f"  Workspace: {settings.workspace}")
        logger.info(f"  Results Dir: {settings.results_dir}")
        logger.info(f"  Upload Endpoint: {settings.upload_endpoint}")
        logger.info(f"  Max Concurrent: {settings.max_concurrent}")
        logger.info(f"  Fail Fast: {str(settings.fail_fast).lower()}")
    logger.info("Enabled Scanners:")
    for scanner in config.enabled_scanners():
        logger.info(f"  - {scanner.name} (timeout: {scanner.timeout})")
        command = " ".join([scanner.command, *scanner.arguments_for(local=local)])
        logger.info(f"    Command: {command}")
    logger.info("SBOM Generation:")
    logger.info("  Tool: syft (CycloneDX JSON)")
    logger.info(f"  Output: {settings.sbom_dir}/")
    if local:
        return
    logger.info("Repositories:")
    for spec in repositories:
        ref = spec.version or spec.commit or spec.branch or ""
        logger.info(f"  - {spec.url} (ref: {ref})")
        scanners = ", ".join(spec.scanners) if spec.scanners else "all enabled"
        logger.info(f"    Scanners: {scanners}")


__all__ = [
    "ScanOrchestrator",
    "cleanup_old_results",
    "describe_languages",
    "missing_required_env",
    "print_dry_run",
]
