# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Result records produced by scanner runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .config import ScannerConfig
from .languages import DetectedLanguageSet


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Outcome of running one scanner against one repository.

    Attributes:
        scanner: Scanner name.
        repository: Repository URL (``local://`` in local mode).
        output_path: JSON report location, possibly missing on failure.
        success: Whether the scanner produced a usable report.
        error: Failure description when ``success`` is ``False``.
        duration: Wall-clock runtime in seconds.
        dojo_scan_type: Upload scan type, empty when uploads are disabled.
        commit_hash: Short commit hash of the scanned checkout.
        branch_tag: Branch, tag or commit label of the scanned checkout.
    """

    scanner: str
    repository: str
    output_path: Path | None
    success: bool
    error: str | None = None
    duration: float = 0.0
    dojo_scan_type: str = ""
    commit_hash: str = ""
    branch_tag: str = ""


@dataclass(slots=True)
class RepoScanContext:
    """Everything the summary needs to report on one repository."""

    repo_url: str
    results: list[ScanResult] = field(default_factory=list)
    languages: DetectedLanguageSet | None = None
    scanners: list[ScannerConfig] = field(default_factory=list)
    sbom_path: Path | None = None

    def result_for(self, scanner_name: str) -> ScanResult | None:
        """Return the first result recorded for ``scanner_name``."""

        for result in self.results:
            if result.scanner == scanner_name:
                return result
        return None


__all__ = ["RepoScanContext", "ScanResult"]
