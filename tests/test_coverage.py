# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the language coverage matrix."""

from __future__ import annotations

from pathlib import Path

import pytest

from allscan.config import ScannerConfig
from allscan.coverage import CoverageCell, CoverageState, compute_coverage, repo_level_results
from allscan.languages import DetectedLanguageSet, LanguageSource
from allscan.parsers import AnalysisCategory, default_parser_registry
from allscan.results import RepoScanContext, ScanResult

URL = "https://github.com/acme/widgets"


def _result(name: str, success: bool) -> ScanResult:
    return ScanResult(scanner=name, repository=URL, output_path=Path(f"/tmp/{name}.json"), success=success)


def _context(scanners: list[ScannerConfig], results: list[ScanResult], *languages: str) -> RepoScanContext:
    detected = DetectedLanguageSet.from_weights({language: 1 for language in languages}, LanguageSource.LOCAL_SCAN)
    return RepoScanContext(repo_url=URL, results=results, languages=detected, scanners=scanners)


@pytest.mark.parametrize(
    ("operations", "final"),
    [
        (["success", "failure"], CoverageState.OK),
        (["failure", "success"], CoverageState.OK),
        (["conditional", "failure"], CoverageState.FAILED),
        (["failure", "conditional"], CoverageState.FAILED),
        (["success", "conditional"], CoverageState.OK),
        (["conditional"], CoverageState.CONDITIONAL),
        ([], CoverageState.NONE),
    ],
)
def test_cell_transitions_are_monotonic(operations: list[str], final: CoverageState) -> None:
    cell = CoverageCell()
    previous = cell.state
    for operation in operations:
        getattr(cell, f"record_{operation}")()
        assert cell.state >= previous
        previous = cell.state

    assert cell.state is final


def test_coverage_combines_exact_conditional_and_failed_scanners() -> None:
    scanners = [
        ScannerConfig(name="osv-scanner", command="osv-scanner", enabled=True),
        ScannerConfig(name="gosec", command="gosec", enabled=True, languages=["go"]),
        ScannerConfig(name="socket", command="socket", enabled=True, languages=["javascript"], languages_conditional=["python"]),
        ScannerConfig(name="gitleaks", command="gitleaks", enabled=True),
    ]
    results = [_result("osv-scanner", True), _result("gosec", False), _result("socket", False), _result("gitleaks", True)]

    matrix = compute_coverage(_context(scanners, results, "go", "python"), default_parser_registry())

    assert matrix is not None
    assert matrix.state("go", AnalysisCategory.SCA) is CoverageState.OK
    assert matrix.state("go", AnalysisCategory.SAST) is CoverageState.FAILED
    assert matrix.state("python", AnalysisCategory.SCA) is CoverageState.OK
    assert matrix.state("python", AnalysisCategory.SAST) is CoverageState.NONE


def test_conditional_only_coverage_and_missing_results() -> None:
    scanners = [
        ScannerConfig(name="socket", command="socket", enabled=True, languages=["javascript"], languages_conditional=["python"]),
        ScannerConfig(name="gosec", command="gosec", enabled=True, languages=["go"]),
    ]

    matrix = compute_coverage(_context(scanners, [], "python", "go"), default_parser_registry())

    assert matrix is not None
    assert matrix.state("python", AnalysisCategory.SCA) is CoverageState.CONDITIONAL
    assert matrix.state("go", AnalysisCategory.SAST) is CoverageState.FAILED


def test_unknown_scanners_do_not_contribute() -> None:
    scanners = [ScannerConfig(name="custom", command="custom", enabled=True)]

    matrix = compute_coverage(_context(scanners, [_result("custom", True)], "go"), default_parser_registry())

    assert matrix is not None
    assert matrix.state("go", AnalysisCategory.SCA) is CoverageState.NONE


def test_no_languages_means_no_matrix() -> None:
    assert compute_coverage(_context([], []), default_parser_registry()) is None
    assert compute_coverage(RepoScanContext(repo_url=URL), default_parser_registry()) is None


def test_repo_level_results_only_include_run_scanners() -> None:
    scanners = [
        ScannerConfig(name="gitleaks", command="gitleaks", enabled=True),
        ScannerConfig(name="binary-detector", command="builtin:binary-detector", enabled=True),
        ScannerConfig(name="scorecard", command="scorecard", enabled=True),
        ScannerConfig(name="grype", command="grype", enabled=True),
    ]
    results = [_result("gitleaks", True), _result("binary-detector", False), _result("grype", True)]

    outcomes = repo_level_results(_context(scanners, results, "go"), default_parser_registry())

    assert [(outcome.name, outcome.category, outcome.success) for outcome in outcomes] == [
        ("gitleaks", AnalysisCategory.SECRETS, True),
        ("binary-detector", AnalysisCategory.BINARY, False),
    ]
