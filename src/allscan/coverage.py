# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-language coverage tracking across analysis categories.

Cells move through the ordered states ``NONE < CONDITIONAL < FAILED < OK``.
A success always lands on ``OK``; a failure only raises a cell to ``FAILED``;
a conditional match only lifts ``NONE``. Nothing ever lowers a cell.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from .parsers import REPO_LEVEL_CATEGORIES, TRACKED_CATEGORIES, AnalysisCategory, ParserRegistry
from .results import RepoScanContext


class CoverageState(IntEnum):
    """Ordered coverage outcome for one (language, category) pair."""

    NONE = 0
    CONDITIONAL = 1
    FAILED = 2
    OK = 3


@dataclass(slots=True)
class CoverageCell:
    """Mutable coverage state with monotonic upgrade operations."""

    state: CoverageState = CoverageState.NONE

    def record_success(self) -> None:
        self.state = CoverageState.OK

    def record_failure(self) -> None:
        if self.state < CoverageState.FAILED:
            self.state = CoverageState.FAILED

    def record_conditional(self) -> None:
        if self.state is CoverageState.NONE:
            self.state = CoverageState.CONDITIONAL


@dataclass(slots=True)
class CoverageMatrix:
    """Detected languages crossed with tracked analysis categories."""

    languages: tuple[str, ...]
    categories: tuple[AnalysisCategory, ...] = TRACKED_CATEGORIES
    cells: dict[tuple[str, AnalysisCategory], CoverageCell] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for language in self.languages:
            for category in self.categories:
                self.cells.setdefault((language, category), CoverageCell())

    def cell(self, language: str, category: AnalysisCategory) -> CoverageCell:
        """Return the cell for ``language`` and ``category``.

        Raises:
            KeyError: If the pair is not part of the matrix.
        """

        return self.cells[(language, category)]

    def state(self, language: str, category: AnalysisCategory) -> CoverageState:
        """Return the current state for ``language`` and ``category``."""

        return self.cell(language, category).state


@dataclass(frozen=True, slots=True)
class RepoLevelResult:
    """Outcome of a scanner that applies to the repository as a whole."""

    name: str
    category: AnalysisCategory
    success: bool


def compute_coverage(context: RepoScanContext, registry: ParserRegistry) -> CoverageMatrix | None:
    """Build the coverage matrix for one repository.

    Only selected scanners whose parser category is tracked contribute. A
    scanner covers a language exactly when it is universal or lists the
    language in ``languages``; otherwise a listing in
    ``languages_conditional`` yields conditional coverage. A scanner with no
    result counts as failed.

    Args:
        context: Repository scan context with languages, scanners and results.
        registry: Parser registry used to look up scanner categories.

    Returns:
        CoverageMatrix | None: Matrix over detected languages, or ``None`` when
        no languages were detected.
    """

    if context.languages is None or not context.languages.languages:
        return None
    matrix = CoverageMatrix(languages=context.languages.languages)
    for scanner in context.scanners:
        category = registry.category_of(scanner.name)
        if category is None or category in REPO_LEVEL_CATEGORIES or category not in matrix.categories:
            continue
        result = context.result_for(scanner.name)
        succeeded = result is not None and result.success
        exact = {language.lower() for language in scanner.languages}
        conditional = {language.lower() for language in scanner.languages_conditional}
        for language in matrix.languages:
            cell = matrix.cell(language, category)
            if scanner.is_universal or language.lower() in exact:
                if succeeded:
                    cell.record_success()
                else:
                    cell.record_failure()
            elif language.lower() in conditional:
                cell.record_conditional()
    return matrix


def repo_level_results(context: RepoScanContext, registry: ParserRegistry) -> list[RepoLevelResult]:
    """Return outcomes of the repository-level scanners that produced results."""

    outcomes: list[RepoLevelResult] = []
    for scanner in context.scanners:
        category = registry.category_of(scanner.name)
        if category not in REPO_LEVEL_CATEGORIES:
            continue
        result = context.result_for(scanner.name)
        if result is None:
            continue
        outcomes.append(RepoLevelResult(name=scanner.name, category=category, success=result.success))
    return outcomes


__all__ = [
    "CoverageCell",
    "CoverageMatrix",
    "CoverageState",
    "RepoLevelResult",
    "compute_coverage",
    "repo_level_results",
]
