# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Scanner selection driven by detected languages and per-repository allow-lists."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from .config import RepositorySpec, ScannerConfig
from .core.logging import ConsoleLogger
from .languages import DetectedLanguageSet


class SkipReason(str, Enum):
    """Why a scanner was left out of a repository's run."""

    DISABLED = "disabled"
    INCOMPATIBLE = "no compatible languages detected"
    UNKNOWN = "not defined in the scanner catalog"


@dataclass(frozen=True, slots=True)
class SelectionDecision:
    """Verdict for one scanner considered for a repository."""

    name: str
    selected: bool
    reason: SkipReason | None = None


@dataclass(frozen=True, slots=True)
class SelectionResult:
    """Outcome of planning the scanners for one repository."""

    scanners: tuple[ScannerConfig, ...]
    decisions: tuple[SelectionDecision, ...]

    @property
    def names(self) -> tuple[str, ...]:
        """Return selected scanner names in run order."""

        return tuple(scanner.name for scanner in self.scanners)

    @property
    def skipped(self) -> tuple[SelectionDecision, ...]:
        """Return decisions for scanners that will not run."""

        return tuple(decision for decision in self.decisions if not decision.selected)


def is_scanner_compatible(scanner: ScannerConfig, detected: DetectedLanguageSet | None) -> bool:
    """Return ``True`` when ``scanner`` applies to the detected languages.

    Universal scanners (no ``languages``) are always compatible. Otherwise a
    detected language must appear, ignoring case, in ``languages`` or
    ``languages_conditional``; with nothing detected only universal scanners
    qualify.

    Args:
        scanner: Catalog entry under consideration.
        detected: Languages detected for the repository.

    Returns:
        bool: ``True`` when the scanner should run.
    """

    if scanner.is_universal:
        return True
    if detected is None or not detected.languages:
        return False
    supported = {language.lower() for language in (*scanner.languages, *scanner.languages_conditional)}
    return any(language.lower() in supported for language in detected.languages)


@dataclass(slots=True)
class ScannerSelector:
    """Filter the scanner catalog down to the subset applicable to a repository."""

    catalog: Sequence[ScannerConfig]
    logger: ConsoleLogger = field(default_factory=ConsoleLogger)

    def select(self, spec: RepositorySpec, detected: DetectedLanguageSet | None) -> SelectionResult:
        """Return the scanners to run for ``spec``.

        Args:
            spec: Repository entry, optionally naming an explicit allow-list.
            detected: Languages detected in the repository.

        Returns:
            SelectionResult: Selected scanners in run order plus every decision.
        """

        if spec.scanners:
            candidates = self._explicit_candidates(spec.scanners)
        else:
            candidates = [(scanner.name, scanner) for scanner in self.catalog]
        selected: list[ScannerConfig] = []
        decisions: list[SelectionDecision] = []
        for name, scanner in candidates:
            decision = self._decide(name, scanner, detected)
            decisions.append(decision)
            if decision.selected and scanner is not None:
                selected.append(scanner)
            elif decision.reason is not None and (spec.scanners or decision.reason is not SkipReason.DISABLED):
                self.logger.info(f"Skipping {name}: {decision.reason.value}")
        return SelectionResult(scanners=tuple(selected), decisions=tuple(decisions))

    def _explicit_candidates(self, names: Sequence[str]) -> list[tuple[str, ScannerConfig | None]]:
        by_name = {scanner.name: scanner for scanner in self.catalog}
        return [(name, by_name.get(name)) for name in names]

    @staticmethod
    def _decide(
        name: str,
        scanner: ScannerConfig | None,
        detected: DetectedLanguageSet | None,
    ) -> SelectionDecision:
        if scanner is None:
            return SelectionDecision(name=name, selected=False, reason=SkipReason.UNKNOWN)
        if not scanner.enabled:
            return SelectionDecision(name=name, selected=False, reason=SkipReason.DISABLED)
        if not is_scanner_compatible(scanner, detected):
            return SelectionDecision(name=name, selected=False, reason=SkipReason.INCOMPATIBLE)
        return SelectionDecision(name=name, selected=True)


__all__ = [
    "ScannerSelector",
    "SelectionDecision",
    "SelectionResult",
    "SkipReason",
    "is_scanner_compatible",
]
