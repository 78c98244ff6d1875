# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity histogram and analysis category types shared by parsers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final


class AnalysisCategory(str, Enum):
    """Kind of check a scanner performs."""

    SCA = "SCA"
    SAST = "SAST"
    SECRETS = "Secrets"
    BINARY = "Binary"
    SCORECARD = "Scorecard"


TRACKED_CATEGORIES: Final[tuple[AnalysisCategory, ...]] = (AnalysisCategory.SCA, AnalysisCategory.SAST)
REPO_LEVEL_CATEGORIES: Final[frozenset[AnalysisCategory]] = frozenset(
    {AnalysisCategory.SECRETS, AnalysisCategory.BINARY, AnalysisCategory.SCORECARD},
)


@dataclass(slots=True)
class FindingSummary:
    """Counts of findings per severity bucket."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0
    total: int = 0

    def record(self, severity: str) -> None:
        """Count one finding under ``severity``; unknown labels count as info.

        ``moderate`` is treated as a synonym for ``medium``.
        """

        self.total += 1
        match severity.strip().lower():
            case "critical":
                self.critical += 1
            case "high":
                self.high += 1
            case "medium" | "moderate":
                self.medium += 1
            case "low":
                self.low += 1
            case _:
                self.info += 1


__all__ = ["AnalysisCategory", "FindingSummary", "REPO_LEVEL_CATEGORIES", "TRACKED_CATEGORIES"]
