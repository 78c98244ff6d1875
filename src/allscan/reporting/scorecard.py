# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Detailed rendering of OpenSSF Scorecard reports."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from rich.console import Console
from rich.text import Text

from ..parsers import ParseError

REASON_WIDTH: Final[int] = 40
CHECK_NAME_WIDTH: Final[int] = 25
RULE_WIDTH: Final[int] = 64


@dataclass(frozen=True, slots=True)
class ScorecardCheck:
    """One scored check from a scorecard run."""

    name: str
    score: int
    reason: str


@dataclass(frozen=True, slots=True)
class ScorecardReport:
    """Overall score, tool version and individual checks."""

    score: float
    version: str
    checks: tuple[ScorecardCheck, ...]

    @classmethod
    def from_document(cls, document: Any) -> ScorecardReport:
        if not isinstance(document, dict):
            raise ParseError("scorecard: expected a JSON object")
        scorecard = document.get("scorecard") or {}
        checks = tuple(
            ScorecardCheck(
                name=str(entry.get("name", "")),
                score=int(entry.get("score", -1)),
                reason=str(entry.get("reason") or ""),
            )
            for entry in document.get("checks") or []
            if isinstance(entry, dict)
        )
        return cls(
            score=float(document.get("score") or 0.0),
            version=str(scorecard.get("version", "")) if isinstance(scorecard, dict) else "",
            checks=checks,
        )

    @classmethod
    def load(cls, path: Path) -> ScorecardReport:
        """Read and decode the scorecard JSON at ``path``.

        Raises:
            OSError: If the file cannot be read.
            ParseError: If the file is not a scorecard JSON document.
        """

        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"scorecard: invalid JSON output: {exc}") from exc
        return cls.from_document(document)


def truncate_reason(reason: str, limit: int = REASON_WIDTH) -> str:
    """Return the first line of ``reason`` shortened to ``limit`` characters."""

    first_line = reason.split("\n", 1)[0]
    if len(first_line) > limit:
        return first_line[: limit - 3] + "..."
    return first_line


def overall_style(score: float) -> str:
    """Return the colour used for an overall score."""

    if score >= 7:
        return "green"
    if score >= 4:
        return "yellow"
    return "red"


def check_marker(score: int) -> tuple[str, str]:
    """Return the ``(icon, style)`` pair for one check score."""

    if score < 0:
        return "⚪", "dim"
    if score >= 8:
        return "🟢", "green"
    if score >= 5:
        return "🟡", "yellow"
    if score >= 3:
        return "🟠", "yellow"
    return "🔴", "red"


def render_scorecard_report(console: Console, report: ScorecardReport) -> None:
    """Print the overall score and every individual check."""

    console.print()
    console.print(Text("═" * RULE_WIDTH, style="bold cyan"))
    console.print(Text(" 🛡️  OpenSSF Scorecard Report", style="bold cyan"))
    console.print(Text("═" * RULE_WIDTH, style="bold cyan"))
    console.print()
    line = Text("  ")
    line.append("Overall Score:", style="bold")
    line.append(" ")
    line.append(f"{report.score:.1f} / 10", style=f"bold {overall_style(report.score)}")
    console.print(line)
    line = Text("  ")
    line.append("Scorecard Version:", style="dim")
    line.append(f" {report.version}")
    console.print(line)
    console.print()
    console.print(Text("  Individual Checks:", style="bold cyan"))
    console.print(Text("  " + "─" * RULE_WIDTH, style="dim"))
    for check in report.checks:
        icon, style = check_marker(check.score)
        score = " ?" if check.score < 0 else f"{check.score:2d}"
        line = Text(f"  {icon} ")
        line.append(f"{check.name:<{CHECK_NAME_WIDTH}}", style="bold")
        line.append(" ")
        line.append(f"{score}/10", style=style)
        line.append("  ")
        line.append(truncate_reason(check.reason), style="dim")
        console.print(line)
    console.print(Text("  " + "─" * RULE_WIDTH, style="dim"))
    console.print()


__all__ = [
    "ScorecardCheck",
    "ScorecardReport",
    "check_marker",
    "overall_style",
    "render_scorecard_report",
    "truncate_reason",
]
