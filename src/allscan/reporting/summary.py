# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Console summary of scan results, coverage and run statistics."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..coverage import CoverageMatrix, CoverageState, compute_coverage, repo_level_results
from ..parsers import AnalysisCategory, FindingSummary, ParseError, ParserRegistry, ResultParser
from ..results import RepoScanContext, ScanResult
from ..targets import repository_slug
from .scorecard import ScorecardReport, render_scorecard_report

SEPARATOR_WIDTH: Final[int] = 70

_CELL_MARKERS: Final[dict[CoverageState, tuple[str, str]]] = {
    CoverageState.OK: ("✔", "bright_green"),
    CoverageState.FAILED: ("⚠", "yellow"),
    CoverageState.CONDITIONAL: ("◐", "yellow"),
    CoverageState.NONE: ("✘", "red"),
}


@dataclass(slots=True)
class RunStatistics:
    """Totals across every repository in a run."""

    total: int = 0
    successful: int = 0
    failed: int = 0
    duration: float = 0.0

    def record(self, result: ScanResult) -> None:
        self.total += 1
        self.duration += result.duration
        if result.success:
            self.successful += 1
        else:
            self.failed += 1


def format_duration(seconds: float) -> str:
    """Return ``seconds`` as a compact ``1h2m3.4s`` style string."""

    hours, remainder = divmod(max(seconds, 0.0), 3600)
    minutes, secs = divmod(remainder, 60)
    parts: list[str] = []
    if hours:
        parts.append(f"{int(hours)}h")
    if hours or minutes:
        parts.append(f"{int(minutes)}m")
    parts.append(f"{secs:.1f}s")
    return "".join(parts)


def percentage_label(percent: float) -> str:
    """Return the coverage-row label for a language share."""

    if percent < 1.0:
        return "(<1%)"
    return f"({int(percent + 0.5)}%)"


def parse_result(result: ScanResult, registry: ParserRegistry) -> tuple[FindingSummary, ResultParser | None]:
    """Return the finding summary for ``result`` and the parser that produced it.

    Unreadable or malformed reports yield an empty summary.
    """

    parser = registry.try_get(result.scanner)
    if parser is None or result.output_path is None:
        return FindingSummary(), parser
    try:
        return parser.parse(result.output_path.read_bytes()), parser
    except (OSError, ParseError):
        return FindingSummary(), parser


class SummaryRenderer:
    """Render the end-of-run summary onto a Rich console."""

    def __init__(self, console: Console, registry: ParserRegistry) -> None:
        self.console = console
        self.registry = registry

    def render(self, contexts: Sequence[RepoScanContext]) -> RunStatistics:
        """Print per-repository results and overall statistics.

        Args:
            contexts: Scan contexts in run order.

        Returns:
            RunStatistics: Totals printed in the statistics block.
        """

        stats = RunStatistics()
        self._banner("📊 SCAN RESULTS SUMMARY")
        self.console.print()
        for context in contexts:
            self.console.print(Text(f"📦 {repository_slug(context.repo_url)}", style="bold magenta"))
            self.console.print(Text("─" * SEPARATOR_WIDTH, style="dim"))
            for result in context.results:
                stats.record(result)
                self.render_result(result)
            matrix = compute_coverage(context, self.registry)
            if matrix is not None:
                self.render_coverage(context, matrix)
                self.render_repo_level(context)
            if context.sbom_path is not None:
                line = Text("\n  ")
                line.append("SBOM", style="bold cyan")
                line.append(f": {context.sbom_path}")
                self.console.print(line)
            self.console.print()
        self._render_statistics(stats)
        return stats

    def render_result(self, result: ScanResult) -> None:
        """Print one scanner's outcome."""

        if not result.success:
            line = Text("  ")
            line.append(f"❌ {result.scanner}", style="red")
            line.append(": ")
            line.append("FAILED", style="red")
            line.append(f" - {result.error}")
            self.console.print(line)
            return
        summary, parser = parse_result(result, self.registry)
        if parser is None:
            line = Text("  🔧 ")
            line.append(result.scanner, style="bold")
            line.append(" (")
            line.append("Unknown", style="dim")
            line.append(")")
            self.console.print(line)
            self.console.print(Text("     No parser available", style="dim"))
            return
        if parser.category is AnalysisCategory.SCORECARD:
            self._render_scorecard(result)
            return
        self.render_findings(parser, summary)

    def render_findings(self, parser: ResultParser, summary: FindingSummary) -> None:
        """Print the severity breakdown reported by one parser."""

        line = Text(f"  {parser.icon} ")
        line.append(parser.name, style="bold")
        line.append(" (")
        line.append(parser.category.value, style="dim")
        line.append(")")
        self.console.print(line)
        if summary.total == 0:
            self.console.print(Text("     ✨ No findings", style="green"))
            return
        if parser.category is AnalysisCategory.SECRETS:
            self.console.print(Text(f"     🚨 Secrets detected: {summary.total}", style="red"))
            return
        buckets = (
            ("🔴 Critical", summary.critical, "bold red"),
            ("🟠 High", summary.high, "red"),
            ("🟡 Medium", summary.medium, "yellow"),
            ("🟢 Low", summary.low, "green"),
            ("⚪ Info", summary.info, "dim"),
        )
        findings = Text("     ")
        first = True
        for label, count, style in buckets:
            if count <= 0:
                continue
            if not first:
                findings.append("  ")
            findings.append(f"{label}: {count}", style=style)
            first = False
        self.console.print(findings)
        self.console.print(Text(f"     Total: {summary.total} findings", style="dim"))

    def render_coverage(self, context: RepoScanContext, matrix: CoverageMatrix) -> None:
        """Print the language by category coverage table."""

        percentages = (context.languages.percentages() if context.languages else None) or {}
        languages = sorted(matrix.languages, key=lambda name: (-percentages.get(name, 0.0), name))
        name_width = max(len(language) for language in languages)
        labels = {
            language: f"{language:<{name_width}} {percentage_label(percentages[language])}"
            if language in percentages
            else language
            for language in languages
        }

        self.console.print()
        self.console.print(Text("  Language Coverage", style="bold cyan"))
        table = Table(box=box.SIMPLE_HEAD, show_edge=False, pad_edge=False, padding=(0, 2))
        table.add_column("Language", no_wrap=True)
        for category in matrix.categories:
            table.add_column(category.value, justify="center", no_wrap=True)
        for language in languages:
            cells = []
            for category in matrix.categories:
                marker, style = _CELL_MARKERS[matrix.state(language, category)]
                cells.append(Text(marker, style=style))
            table.add_row(labels[language], *cells)
        self.console.print(table)

    def render_repo_level(self, context: RepoScanContext) -> None:
        """Print the repository-level scanners that produced results."""

        outcomes = repo_level_results(context, self.registry)
        if not outcomes:
            return
        self.console.print()
        self.console.print(Text("  Repo-Level Scanners", style="bold cyan"))
        for outcome in outcomes:
            line = Text("  ")
            if outcome.success:
                line.append("✔", style="bright_green")
            else:
                line.append("⚠", style="yellow")
            line.append(f" {outcome.name} (")
            line.append(outcome.category.value, style="dim")
            line.append(")")
            self.console.print(line)

    def _render_scorecard(self, result: ScanResult) -> None:
        try:
            report = ScorecardReport.load(_require_path(result))
        except (OSError, ParseError) as exc:
            line = Text("  ")
            line.append(f"❌ {result.scanner}", style="red")
            line.append(": ")
            line.append("Failed to print report", style="red")
            line.append(f" - {exc}")
            self.console.print(line)
            return
        render_scorecard_report(self.console, report)

    def _render_statistics(self, stats: RunStatistics) -> None:
        self._banner("📈 OVERALL STATISTICS")
        self.console.print(Text.assemble("  Total scans:    ", (str(stats.total), "bold")))
        self.console.print(Text.assemble("  Successful:     ", (str(stats.successful), "bold green")))
        failed_style = "bold red" if stats.failed else "dim"
        self.console.print(Text.assemble("  Failed:         ", (str(stats.failed), failed_style)))
        self.console.print(Text.assemble("  Total duration: ", (format_duration(stats.duration), "dim")))
        self.console.print(Text("═" * SEPARATOR_WIDTH, style="cyan"))
        self.console.print()

    def _banner(self, title: str) -> None:
        self.console.print()
        self.console.print(Text("═" * SEPARATOR_WIDTH, style="cyan"))
        self.console.print(Text(f" {title} ", style="bold cyan"))
        self.console.print(Text("═" * SEPARATOR_WIDTH, style="cyan"))


def _require_path(result: ScanResult) -> Path:
    if result.output_path is None:
        raise FileNotFoundError(f"{result.scanner} produced no output file")
    return result.output_path


def print_summary(console: Console, contexts: Sequence[RepoScanContext], registry: ParserRegistry) -> RunStatistics:
    """Render the summary for ``contexts`` on ``console``."""

    return SummaryRenderer(console, registry).render(contexts)


__all__ = [
    "RunStatistics",
    "SummaryRenderer",
    "format_duration",
    "parse_result",
    "percentage_label",
    "print_summary",
]
