# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fixed-schema decoders turning scanner JSON into severity histograms.

Each supported tool output format is one :class:`OutputSchema` member; a
:class:`ResultParser` pairs a scanner name with its schema and display
metadata and dispatches through ``_DECODERS``.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final

from .models import AnalysisCategory, FindingSummary


class OutputSchema(str, Enum):
    """Closed set of scanner output formats understood by allscan."""

    GRYPE = "grype"
    OSV = "osv"
    SOCKET = "socket"
    GOSEC = "gosec"
    GITLEAKS = "gitleaks"
    BINARY = "binary"
    SCORECARD = "scorecard"


class ParseError(ValueError):
    """Raised when scanner output does not match its expected schema."""


def _items(document: Any, key: str) -> Iterable[Mapping[str, Any]]:
    if not isinstance(document, Mapping):
        return ()
    value = document.get(key)
    if not isinstance(value, list):
        return ()
    return (entry for entry in value if isinstance(entry, Mapping))


def _severity(entry: Mapping[str, Any], key: str = "severity") -> str:
    value = entry.get(key)
    return value if isinstance(value, str) else ""


def _cvss_label(value: str) -> str:
    """Map a numeric CVSS score string onto a severity label."""

    try:
        score = float(value)
    except ValueError:
        return value
    if score >= 9.0:
        return "critical"
    if score >= 7.0:
        return "high"
    if score >= 4.0:
        return "medium"
    if score > 0.0:
        return "low"
    return "info"


def _decode_grype(document: Any) -> FindingSummary:
    summary = FindingSummary()
    for match in _items(document, "matches"):
        vulnerability = match.get("vulnerability")
        summary.record(_severity(vulnerability) if isinstance(vulnerability, Mapping) else "")
    return summary


def _decode_osv(document: Any) -> FindingSummary:
    summary = FindingSummary()
    for result in _items(document, "results"):
        for package in _items(result, "packages"):
            for group in _items(package, "groups"):
                summary.record(_cvss_label(_severity(group, "max_severity")))
    return summary


def _decode_socket(document: Any) -> FindingSummary:
    summary = FindingSummary()
    for key in ("alerts", "issues", "findings"):
        for entry in _items(document, key):
            summary.record(_severity(entry))
    for result in _items(document, "results"):
        for alert in _items(result, "alerts"):
            summary.record(_severity(alert))
    return summary


def _decode_gosec(document: Any) -> FindingSummary:
    summary = FindingSummary()
    for issue in _items(document, "Issues"):
        summary.total += 1
        match _severity(issue).upper():
            case "HIGH":
                summary.high += 1
            case "MEDIUM":
                summary.medium += 1
            case "LOW":
                summary.low += 1
    return summary


def _decode_gitleaks(document: Any) -> FindingSummary:
    if not isinstance(document, list):
        raise ParseError("gitleaks report must be a JSON array")
    return FindingSummary(high=len(document), total=len(document))


def _decode_binary(document: Any) -> FindingSummary:
    total = document.get("total", 0) if isinstance(document, Mapping) else 0
    if not isinstance(total, int):
        raise ParseError("binary-detector total must be an integer")
    return FindingSummary(medium=total, total=total)


def scorecard_bucket(score: int) -> str:
    """Return the severity bucket for one Scorecard check score (0-10)."""

    if score <= 3:
        return "critical"
    if score <= 5:
        return "high"
    if score <= 7:
        return "medium"
    if score <= 9:
        return "low"
    return "info"


def _decode_scorecard(document: Any) -> FindingSummary:
    summary = FindingSummary()
    for check in _items(document, "checks"):
        score = check.get("score")
        if not isinstance(score, (int, float)) or score < 0:
            continue
        summary.record(scorecard_bucket(int(score)))
    return summary


_DECODERS: Final[dict[OutputSchema, Callable[[Any], FindingSummary]]] = {
    OutputSchema.GRYPE: _decode_grype,
    OutputSchema.OSV: _decode_osv,
    OutputSchema.SOCKET: _decode_socket,
    OutputSchema.GOSEC: _decode_gosec,
    OutputSchema.GITLEAKS: _decode_gitleaks,
    OutputSchema.BINARY: _decode_binary,
    OutputSchema.SCORECARD: _decode_scorecard,
}


@dataclass(frozen=True, slots=True)
class ResultParser:
    """Scanner-specific parser variant.

    Attributes:
        name: Scanner name the parser is registered under.
        schema: Output format decoded by this parser.
        category: Analysis category the scanner belongs to.
        icon: Emoji shown next to the scanner in summaries.
    """

    name: str
    schema: OutputSchema
    category: AnalysisCategory
    icon: str

    def parse(self, data: bytes | str) -> FindingSummary:
        """Decode raw scanner output into a severity histogram.

        Args:
            data: Raw JSON emitted by the scanner.

        Returns:
            FindingSummary: Counts per severity bucket.

        Raises:
            ParseError: If ``data`` is not valid JSON for this schema.
        """

        try:
            document = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"{self.name}: invalid JSON output: {exc}") from exc
        return _DECODERS[self.schema](document)


__all__ = ["OutputSchema", "ParseError", "ResultParser", "scorecard_bucket"]
