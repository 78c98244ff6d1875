# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Terminal reporting for completed scan runs."""

from __future__ import annotations

from .scorecard import ScorecardReport, render_scorecard_report
from .summary import RunStatistics, SummaryRenderer, format_duration, parse_result, percentage_label, print_summary

__all__ = [
    "RunStatistics",
    "ScorecardReport",
    "SummaryRenderer",
    "format_duration",
    "parse_result",
    "percentage_label",
    "print_summary",
    "render_scorecard_report",
]
