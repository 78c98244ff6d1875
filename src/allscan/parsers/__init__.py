# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Scanner output parsers."""

from __future__ import annotations

from .decoders import OutputSchema, ParseError, ResultParser, scorecard_bucket
from .models import REPO_LEVEL_CATEGORIES, TRACKED_CATEGORIES, AnalysisCategory, FindingSummary
from .registry import ParserRegistry, default_parser_registry

__all__ = [
    "REPO_LEVEL_CATEGORIES",
    "TRACKED_CATEGORIES",
    "AnalysisCategory",
    "FindingSummary",
    "OutputSchema",
    "ParseError",
    "ParserRegistry",
    "ResultParser",
    "default_parser_registry",
    "scorecard_bucket",
]
