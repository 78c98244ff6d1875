# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser registry keyed by scanner name."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from .decoders import OutputSchema, ResultParser
from .models import AnalysisCategory


class ParserRegistry(Mapping[str, ResultParser]):
    """Read-only mapping of scanner names to their result parsers.

    Built once per run and handed to reporting and coverage explicitly.
    """

    def __init__(self, parsers: Iterable[ResultParser] = ()) -> None:
        self._parsers: dict[str, ResultParser] = {}
        for parser in parsers:
            self.register(parser)

    def register(self, parser: ResultParser) -> None:
        """Register ``parser`` enforcing uniqueness by scanner name.

        Raises:
            ValueError: If a parser with the same name is already registered.
        """

        if parser.name in self._parsers:
            raise ValueError(f"Parser '{parser.name}' already registered")
        self._parsers[parser.name] = parser

    def try_get(self, name: str) -> ResultParser | None:
        """Return the parser for ``name`` or ``None`` when unknown."""

        return self._parsers.get(name)

    def category_of(self, name: str) -> AnalysisCategory | None:
        """Return the analysis category of scanner ``name`` when known."""

        parser = self._parsers.get(name)
        return parser.category if parser is not None else None

    def __len__(self) -> int:
        return len(self._parsers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._parsers)

    def __getitem__(self, name: str) -> ResultParser:
        return self._parsers[name]


def default_parser_registry() -> ParserRegistry:
    """Return a registry populated with every built-in parser."""

    return ParserRegistry(
        (
            ResultParser("grype", OutputSchema.GRYPE, AnalysisCategory.SCA, "📦"),
            ResultParser("osv-scanner", OutputSchema.OSV, AnalysisCategory.SCA, "🔎"),
            ResultParser("socket", OutputSchema.SOCKET, AnalysisCategory.SCA, "🔌"),
            ResultParser("gosec", OutputSchema.GOSEC, AnalysisCategory.SAST, "🔍"),
            ResultParser("gitleaks", OutputSchema.GITLEAKS, AnalysisCategory.SECRETS, "🔑"),
            ResultParser("binary-detector", OutputSchema.BINARY, AnalysisCategory.BINARY, "📀"),
            ResultParser("scorecard", OutputSchema.SCORECARD, AnalysisCategory.SCORECARD, "🛡️"),
        ),
    )


__all__ = ["ParserRegistry", "default_parser_registry"]
