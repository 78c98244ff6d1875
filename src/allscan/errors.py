# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared across the scan pipeline."""

from __future__ import annotations


class AllscanError(Exception):
    """Base class for recoverable allscan failures."""


class ConfigError(AllscanError):
    """Raised when configuration files cannot be loaded or are invalid."""


class RepositoryConfigError(ConfigError):
    """Raised when a single repository entry is malformed."""


class CheckoutError(AllscanError):
    """Raised when a repository cannot be cloned, fetched or reset."""


class GitCommandError(CheckoutError):
    """Raised when a git invocation exits with a non-zero status."""

    def __init__(self, command: tuple[str, ...], returncode: int, output: str) -> None:
        """Initialise the error with the failing git command metadata.

        Args:
            command: Git argument vector that failed.
            returncode: Exit status reported by git.
            output: Combined stdout/stderr produced by git.
        """

        detail = output.strip() or "<no output>"
        super().__init__(f"{' '.join(command)} failed ({returncode}): {detail}")
        self.command = command
        self.returncode = returncode
        self.output = output


class SBOMGenerationError(AllscanError):
    """Raised when the SBOM generator fails or times out."""


class LanguageMetadataUnavailable(AllscanError):
    """Raised when hosted language metadata cannot be retrieved."""


class UploadError(AllscanError):
    """Raised when a result upload is rejected or cannot be delivered."""


__all__ = [
    "AllscanError",
    "CheckoutError",
    "ConfigError",
    "GitCommandError",
    "LanguageMetadataUnavailable",
    "RepositoryConfigError",
    "SBOMGenerationError",
    "UploadError",
]
