# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Helpers shared by CLI commands."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Final

import typer

from ..config import RepositorySpec
from ..config_loader import load_repositories
from ..core.logging import ConsoleLogger, configure_debug_logging
from ..errors import ConfigError

CONFIG_ERROR_EXIT_CODE: Final[int] = 2
DEFAULT_CONFIG_PATH: Final[Path] = Path("allscan.toml")
DEFAULT_REPOS_PATH: Final[Path] = Path("repositories.toml")


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


def build_cli_logger(*, emoji: bool, no_color: bool = False, debug: bool = False) -> ConsoleLogger:
    """Return a console logger for the CLI presentation flags."""

    configure_debug_logging(enabled=debug)
    return ConsoleLogger(use_emoji=emoji, use_color=False if no_color else None)


def title_case(text: str) -> str:
    """Upper-case the first letter of every whitespace-separated word."""

    return " ".join(word[:1].upper() + word[1:] for word in text.split())


def confirm_missing_env(missing: Mapping[str, str], logger: ConsoleLogger) -> None:
    """List missing environment variables and ask whether to continue.

    Raises:
        CLIError: If the user declines.
    """

    logger.warn("Missing required environment variables:")
    for consumer, variable in missing.items():
        logger.info(f"  • {title_case(consumer)} requires {variable}")
    if not typer.confirm("Continue anyway?", default=False):
        raise CLIError("Aborted: missing required environment variables")


def resolve_repository_list(
    repos_path: Path | None,
    configured: list[RepositorySpec],
) -> list[RepositorySpec]:
    """Return the repositories to scan.

    An explicit ``--repos`` file wins. Otherwise ``repositories.toml`` in the
    working directory is used when present, then the ``[[repositories]]``
    entries of the main configuration.

    Raises:
        CLIError: If the file cannot be loaded or no repository is configured.
    """

    path = repos_path
    if path is None and DEFAULT_REPOS_PATH.is_file():
        path = DEFAULT_REPOS_PATH
    if path is not None:
        try:
            return load_repositories(path)
        except ConfigError as exc:
            raise CLIError(f"Failed to load repositories: {exc}", exit_code=CONFIG_ERROR_EXIT_CODE) from exc
    if not configured:
        raise CLIError("No repositories configured", exit_code=CONFIG_ERROR_EXIT_CODE)
    return list(configured)


__all__ = [
    "CLIError",
    "CONFIG_ERROR_EXIT_CODE",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_REPOS_PATH",
    "build_cli_logger",
    "confirm_missing_env",
    "resolve_repository_list",
    "title_case",
]
