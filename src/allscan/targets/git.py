# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Thin git invocation layer shared by ref resolution and checkouts."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Final

from ..core.process import CommandOptions, CommandTimeoutError, run_command
from ..errors import GitCommandError

GitRunner = Callable[[Sequence[str], Path | None], list[str]]

GIT_TIMEOUT_SECONDS: Final[float] = 600.0


def run_git(args: Sequence[str], cwd: Path | None) -> list[str]:
    """Execute ``git <args>`` returning stdout lines.

    Args:
        args: Git arguments without the leading ``git``.
        cwd: Working directory for the command, ``None`` for the current one.

    Returns:
        list[str]: Output lines produced by git.

    Raises:
        GitCommandError: If git is missing, times out or exits non-zero.
    """

    command = ("git", *args)
    env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
    options = CommandOptions(cwd=cwd, env=env, check=False, timeout=GIT_TIMEOUT_SECONDS)
    try:
        completed = run_command(command, options=options)
    except FileNotFoundError as exc:
        raise GitCommandError(command, 127, str(exc)) from exc
    except CommandTimeoutError as exc:
        raise GitCommandError(command, 124, f"{exc}\n{exc.output}") from exc
    if completed.returncode != 0:
        raise GitCommandError(command, completed.returncode, completed.stderr or completed.stdout)
    return completed.stdout.splitlines()


__all__ = ["GIT_TIMEOUT_SECONDS", "GitRunner", "run_git"]
