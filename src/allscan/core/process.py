# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import logging
import shutil

# Bandit: subprocess usage is intentional; arguments are passed as vectors and
# ``shell=True`` is never used.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CommandOptions:
    """Immutable command execution options."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    check: bool = True
    timeout: float | None = None
    merge_stderr: bool = False
    discard_stdin: bool = True


class SubprocessExecutionError(RuntimeError):
    """Raised when a subprocess exits with a non-zero status while ``check`` is true."""

    def __init__(self, command: Sequence[str], returncode: int, stdout: str, stderr: str) -> None:
        """Initialise the error with captured subprocess metadata.

        Args:
            command: Normalised command sequence that was executed.
            returncode: Exit status reported by the subprocess.
            stdout: Captured standard output stream.
            stderr: Captured standard error stream.
        """

        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. stderr: {stderr.strip() or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class CommandTimeoutError(RuntimeError):
    """Raised when a subprocess exceeds its timeout and has been killed."""

    def __init__(self, command: Sequence[str], timeout: float, output: str) -> None:
        super().__init__(f"Command '{command[0]}' timed out after {timeout:g}s")
        self.command = tuple(command)
        self.timeout = timeout
        self.output = output


def _ensure_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode(errors="ignore")
    return value


def resolve_executable(name: str) -> str | None:
    """Return the absolute path of ``name`` or ``None`` when it is not installed.

    Args:
        name: Executable name or path.

    Returns:
        str | None: Absolute executable path when resolvable.
    """

    candidate = Path(name)
    if candidate.is_absolute():
        return str(candidate) if candidate.exists() else None
    return shutil.which(name)


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Normalise the subprocess argument sequence.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
    """

    if not args:
        raise ValueError("subprocess command requires at least one argument")
    head, *rest = args
    resolved = resolve_executable(head)
    if resolved is None:
        raise FileNotFoundError(f"Executable '{head}' was not found on PATH")
    return [resolved, *rest]


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Execute ``args`` after normalising the executable path.

    ``subprocess.run`` kills the child when the timeout expires; the partial
    output is attached to the raised :class:`CommandTimeoutError`.

    Args:
        args: Command and argument sequence to execute.
        options: Options configuring execution semantics.

    Returns:
        CompletedProcess: Subprocess execution metadata with text streams.

    Raises:
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
        CommandTimeoutError: When the process exceeds ``options.timeout``.
        SubprocessExecutionError: When ``check`` is true and the process exits
            with a non-zero status.
    """

    resolved_options = options or CommandOptions()
    normalized = _normalize_args(args)
    LOGGER.debug("running %s (cwd=%s)", " ".join(args), resolved_options.cwd)
    try:
        # Bandit: argument vectors come from configuration, never a shell string.
        completed: CompletedProcess[str] = subprocess.run(  # nosec B603
            normalized,
            cwd=str(resolved_options.cwd) if resolved_options.cwd is not None else None,
            env=dict(resolved_options.env) if resolved_options.env is not None else None,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if resolved_options.merge_stderr else subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=resolved_options.timeout,
            stdin=subprocess.DEVNULL if resolved_options.discard_stdin else None,
        )
    except subprocess.TimeoutExpired as exc:
        timeout_value = resolved_options.timeout if resolved_options.timeout is not None else 0.0
        raise CommandTimeoutError(args, timeout_value, _ensure_text(exc.stdout)) from exc

    stdout = _ensure_text(completed.stdout)
    stderr = _ensure_text(completed.stderr)
    if resolved_options.check and completed.returncode != 0:
        raise SubprocessExecutionError(normalized, completed.returncode, stdout, stderr)
    return CompletedProcess(args=normalized, returncode=completed.returncode, stdout=stdout, stderr=stderr)


__all__ = [
    "CommandOptions",
    "CommandTimeoutError",
    "SubprocessExecutionError",
    "resolve_executable",
    "run_command",
]
