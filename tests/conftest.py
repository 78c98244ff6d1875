# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable, Iterator
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from allscan.core.console import get_console_manager

GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@example.com",
}


@pytest.fixture(autouse=True)
def _fresh_consoles() -> Iterator[None]:
    get_console_manager().reset()
    yield
    get_console_manager().reset()


@pytest.fixture
def git_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give git a deterministic identity and keep it away from user config."""

    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    for key, value in GIT_IDENTITY.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", "/dev/null")


@pytest.fixture
def git(git_env: None) -> Callable[..., str]:
    """Return a helper running git in a directory and returning stdout."""

    def _git(cwd: Path, *args: str) -> str:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
        )
        return completed.stdout.strip()

    return _git


@pytest.fixture
def origin_repo(tmp_path: Path, git: Callable[..., str]) -> Path:
    """Create a repository with ``main`` and ``develop`` branches and a ``v1.0.0`` tag."""

    origin = tmp_path / "origin" / "widgets"
    origin.mkdir(parents=True)
    git(origin, "init", "--initial-branch=main")
    (origin / "main.go").write_text("package main\n", encoding="utf-8")
    git(origin, "add", ".")
    git(origin, "commit", "-m", "initial")
    git(origin, "tag", "-a", "v1.0.0", "-m", "release 1.0.0")
    git(origin, "checkout", "-b", "develop")
    (origin / "app.py").write_text("print('develop')\n", encoding="utf-8")
    git(origin, "add", ".")
    git(origin, "commit", "-m", "develop work")
    git(origin, "checkout", "main")
    return origin


@pytest.fixture
def recording_console() -> Console:
    """Return a colourless console writing into memory."""

    return Console(file=StringIO(), color_system=None, no_color=True, width=200, highlight=False)
