# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Clone, refresh and pin working copies inside the scan workspace."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from ..config import RepositorySpec
from ..core.logging import ConsoleLogger
from ..errors import CheckoutError, GitCommandError
from .git import GitRunner, run_git
from .models import RefKind, RefPlan, ResolvedTarget
from .refs import check_version_commit, plan_ref


def _strip_git_suffix(url: str) -> str:
    return url.strip().removesuffix(".git")


def repository_slug(url: str) -> str:
    """Return ``owner/repo`` from the last two path segments of ``url``.

    Args:
        url: Repository URL in HTTPS, SSH or file form.

    Returns:
        str: Workspace-relative slug with any ``.git`` suffix removed.
    """

    parts = _strip_git_suffix(url).rstrip("/").replace(":", "/").split("/")
    tail = [part for part in parts if part][-2:]
    return "/".join(tail)


def repository_name(url: str) -> str:
    """Return the final path segment of ``url`` without ``.git``."""

    return repository_slug(url).rsplit("/", 1)[-1]


def is_reusable_clone(repo_path: Path, url: str, *, runner: GitRunner = run_git) -> bool:
    """Return ``True`` when ``repo_path`` is a clone of ``url``.

    Args:
        repo_path: Candidate working copy.
        url: Remote the working copy must track as ``origin``.
        runner: Git runner used to read the origin URL.

    Returns:
        bool: ``True`` when the origin URL matches ignoring a ``.git`` suffix.
    """

    if not repo_path.is_dir():
        return False
    try:
        lines = runner(["remote", "get-url", "origin"], repo_path)
    except GitCommandError:
        return False
    origin = lines[0] if lines else ""
    return _strip_git_suffix(origin) == _strip_git_suffix(url)


@dataclass(slots=True)
class CheckoutManager:
    """Materialise repository specs as working copies under ``workspace``.

    Branch targets reuse a matching clone through a shallow fetch and hard
    reset. Tags and commits are always checked out fresh.
    """

    workspace: Path
    runner: GitRunner = run_git
    logger: ConsoleLogger = field(default_factory=ConsoleLogger)

    def repo_path(self, url: str) -> Path:
        """Return the workspace location used for ``url``."""

        return self.workspace / repository_slug(url)

    def checkout(self, spec: RepositorySpec) -> ResolvedTarget:
        """Clone or refresh ``spec`` and read back the checked-out commit.

        Args:
            spec: Validated repository entry.

        Returns:
            ResolvedTarget: Working copy path, short commit and display label.

        Raises:
            CheckoutError: If any required git step fails.
        """

        plan = plan_ref(spec)
        path = self.repo_path(spec.url)
        path.parent.mkdir(parents=True, exist_ok=True)
        if plan.kind is RefKind.VERSION:
            self._checkout_version(spec, plan, path)
        elif plan.kind is RefKind.COMMIT:
            self._checkout_commit(spec.url, plan, path)
        else:
            self._checkout_branch(spec.url, plan, path)
        return ResolvedTarget(repo_path=path, commit_hash=self.short_head(path), branch_tag=plan.branch_tag)

    def short_head(self, path: Path) -> str:
        """Return the abbreviated ``HEAD`` commit of ``path``.

        Raises:
            CheckoutError: If git cannot resolve ``HEAD``.
        """

        lines = self.runner(["rev-parse", "--short", "HEAD"], path)
        if not lines or not lines[0].strip():
            raise CheckoutError(f"could not resolve HEAD in {path}")
        return lines[0].strip()

    def _checkout_version(self, spec: RepositorySpec, plan: RefPlan, path: Path) -> None:
        self.logger.info(f"Cloning {spec.url} at version {plan.ref}")
        _remove_tree(path)
        self.runner(["clone", "--depth=1", "--branch", plan.ref, spec.url, str(path)], None)
        if spec.commit:
            check_version_commit(path, plan.ref, spec.commit, runner=self.runner, logger=self.logger)

    def _checkout_commit(self, url: str, plan: RefPlan, path: Path) -> None:
        self.logger.info(f"Fetching {url} at commit {plan.ref}")
        _remove_tree(path)
        path.mkdir(parents=True)
        self.runner(["init"], path)
        self.runner(["remote", "add", "origin", url], path)
        self.runner(["fetch", "--depth=1", "origin", plan.ref], path)
        self.runner(["checkout", "FETCH_HEAD"], path)

    def _checkout_branch(self, url: str, plan: RefPlan, path: Path) -> None:
        if is_reusable_clone(path, url, runner=self.runner):
            self.logger.info(f"Updating cached clone of {url} ({plan.ref})")
            # Shallow clones only track their original branch; map the ref explicitly.
            refspec = f"+refs/heads/{plan.ref}:refs/remotes/origin/{plan.ref}"
            try:
                self.runner(["fetch", "origin", refspec, "--depth=1"], path)
                self.runner(["reset", "--hard", f"origin/{plan.ref}"], path)
            except GitCommandError as exc:
                self.logger.warn(f"Updating cached clone failed ({exc}); re-cloning")
            else:
                return
        self.logger.info(f"Cloning {url} ({plan.ref})")
        _remove_tree(path)
        self.runner(["clone", "--depth=1", "--branch", plan.ref, url, str(path)], None)


def _remove_tree(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)


__all__ = ["CheckoutManager", "is_reusable_clone", "repository_name", "repository_slug"]
