# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Ref precedence, remote tag discovery and tag/commit consistency checks.

Remote discovery reads ``git ls-remote --tags --sort=-v:refname`` output where
annotated tags appear twice: once as ``<tag-object> refs/tags/<name>`` and once
as ``<commit> refs/tags/<name>^{}``. Only the dereferenced hash names the
commit, so it always wins over the tag object hash when both are present.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Final

from ..config import RepositorySpec
from ..constants import DEFAULT_BRANCH
from ..core.logging import ConsoleLogger
from ..errors import GitCommandError
from .git import GitRunner, run_git
from .models import RefKind, RefPlan

LOGGER = logging.getLogger(__name__)

TAG_REF_PREFIX: Final[str] = "refs/tags/"
DEREF_SUFFIX: Final[str] = "^{}"
SHORT_HASH_LENGTH: Final[int] = 7


def parse_ls_remote(url: str, output: str | Iterable[str]) -> RepositorySpec:
    """Select the newest tag from version-sorted ``ls-remote`` output.

    Args:
        url: Remote URL the listing was produced for.
        output: Raw listing text or its lines, newest tag first.

    Returns:
        RepositorySpec: ``version`` and short ``commit`` of the newest tag, or a
        ``main`` branch spec when the listing holds no tags.
    """

    lines = output.splitlines() if isinstance(output, str) else list(output)
    dereferenced: dict[str, str] = {}
    latest: tuple[str, str] | None = None
    for line in lines:
        fields = line.split()
        if len(fields) != 2:
            continue
        object_hash, ref = fields
        if not ref.startswith(TAG_REF_PREFIX):
            continue
        name = ref.removeprefix(TAG_REF_PREFIX)
        if name.endswith(DEREF_SUFFIX):
            dereferenced[name.removesuffix(DEREF_SUFFIX)] = object_hash
            continue
        if latest is None:
            latest = (name, object_hash)
    if latest is None:
        return RepositorySpec(url=url, branch=DEFAULT_BRANCH)
    name, tag_hash = latest
    commit = dereferenced.get(name, tag_hash)
    return RepositorySpec(url=url, version=name, commit=commit[:SHORT_HASH_LENGTH])


def resolve_remote_target(
    url: str,
    *,
    runner: GitRunner = run_git,
    logger: ConsoleLogger | None = None,
) -> RepositorySpec:
    """Resolve the newest tag of ``url``, falling back to the ``main`` branch.

    Args:
        url: Remote repository URL.
        runner: Git runner used to list remote tags.
        logger: Console logger for user-facing progress messages.

    Returns:
        RepositorySpec: Spec pinned to the latest tag, or tracking ``main``.
    """

    console = logger or ConsoleLogger()
    console.info(f"Resolving latest tag for {url}...")
    try:
        lines = runner(["ls-remote", "--tags", "--sort=-v:refname", url], None)
    except GitCommandError as exc:
        console.warn(f"Could not list remote tags ({exc}); using branch '{DEFAULT_BRANCH}'")
        return RepositorySpec(url=url, branch=DEFAULT_BRANCH)
    spec = parse_ls_remote(url, lines)
    if spec.version is None:
        console.info(f"No tags found, using branch '{DEFAULT_BRANCH}'")
    else:
        console.info(f"Latest tag: {spec.version} (commit {spec.commit})")
    return spec


def plan_ref(spec: RepositorySpec) -> RefPlan:
    """Apply ref precedence: version, then commit, then branch, then ``main``."""

    if spec.version:
        return RefPlan(kind=RefKind.VERSION, ref=spec.version)
    if spec.commit:
        return RefPlan(kind=RefKind.COMMIT, ref=spec.commit)
    return RefPlan(kind=RefKind.BRANCH, ref=spec.branch or DEFAULT_BRANCH)


def _hashes_agree(left: str, right: str) -> bool:
    left, right = left.lower(), right.lower()
    return left.startswith(right) or right.startswith(left)


def check_version_commit(
    repo_path: Path,
    version: str,
    expected_commit: str,
    *,
    runner: GitRunner = run_git,
    logger: ConsoleLogger | None = None,
) -> bool | None:
    """Compare the commit a local tag points at with the declared commit.

    Short and full hashes are compared by prefix in both directions. A
    mismatch only warns; the checkout keeps the tag's real commit.

    Args:
        repo_path: Working copy containing the fetched tag.
        version: Tag name that was checked out.
        expected_commit: Commit declared alongside the tag.
        runner: Git runner used to dereference the tag.
        logger: Console logger receiving the mismatch warning.

    Returns:
        bool | None: ``True`` when hashes agree, ``False`` on mismatch and
        ``None`` when git could not dereference the tag.
    """

    try:
        lines = runner(["rev-list", "-n", "1", "--abbrev-commit", f"tags/{version}"], repo_path)
    except GitCommandError as exc:
        LOGGER.debug("skipping tag/commit check for %s: %s", version, exc)
        return None
    actual = lines[0].strip() if lines else ""
    if not actual:
        return None
    if _hashes_agree(actual, expected_commit):
        return True
    (logger or ConsoleLogger()).warn(
        f"Version {version} points to commit {actual}, not {expected_commit}; scanning the tag's commit",
    )
    return False


__all__ = [
    "SHORT_HASH_LENGTH",
    "check_version_commit",
    "parse_ls_remote",
    "plan_ref",
    "resolve_remote_target",
]
