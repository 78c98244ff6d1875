# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Value objects describing resolved checkout targets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class RefKind(str, Enum):
    """Kind of ref a repository entry resolves to."""

    VERSION = "version"
    COMMIT = "commit"
    BRANCH = "branch"


@dataclass(frozen=True, slots=True)
class RefPlan:
    """Fetch plan selected from a repository entry's ref selectors.

    Attributes:
        kind: Which selector won the precedence contest.
        ref: Tag, commit or branch name handed to git.
    """

    kind: RefKind
    ref: str

    @property
    def branch_tag(self) -> str:
        """Return the display label used for results and uploads."""

        return self.ref


@dataclass(frozen=True, slots=True)
class ResolvedTarget:
    """Concrete checkout produced for one repository in one run.

    Attributes:
        repo_path: Working copy location on disk.
        commit_hash: Short hash read back from the checkout itself.
        branch_tag: Version tag, commit or branch label of the checkout.
    """

    repo_path: Path
    commit_hash: str
    branch_tag: str
