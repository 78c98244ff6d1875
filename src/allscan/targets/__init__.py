# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Ref resolution and working-copy management for scan targets."""

from __future__ import annotations

from .checkout import CheckoutManager, is_reusable_clone, repository_name, repository_slug
from .git import GitRunner, run_git
from .models import RefKind, RefPlan, ResolvedTarget
from .refs import check_version_commit, parse_ls_remote, plan_ref, resolve_remote_target

__all__ = [
    "CheckoutManager",
    "GitRunner",
    "RefKind",
    "RefPlan",
    "ResolvedTarget",
    "check_version_commit",
    "is_reusable_clone",
    "parse_ls_remote",
    "plan_ref",
    "repository_name",
    "repository_slug",
    "resolve_remote_target",
    "run_git",
]
