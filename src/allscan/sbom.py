# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Content-keyed cache of CycloneDX SBOMs generated with syft.

Files are named ``{repo}_{tag}_{commit}_{date}.cdx.json`` for version tags
and ``{repo}_{commit}_{date}.cdx.json`` otherwise. Lookups match on the
prefix before the date, so an unchanged commit reuses its SBOM indefinitely.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Final

from .constants import SBOM_TIMEOUT_SECONDS
from .core.process import CommandOptions, CommandTimeoutError, SubprocessExecutionError, run_command
from .errors import SBOMGenerationError

SBOM_SUFFIX: Final[str] = ".cdx.json"
SYFT_COMMAND: Final[str] = "syft"

_VERSION_TAG_PATTERN: Final[re.Pattern[str]] = re.compile(r"^v?\d+(\.\d+)")

SBOMGenerator = Callable[[Path, Path], None]


def is_version_tag(label: str) -> bool:
    """Return ``True`` for labels such as ``v1.2`` or ``1.2.3-rc1``."""

    return _VERSION_TAG_PATTERN.match(label) is not None


@dataclass(frozen=True, slots=True)
class SBOMKey:
    """Cache identity of an SBOM: repository, ref label and commit."""

    repo_name: str
    label: str
    commit_hash: str

    @property
    def prefix(self) -> str:
        """Return the filename prefix shared by every artifact with this key."""

        if is_version_tag(self.label):
            return f"{self.repo_name}_{self.label}_{self.commit_hash}_"
        return f"{self.repo_name}_{self.commit_hash}_"

    def filename(self, created: date) -> str:
        """Return the artifact filename for a generation on ``created``."""

        return f"{self.prefix}{created.isoformat()}{SBOM_SUFFIX}"


@dataclass(frozen=True, slots=True)
class SBOMArtifact:
    """SBOM file located or produced for a key."""

    key: SBOMKey
    path: Path
    reused: bool


def run_syft(repo_path: Path, output_path: Path) -> None:
    """Generate a CycloneDX SBOM for ``repo_path`` with syft.

    Raises:
        SBOMGenerationError: If syft is missing, fails or exceeds its timeout.
    """

    options = CommandOptions(cwd=repo_path, timeout=SBOM_TIMEOUT_SECONDS, merge_stderr=True)
    try:
        run_command([SYFT_COMMAND, "scan", "dir:.", "-o", f"cyclonedx-json={output_path}"], options=options)
    except FileNotFoundError as exc:
        raise SBOMGenerationError(f"{SYFT_COMMAND} not found on PATH") from exc
    except CommandTimeoutError as exc:
        raise SBOMGenerationError(str(exc)) from exc
    except SubprocessExecutionError as exc:
        raise SBOMGenerationError(f"{SYFT_COMMAND} failed: {exc.stdout.strip()}") from exc


class SBOMCache:
    """Locate or generate SBOMs inside ``directory``."""

    def __init__(
        self,
        directory: Path,
        *,
        generator: SBOMGenerator = run_syft,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.directory = directory
        self._generator = generator
        self._today = today

    def find(self, key: SBOMKey) -> Path | None:
        """Return an existing artifact for ``key`` regardless of its date."""

        if not self.directory.is_dir():
            return None
        prefix = key.prefix
        for entry in sorted(self.directory.iterdir()):
            if entry.is_dir():
                continue
            if entry.name.startswith(prefix) and entry.name.endswith(SBOM_SUFFIX):
                return entry
        return None

    def ensure(self, key: SBOMKey, repo_path: Path) -> SBOMArtifact:
        """Return the cached artifact for ``key`` or generate a new one.

        Args:
            key: Cache identity for the checkout.
            repo_path: Working copy the SBOM describes.

        Returns:
            SBOMArtifact: Location of the artifact and whether it was reused.

        Raises:
            SBOMGenerationError: If generation fails on a cache miss.
        """

        if existing := self.find(key):
            return SBOMArtifact(key=key, path=existing, reused=True)
        self.directory.mkdir(parents=True, exist_ok=True)
        output_path = (self.directory / key.filename(self._today())).resolve()
        self._generator(repo_path, output_path)
        if not output_path.is_file():
            raise SBOMGenerationError(f"SBOM generator did not create {output_path}")
        return SBOMArtifact(key=key, path=output_path, reused=False)


__all__ = ["SBOMArtifact", "SBOMCache", "SBOMKey", "is_version_tag", "run_syft"]
