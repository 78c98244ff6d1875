# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Built-in scanner flagging committed binary artifacts."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Final

BUILTIN_NAME: Final[str] = "binary-detector"
SNIFF_BYTES: Final[int] = 8192

BINARY_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        ".exe", ".dll", ".so", ".dylib", ".a", ".o", ".obj", ".bin", ".com",
        ".class", ".pyc", ".pyo", ".jar", ".war", ".ear", ".whl", ".egg",
        ".deb", ".rpm", ".msi", ".dmg", ".pkg", ".app", ".ipa", ".apk",
        ".wasm", ".node",
    },
)  # fmt: skip


@dataclass(frozen=True, slots=True)
class BinaryFile:
    """One flagged file relative to the scanned root."""

    path: str
    size: int
    reason: str


def has_binary_content(path: Path) -> bool:
    """Return ``True`` when the first 8 KiB of ``path`` contain a NUL byte."""

    try:
        with path.open("rb") as handle:
            chunk = handle.read(SNIFF_BYTES)
    except OSError:
        return False
    return b"\x00" in chunk


def find_binaries(root: Path) -> list[BinaryFile]:
    """Walk ``root`` and flag binary files, skipping hidden entries.

    Args:
        root: Directory to scan.

    Returns:
        list[BinaryFile]: Flagged files in walk order.
    """

    found: list[BinaryFile] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        base = Path(dirpath)
        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            path = base / filename
            extension = path.suffix.lower()
            if extension in BINARY_EXTENSIONS:
                reason = f"binary extension: {extension}"
            elif has_binary_content(path):
                reason = "binary content detected"
            else:
                continue
            try:
                size = path.stat().st_size
            except OSError:
                size = 0
            found.append(BinaryFile(path=path.relative_to(root).as_posix(), size=size, reason=reason))
    return found


def run_binary_detector(root: Path, output_path: Path) -> int:
    """Scan ``root`` and write a ``{"binaries": [...], "total": N}`` report.

    Returns:
        int: Number of binaries found.
    """

    binaries = find_binaries(root)
    payload = {"binaries": [asdict(entry) for entry in binaries], "total": len(binaries)}
    output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return len(binaries)


__all__ = ["BINARY_EXTENSIONS", "BUILTIN_NAME", "BinaryFile", "find_binaries", "run_binary_detector"]
