# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the SBOM cache."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from allscan.errors import SBOMGenerationError
from allscan.sbom import SBOMCache, SBOMKey, is_version_tag


class _Generator:
    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path]] = []

    def __call__(self, repo_path: Path, output_path: Path) -> None:
        self.calls.append((repo_path, output_path))
        output_path.write_text('{"bomFormat": "CycloneDX"}', encoding="utf-8")


@pytest.mark.parametrize(
    ("label", "expected"),
    [("v1.2", True), ("1.2.3", True), ("v10.0.0-rc1", True), ("main", False), ("v1", False), ("abc1234", False)],
)
def test_is_version_tag(label: str, expected: bool) -> None:
    assert is_version_tag(label) is expected


def test_key_filenames() -> None:
    created = date(2024, 5, 17)

    assert SBOMKey("widgets", "v1.2.0", "abc1234").filename(created) == "widgets_v1.2.0_abc1234_2024-05-17.cdx.json"
    assert SBOMKey("widgets", "main", "abc1234").filename(created) == "widgets_abc1234_2024-05-17.cdx.json"


def test_lookup_ignores_generation_date(tmp_path: Path) -> None:
    directory = tmp_path / "sboms"
    directory.mkdir()
    existing = directory / "widgets_v1.2.0_abc1234_2023-01-01.cdx.json"
    existing.write_text("{}", encoding="utf-8")
    generator = _Generator()
    cache = SBOMCache(directory, generator=generator, today=lambda: date(2024, 5, 17))

    artifact = cache.ensure(SBOMKey("widgets", "v1.2.0", "abc1234"), tmp_path)

    assert artifact.reused
    assert artifact.path == existing
    assert generator.calls == []


def test_miss_generates_dated_artifact(tmp_path: Path) -> None:
    directory = tmp_path / "sboms"
    generator = _Generator()
    directory.mkdir()
    cache = SBOMCache(directory, generator=generator, today=lambda: date(2024, 5, 17))
    (directory / "widgets_v1.2.0_def5678_2024-05-17.cdx.json").write_text("{}", encoding="utf-8")

    artifact = cache.ensure(SBOMKey("widgets", "v1.2.0", "abc1234"), tmp_path / "repo")

    assert not artifact.reused
    assert artifact.path.name == "widgets_v1.2.0_abc1234_2024-05-17.cdx.json"
    assert artifact.path.is_absolute()
    assert generator.calls == [(tmp_path / "repo", artifact.path)]
    found = cache.find(SBOMKey("widgets", "v1.2.0", "abc1234"))
    assert found is not None
    assert found.name == artifact.path.name


def test_branch_and_tag_keys_do_not_collide(tmp_path: Path) -> None:
    directory = tmp_path / "sboms"
    directory.mkdir()
    (directory / "widgets_v1.2.0_abc1234_2024-05-17.cdx.json").write_text("{}", encoding="utf-8")
    cache = SBOMCache(directory, generator=_Generator())

    assert cache.find(SBOMKey("widgets", "main", "abc1234")) is None


def test_generator_must_produce_file(tmp_path: Path) -> None:
    cache = SBOMCache(tmp_path / "sboms", generator=lambda repo, output: None)

    with pytest.raises(SBOMGenerationError, match="did not create"):
        cache.ensure(SBOMKey("widgets", "main", "abc1234"), tmp_path)
