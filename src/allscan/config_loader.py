# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Load scanner catalogs and repository lists from TOML documents."""

from __future__ import annotations

import json
import os
import re
import tomllib
from collections.abc import Mapping
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Final

from jsonschema import Draft202012Validator
from jsonschema import exceptions as jsonschema_exceptions
from pydantic import ValidationError

from .config import Config, GlobalSettings, RepositorySpec, ScannerConfig
from .errors import ConfigError

GLOBAL_KEY: Final[str] = "global"
SCANNERS_KEY: Final[str] = "scanners"
REPOSITORIES_KEY: Final[str] = "repositories"
SCANNERS_SCHEMA: Final[str] = "scanners.schema.json"
REPOSITORIES_SCHEMA: Final[str] = "repositories.schema.json"

_ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


@lru_cache(maxsize=None)
def _validator(schema_name: str) -> Draft202012Validator:
    schema_text = resources.files("allscan").joinpath("schema").joinpath(schema_name).read_text(encoding="utf-8")
    return Draft202012Validator(json.loads(schema_text))


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda match: env.get(match.group(1), match.group(0)), value)
    if isinstance(value, Mapping):
        return {key: _expand_env_value(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(item, env) for item in value]
    return value


def _read_document(path: Path, schema_name: str, env: Mapping[str, str]) -> dict[str, Any]:
    """Parse ``path`` as TOML, validate it and expand ``${VAR}`` references.

    Args:
        path: TOML document to read.
        schema_name: Name of the bundled JSON schema used for validation.
        env: Environment mapping used for ``${VAR}`` substitution.

    Returns:
        dict[str, Any]: Validated, environment-expanded document.

    Raises:
        ConfigError: If the file is missing, unparsable or fails validation.
    """

    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"configuration file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: invalid TOML: {exc}") from exc
    try:
        _validator(schema_name).validate(document)
    except jsonschema_exceptions.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise ConfigError(f"{path}: {location}: {exc.message}") from exc
    return _expand_env_value(document, env)


def _build_repositories(entries: list[Mapping[str, Any]], path: Path) -> list[RepositorySpec]:
    try:
        return [RepositorySpec.model_validate(entry) for entry in entries]
    except ValidationError as exc:
        raise ConfigError(f"{path}: invalid repository entry: {exc}") from exc


def load_config(path: Path, *, env: Mapping[str, str] | None = None) -> Config:
    """Load the scanner catalog and global settings from ``path``.

    Missing global values fall back to the model defaults and every scanner
    timeout is parsed eagerly so malformed durations fail the whole load.

    Args:
        path: TOML file holding ``[global]`` and ``[[scanners]]`` tables.
        env: Optional environment mapping used for ``${VAR}`` expansion.

    Returns:
        Config: Parsed configuration.

    Raises:
        ConfigError: If the file cannot be read or contains invalid values.
    """

    document = _read_document(path, SCANNERS_SCHEMA, env if env is not None else os.environ)
    try:
        settings = GlobalSettings.model_validate(document.get(GLOBAL_KEY, {}))
        scanners = [ScannerConfig.model_validate(entry) for entry in document.get(SCANNERS_KEY, [])]
    except ValidationError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    if settings.max_concurrent == 0:
        settings.max_concurrent = GlobalSettings().max_concurrent
    for scanner in scanners:
        _ = scanner.timeout_seconds
    repositories = _build_repositories(document.get(REPOSITORIES_KEY, []), path)
    return Config(settings=settings, scanners=scanners, repositories=repositories)


def load_repositories(path: Path, *, env: Mapping[str, str] | None = None) -> list[RepositorySpec]:
    """Load the ``[[repositories]]`` list from ``path``.

    Args:
        path: TOML file holding repository entries.
        env: Optional environment mapping used for ``${VAR}`` expansion.

    Returns:
        list[RepositorySpec]: Repository entries in file order.

    Raises:
        ConfigError: If the file cannot be read or contains invalid entries.
    """

    document = _read_document(path, REPOSITORIES_SCHEMA, env if env is not None else os.environ)
    return _build_repositories(document.get(REPOSITORIES_KEY, []), path)


__all__ = ["load_config", "load_repositories"]
