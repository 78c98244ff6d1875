# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants used across allscan modules."""

from __future__ import annotations

from typing import Final

DEFAULT_WORKSPACE: Final[str] = "/tmp/scanner-workspace"
DEFAULT_RESULTS_DIR: Final[str] = "./scan-results"
DEFAULT_MAX_CONCURRENT: Final[int] = 3
DEFAULT_SCANNER_TIMEOUT: Final[str] = "5m"
DEFAULT_BRANCH: Final[str] = "main"
SBOM_DIR_NAME: Final[str] = "sboms"
SBOM_TIMEOUT_SECONDS: Final[float] = 300.0
RESULT_RETENTION_DAYS: Final[int] = 7
LOCAL_URL_SCHEME: Final[str] = "local://"
BUILTIN_COMMAND_PREFIX: Final[str] = "builtin:"

UPLOAD_TOKEN_ENV: Final[str] = "VULN_MGMT_API_TOKEN"
GITHUB_TOKEN_ENV: Final[str] = "GITHUB_TOKEN"

ALWAYS_EXCLUDE_DIRS: Final[frozenset[str]] = frozenset(
    {
        "node_modules",
        "vendor",
        "__pycache__",
        "venv",
        ".venv",
        "target",
        "build",
        "dist",
        "bin",
        "obj",
    },
)

LANGUAGE_EXTENSIONS: Final[dict[str, set[str]]] = {
    "go": {".go"},
    "python": {".py", ".pyw", ".pyx"},
    "javascript": {".js", ".jsx", ".mjs", ".cjs", ".vue", ".svelte"},
    "typescript": {".ts", ".tsx", ".mts", ".cts"},
    "java": {".java"},
    "kotlin": {".kt", ".kts"},
    "c": {".c", ".h"},
    "cpp": {".cpp", ".cc", ".cxx", ".hpp", ".hxx"},
    "csharp": {".cs"},
    "ruby": {".rb", ".rake", ".gemspec"},
    "php": {".php"},
    "rust": {".rs"},
    "swift": {".swift"},
    "scala": {".scala", ".sc"},
    "shell": {".sh", ".bash", ".zsh"},
    "perl": {".pl", ".pm"},
    "lua": {".lua"},
    "r": {".r", ".R"},
    "elixir": {".ex", ".exs"},
    "erlang": {".erl", ".hrl"},
    "haskell": {".hs", ".lhs"},
    "clojure": {".clj", ".cljs", ".cljc"},
    "dart": {".dart"},
    "objective-c": {".m", ".mm"},
    "groovy": {".groovy", ".gvy"},
}

# Manifests win over extensions during classification.
LANGUAGE_MANIFESTS: Final[dict[str, set[str]]] = {
    "go": {"go.mod", "go.sum"},
    "javascript": {"package.json", "yarn.lock", "package-lock.json", "pnpm-lock.yaml"},
    "python": {"requirements.txt", "setup.py", "pyproject.toml", "Pipfile", "Pipfile.lock"},
    "java": {"pom.xml", "build.gradle", "settings.gradle"},
    "kotlin": {"build.gradle.kts"},
    "ruby": {"Gemfile", "Gemfile.lock"},
    "php": {"composer.json", "composer.lock"},
    "rust": {"Cargo.toml", "Cargo.lock"},
    "swift": {"Package.swift"},
    "scala": {"build.sbt"},
    "elixir": {"mix.exs"},
    "erlang": {"rebar.config"},
    "dart": {"pubspec.yaml"},
    "c": {"Makefile", "CMakeLists.txt"},
}

EXTENSION_LANGUAGES: Final[dict[str, str]] = {
    extension: language for language, extensions in LANGUAGE_EXTENSIONS.items() for extension in extensions
}
MANIFEST_LANGUAGES: Final[dict[str, str]] = {
    filename: language for language, filenames in LANGUAGE_MANIFESTS.items() for filename in filenames
}

HOSTED_LANGUAGE_NAMES: Final[dict[str, str]] = {
    "C++": "cpp",
    "C#": "csharp",
    "Objective-C": "objective-c",
    "Vue": "javascript",
    "Svelte": "javascript",
}

__all__ = [
    "ALWAYS_EXCLUDE_DIRS",
    "BUILTIN_COMMAND_PREFIX",
    "DEFAULT_BRANCH",
    "DEFAULT_MAX_CONCURRENT",
    "DEFAULT_RESULTS_DIR",
    "DEFAULT_SCANNER_TIMEOUT",
    "DEFAULT_WORKSPACE",
    "EXTENSION_LANGUAGES",
    "GITHUB_TOKEN_ENV",
    "HOSTED_LANGUAGE_NAMES",
    "LANGUAGE_EXTENSIONS",
    "LANGUAGE_MANIFESTS",
    "LOCAL_URL_SCHEME",
    "MANIFEST_LANGUAGES",
    "RESULT_RETENTION_DAYS",
    "SBOM_DIR_NAME",
    "SBOM_TIMEOUT_SECONDS",
    "UPLOAD_TOKEN_ENV",
]
