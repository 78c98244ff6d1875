# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring the scan, resolve and languages commands."""

from __future__ import annotations

from pathlib import Path

import typer

from ..config import Config, RepositorySpec
from ..config_loader import load_config
from ..core.logging import ConsoleLogger
from ..errors import ConfigError
from ..languages import LanguageDetector
from ..orchestrator import ScanOrchestrator, cleanup_old_results, missing_required_env, print_dry_run
from ..parsers import default_parser_registry
from ..reporting import print_summary
from ..targets import resolve_remote_target
from ..upload import ResultUploader
from .shared import (
    CONFIG_ERROR_EXIT_CODE,
    DEFAULT_CONFIG_PATH,
    CLIError,
    build_cli_logger,
    confirm_missing_env,
    resolve_repository_list,
)

app = typer.Typer(
    help="Orchestrate security scanners across repositories.",
    add_completion=False,
    no_args_is_help=True,
)


@app.command("scan", help="Clone repositories, run the configured scanners and summarise the results.")
def scan_command(
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Scanner configuration file."),
    repos_path: Path | None = typer.Option(None, "--repos", "-r", help="Repository list file."),
    repo: str | None = typer.Option(None, "--repo", help="Scan one repository at its latest tagged release."),
    local: bool = typer.Option(False, "--local", help="Scan the current directory in place; skips uploads."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the plan without running anything."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Continue without prompting about missing variables."),
    no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji in console output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable coloured console output."),
    debug: bool = typer.Option(False, "--debug", help="Emit debug logging."),
) -> None:
    """Run the full scan pipeline."""

    logger = build_cli_logger(emoji=not no_emoji, no_color=no_color, debug=debug)
    try:
        failed = _run_scan(
            logger,
            config_path=config_path,
            repos_path=repos_path,
            repo=repo,
            local=local,
            dry_run=dry_run,
            assume_yes=yes,
        )
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=1 if failed else 0)


def _run_scan(
    logger: ConsoleLogger,
    *,
    config_path: Path,
    repos_path: Path | None,
    repo: str | None,
    local: bool,
    dry_run: bool,
    assume_yes: bool,
) -> int:
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        raise CLIError(f"Failed to load config: {exc}", exit_code=CONFIG_ERROR_EXIT_CODE) from exc

    if (missing := missing_required_env(config, local=local)) and not assume_yes:
        confirm_missing_env(missing, logger)

    if local:
        return _run_local(config, logger, dry_run=dry_run)

    repositories: list[RepositorySpec]
    if repo:
        repositories = [resolve_remote_target(repo, logger=logger)]
    else:
        repositories = resolve_repository_list(repos_path, config.repositories)

    logger.section("🔍 Security Scan Orchestrator")
    logger.info(f"Config: {config_path}")
    logger.info(f"Enabled scanners: {len(config.enabled_scanners())}")
    logger.info(f"Target repos: {len(repositories)}")
    if dry_run:
        logger.info("DRY RUN MODE - No scans will be executed")
        print_dry_run(config, repositories, logger)
        return 0

    orchestrator = ScanOrchestrator(config, logger=logger)
    _prepare_results(orchestrator, logger)
    contexts = orchestrator.run(repositories)
    stats = print_summary(logger.console, contexts, default_parser_registry())
    if config.settings.upload_endpoint:
        results = [result for context in contexts for result in context.results]
        ResultUploader(config.settings.upload_endpoint, logger=logger).upload_all(results)
    return stats.failed


def _run_local(config: Config, logger: ConsoleLogger, *, dry_run: bool) -> int:
    cwd = Path.cwd()
    logger.section("🔍 Security Scan Orchestrator")
    logger.info(f"Local mode: scanning {cwd}")
    logger.info(f"Enabled scanners: {len(config.enabled_scanners())}")
    if dry_run:
        logger.info("DRY RUN MODE - No scans will be executed")
        print_dry_run(config, [], logger, local=True)
        return 0
    orchestrator = ScanOrchestrator(config, logger=logger)
    _prepare_results(orchestrator, logger)
    context = orchestrator.scan_local(cwd)
    stats = print_summary(logger.console, [context], default_parser_registry())
    logger.info(f"Local mode: results saved to {config.settings.results_dir} (upload skipped)")
    return stats.failed


def _prepare_results(orchestrator: ScanOrchestrator, logger: ConsoleLogger) -> None:
    try:
        orchestrator.setup_directories()
    except OSError as exc:
        raise CLIError(f"Failed to set up directories: {exc}") from exc
    if removed := cleanup_old_results(orchestrator.config.settings.results_dir):
        logger.info(f"Cleaned up {removed} old scan result(s)")


@app.command("resolve", help="Show the ref a repository URL resolves to.")
def resolve_command(
    url: str = typer.Argument(..., help="Remote repository URL."),
    no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji in console output."),
) -> None:
    """Resolve the newest tag of ``url`` and print the resulting target."""

    logger = build_cli_logger(emoji=not no_emoji)
    spec = resolve_remote_target(url, logger=logger)
    typer.echo(f"url: {spec.url}")
    if spec.version:
        typer.echo(f"version: {spec.version}")
        typer.echo(f"commit: {spec.commit}")
    else:
        typer.echo(f"branch: {spec.branch}")


@app.command("languages", help="Detect the languages of a working copy.")
def languages_command(
    path: Path = typer.Argument(Path("."), help="Directory to inspect."),
    url: str = typer.Option("", "--url", help="Remote URL used for hosted language metadata."),
) -> None:
    """Print detected languages, their share and the detection source."""

    if not path.is_dir():
        raise typer.BadParameter(f"{path} is not a directory", param_hint="PATH")
    detected = LanguageDetector().detect(path, url)
    if not detected:
        typer.echo("No languages detected")
        return
    percentages = detected.percentages() or {}
    typer.echo(f"source: {detected.source.value}")
    for language in detected.languages:
        typer.echo(f"{language}: {percentages.get(language, 0.0):.1f}%")


__all__ = ["app"]
