# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Upload successful scan reports to a vulnerability-management endpoint."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Final

import httpx

from .constants import UPLOAD_TOKEN_ENV
from .core.logging import ConsoleLogger
from .errors import UploadError
from .results import ScanResult
from .targets import repository_slug

UPLOAD_TIMEOUT_SECONDS: Final[float] = 30.0
PRODUCT_TYPE_NAME: Final[str] = "Research and Development"


def product_name(repo_url: str) -> str:
    """Return the ``owner/repo`` product name used for ``repo_url``."""

    return repository_slug(repo_url) or "unknown"


def upload_fields(result: ScanResult, *, scan_date: date) -> dict[str, str]:
    """Return the multipart form fields describing ``result``.

    Args:
        result: Successful scan result with a configured scan type.
        scan_date: Date reported as the scan date.

    Returns:
        dict[str, str]: Form fields; commit and branch are omitted when empty.
    """

    product = product_name(result.repository)
    fields = {
        "scan_date": scan_date.isoformat(),
        "product_name": product,
        "engagement_name": f"{product}-{result.scanner}",
        "scan_type": result.dojo_scan_type,
        "auto_create_context": "true",
        "product_type_name": PRODUCT_TYPE_NAME,
        "do_not_reactivate": "true",
    }
    if result.commit_hash:
        fields["commit_hash"] = result.commit_hash
    if result.branch_tag:
        fields["branch_tag"] = result.branch_tag
    return fields


@dataclass(slots=True)
class UploadSummary:
    """Counts of uploaded, failed and skipped reports."""

    uploaded: int = 0
    failed: int = 0
    skipped: int = 0


class ResultUploader:
    """Post scan reports as multipart forms with token authentication."""

    def __init__(
        self,
        endpoint: str,
        *,
        token: str | None = None,
        env: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: float = UPLOAD_TIMEOUT_SECONDS,
        today: Callable[[], date] = date.today,
        logger: ConsoleLogger | None = None,
    ) -> None:
        environment = env if env is not None else os.environ
        self.endpoint = endpoint
        self._token = token if token is not None else environment.get(UPLOAD_TOKEN_ENV, "")
        self._transport = transport
        self._timeout = timeout
        self._today = today
        self._logger = logger or ConsoleLogger()

    def upload_all(self, results: Iterable[ScanResult]) -> UploadSummary:
        """Upload every eligible result and log a closing summary.

        Failed scans and results without a scan type are skipped. Nothing is
        sent when no token is configured.

        Args:
            results: Results collected across the run.

        Returns:
            UploadSummary: Per-outcome counts.
        """

        summary = UploadSummary()
        self._logger.info(f"Uploading results to {self.endpoint}")
        if not self._token:
            self._logger.warn(f"{UPLOAD_TOKEN_ENV} not set, skipping upload")
            return summary
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            for result in results:
                if not result.success:
                    self._logger.info(f"Skipping {result.output_path or result.scanner} (scan failed)")
                    summary.skipped += 1
                    continue
                if not result.dojo_scan_type:
                    self._logger.info(f"Skipping {result.scanner} (no upload scan type configured)")
                    summary.skipped += 1
                    continue
                try:
                    self.upload(client, result)
                except UploadError as exc:
                    self._logger.fail(f"Failed to upload {result.output_path}: {exc}")
                    summary.failed += 1
                else:
                    self._logger.ok(f"Uploaded {result.output_path}")
                    summary.uploaded += 1
        self._logger.info(f"Upload Summary: {summary.uploaded} successful, {summary.failed} failed")
        return summary

    def upload(self, client: httpx.Client, result: ScanResult) -> None:
        """Send one report.

        Raises:
            UploadError: If the report cannot be read, the request fails, or
                the endpoint answers with a non-2xx status.
        """

        if result.output_path is None:
            raise UploadError(f"{result.scanner} has no output file")
        try:
            content = result.output_path.read_bytes()
        except OSError as exc:
            raise UploadError(f"opening file: {exc}") from exc
        files = {"file": (result.output_path.name, content, "application/json")}
        headers = {"Authorization": f"Token {self._token}"}
        data = upload_fields(result, scan_date=self._today())
        try:
            response = client.post(self.endpoint, data=data, files=files, headers=headers)
        except httpx.HTTPError as exc:
            raise UploadError(f"sending request: {exc}") from exc
        if not response.is_success:
            raise UploadError(f"upload failed with status {response.status_code}: {response.text}")


__all__ = ["ResultUploader", "UploadSummary", "product_name", "upload_fields"]
