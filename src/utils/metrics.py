"""
Prometheus metrics for upload runs.

The uploader is a one-shot process, so metrics are not scraped from a live
server: when METRICS_TEXTFILE is set they are written once at the end of the
run for a node-exporter textfile collector to pick up.

Metrics Provided:
    - upload_requests_total: Counter of runs by status and input kind
    - upload_bytes_total: Counter of bytes handed to the transfer manager
    - upload_duration_seconds: Histogram of transfer latency
    - archive_duration_seconds: Histogram of directory zip time
    - s3_api_errors_total: Counter of transfer failures by exception type

Usage:
    from src.utils.metrics import get_metrics

    metrics = get_metrics()
    with metrics.track_upload():
        result = uploader.upload(path, destination)
    metrics.record_upload(result.success, kind="file", bytes_uploaded=size)
"""

import os
from contextlib import nullcontext
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    write_to_textfile,
)

from src.utils.logging import get_logger

logger = get_logger(__name__)


class UploadMetrics:
    """
    Prometheus collectors for one uploader process.

    Each instance owns its registry, so several instances (e.g. in tests)
    never collide on metric names.

    Example:
        >>> metrics = UploadMetrics()
        >>> metrics.record_upload(True, kind="directory", bytes_uploaded=1024)
    """

    def __init__(self, enabled: bool = True, registry: Optional[CollectorRegistry] = None) -> None:
        self.enabled = enabled
        self.registry = registry if registry is not None else CollectorRegistry()

        if not self.enabled:
            logger.debug("Metrics collection disabled")
            return

        self.upload_requests = Counter(
            name="upload_requests_total",
            documentation="Total number of upload runs",
            labelnames=["status", "kind"],  # status: success/failure, kind: file/directory
            registry=self.registry,
        )

        self.upload_bytes = Counter(
            name="upload_bytes_total",
            documentation="Total bytes uploaded to S3",
            registry=self.registry,
        )

        self.upload_duration = Histogram(
            name="upload_duration_seconds",
            documentation="Time spent in the S3 transfer",
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 900.0],
            registry=self.registry,
        )

        self.archive_duration = Histogram(
            name="archive_duration_seconds",
            documentation="Time spent zipping a directory",
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
            registry=self.registry,
        )

        self.s3_api_errors = Counter(
            name="s3_api_errors_total",
            documentation="Total S3 transfer errors",
            labelnames=["error_type"],
            registry=self.registry,
        )

    def track_upload(self):
        """Context manager timing an S3 transfer."""
        if not self.enabled:
            return nullcontext()
        return self.upload_duration.time()

    def track_archive(self):
        """Context manager timing archive creation."""
        if not self.enabled:
            return nullcontext()
        return self.archive_duration.time()

    def record_upload(self, success: bool, kind: str, bytes_uploaded: int = 0) -> None:
        """
        Record the outcome of one upload run.

        Args:
            success: Whether the run succeeded
            kind: "file" or "directory"
            bytes_uploaded: Size of the uploaded object (counted on success only)
        """
        if not self.enabled:
            return

        status = "success" if success else "failure"
        self.upload_requests.labels(status=status, kind=kind).inc()
        if success and bytes_uploaded > 0:
            self.upload_bytes.inc(bytes_uploaded)

    def record_s3_error(self, error_type: str) -> None:
        if not self.enabled:
            return
        self.s3_api_errors.labels(error_type=error_type).inc()

    def write_textfile(self, path: str) -> None:
        """
        Write the registry in Prometheus text format.

        write_to_textfile renames a temp file into place, so collectors never
        read a half-written file.
        """
        if not self.enabled:
            return
        write_to_textfile(path, self.registry)
        logger.info(f"Wrote metrics to {path}")


_metrics_instance: Optional[UploadMetrics] = None


def get_metrics() -> UploadMetrics:
    """Get the process-wide metrics instance (enabled unless METRICS_ENABLED=false)."""
    global _metrics_instance

    if _metrics_instance is None:
        enabled = os.getenv("METRICS_ENABLED", "true").lower() == "true"
        _metrics_instance = UploadMetrics(enabled=enabled)

    return _metrics_instance
