"""
Prometheus metrics for transfer monitoring.

Provides instrumentation for the transfer engine with standardized
Prometheus metrics. Metrics are observability only; nothing in the engine
reads them back for correctness.

Metrics Provided:
    - upload_requests_total: Counter for per-unit uploads by status
    - upload_bytes_total: Counter for uploaded bytes
    - upload_duration_seconds: Histogram for per-unit put latency
    - storage_api_errors_total: Counter for object store errors
    - bucket_clears_total: Counter for full-bucket wipes
    - transfer_jobs_total: Counter for finished jobs by kind and state
    - queue_depth: Gauge for units waiting in the work queue
    - active_workers: Gauge for running upload workers

Usage:
    from s3publish.utils.metrics import get_metrics

    metrics = get_metrics()
    with metrics.track_upload():
        bucket.put(key, payload, content_type, acl)
    metrics.record_upload_success(bytes_uploaded=len(payload))
"""

import os
from contextlib import nullcontext
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    REGISTRY,
    start_http_server,
)

from s3publish.utils.logging import get_logger

# Module-level logger
logger = get_logger(__name__)


class PrometheusMetrics:
    """
    Centralized Prometheus metrics for s3publish.

    Example:
        >>> metrics = PrometheusMetrics(registry=CollectorRegistry())
        >>> metrics.record_upload_success(bytes_uploaded=1024)
    """

    def __init__(
        self, enabled: bool = True, registry: Optional[CollectorRegistry] = None
    ) -> None:
        """
        Initialize metrics collectors.

        Args:
            enabled: Whether metrics collection is enabled
            registry: Custom Prometheus registry (uses default if None)
        """
        self.enabled = enabled
        self.registry = registry if registry is not None else REGISTRY

        if not self.enabled:
            logger.debug("Metrics collection disabled")
            return

        # ====================================================================
        # Upload Operations
        # ====================================================================

        self.upload_requests = Counter(
            name="upload_requests_total",
            documentation="Total number of per-unit uploads",
            labelnames=["status"],  # success, failure, dry_run
            registry=self.registry,
        )

        self.upload_bytes = Counter(
            name="upload_bytes_total",
            documentation="Total bytes uploaded to the bucket",
            registry=self.registry,
        )

        self.upload_duration = Histogram(
            name="upload_duration_seconds",
            documentation="Time spent in a single put call",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=self.registry,
        )

        # ====================================================================
        # Object Store
        # ====================================================================

        self.storage_api_errors = Counter(
            name="storage_api_errors_total",
            documentation="Total object store API errors",
            labelnames=["operation", "error_type"],  # operation: put/delete_all/list
            registry=self.registry,
        )

        self.bucket_clears = Counter(
            name="bucket_clears_total",
            documentation="Total full-bucket wipes performed before a sync",
            registry=self.registry,
        )

        # ====================================================================
        # Jobs and Workers
        # ====================================================================

        self.transfer_jobs = Counter(
            name="transfer_jobs_total",
            documentation="Total transfer jobs by kind and terminal state",
            labelnames=["kind", "state"],
            registry=self.registry,
        )

        self.queue_depth = Gauge(
            name="queue_depth",
            documentation="Number of transfer units waiting in the work queue",
            registry=self.registry,
        )

        self.active_workers = Gauge(
            name="active_workers",
            documentation="Number of upload workers currently running",
            registry=self.registry,
        )

        logger.debug("PrometheusMetrics initialized with all collectors")

    def track_upload(self):
        """
        Context manager timing a single put call.

        Example:
            >>> with metrics.track_upload():
            ...     bucket.put(key, payload, content_type, acl)
        """
        if not self.enabled:
            return nullcontext()
        return self.upload_duration.time()

    def record_upload_success(self, bytes_uploaded: int) -> None:
        if not self.enabled:
            return
        self.upload_requests.labels(status="success").inc()
        self.upload_bytes.inc(bytes_uploaded)

    def record_upload_failure(self) -> None:
        if not self.enabled:
            return
        self.upload_requests.labels(status="failure").inc()

    def record_dry_run(self) -> None:
        if not self.enabled:
            return
        self.upload_requests.labels(status="dry_run").inc()

    def record_storage_error(self, operation: str, error_type: str) -> None:
        """
        Record object store API error.

        Args:
            operation: Store operation (put, delete_all, list)
            error_type: Exception class name
        """
        if not self.enabled:
            return
        self.storage_api_errors.labels(operation=operation, error_type=error_type).inc()

    def record_bucket_clear(self) -> None:
        if not self.enabled:
            return
        self.bucket_clears.inc()

    def record_job(self, kind: str, state: str) -> None:
        if not self.enabled:
            return
        self.transfer_jobs.labels(kind=kind, state=state).inc()

    def set_queue_depth(self, depth: int) -> None:
        if not self.enabled:
            return
        self.queue_depth.set(depth)

    def worker_started(self) -> None:
        if not self.enabled:
            return
        self.active_workers.inc()

    def worker_stopped(self) -> None:
        if not self.enabled:
            return
        self.active_workers.dec()


# ============================================================================
# Global Metrics Instance
# ============================================================================

_metrics_instance: Optional[PrometheusMetrics] = None


def get_metrics() -> PrometheusMetrics:
    """
    Get global metrics instance (singleton).

    Collection is enabled unless METRICS_ENABLED=false.

    Returns:
        Global PrometheusMetrics instance
    """
    global _metrics_instance

    if _metrics_instance is None:
        enabled = os.getenv("METRICS_ENABLED", "true").lower() == "true"
        _metrics_instance = PrometheusMetrics(enabled=enabled)

    return _metrics_instance


def start_metrics_server(port: int = 9090, addr: str = "0.0.0.0") -> None:
    """
    Start Prometheus metrics HTTP server in a daemon thread.

    Args:
        port: Port to listen on (default: 9090)
        addr: Address to bind to (default: 0.0.0.0 - all interfaces)
    """
    logger.info(f"Starting Prometheus metrics server on {addr}:{port}")
    start_http_server(port=port, addr=addr)
    logger.info(f"Metrics server running at http://{addr}:{port}/metrics")
