"""Prometheus metrics collection for the API.

This module defines and manages Prometheus metrics for monitoring
request rates, media resolution, asset materialization, storage uploads,
and errors.
"""

from prometheus_client import Counter, Histogram, Info

# Application info
app_info = Info("media_api", "Media embedding API application information")

# HTTP request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# Resolution metrics
media_resolutions_total = Counter(
    "media_resolutions_total",
    "Total media URL resolutions by platform, kind and outcome",
    ["platform", "kind", "outcome"],
)

# Materialization metrics
materializations_total = Counter(
    "materializations_total",
    "Total asset materializations by representation",
    ["representation"],
)

materialized_size_bytes = Histogram(
    "materialized_size_bytes",
    "Materialized file size in bytes",
    ["representation"],
    buckets=[1e3, 1e4, 1e5, 1e6, 5e6, 10e6, 50e6],
)

# Storage metrics
storage_uploads_total = Counter(
    "storage_uploads_total",
    "Total object storage uploads by backend and status",
    ["backend", "status"],
)

storage_upload_duration_seconds = Histogram(
    "storage_upload_duration_seconds",
    "Object storage upload duration in seconds",
    ["backend"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors by error code and endpoint",
    ["error_code", "endpoint"],
)


class MetricsCollector:
    """Centralized metrics collection and update helper.

    Provides static methods for recording various metrics throughout
    the application in a consistent manner.
    """

    @staticmethod
    def record_request(
        method: str,
        endpoint: str,
        status: int,
        duration: float,
    ) -> None:
        """Record HTTP request metrics.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: Normalized endpoint path.
            status: HTTP response status code.
            duration: Request duration in seconds.
        """
        http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status=str(status),
        ).inc()
        http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint,
        ).observe(duration)

    @staticmethod
    def record_resolution(platform: str, kind: str, outcome: str) -> None:
        """Record a media URL resolution.

        Args:
            platform: Detected platform (e.g., 'youtube', 'direct').
            kind: Declared media kind ('video' or 'audio').
            outcome: 'resolved' or 'best_effort' when no media ID was found.
        """
        media_resolutions_total.labels(platform=platform, kind=kind, outcome=outcome).inc()

    @staticmethod
    def record_materialization(representation: str, size: int) -> None:
        """Record an asset materialization.

        Args:
            representation: 'inline', 'object' or 'degraded'.
            size: File size in bytes.
        """
        materializations_total.labels(representation=representation).inc()
        if size > 0:
            materialized_size_bytes.labels(representation=representation).observe(size)

    @staticmethod
    def record_storage_upload(backend: str, status: str, duration: float) -> None:
        """Record an object storage upload attempt.

        Args:
            backend: Storage backend name ('local', 'supabase', 'memory').
            status: 'success' or 'failed'.
            duration: Upload duration in seconds.
        """
        storage_uploads_total.labels(backend=backend, status=status).inc()
        storage_upload_duration_seconds.labels(backend=backend).observe(duration)

    @staticmethod
    def record_error(error_code: str, endpoint: str) -> None:
        """Record an error occurrence.

        Args:
            error_code: Error code from ErrorCode class.
            endpoint: Endpoint where the error occurred.
        """
        errors_total.labels(error_code=error_code, endpoint=endpoint).inc()


def initialize_metrics(version: str) -> None:
    """Initialize application metrics with version information.

    Should be called during application startup.

    Args:
        version: Application version string.
    """
    app_info.info({"version": version})
