"""
Middleware Package

Contains FastAPI middleware for:
- Prometheus metrics collection
- Resume and blob storage counters used by the services
"""

from findx.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    REQUEST_LATENCY,
    REQUEST_COUNT,
    ACTIVE_REQUESTS,
    RESUME_UPLOADS,
    BLOB_DELETE_FAILURES,
    BLOB_OPERATION_LATENCY,
    DOMAIN_CHANGES,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "REQUEST_LATENCY",
    "REQUEST_COUNT",
    "ACTIVE_REQUESTS",
    "RESUME_UPLOADS",
    "BLOB_DELETE_FAILURES",
    "BLOB_OPERATION_LATENCY",
    "DOMAIN_CHANGES",
]
