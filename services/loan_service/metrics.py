"""Prometheus metrics for the Loan Service."""

from __future__ import annotations

from typing import Any

from library_service_libs.logging_utils import create_service_logger
from prometheus_client import REGISTRY, Counter

logger = create_service_logger("loan_service.metrics")

_metrics: dict[str, Any] = {}


def _create_metrics() -> dict[str, Any]:
    return {
        "stock_reconciliation_total": Counter(
            "loan_stock_reconciliation_total",
            "Compensating stock increments by outcome",
            ["outcome"],  # scheduled/reconciled/abandoned
            registry=REGISTRY,
        ),
        "loan_operations_total": Counter(
            "loan_operations_total",
            "Loan operations completed",
            ["operation"],
            registry=REGISTRY,
        ),
    }


def get_metrics() -> dict[str, Any]:
    """Create the metrics once per process and return them."""
    if not _metrics:
        _metrics.update(_create_metrics())
        logger.debug("Loan Service metrics created")
    return _metrics
