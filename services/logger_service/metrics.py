"""Prometheus metrics for the Logger Service."""

from __future__ import annotations

from typing import Any

from prometheus_client import REGISTRY, Counter

_metrics: dict[str, Any] = {}


def get_metrics() -> dict[str, Any]:
    if not _metrics:
        _metrics["log_records_consumed_total"] = Counter(
            "log_records_consumed_total",
            "Log records consumed from log_queue",
            ["outcome"],  # stored/parse_error/store_error/file_error
            registry=REGISTRY,
        )
    return _metrics
