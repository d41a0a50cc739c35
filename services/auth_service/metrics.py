"""Prometheus metrics for the Auth Service."""

from __future__ import annotations

from typing import Any

from prometheus_client import REGISTRY, Counter

_metrics: dict[str, Any] = {}


def get_metrics() -> dict[str, Any]:
    if not _metrics:
        _metrics["auth_operations_total"] = Counter(
            "auth_operations_total",
            "Auth operations by outcome",
            ["operation", "outcome"],
            registry=REGISTRY,
        )
        _metrics["auth_tokens_issued_total"] = Counter(
            "auth_tokens_issued_total",
            "Tokens issued",
            ["token_type"],
            registry=REGISTRY,
        )
    return _metrics
