"""Prometheus metrics for the Mailer Service."""

from __future__ import annotations

from typing import Any

from prometheus_client import REGISTRY, Counter

_metrics: dict[str, Any] = {}


def get_metrics() -> dict[str, Any]:
    if not _metrics:
        _metrics["emails_sent_total"] = Counter(
            "emails_sent_total",
            "Emails handled per queue",
            ["queue", "outcome"],  # sent/parse_error/render_error/send_error
            registry=REGISTRY,
        )
    return _metrics
