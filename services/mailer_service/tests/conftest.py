"""Shared test fixtures for Mailer Service tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from prometheus_client import REGISTRY

from services.mailer_service.config import Settings
from services.mailer_service.implementations.template_renderer_impl import JinjaTemplateRenderer
from services.mailer_service.notification_processor import template_ids


@pytest.fixture(autouse=True)
def _clear_prometheus_registry() -> Any:
    """Clear the default Prometheus registry so metric modules can be re-imported."""
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        REGISTRY.unregister(collector)
    yield


@pytest.fixture
def renderer() -> JinjaTemplateRenderer:
    renderer = JinjaTemplateRenderer(Settings().TEMPLATE_DIR)
    renderer.ensure_templates(template_ids())
    return renderer


@pytest.fixture
def smtp_settings(tmp_path: Path) -> Settings:
    username_file = tmp_path / "smtp_username"
    password_file = tmp_path / "smtp_password"
    username_file.write_text("library@example.com\n", encoding="utf-8")
    password_file.write_text("app-password\n", encoding="utf-8")
    return Settings(
        SMTP_HOST="smtp.example.com",
        SMTP_PORT=587,
        SMTP_USE_TLS=True,
        SMTP_TIMEOUT=10,
        SMTP_USERNAME_FILE=str(username_file),
        SMTP_PASSWORD_FILE=str(password_file),
    )
