"""Protocol definitions for Mailer Service dependency injection."""

from __future__ import annotations

from typing import Any, NamedTuple, Protocol
from uuid import UUID


class EmailSendResult(NamedTuple):
    """Result of sending an email through a provider."""

    success: bool
    error_message: str | None = None


class RenderedTemplate(NamedTuple):
    """Result of rendering an email template."""

    subject: str
    html_content: str
    text_content: str


class TemplateRenderer(Protocol):
    def ensure_templates(self, template_ids: list[str]) -> None:
        """Fail with a configuration error unless every template loads."""
        ...

    async def render(
        self, template_id: str, variables: dict[str, Any], correlation_id: UUID | None = None
    ) -> RenderedTemplate: ...


class EmailProvider(Protocol):
    async def send_email(
        self, to: str, subject: str, html_content: str, text_content: str | None = None
    ) -> EmailSendResult: ...
