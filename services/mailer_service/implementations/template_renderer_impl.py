"""Jinja2 template renderer for the Mailer Service.

Templates are named ``<queue>.html.j2`` and declare their subject in a
leading ``<!-- subject: ... -->`` comment.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

from jinja2 import Environment, FileSystemLoader, Template, TemplateError, select_autoescape
from library_service_libs.error_handling import raise_configuration_error, raise_processing_error
from library_service_libs.logging_utils import create_service_logger

from services.mailer_service.protocols import RenderedTemplate, TemplateRenderer

logger = create_service_logger("mailer_service.template_renderer")

SUBJECT_PATTERN = re.compile(r"<!--\s*subject:\s*(.+?)\s*-->", re.IGNORECASE)
_ENTITIES = (
    ("&nbsp;", " "),
    ("&copy;", "(c)"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


class JinjaTemplateRenderer(TemplateRenderer):
    def __init__(self, template_dir: str, service_name: str = "mailer_service") -> None:
        self.template_dir = Path(template_dir)
        self.service_name = service_name
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml", "j2"]),
            enable_async=True,
        )
        self._templates: dict[str, Template] = {}
        logger.info(f"Initializing Jinja2 renderer with template directory: {self.template_dir}")

    def ensure_templates(self, template_ids: list[str]) -> None:
        for template_id in template_ids:
            filename = f"{template_id}.html.j2"
            try:
                self._templates[template_id] = self.env.get_template(filename)
            except TemplateError as e:
                logger.critical(f"Template could not be loaded: {filename}", error=str(e))
                raise_configuration_error(
                    service=self.service_name,
                    operation="load_templates",
                    config_key="TEMPLATE_DIR",
                    message=f"Template could not be loaded: {filename}",
                    correlation_id=uuid4(),
                    template_dir=str(self.template_dir),
                )

    async def render(
        self, template_id: str, variables: dict[str, Any], correlation_id: UUID | None = None
    ) -> RenderedTemplate:
        template = self._templates.get(template_id)
        if template is None:
            self.ensure_templates([template_id])
            template = self._templates[template_id]

        try:
            html_content = await template.render_async(**variables)
        except TemplateError as e:
            logger.error(f"Error rendering template {template_id}: {e}")
            raise_processing_error(
                service=self.service_name,
                operation="render_template",
                message=f"Template rendering failed: {e}",
                correlation_id=correlation_id or uuid4(),
                template_id=template_id,
            )

        match = SUBJECT_PATTERN.search(html_content)
        subject = match.group(1).strip() if match else f"Library - {template_id}"
        return RenderedTemplate(
            subject=subject,
            html_content=html_content,
            text_content=html_to_text(html_content),
        )


def html_to_text(html: str) -> str:
    """Plain-text alternative for mail clients that do not render HTML."""
    text = re.sub(r"<!--.*?-->", "", html, flags=re.DOTALL)
    text = re.sub(r"<br\s*/?>|</?(p|div|h\d)[^>]*>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", "", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n\s*\n+", "\n\n", text)
    return text.strip()
