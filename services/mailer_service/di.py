"""Dishka DI configuration for the Mailer Service worker."""

from __future__ import annotations

from dishka import Provider, Scope, provide
from library_core.broker_topology import BINDINGS, Exchange

from services.mailer_service.config import Settings, settings
from services.mailer_service.implementations.smtp_provider_impl import SMTPEmailProvider
from services.mailer_service.implementations.template_renderer_impl import JinjaTemplateRenderer
from services.mailer_service.kafka_consumer import MailQueueConsumer
from services.mailer_service.notification_processor import NotificationProcessor
from services.mailer_service.protocols import EmailProvider, TemplateRenderer


class MailerServiceProvider(Provider):
    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return settings

    @provide(scope=Scope.APP)
    def provide_template_renderer(self, settings: Settings) -> TemplateRenderer:
        return JinjaTemplateRenderer(settings.TEMPLATE_DIR, settings.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_email_provider(self, settings: Settings) -> EmailProvider:
        return SMTPEmailProvider(settings)

    @provide(scope=Scope.APP)
    def provide_processor(
        self, renderer: TemplateRenderer, provider: EmailProvider
    ) -> NotificationProcessor:
        return NotificationProcessor(renderer, provider)

    @provide(scope=Scope.APP)
    def provide_consumers(
        self, processor: NotificationProcessor, settings: Settings
    ) -> list[MailQueueConsumer]:
        return [
            MailQueueConsumer(
                queue=queue,
                processor=processor,
                bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
                group_id=settings.CONSUMER_GROUP_ID,
                requeue_delay_seconds=settings.REQUEUE_DELAY_SECONDS,
            )
            for queue in BINDINGS[Exchange.EMAIL]
        ]
