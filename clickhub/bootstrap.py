"""Container wiring for the click-tracking application.

``build_container`` is called once at process start; everything after that
resolves from the returned container.
"""

from __future__ import annotations

from clickhub.clicks.click_service import ClickService
from clickhub.clicks.finance_service import FinanceService
from clickhub.clicks.model import ClickRepository
from clickhub.clicks.process_click_job import ClickWorker, ProcessClickJob
from clickhub.clicks.webhook_service import WebhookService
from clickhub.config.context import PlatformConfig
from clickhub.container import Container
from clickhub.services.database.interface import DatabaseInterface
from clickhub.services.database.memory_database import MemoryDatabase
from clickhub.services.logger.factory import LoggerFactory
from clickhub.services.logger.interface import LoggingInterface
from clickhub.services.message_queue.interface import MessageQueueInterface
from clickhub.services.message_queue.memory_queue import MemoryQueue
from clickhub.services.secrets.env_secrets import EnvSecrets
from clickhub.services.secrets.interface import SecretsInterface


def _connect(db: DatabaseInterface, container: Container) -> DatabaseInterface:
    db.connect()
    return db


def _ensure_schema(repository: ClickRepository, container: Container) -> ClickRepository:
    repository.ensure_schema()
    return repository


def register_services(container: Container) -> None:
    """Register infrastructure and click services. Safe to call on any container."""
    # Infrastructure
    container.singleton(DatabaseInterface, MemoryDatabase)
    container.extend(DatabaseInterface, _connect)
    container.singleton(MessageQueueInterface, MemoryQueue)
    container.singleton(
        LoggingInterface, lambda c, params: c.make(LoggerFactory).create()
    )

    # Click services
    container.singleton(ClickRepository)
    container.extend(ClickRepository, _ensure_schema)
    container.singleton(ClickService)
    container.singleton(WebhookService)
    container.singleton(FinanceService)
    container.singleton(ClickWorker)
    container.bind(ProcessClickJob)


def build_container(
    env_overrides: dict[str, str] | None = None, log_impl: str | None = None
) -> Container:
    """Build the application container from environment overrides."""
    env_overrides = dict(env_overrides or {})
    container = Container()

    # The container itself, so the worker can build one job per message
    container.instance(Container, container)

    config = container.instance(PlatformConfig, PlatformConfig(overrides=env_overrides))
    container.instance(SecretsInterface, EnvSecrets(overrides=env_overrides))

    # --log flag takes precedence, then LOG_IMPL
    log_impl = log_impl or config.get("LOG_IMPL", "pretty")
    container.instance(LoggerFactory, LoggerFactory(default_impl=log_impl))

    register_services(container)

    container.make(LoggingInterface).debug(
        "Container ready", log_impl=log_impl, finance_url=config.finance_url
    )
    return container
