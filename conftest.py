"""Root-level pytest fixtures: an application container wired with in-memory services."""

from __future__ import annotations

import pytest

from clickhub.bootstrap import build_container
from clickhub.container import Container
from clickhub.services.logger.factory import LoggerFactory
from clickhub.services.logger.memory_logger import MemoryLogger


@pytest.fixture
def app_container() -> Container:
    """Container with memory logging and a fixed webhook secret."""
    return build_container(
        {"WEBHOOK_SECRET": "test-secret", "FINANCE_SERVICE_URL": "http://finance.invalid"},
        log_impl="memory",
    )


@pytest.fixture
def memory_log(app_container: Container) -> MemoryLogger:
    """The logger every service in ``app_container`` writes to."""
    log = app_container.make(LoggerFactory).create()
    assert isinstance(log, MemoryLogger)
    return log


@pytest.fixture
def click_payload() -> dict:
    return {
        "click_id": "click_1",
        "offer_id": 12345,
        "source": "network_1",
        "timestamp": "2024-01-01T10:00:00Z",
        "signature": "sig_1",
    }
