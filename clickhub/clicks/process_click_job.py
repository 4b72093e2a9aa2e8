"""Background storage of queued clicks.

One ``ProcessClickJob`` is built per queued message, with the message itself
passed as the ``click_data`` override; the remaining constructor arguments
come from the container.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from clickhub.clicks.click_service import CLICK_TOPIC
from clickhub.clicks.model import Click, ClickRepository
from clickhub.container import Container
from clickhub.services.logger.factory import LoggerFactory
from clickhub.services.message_queue.interface import MessageQueueInterface


class ProcessClickJob:
    tries = 3

    def __init__(
        self, click_data: dict[str, Any], repository: ClickRepository, logger: LoggerFactory
    ) -> None:
        self.click_data = click_data
        self.repository = repository
        self.log = logger.create()

    def handle(self) -> bool:
        """Store the click. Returns False for a duplicate; raises so the worker can retry."""
        click_id = self.click_data.get("click_id")
        try:
            if self.repository.find_by_click_id(str(click_id)) is not None:
                self.log.info("Click already exists, skipping", click_id=click_id)
                return False
            self.repository.create(Click.from_payload(self.click_data))
        except Exception as exc:
            self.log.error("Failed to process click", error=str(exc), click_data=self.click_data)
            raise
        self.log.info("Click processed successfully", click_id=click_id)
        return True

    def failed(self, exc: BaseException) -> None:
        self.log.error(
            "Click processing job failed permanently",
            error=str(exc),
            click_data=self.click_data,
        )


@dataclass
class WorkReport:
    stored: int = 0
    duplicates: int = 0
    failed: int = 0


class ClickWorker:
    """Drains the click topic, running each message through a fresh job."""

    def __init__(self, container: Container, queue: MessageQueueInterface) -> None:
        self.container = container
        self.queue = queue

    def work(self, topic: str = CLICK_TOPIC) -> WorkReport:
        report = WorkReport()
        while (message := self.queue.consume_one(topic)) is not None:
            job = self.container.make(ProcessClickJob, {"click_data": message})
            outcome = self._run(job)
            if outcome is None:
                report.failed += 1
            elif outcome:
                report.stored += 1
            else:
                report.duplicates += 1
        return report

    @staticmethod
    def _run(job: ProcessClickJob) -> bool | None:
        for attempt in range(1, job.tries + 1):
            try:
                return job.handle()
            except Exception as exc:
                if attempt == job.tries:
                    job.failed(exc)
        return None
