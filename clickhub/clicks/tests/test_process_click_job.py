import pytest

from clickhub.clicks.click_service import CLICK_TOPIC, ClickService
from clickhub.clicks.model import ClickRepository
from clickhub.clicks.process_click_job import ClickWorker, ProcessClickJob
from clickhub.container import Container, UnresolvedDependency
from clickhub.services.message_queue.interface import MessageQueueInterface


def test_job_is_built_per_message_with_override(app_container: Container, click_payload):
    first = app_container.make(ProcessClickJob, {"click_data": click_payload})
    second = app_container.make(ProcessClickJob, {"click_data": {"click_id": "other"}})
    assert first is not second
    assert first.click_data is click_payload
    assert first.repository is second.repository


def test_job_requires_click_data(app_container: Container):
    with pytest.raises(UnresolvedDependency, match="click_data"):
        app_container.make(ProcessClickJob)


def test_handle_stores_then_skips_duplicates(app_container, memory_log, click_payload):
    job = app_container.make(ProcessClickJob, {"click_data": click_payload})
    assert job.handle() is True
    assert job.handle() is False
    stored = app_container.make(ClickRepository).find_by_click_id("click_1")
    assert stored is not None and stored.offer_id == 12345
    assert "Click already exists, skipping" in memory_log.messages


def test_handle_reraises_and_logs(app_container, memory_log, click_payload):
    job = app_container.make(ProcessClickJob, {"click_data": {**click_payload, "timestamp": "bad"}})
    with pytest.raises(ValueError):
        job.handle()
    assert memory_log.at("ERROR")[-1].msg == "Failed to process click"


def test_worker_drains_queue(app_container, click_payload):
    service = app_container.make(ClickService)
    assert service.process_click(click_payload)
    assert service.process_click(click_payload)
    assert service.process_click({**click_payload, "click_id": "click_2"})

    report = app_container.make(ClickWorker).work()
    assert (report.stored, report.duplicates, report.failed) == (2, 1, 0)
    assert app_container.make(MessageQueueInterface).pending(CLICK_TOPIC) == 0


def test_worker_retries_then_marks_failed(app_container, memory_log, click_payload):
    queue = app_container.make(MessageQueueInterface)
    queue.publish(CLICK_TOPIC, {**click_payload, "offer_id": "nan-ish"})

    report = app_container.make(ClickWorker).work()
    assert report.failed == 1
    errors = [e.msg for e in memory_log.at("ERROR")]
    assert errors.count("Failed to process click") == ProcessClickJob.tries
    assert errors[-1] == "Click processing job failed permanently"
