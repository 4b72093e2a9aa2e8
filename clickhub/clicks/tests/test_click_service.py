from datetime import datetime

import pytest

from clickhub.clicks.click_service import CLICK_TOPIC, ClickService
from clickhub.clicks.model import Click, ClickRepository
from clickhub.container import Container
from clickhub.services.message_queue.interface import MessageQueueInterface


@pytest.fixture
def service(app_container: Container) -> ClickService:
    return app_container.make(ClickService)


def _store(repo: ClickRepository, click_id: str, offer_id: int, source: str, ts: str) -> None:
    repo.create(Click(click_id, offer_id, source, datetime.fromisoformat(ts), f"sig-{click_id}"))


def test_service_is_a_container_singleton(app_container: Container, service: ClickService):
    assert app_container.make(ClickService) is service
    assert service.repository is app_container.make(ClickRepository)


def test_validates_click_data_structure(click_payload):
    assert ClickService.validate_click_data(click_payload)


@pytest.mark.parametrize(
    "changes",
    [
        {"offer_id": "not_numeric"},
        {"timestamp": "invalid_timestamp"},
        {"click_id": ""},
        {"signature": None},
        {"offer_id": True},
        {"offer_id": "nan"},
        {"offer_id": "inf"},
        {"offer_id": "1_000"},
        {"offer_id": "12.5"},
        {"offer_id": 12.5},
        {"offer_id": float("inf")},
    ],
)
def test_rejects_invalid_click_data(click_payload, changes):
    assert not ClickService.validate_click_data({**click_payload, **changes})


@pytest.mark.parametrize("offer_id", [12345, "12345", "12.0", 12.0, " 42 "])
def test_accepts_whole_number_offer_ids(click_payload, offer_id):
    assert ClickService.validate_click_data({**click_payload, "offer_id": offer_id})


def test_rejects_missing_fields(click_payload):
    del click_payload["source"]
    assert not ClickService.validate_click_data(click_payload)


def test_process_click_queues_valid_payload(app_container, service, click_payload):
    assert service.process_click(click_payload)
    queue = app_container.make(MessageQueueInterface)
    assert queue.consume_one(CLICK_TOPIC) == click_payload


def test_process_click_logs_and_rejects_invalid_payload(service, memory_log, click_payload):
    assert not service.process_click({**click_payload, "offer_id": "abc"})
    warnings = memory_log.at("WARN")
    assert warnings[-1].msg == "Invalid click data received"
    assert warnings[-1].ctx["data"]["offer_id"] == "abc"


def test_process_click_logs_queue_failures(service, memory_log, click_payload):
    def broken_publish(*args, **kwargs):
        raise ConnectionError("queue down")

    service.queue.publish = broken_publish
    assert not service.process_click(click_payload)
    assert memory_log.at("ERROR")[-1].ctx["error"] == "queue down"


def test_aggregate_groups_by_offer_source_and_day(service):
    repo = service.repository
    _store(repo, "c1", 12345, "network_1", "2024-01-01T10:00:00")
    _store(repo, "c2", 12345, "network_1", "2024-01-01T11:00:00")
    _store(repo, "c3", 67890, "network_2", "2024-01-01T12:00:00")
    _store(repo, "c4", 12345, "network_1", "2024-01-02T09:00:00")

    rows = service.aggregate("2024-01-01", "2024-01-01")
    assert rows == [
        {"offer_id": 12345, "source": "network_1", "date": "2024-01-01", "clicks_count": 2},
        {"offer_id": 67890, "source": "network_2", "date": "2024-01-01", "clicks_count": 1},
    ]

    rows = service.aggregate("2024-01-01", "2024-01-02", {"offer_id": 12345}, sort_by="date", direction="asc")
    assert [(r["date"], r["clicks_count"]) for r in rows] == [("2024-01-01", 2), ("2024-01-02", 1)]


def test_aggregate_rejects_unknown_sort(service):
    with pytest.raises(ValueError, match="Cannot sort by 'revenue'"):
        service.aggregate("2024-01-01", "2024-01-02", sort_by="revenue")
    with pytest.raises(ValueError, match="Invalid sort direction"):
        service.aggregate("2024-01-01", "2024-01-02", direction="sideways")


def test_clicks_count(service):
    _store(service.repository, "c1", 1, "n", "2024-01-01T10:00:00")
    _store(service.repository, "c2", 1, "n", "2024-01-02T10:00:00")
    assert service.clicks_count("2024-01-01", "2024-01-02") == 2
    assert service.clicks_count("2024-01-02", "2024-01-02") == 1


def _seed_offers(service: ClickService, count: int) -> None:
    for i in range(count):
        _store(service.repository, f"c{i}", 1000 + i, f"net_{i % 2}", "2024-01-01T10:00:00")


def test_aggregated_report_pages_rows(service):
    _seed_offers(service, 5)
    report = service.aggregated_report(
        "2024-01-01", "2024-01-01", sort_by="offer_id", direction="asc", page=2, limit=2
    )
    assert [row["offer_id"] for row in report["data"]] == [1002, 1003]
    assert report["pagination"] == {
        "current_page": 2,
        "per_page": 2,
        "total": 5,
        "last_page": 3,
        "from": 3,
        "to": 4,
    }
    assert report["sorting"] == {"sort_by": "offer_id", "sort_direction": "asc"}
    assert report["filters"] == {
        "start_date": "2024-01-01",
        "end_date": "2024-01-01",
        "offer_id": None,
        "source": None,
    }


def test_aggregated_report_applies_filters(service):
    _seed_offers(service, 4)
    report = service.aggregated_report("2024-01-01", "2024-01-01", {"source": "net_1"})
    assert {row["source"] for row in report["data"]} == {"net_1"}
    assert report["pagination"]["total"] == 2
    assert report["filters"]["source"] == "net_1"


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"end": "2023-12-31"}, "end_date must be on or after start_date"),
        ({"limit": 0}, "limit must be between 1 and 1000"),
        ({"limit": 1001}, "limit must be between 1 and 1000"),
        ({"page": 0}, "page must be 1 or greater"),
    ],
)
def test_aggregated_report_rejects_bad_paging(service, kwargs, message):
    params = {"start": "2024-01-01", "end": "2024-01-02", **kwargs}
    with pytest.raises(ValueError, match=message):
        service.aggregated_report(**params)


def test_summary_counts_distinct_offers_and_sources(service):
    _store(service.repository, "c1", 1, "net_a", "2024-01-01T10:00:00")
    _store(service.repository, "c2", 1, "net_b", "2024-01-01T11:00:00")
    _store(service.repository, "c3", 2, "net_a", "2024-01-02T09:00:00")
    _store(service.repository, "c4", 3, "net_a", "2024-01-05T09:00:00")
    assert service.summary("2024-01-01", "2024-01-02") == {
        "total_clicks": 3,
        "unique_offers": 2,
        "unique_sources": 2,
        "date_range": {"start_date": "2024-01-01", "end_date": "2024-01-02"},
    }
