"""Click ingestion and reporting.

Incoming clicks are validated and queued; ``ProcessClickJob`` stores them
later. Reports are computed from the repository.
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import date
from typing import Any

from clickhub.clicks.model import (
    REQUIRED_FIELDS,
    ClickRepository,
    parse_date,
    parse_timestamp,
    to_offer_id,
)
from clickhub.services.logger.factory import LoggerFactory
from clickhub.services.message_queue.interface import MessageQueueInterface

CLICK_TOPIC = "clicks.ingest"
SORT_FIELDS = ("clicks_count", "offer_id", "source", "date")
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000


class ClickService:
    def __init__(
        self,
        repository: ClickRepository,
        queue: MessageQueueInterface,
        logger: LoggerFactory,
    ) -> None:
        self.repository = repository
        self.queue = queue
        self.log = logger.create()

    def process_click(self, click_data: dict[str, Any]) -> bool:
        """Validate a click and queue it for storage. False when rejected."""
        try:
            if not self.validate_click_data(click_data):
                self.log.warn("Invalid click data received", data=click_data)
                return False
            self.queue.publish(CLICK_TOPIC, dict(click_data), key=str(click_data["click_id"]))
            return True
        except Exception as exc:
            self.log.error("Error processing click", error=str(exc), data=click_data)
            return False

    @staticmethod
    def validate_click_data(data: dict[str, Any]) -> bool:
        for field in REQUIRED_FIELDS:
            if not data.get(field):
                return False
        try:
            to_offer_id(data["offer_id"])
            parse_timestamp(data["timestamp"])
        except ValueError:
            return False
        return True

    def aggregate(
        self,
        start: date | str,
        end: date | str,
        filters: dict[str, Any] | None = None,
        sort_by: str = "clicks_count",
        direction: str = "desc",
    ) -> list[dict[str, Any]]:
        """Click counts grouped by offer, source and day."""
        if sort_by not in SORT_FIELDS:
            raise ValueError(f"Cannot sort by '{sort_by}' (choices: {', '.join(SORT_FIELDS)})")
        if direction not in ("asc", "desc"):
            raise ValueError(f"Invalid sort direction: '{direction}'")

        filters = filters or {}
        clicks = self.repository.between(
            start, end, offer_id=filters.get("offer_id"), source=filters.get("source")
        )
        counts = Counter((c.offer_id, c.source, c.timestamp.date().isoformat()) for c in clicks)
        rows = [
            {"offer_id": offer_id, "source": source, "date": day, "clicks_count": count}
            for (offer_id, source, day), count in counts.items()
        ]
        rows.sort(key=lambda r: r[sort_by], reverse=direction == "desc")
        return rows

    def aggregated_report(
        self,
        start: date | str,
        end: date | str,
        filters: dict[str, Any] | None = None,
        sort_by: str = "clicks_count",
        direction: str = "desc",
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> dict[str, Any]:
        """One page of :meth:`aggregate` with its pagination, filters and sorting."""
        start_day, end_day = _date_range(start, end)
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if page < 1:
            raise ValueError("page must be 1 or greater")

        filters = filters or {}
        rows = self.aggregate(start_day, end_day, filters, sort_by, direction)
        total = len(rows)
        offset = (page - 1) * limit
        return {
            "data": rows[offset : offset + limit],
            "pagination": {
                "current_page": page,
                "per_page": limit,
                "total": total,
                "last_page": math.ceil(total / limit),
                "from": offset + 1,
                "to": min(offset + limit, total),
            },
            "filters": {
                "start_date": start_day.isoformat(),
                "end_date": end_day.isoformat(),
                "offer_id": filters.get("offer_id"),
                "source": filters.get("source"),
            },
            "sorting": {"sort_by": sort_by, "sort_direction": direction},
        }

    def summary(self, start: date | str, end: date | str) -> dict[str, Any]:
        start_day, end_day = _date_range(start, end)
        rows = self.aggregate(start_day, end_day)
        return {
            "total_clicks": self.clicks_count(start_day, end_day),
            "unique_offers": len({row["offer_id"] for row in rows}),
            "unique_sources": len({row["source"] for row in rows}),
            "date_range": {"start_date": start_day.isoformat(), "end_date": end_day.isoformat()},
        }

    def clicks_count(self, start: date | str, end: date | str) -> int:
        return self.repository.count_between(start, end)


def _date_range(start: date | str, end: date | str) -> tuple[date, date]:
    start_day, end_day = parse_date(start), parse_date(end)
    if end_day < start_day:
        raise ValueError("end_date must be on or after start_date")
    return start_day, end_day
