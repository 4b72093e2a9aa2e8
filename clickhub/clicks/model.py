"""Click records and the repository wrapping the ``clicks`` table."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from clickhub.services.database.interface import DatabaseInterface

TABLE = "clicks"
REQUIRED_FIELDS = ("click_id", "offer_id", "source", "timestamp", "signature")
_WHOLE_NUMBER = re.compile(r"(-?\d+)(?:\.0*)?", re.ASCII)

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    id BIGSERIAL PRIMARY KEY,
    click_id TEXT NOT NULL UNIQUE,
    offer_id BIGINT NOT NULL,
    source TEXT NOT NULL,
    timestamp TIMESTAMP NOT NULL,
    signature TEXT NOT NULL
)
"""


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into naive UTC.

    Aware values are converted to UTC; naive values are taken as UTC already.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_offer_id(value: Any) -> int:
    """Whole-number offer id from an int, an integral float, or a string like "12" or "12.0"."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        match = _WHOLE_NUMBER.fullmatch(value.strip())
        if match:
            return int(match.group(1))
    raise ValueError(f"Offer id must be a whole number, got {value!r}")


def parse_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


@dataclass
class Click:
    click_id: str
    offer_id: int
    source: str
    timestamp: datetime
    signature: str

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Click:
        return cls(
            click_id=str(data["click_id"]),
            offer_id=to_offer_id(data["offer_id"]),
            source=str(data["source"]),
            timestamp=parse_timestamp(data["timestamp"]),
            signature=str(data["signature"]),
        )

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Click:
        return cls(
            click_id=row["click_id"],
            offer_id=int(row["offer_id"]),
            source=row["source"],
            timestamp=parse_timestamp(row["timestamp"]),
            signature=row["signature"],
        )

    def to_row(self) -> dict[str, Any]:
        return {
            "click_id": self.click_id,
            "offer_id": self.offer_id,
            "source": self.source,
            "timestamp": self.timestamp,
            "signature": self.signature,
        }

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready form used when forwarding clicks downstream."""
        return {
            "click_id": self.click_id,
            "offer_id": self.offer_id,
            "source": self.source,
            "timestamp": self.timestamp.replace(tzinfo=timezone.utc).isoformat().replace("+00:00", "Z"),
            "signature": self.signature,
        }


class ClickRepository:
    """Data access for the ``clicks`` table."""

    def __init__(self, db: DatabaseInterface) -> None:
        self.db = db

    def ensure_schema(self) -> None:
        self.db.execute(SCHEMA)

    def create(self, click: Click) -> Click:
        self.db.insert_one(TABLE, click.to_row())
        return click

    def all(self) -> list[Click]:
        rows = self.db.fetch_all(f"SELECT * FROM {TABLE}")
        return sorted((Click.from_row(r) for r in rows), key=lambda c: c.timestamp)

    def find_by_click_id(self, click_id: str) -> Click | None:
        row = self.db.fetch_one(f"SELECT * FROM {TABLE} WHERE click_id = $1", [click_id])
        return Click.from_row(row) if row else None

    def between(
        self,
        start: date | str,
        end: date | str,
        offer_id: int | None = None,
        source: str | None = None,
    ) -> list[Click]:
        """Clicks from the start of *start* through the end of *end*, both inclusive."""
        lower = datetime.combine(parse_date(start), time.min)
        upper = datetime.combine(parse_date(end) + timedelta(days=1), time.min)
        conditions = ["timestamp >= $1", "timestamp < $2"]
        params: list[Any] = [lower, upper]
        if offer_id is not None:
            params.append(int(offer_id))
            conditions.append(f"offer_id = ${len(params)}")
        if source is not None:
            params.append(source)
            conditions.append(f"source = ${len(params)}")
        rows = self.db.fetch_all(
            f"SELECT * FROM {TABLE} WHERE {' AND '.join(conditions)}", params
        )
        return sorted((Click.from_row(r) for r in rows), key=lambda c: c.timestamp)

    def for_date(self, day: date | str) -> list[Click]:
        return self.between(day, day)

    def count_between(self, start: date | str, end: date | str) -> int:
        return len(self.between(start, end))
