"""Forwards a day's clicks to the finance service over HTTP.

Payload posted to ``<FINANCE_SERVICE_URL>/clicks``::

    {"date": "2024-01-15", "total_clicks": 2, "clicks": [{...}, {...}]}
"""

from __future__ import annotations

import asyncio
from datetime import date

import aiohttp

from clickhub.clicks.model import Click, ClickRepository
from clickhub.config.context import PlatformConfig
from clickhub.services.logger.factory import LoggerFactory

_HEALTH_TIMEOUT = 5.0


class FinanceService:
    def __init__(
        self, repository: ClickRepository, config: PlatformConfig, logger: LoggerFactory
    ) -> None:
        self.repository = repository
        self.base_url = config.finance_url
        self.timeout = config.finance_timeout
        self.log = logger.create()

    async def forward_clicks_for_date(self, day: date | str) -> bool:
        try:
            clicks = self.repository.for_date(day)
        except ValueError as exc:
            self.log.error("Invalid forwarding date", error=str(exc), date=str(day))
            return False

        if not clicks:
            self.log.info(f"No clicks found for date: {day}")
            return True

        payload = self.format_clicks(clicks)
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.post(f"{self.base_url}/clicks", json=payload) as resp:
                    if 200 <= resp.status < 300:
                        self.log.info(
                            f"Successfully forwarded {len(clicks)} clicks to Finance service "
                            f"for date: {day}"
                        )
                        return True
                    body = await resp.text()
                    self.log.error(
                        "Failed to forward clicks to Finance service",
                        status=resp.status,
                        response=body,
                        date=str(day),
                    )
                    return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            self.log.error(
                "Exception while forwarding clicks to Finance service",
                error=str(exc) or type(exc).__name__,
                date=str(day),
            )
            return False

    @staticmethod
    def format_clicks(clicks: list[Click]) -> dict:
        return {
            "date": clicks[0].timestamp.date().isoformat(),
            "total_clicks": len(clicks),
            "clicks": [click.to_payload() for click in clicks],
        }

    async def test_connection(self) -> bool:
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=_HEALTH_TIMEOUT)
            ) as session:
                async with session.get(f"{self.base_url}/health") as resp:
                    return 200 <= resp.status < 300
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            self.log.error(
                "Failed to connect to Finance service",
                error=str(exc) or type(exc).__name__,
                url=self.base_url,
            )
            return False
