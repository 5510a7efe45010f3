"""
Клиент сервиса официальных объявлений (домашний регион).
Отвечает на один вопрос: Рамадан ли сегодня и какая дата хиджры.

Ожидаемый ответ GET {base}/ramadan/check?date=DD-MM-YYYY:
    {"isRamadan": true,
     "hijri": {"day": 10, "month": 9, "year": "1447", "monthName": "Ramadan"},
     "totalDays": 30}
"""

from dataclasses import dataclass
from typing import Optional

import aiohttp
from loguru import logger

from config import ANNOUNCEMENT_API_URL, HTTP_TIMEOUT_SECONDS
from core.errors import CalendarSourceError
from core.models import HijriDate


@dataclass(frozen=True)
class Announcement:
    is_ramadan: bool
    hijri: HijriDate
    total_days: Optional[int] = None


class AnnouncementAPI:
    SOURCE = "announcement"

    def __init__(
        self,
        base_url: str = ANNOUNCEMENT_API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def init(self):
        """Создать HTTP-сессию (только если сервис настроен)."""
        if self.enabled and self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            logger.info("AnnouncementAPI session created")

    async def close(self):
        """Закрыть HTTP-сессию."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None
            logger.info("AnnouncementAPI session closed")

    async def check_date(self, date_str: str) -> Announcement:
        """Проверить дату DD-MM-YYYY."""
        if not self.enabled:
            raise CalendarSourceError(self.SOURCE, "ANNOUNCEMENT_API_URL is not configured")
        if self._session is None:
            raise CalendarSourceError(self.SOURCE, "session is not initialised")

        url = f"{self.base_url}/ramadan/check"
        async with self._session.get(url, params={"date": date_str}) as resp:
            if not 200 <= resp.status < 300:
                raise CalendarSourceError(self.SOURCE, f"HTTP {resp.status}")
            try:
                payload = await resp.json(content_type=None)
            except ValueError as e:
                raise CalendarSourceError(self.SOURCE, "invalid JSON") from e

        return self._parse(payload)

    def _parse(self, payload) -> Announcement:
        if not isinstance(payload, dict) or not isinstance(payload.get("isRamadan"), bool):
            raise CalendarSourceError(self.SOURCE, "response has no isRamadan flag")
        try:
            hijri = payload["hijri"]
            total_days = payload.get("totalDays")
            return Announcement(
                is_ramadan=payload["isRamadan"],
                hijri=HijriDate(
                    month=int(hijri["month"]),
                    day=int(hijri["day"]),
                    year=str(hijri["year"]),
                    month_name=str(hijri.get("monthName") or ""),
                ),
                total_days=int(total_days) if total_days is not None else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CalendarSourceError(self.SOURCE, f"malformed payload: {e!r}") from e
