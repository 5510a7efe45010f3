"""
Асинхронный клиент API AlAdhan (математический календарь хиджры).
Каждый метод делает один GET; ошибки не повторяются, а поднимаются наверх
как CalendarSourceError (транспортные ошибки aiohttp пробрасываются как есть).
"""

import aiohttp
from loguru import logger

from config import ALADHAN_BASE_URL, HTTP_TIMEOUT_SECONDS
from core.errors import CalendarSourceError
from core.models import RAMADAN_MONTH, CalendarDay, HijriDate

# method=1 → University of Islamic Sciences, Karachi; school=1 → Hanafi
PRAYER_METHOD = 1
PRAYER_SCHOOL = 1
CALENDAR_METHOD = "MATHEMATICAL"


def _parse_calendar_day(item: dict) -> CalendarDay:
    # hToGCalendar отдаёт {hijri, gregorian}, calendar отдаёт {timings, date: {hijri, gregorian}}
    date_info = item.get("date") if isinstance(item.get("date"), dict) else item
    hijri = date_info["hijri"]
    gregorian = date_info["gregorian"]
    return CalendarDay(
        hijri_month=int(hijri["month"]["number"]),
        hijri_day=int(hijri["day"]),
        hijri_year=str(hijri["year"]),
        gregorian_date=gregorian["date"],
        weekday=(gregorian.get("weekday") or {}).get("en", ""),
        timings=dict(item.get("timings") or {}),
    )


class AlAdhanAPI:
    SOURCE = "aladhan"

    def __init__(
        self,
        base_url: str = ALADHAN_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def init(self):
        """Создать HTTP-сессию."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            logger.info("AlAdhanAPI session created")

    async def close(self):
        """Закрыть HTTP-сессию."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None
            logger.info("AlAdhanAPI session closed")

    def _params(self, offset: int, **extra) -> dict:
        params = {"calendarMethod": CALENDAR_METHOD, "adjustment": int(offset)}
        params.update(extra)
        return params

    async def _get(self, path: str, params: dict = None):
        """GET-запрос; возвращает поле data из ответа с code == 200."""
        if self._session is None:
            raise CalendarSourceError(self.SOURCE, "session is not initialised")

        url = f"{self.base_url}{path}"
        async with self._session.get(url, params=params) as resp:
            if not 200 <= resp.status < 300:
                raise CalendarSourceError(self.SOURCE, f"HTTP {resp.status} for {path}")
            try:
                payload = await resp.json(content_type=None)
            except ValueError as e:
                raise CalendarSourceError(self.SOURCE, f"invalid JSON for {path}") from e

        if not isinstance(payload, dict):
            raise CalendarSourceError(self.SOURCE, f"unexpected body for {path}")
        if payload.get("code") != 200:
            raise CalendarSourceError(self.SOURCE, f"{path} returned code {payload.get('code')}")
        if "data" not in payload:
            raise CalendarSourceError(self.SOURCE, f"{path} returned no data")
        return payload["data"]

    async def gregorian_to_hijri(self, date_str: str, offset: int = 0) -> HijriDate:
        """Дата DD-MM-YYYY → дата хиджры с учётом поправки."""
        data = await self._get(f"/gToH/{date_str}", params=self._params(offset))
        try:
            hijri = data["hijri"]
            return HijriDate(
                month=int(hijri["month"]["number"]),
                day=int(hijri["day"]),
                year=str(hijri["year"]),
                month_name=hijri["month"]["en"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CalendarSourceError(self.SOURCE, f"malformed gToH payload: {e!r}") from e

    async def hijri_year_calendar(
        self, hijri_year: str, offset: int = 0, month: int = RAMADAN_MONTH
    ) -> list[CalendarDay]:
        """Все дни месяца хиджры month года hijri_year с григорианскими датами."""
        data = await self._get(f"/hToGCalendar/{month}/{hijri_year}", params=self._params(offset))
        if not isinstance(data, list):
            raise CalendarSourceError(self.SOURCE, "malformed hToGCalendar payload")
        try:
            days = [_parse_calendar_day(item) for item in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CalendarSourceError(self.SOURCE, f"malformed hToGCalendar day: {e!r}") from e
        return [d for d in days if d.hijri_month == month]

    async def gregorian_month_calendar(
        self,
        year: int,
        month: int,
        latitude: float,
        longitude: float,
        timezone: str,
        offset: int = 0,
    ) -> list[CalendarDay]:
        """Григорианский месяц с пометками хиджры и временами намаза."""
        params = self._params(
            offset,
            latitude=latitude,
            longitude=longitude,
            method=PRAYER_METHOD,
            school=PRAYER_SCHOOL,
            timezonestring=timezone,
        )
        data = await self._get(f"/calendar/{year}/{month}", params=params)
        if not isinstance(data, list):
            raise CalendarSourceError(self.SOURCE, "malformed calendar payload")
        try:
            return [_parse_calendar_day(item) for item in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CalendarSourceError(self.SOURCE, f"malformed calendar day: {e!r}") from e
