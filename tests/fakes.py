"""
Подставные объекты для тестов: часы, календарные API, aiohttp-сессия.
"""

from datetime import date, datetime, timedelta, timezone

from core.announcement_api import Announcement
from core.errors import CalendarSourceError
from core.models import CalendarDay, HijriDate


class FakeClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def time(self) -> float:
        return self.current.timestamp()

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


def utc(year, month, day, hour=12, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def ramadan_days(start: date, total: int = 30, hijri_year: str = "1447") -> list[CalendarDay]:
    return [
        CalendarDay(
            hijri_month=9,
            hijri_day=i + 1,
            hijri_year=hijri_year,
            gregorian_date=(start + timedelta(days=i)).strftime("%d-%m-%Y"),
            weekday=(start + timedelta(days=i)).strftime("%A"),
            timings={
                "Imsak": "04:50 (+06)",
                "Fajr": "05:00 (+06)",
                "Maghrib": "18:05 (+06)",
            },
        )
        for i in range(total)
    ]


class FakeCalendarAPI:
    """Ведёт себя как AlAdhanAPI; каждый ответ можно заменить исключением."""

    def __init__(self, hijri=None, year_days=None, month_days=None):
        self.hijri = hijri
        self.year_days = year_days if year_days is not None else []
        self.month_days = month_days or {}
        self.calls = []

    @property
    def network_calls(self) -> int:
        return len(self.calls)

    async def init(self):
        pass

    async def close(self):
        pass

    async def gregorian_to_hijri(self, date_str, offset=0):
        self.calls.append(("gToH", date_str, offset))
        if isinstance(self.hijri, Exception):
            raise self.hijri
        if callable(self.hijri):
            return self.hijri(date_str)
        if self.hijri is None:
            raise CalendarSourceError("aladhan", "no date configured")
        return self.hijri

    async def hijri_year_calendar(self, hijri_year, offset=0, month=9):
        self.calls.append(("hToGCalendar", hijri_year, offset))
        if isinstance(self.year_days, Exception):
            raise self.year_days
        return list(self.year_days)

    async def gregorian_month_calendar(self, year, month, latitude, longitude, timezone, offset=0):
        self.calls.append(("calendar", year, month, offset))
        result = self.month_days.get((year, month), [])
        if isinstance(result, Exception):
            raise result
        return list(result)


class FakeAnnouncementAPI:
    enabled = True

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    async def init(self):
        pass

    async def close(self):
        pass

    async def check_date(self, date_str):
        self.calls.append(date_str)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def announcement(is_ramadan: bool, month: int, day: int, year="1447", total_days=None) -> Announcement:
    names = {8: "Sha'ban", 9: "Ramadan", 10: "Shawwal"}
    return Announcement(
        is_ramadan=is_ramadan,
        hijri=HijriDate(month=month, day=day, year=year, month_name=names.get(month, "")),
        total_days=total_days,
    )


class FakeResponse:
    def __init__(self, status=200, payload=None, invalid_json=False):
        self.status = status
        self._payload = payload
        self._invalid_json = invalid_json

    async def json(self, content_type="application/json"):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Минимальная замена aiohttp.ClientSession: get() по суффиксу пути."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.calls = []
        self.closed = False

    def get(self, url, params=None):
        self.calls.append((url, params))
        for suffix, response in self.routes.items():
            if url.endswith(suffix):
                return response
        return FakeResponse(status=404, payload={"code": 404})

    async def close(self):
        self.closed = True
