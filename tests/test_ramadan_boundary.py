import asyncio
from datetime import date

import aiohttp

from core.errors import CalendarSourceError
from core.models import RamadanBoundary
from core.ramadan_boundary import RamadanBoundaryResolver, months_around, ramadan_days_in_order
from fakes import FakeCalendarAPI, ramadan_days

TODAY = date(2026, 1, 20)
LOCATION = dict(today=TODAY, latitude=23.81, longitude=90.41, timezone="Asia/Dhaka")


def _resolve(api, year="1447", offset=-1):
    return asyncio.run(RamadanBoundaryResolver(api).resolve(year, offset, **LOCATION))


def test_months_around_wraps_years():
    assert months_around(date(2026, 1, 5)) == [(2025, 12), (2026, 1), (2026, 2), (2026, 3)]
    assert months_around(date(2026, 11, 5)) == [(2026, 10), (2026, 11), (2026, 12), (2027, 1)]


def test_year_calendar_is_used_first():
    api = FakeCalendarAPI(year_days=ramadan_days(date(2026, 2, 18), 29))

    boundary = _resolve(api)

    assert boundary == RamadanBoundary("18-02-2026", "18-03-2026", 29)
    assert [c[0] for c in api.calls] == ["hToGCalendar"]
    assert api.calls[0] == ("hToGCalendar", "1447", -1)


def test_empty_year_calendar_falls_back_to_month_scan():
    days = ramadan_days(date(2026, 2, 18), 30)
    api = FakeCalendarAPI(
        year_days=[],
        month_days={(2026, 2): days[:11], (2026, 3): days[11:]},
    )

    boundary = _resolve(api)

    assert boundary == RamadanBoundary("18-02-2026", "19-03-2026", 30)
    scanned = sorted((c[1], c[2]) for c in api.calls if c[0] == "calendar")
    assert scanned == [(2025, 12), (2026, 1), (2026, 2), (2026, 3)]
    assert all(c[-1] == -1 for c in api.calls)


def test_failed_year_calendar_and_failed_months_still_scan_the_rest():
    days = ramadan_days(date(2026, 2, 18), 30)
    api = FakeCalendarAPI(
        year_days=CalendarSourceError("aladhan", "HTTP 400"),
        month_days={
            (2025, 12): aiohttp.ClientConnectionError("reset"),
            (2026, 2): days[:11],
            (2026, 3): days[11:],
        },
    )

    assert _resolve(api) == RamadanBoundary("18-02-2026", "19-03-2026", 30)


def test_month_scan_output_is_ordered_by_hijri_day():
    days = ramadan_days(date(2026, 2, 18), 30)
    shuffled = days[20:] + days[:5] + days[5:20] + days[3:6]

    ordered = ramadan_days_in_order(shuffled)

    assert [d.hijri_day for d in ordered] == list(range(1, 31))


def test_nothing_found_gives_unknown_boundary():
    api = FakeCalendarAPI(year_days=asyncio.TimeoutError())

    boundary = _resolve(api)

    assert boundary == RamadanBoundary(None, None, 30)
    assert boundary.is_known is False
