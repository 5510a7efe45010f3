"""
Границы Рамадана (григорианские даты начала и конца, число дней).

Порядок:
  1. годовой календарь хиджры для месяца 9;
  2. просмотр григорианских месяцев [текущий-1 .. текущий+2] с фильтром по месяцу 9;
  3. ничего не нашли, границы неизвестны, 30 дней по умолчанию.
Просмотр месяцев идёт относительно «сегодня», а не запрошенного года:
резолвер всегда вызывается для Рамадана текущего года.
"""

import asyncio
from datetime import date

from loguru import logger

from core.aladhan_api import AlAdhanAPI
from core.calendar_sources import SOURCE_ERRORS
from core.models import DEFAULT_RAMADAN_DAYS, RAMADAN_MONTH, CalendarDay, RamadanBoundary


def months_around(today: date, before: int = 1, after: int = 2) -> list[tuple[int, int]]:
    """(год, месяц) от today-before до today+after включительно."""
    months = []
    for shift in range(-before, after + 1):
        index = today.year * 12 + (today.month - 1) + shift
        months.append((index // 12, index % 12 + 1))
    return months


def ramadan_days_in_order(days: list[CalendarDay]) -> list[CalendarDay]:
    """Только месяц 9, по возрастанию дня хиджры, без повторов."""
    ramadan = sorted(
        (d for d in days if d.hijri_month == RAMADAN_MONTH),
        key=lambda d: d.hijri_day,
    )
    seen = set()
    unique = []
    for day in ramadan:
        if day.hijri_day in seen:
            continue
        seen.add(day.hijri_day)
        unique.append(day)
    return unique


def boundary_from_days(days: list[CalendarDay]) -> RamadanBoundary:
    return RamadanBoundary(
        start_gregorian=days[0].gregorian_date,
        end_gregorian=days[-1].gregorian_date,
        total_days=len(days),
    )


class RamadanBoundaryResolver:
    def __init__(self, calendar_api: AlAdhanAPI):
        self.calendar_api = calendar_api

    async def resolve(
        self,
        hijri_year: str,
        offset: int,
        *,
        today: date,
        latitude: float,
        longitude: float,
        timezone: str,
    ) -> RamadanBoundary:
        try:
            days = await self.calendar_api.hijri_year_calendar(hijri_year, offset)
        except SOURCE_ERRORS as e:
            logger.warning(f"Ramadan year calendar {hijri_year} failed, scanning months: {e!r}")
            days = []
        else:
            if not days:
                logger.warning(f"Ramadan year calendar {hijri_year} is empty, scanning months")

        if days:
            return boundary_from_days(days)

        days = await self.scan_ramadan_days(today, offset, latitude, longitude, timezone)
        if days:
            return boundary_from_days(days)

        logger.warning(f"No Ramadan days found around {today.isoformat()}, boundary unknown")
        return RamadanBoundary(None, None, DEFAULT_RAMADAN_DAYS)

    async def scan_ramadan_days(
        self,
        today: date,
        offset: int,
        latitude: float,
        longitude: float,
        timezone: str,
    ) -> list[CalendarDay]:
        """Параллельно загрузить 4 месяца; упавший месяц считается пустым."""
        months = months_around(today)
        results = await asyncio.gather(
            *(
                self.calendar_api.gregorian_month_calendar(
                    year, month, latitude, longitude, timezone, offset
                )
                for year, month in months
            ),
            return_exceptions=True,
        )

        collected: list[CalendarDay] = []
        for (year, month), result in zip(months, results):
            if isinstance(result, SOURCE_ERRORS):
                logger.warning(f"Calendar {year}/{month} failed: {result!r}")
                continue
            if isinstance(result, BaseException):
                raise result
            collected.extend(result)

        return ramadan_days_in_order(collected)
