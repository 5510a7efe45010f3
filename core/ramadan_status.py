"""
Статус Рамадана для пользователя: до Рамадана, Рамадан, после Рамадана.

Цепочка источников: официальные объявления (домашний регион) →
математический календарь AlAdhan → границы месяца 9 (годовой календарь,
затем просмотр месяцев) → статическая таблица примерных дат.
get_ramadan_status никогда не падает: любой сбой превращается
в ответ по статической таблице.
"""

import asyncio
import math
from datetime import date, datetime, timezone as dt_timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger

from config import (
    CACHE_MAX_ENTRIES,
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    HIJRI_OFFSET,
    HOME_REGIONS,
    STATUS_CACHE_TTL_HOURS,
    STATUS_TIMEOUT_SECONDS,
)
from core.aladhan_api import AlAdhanAPI
from core.announcement_api import AnnouncementAPI
from core.calendar_sources import SOURCE_ERRORS, AnnouncementSource, CalendarSource, MathematicalSource
from core.errors import CalendarSourceError
from core.hijri_offsets import OffsetResolver, parse_configured_offset
from core.models import (
    DEFAULT_RAMADAN_DAYS,
    POST_RAMADAN,
    PRE_RAMADAN,
    RAMADAN,
    RAMADAN_MONTH,
    Coordinates,
    HijriDate,
    OffsetResolution,
    RamadanStatus,
)
from core.ramadan_boundary import RamadanBoundaryResolver
from core.ttl_cache import TTLCache

# Примерные окна Рамадана: григорианский год → (год хиджры, начало, конец)
FALLBACK_WINDOWS = {
    2024: ("1445", date(2024, 3, 11), date(2024, 4, 9)),
    2025: ("1446", date(2025, 3, 1), date(2025, 3, 30)),
    2026: ("1447", date(2026, 2, 18), date(2026, 3, 19)),
    2027: ("1448", date(2027, 2, 8), date(2027, 3, 9)),
    2028: ("1449", date(2028, 1, 28), date(2028, 2, 26)),
}


def utc_now() -> datetime:
    return datetime.now(dt_timezone.utc)


def local_today(timezone: str, now: datetime) -> date:
    """Календарная дата в таймзоне пользователя; неизвестная таймзона → UTC."""
    try:
        tz = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError, TypeError, OSError):
        logger.warning(f"Unknown timezone {timezone!r}, using UTC")
        tz = dt_timezone.utc
    return now.astimezone(tz).date()


def format_ddmmyyyy(value: date) -> str:
    return value.strftime("%d-%m-%Y")


def parse_ddmmyyyy(value: str) -> date:
    return datetime.strptime(value, "%d-%m-%Y").date()


def rough_days_until(hijri_month: int, hijri_day: int) -> int:
    """
    Грубая оценка дней до Рамадана, когда его начало неизвестно.
    Заведомо приблизительна (29.5 дня на месяц), это не точный контракт.
    """
    estimate = (RAMADAN_MONTH - hijri_month - 1) * 29.5 + (30 - hijri_day)
    return max(0, math.floor(estimate + 0.5))


def static_fallback_status(today: date) -> RamadanStatus:
    """Ответ по таблице примерных дат; берётся ближайший известный год."""
    year = today.year
    if year not in FALLBACK_WINDOWS:
        year = min(FALLBACK_WINDOWS, key=lambda y: (abs(y - today.year), y))
    hijri_year, start, end = FALLBACK_WINDOWS[year]
    total_days = (end - start).days + 1
    start_str, end_str = format_ddmmyyyy(start), format_ddmmyyyy(end)

    if today < start:
        return RamadanStatus(
            phase=PRE_RAMADAN,
            current_day=None,
            days_until=(start - today).days,
            ramadan_start_gregorian=start_str,
            ramadan_end_gregorian=end_str,
            hijri_month=8,
            hijri_month_name="Sha'ban",
            hijri_day=None,
            hijri_year=hijri_year,
            ramadan_total_days=total_days,
        )
    if today <= end:
        day = min((today - start).days + 1, total_days)
        return RamadanStatus(
            phase=RAMADAN,
            current_day=day,
            days_until=None,
            ramadan_start_gregorian=start_str,
            ramadan_end_gregorian=end_str,
            hijri_month=RAMADAN_MONTH,
            hijri_month_name="Ramadan",
            hijri_day=day,
            hijri_year=hijri_year,
            ramadan_total_days=total_days,
        )
    return RamadanStatus(
        phase=POST_RAMADAN,
        current_day=None,
        days_until=None,
        ramadan_start_gregorian=None,
        ramadan_end_gregorian=None,
        hijri_month=10,
        hijri_month_name="Shawwal",
        hijri_day=None,
        hijri_year=hijri_year,
        ramadan_total_days=None,
    )


def cache_key(
    timezone: str,
    resolution: OffsetResolution,
    coordinates: Optional[Coordinates],
    today: date,
) -> str:
    coords = f"{coordinates.latitude:.2f},{coordinates.longitude:.2f}" if coordinates else "NA"
    marker = "cfg" if resolution.configured else "auto"
    return (
        f"ramadan:{timezone}:{resolution.country or 'NA'}:{coords}:"
        f"{resolution.offset}:{marker}:{today.isoformat()}"
    )


def announced_ramadan_status(hijri: HijriDate, total_days: Optional[int]) -> RamadanStatus:
    total = total_days or DEFAULT_RAMADAN_DAYS
    day = max(1, min(hijri.day, total))
    return RamadanStatus(
        phase=RAMADAN,
        current_day=day,
        days_until=None,
        ramadan_start_gregorian=None,
        ramadan_end_gregorian=None,
        hijri_month=hijri.month,
        hijri_month_name=hijri.month_name or "Ramadan",
        hijri_day=day,
        hijri_year=hijri.year,
        ramadan_total_days=total,
    )


def provisional_status(hijri: HijriDate) -> RamadanStatus:
    """Статус по объявлению «не Рамадан», без границ; уточняется математическим путём."""
    if hijri.month > RAMADAN_MONTH:
        return RamadanStatus(
            POST_RAMADAN, None, None, None, None,
            hijri.month, hijri.month_name, hijri.day, hijri.year, None,
        )
    return RamadanStatus(
        PRE_RAMADAN, None, rough_days_until(hijri.month, hijri.day), None, None,
        hijri.month, hijri.month_name, hijri.day, hijri.year, None,
    )


class RamadanStatusEngine:
    def __init__(
        self,
        calendar_api: AlAdhanAPI,
        announcement_api: Optional[AnnouncementAPI] = None,
        *,
        offset_resolver: Optional[OffsetResolver] = None,
        cache: Optional[TTLCache] = None,
        clock: Callable[[], datetime] = utc_now,
        home_regions: Optional[list[str]] = None,
        timeout: float = STATUS_TIMEOUT_SECONDS,
    ):
        self.calendar_api = calendar_api
        self.offsets = offset_resolver or OffsetResolver(
            configured_offset=parse_configured_offset(HIJRI_OFFSET)
        )
        self.cache = cache if cache is not None else TTLCache(
            STATUS_CACHE_TTL_HOURS * 3600, CACHE_MAX_ENTRIES
        )
        self.clock = clock
        self.home_regions = {r.upper() for r in (HOME_REGIONS if home_regions is None else home_regions)}
        self.timeout = timeout
        self.boundaries = RamadanBoundaryResolver(calendar_api)
        self.mathematical_source = MathematicalSource(calendar_api)
        self.announcement_source = (
            AnnouncementSource(announcement_api)
            if announcement_api is not None and announcement_api.enabled
            else None
        )

    async def get_ramadan_status(
        self,
        timezone: str,
        country_code: Optional[str] = None,
        coordinates: Optional[Coordinates] = None,
    ) -> RamadanStatus:
        """Статус Рамадана на сегодня в таймзоне пользователя. Не бросает исключений."""
        now = self.clock()
        today = now.astimezone(dt_timezone.utc).date()
        try:
            today = local_today(timezone, now)
            resolution = self.offsets.resolve(timezone, country_code, coordinates)
            key = cache_key(timezone, resolution, coordinates, today)
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Ramadan status cache hit: {key}")
                return cached

            return await asyncio.wait_for(
                self._compute(key, today, timezone, country_code, coordinates, resolution),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.error(f"Ramadan status failed for {timezone}, using static table: {e!r}")
            return static_fallback_status(today)

    def sources_for(self, country_code: Optional[str], resolution: OffsetResolution) -> list[CalendarSource]:
        sources: list[CalendarSource] = []
        if self.announcement_source and not resolution.configured:
            if not country_code or resolution.country in self.home_regions:
                sources.append(self.announcement_source)
        sources.append(self.mathematical_source)
        return sources

    async def _compute(
        self,
        key: str,
        today: date,
        timezone: str,
        country_code: Optional[str],
        coordinates: Optional[Coordinates],
        resolution: OffsetResolution,
    ) -> RamadanStatus:
        date_str = format_ddmmyyyy(today)
        provisional = None

        for source in self.sources_for(country_code, resolution):
            try:
                resolved = await source.resolve(date_str, resolution.offset)
            except SOURCE_ERRORS as e:
                logger.warning(f"{source.name} source failed for {date_str}: {e!r}")
                continue

            if resolved.announced is True:
                status = announced_ramadan_status(resolved.hijri, resolved.total_days)
                self.cache.set(key, status)
                logger.info(f"Ramadan announced for {date_str}: day {status.current_day}")
                return status

            if resolved.announced is False:
                provisional = provisional_status(resolved.hijri)
                continue

            status = await self._classify(resolved.hijri, resolution.offset, today, timezone, coordinates)
            self.cache.set(key, status)
            logger.info(f"Ramadan status {timezone} {date_str}: {status.phase} (offset {resolution.offset})")
            return status

        if provisional is not None:
            logger.warning(f"Using provisional announcement status for {date_str}")
            self.cache.set(key, provisional)
            return provisional
        raise CalendarSourceError("engine", f"no calendar source resolved {date_str}")

    def _location(self, timezone: str, coordinates: Optional[Coordinates]) -> tuple[float, float]:
        if coordinates is not None:
            return coordinates.latitude, coordinates.longitude
        known = self.offsets.tables.coordinates_for_timezone(timezone)
        if known:
            return known[0], known[1]
        return DEFAULT_LATITUDE, DEFAULT_LONGITUDE

    async def _classify(
        self,
        hijri: HijriDate,
        offset: int,
        today: date,
        timezone: str,
        coordinates: Optional[Coordinates],
    ) -> RamadanStatus:
        if hijri.month > RAMADAN_MONTH:
            return RamadanStatus(
                phase=POST_RAMADAN,
                current_day=None,
                days_until=None,
                ramadan_start_gregorian=None,
                ramadan_end_gregorian=None,
                hijri_month=hijri.month,
                hijri_month_name=hijri.month_name,
                hijri_day=hijri.day,
                hijri_year=hijri.year,
                ramadan_total_days=None,
            )

        latitude, longitude = self._location(timezone, coordinates)
        boundary = await self.boundaries.resolve(
            hijri.year, offset,
            today=today, latitude=latitude, longitude=longitude, timezone=timezone,
        )

        if hijri.month == RAMADAN_MONTH:
            return RamadanStatus(
                phase=RAMADAN,
                current_day=max(1, min(hijri.day, DEFAULT_RAMADAN_DAYS)),
                days_until=None,
                ramadan_start_gregorian=boundary.start_gregorian,
                ramadan_end_gregorian=boundary.end_gregorian,
                hijri_month=hijri.month,
                hijri_month_name=hijri.month_name,
                hijri_day=hijri.day,
                hijri_year=hijri.year,
                ramadan_total_days=boundary.total_days,
            )

        days_until = None
        if boundary.is_known:
            try:
                days_until = max(0, (parse_ddmmyyyy(boundary.start_gregorian) - today).days)
            except ValueError:
                logger.warning(f"Unparsable Ramadan start {boundary.start_gregorian!r}")
        if days_until is None:
            days_until = rough_days_until(hijri.month, hijri.day)

        return RamadanStatus(
            phase=PRE_RAMADAN,
            current_day=None,
            days_until=days_until,
            ramadan_start_gregorian=boundary.start_gregorian,
            ramadan_end_gregorian=boundary.end_gregorian,
            hijri_month=hijri.month,
            hijri_month_name=hijri.month_name,
            hijri_day=hijri.day,
            hijri_year=hijri.year,
            ramadan_total_days=boundary.total_days,
        )
