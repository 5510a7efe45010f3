"""
Расписание сехри/ифтара на месяц Рамадан.
Берём григорианские месяцы вокруг сегодняшней даты (Рамадан захватывает два),
оставляем дни месяца хиджры 9 и кэшируем результат на 24 часа.
"""

import re
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from config import CACHE_MAX_ENTRIES, TIMETABLE_CACHE_TTL_HOURS
from core.aladhan_api import AlAdhanAPI
from core.errors import RamadanTimetableUnavailable
from core.hijri_offsets import OffsetResolver
from core.models import Coordinates
from core.ramadan_boundary import RamadanBoundaryResolver
from core.ramadan_status import local_today, utc_now
from core.ttl_cache import TTLCache

TIMETABLE_METHOD = "University of Islamic Sciences, Karachi (Hanafi)"


def clean_time(value: str) -> str:
    """'05:01 (+06)' → '05:01'."""
    return re.sub(r"\s*\(.*\)$", "", value or "")


def location_label_from_timezone(timezone: str) -> str:
    """'America/New_York' → 'New York'."""
    return timezone.split("/")[-1].replace("_", " ")


class RamadanTimetableService:
    def __init__(
        self,
        calendar_api: AlAdhanAPI,
        offset_resolver: OffsetResolver,
        cache: Optional[TTLCache] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.boundaries = RamadanBoundaryResolver(calendar_api)
        self.offsets = offset_resolver
        self.cache = cache if cache is not None else TTLCache(
            TIMETABLE_CACHE_TTL_HOURS * 3600, CACHE_MAX_ENTRIES
        )
        self.clock = clock

    async def fetch_timetable(
        self,
        latitude: float,
        longitude: float,
        timezone: str,
        location_label: str,
    ) -> dict:
        offset = self.offsets.resolve_offset(timezone, coordinates=Coordinates(latitude, longitude))
        key = f"timetable:{latitude:.2f},{longitude:.2f}:{timezone}:{offset}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        today = local_today(timezone, self.clock())
        days = await self.boundaries.scan_ramadan_days(today, offset, latitude, longitude, timezone)
        if not days:
            raise RamadanTimetableUnavailable(
                "No Ramadan days found in the current period. Ramadan may not have started yet."
            )

        timetable = {
            "days": [
                {
                    "day": d.hijri_day,
                    "gregorianDate": d.gregorian_date,
                    "weekday": d.weekday[:3],
                    "sehri": clean_time(d.timings.get("Imsak", "")),
                    "iftar": clean_time(d.timings.get("Maghrib", "")),
                    "fajr": clean_time(d.timings.get("Fajr", "")),
                    "maghrib": clean_time(d.timings.get("Maghrib", "")),
                }
                for d in days
            ],
            "location": location_label,
            "timezone": timezone,
            "hijriYear": days[0].hijri_year,
            "method": TIMETABLE_METHOD,
        }
        self.cache.set(key, timetable)
        logger.info(f"Ramadan timetable cached: {location_label} ({len(days)} days)")
        return timetable
