"""
Поправки к математическому календарю хиджры по региону.

Поправка: целое число дней [-2, 2], которое прибавляется к математически
вычисленной дате хиджры, чтобы получить дату по местному наблюдению луны
(параметр adjustment у AlAdhan). Таблицы это данные, а не логика: их можно
заменить JSON-файлом (HIJRI_TABLES_PATH) без изменения кода.
"""

import json
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from loguru import logger

from core.models import Coordinates, OffsetResolution

MIN_OFFSET = -2
MAX_OFFSET = 2

COUNTRY_OFFSETS = {
    "TH": -1,
    "IN": -1,
    "BD": -1,
    "PK": -1,
    "SA": 0,
    "AE": 0,
}

TIMEZONE_OFFSETS = {
    # South & Southeast Asia
    "Asia/Bangkok": -1,
    "Asia/Jakarta": -1,
    "Asia/Kuala_Lumpur": -1,
    "Asia/Dhaka": -1,
    "Asia/Kolkata": -1,
    "Asia/Karachi": -1,
    "Asia/Kabul": -1,
    "Asia/Colombo": -1,
    "Asia/Singapore": -1,
    # Middle East & North Africa
    "Asia/Riyadh": 0,
    "Asia/Dubai": 0,
    "Asia/Qatar": 0,
    "Asia/Kuwait": 0,
    "Asia/Bahrain": 0,
    "Asia/Baghdad": 0,
    "Asia/Amman": 0,
    "Africa/Cairo": 0,
    "Asia/Muscat": -1,
    # Europe, Americas, Oceania
    "Europe/London": 0,
    "America/New_York": 0,
    "America/Chicago": 0,
    "America/Los_Angeles": 0,
    "America/Toronto": 0,
    "Australia/Sydney": -1,
}

TIMEZONE_COUNTRIES = {
    "Asia/Bangkok": "TH",
    "Asia/Dhaka": "BD",
    "Asia/Kolkata": "IN",
    "Asia/Calcutta": "IN",
    "Asia/Karachi": "PK",
    "Asia/Riyadh": "SA",
    "Asia/Dubai": "AE",
    "Asia/Jakarta": "ID",
    "Asia/Kuala_Lumpur": "MY",
    "Asia/Kabul": "AF",
    "Asia/Colombo": "LK",
    "Asia/Singapore": "SG",
    "Asia/Qatar": "QA",
    "Asia/Kuwait": "KW",
    "Asia/Bahrain": "BH",
    "Asia/Baghdad": "IQ",
    "Asia/Amman": "JO",
    "Africa/Cairo": "EG",
    "Asia/Muscat": "OM",
    "Europe/London": "GB",
    "America/New_York": "US",
    "America/Chicago": "US",
    "America/Los_Angeles": "US",
    "America/Toronto": "CA",
    "Australia/Sydney": "AU",
}

# Последний сегмент таймзоны → страна ("Asia/Dhaka" → "Dhaka")
CITY_COUNTRIES = {
    "Bangkok": "TH",
    "Dhaka": "BD",
    "Karachi": "PK",
    "Riyadh": "SA",
    "Dubai": "AE",
    "Kolkata": "IN",
    "Calcutta": "IN",
}


@dataclass(frozen=True)
class CountryBounds:
    lat_min: float
    lat_max: float
    lng_min: float
    lng_max: float
    country_code: str

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.lat_min <= latitude <= self.lat_max
            and self.lng_min <= longitude <= self.lng_max
        )


COUNTRY_BOUNDS = (
    CountryBounds(5, 21, 97, 106, "TH"),
    CountryBounds(16, 33, 34, 56, "SA"),
)

# Координаты по умолчанию для таймзон, когда клиент их не прислал
TIMEZONE_COORDINATES = {
    "Asia/Bangkok": (13.7563, 100.5018, "Bangkok, Thailand"),
    "Asia/Dhaka": (23.8103, 90.4125, "ঢাকা, বাংলাদেশ"),
    "Asia/Kolkata": (22.5726, 88.3639, "Kolkata, India"),
    "Asia/Karachi": (24.8607, 67.0011, "Karachi, Pakistan"),
    "Asia/Riyadh": (24.7136, 46.6753, "Riyadh, Saudi Arabia"),
    "Asia/Dubai": (25.2048, 55.2708, "Dubai, UAE"),
    "Asia/Jakarta": (-6.2088, 106.8456, "Jakarta, Indonesia"),
    "Europe/London": (51.5074, -0.1278, "London, UK"),
    "America/New_York": (40.7128, -74.0060, "New York, USA"),
}


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class OffsetTables:
    country_offsets: Mapping[str, int] = field(default_factory=lambda: _frozen(COUNTRY_OFFSETS))
    timezone_offsets: Mapping[str, int] = field(default_factory=lambda: _frozen(TIMEZONE_OFFSETS))
    timezone_countries: Mapping[str, str] = field(default_factory=lambda: _frozen(TIMEZONE_COUNTRIES))
    city_countries: Mapping[str, str] = field(default_factory=lambda: _frozen(CITY_COUNTRIES))
    country_bounds: tuple = COUNTRY_BOUNDS
    timezone_coordinates: Mapping[str, tuple] = field(default_factory=lambda: _frozen(TIMEZONE_COORDINATES))
    default_offset: int = 0

    def country_for_coordinates(self, latitude: float, longitude: float) -> Optional[str]:
        for bounds in self.country_bounds:
            if bounds.contains(latitude, longitude):
                return bounds.country_code
        return None

    def country_for_timezone(self, timezone: str) -> Optional[str]:
        if not timezone:
            return None
        if timezone in self.timezone_countries:
            return self.timezone_countries[timezone]
        city = timezone.split("/")[-1]
        return self.city_countries.get(city)

    def coordinates_for_timezone(self, timezone: str) -> Optional[tuple]:
        return self.timezone_coordinates.get(timezone)


def load_tables(path: str) -> OffsetTables:
    """
    Загрузить таблицы из JSON. Отсутствующие ключи берутся из встроенных таблиц.

    Формат:
        {"country_offsets": {"MY": -1},
         "timezone_offsets": {...}, "timezone_countries": {...}, "city_countries": {...},
         "country_bounds": [{"lat_min": 5, "lat_max": 21, "lng_min": 97, "lng_max": 106,
                             "country_code": "TH"}],
         "timezone_coordinates": {"Asia/Dhaka": {"latitude": 23.81, "longitude": 90.41,
                                                 "label": "Dhaka"}},
         "default_offset": 0}
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    kwargs = {}
    for key in ("country_offsets", "timezone_offsets", "timezone_countries", "city_countries"):
        if key in data:
            kwargs[key] = _frozen(data[key])
    if "country_offsets" in kwargs:
        kwargs["country_offsets"] = _frozen(
            {k.upper(): v for k, v in kwargs["country_offsets"].items()}
        )
    if "country_bounds" in data:
        kwargs["country_bounds"] = tuple(
            CountryBounds(
                float(b["lat_min"]), float(b["lat_max"]),
                float(b["lng_min"]), float(b["lng_max"]),
                b["country_code"].upper(),
            )
            for b in data["country_bounds"]
        )
    if "timezone_coordinates" in data:
        kwargs["timezone_coordinates"] = _frozen({
            tz: (float(c["latitude"]), float(c["longitude"]), c.get("label", tz))
            for tz, c in data["timezone_coordinates"].items()
        })
    if "default_offset" in data:
        kwargs["default_offset"] = int(data["default_offset"])

    logger.info(f"Hijri offset tables loaded from {path}")
    return OffsetTables(**kwargs)


def parse_configured_offset(raw: Optional[str]) -> Optional[int]:
    """HIJRI_OFFSET → int в [-2, 2] или None, если не задан или не число."""
    if raw is None:
        return None
    match = re.match(r"^\s*([+-]?\d+)", raw)
    if not match:
        if raw.strip():
            logger.warning(f"Ignoring malformed HIJRI_OFFSET: {raw!r}")
        return None
    return max(MIN_OFFSET, min(MAX_OFFSET, int(match.group(1))))


class OffsetResolver:
    """
    Порядок (первое совпадение побеждает):
      1. настроенный override
      2. страна по координатам (bounding box)
      3. явный код страны
      4. страна по таймзоне
      5. таблица таймзон
      6. default (0)
    Страна на шагах 3-4 решает только если она есть в таблице стран.
    """

    def __init__(self, tables: Optional[OffsetTables] = None, configured_offset: Optional[int] = None):
        self.tables = tables or OffsetTables()
        self.configured_offset = configured_offset

    def resolve_country(
        self,
        timezone: str,
        country_code: Optional[str] = None,
        coordinates: Optional[Coordinates] = None,
    ) -> Optional[str]:
        if coordinates is not None:
            country = self.tables.country_for_coordinates(coordinates.latitude, coordinates.longitude)
            if country:
                return country
        if country_code and country_code.strip():
            return country_code.strip().upper()
        return self.tables.country_for_timezone(timezone)

    def resolve(
        self,
        timezone: str,
        country_code: Optional[str] = None,
        coordinates: Optional[Coordinates] = None,
    ) -> OffsetResolution:
        tables = self.tables
        country = self.resolve_country(timezone, country_code, coordinates)

        if self.configured_offset is not None:
            return OffsetResolution(self.configured_offset, country, True, "configured")

        if coordinates is not None:
            coord_country = tables.country_for_coordinates(coordinates.latitude, coordinates.longitude)
            if coord_country:
                offset = tables.country_offsets.get(coord_country, tables.default_offset)
                return OffsetResolution(offset, coord_country, False, "coordinates")

        explicit = country_code.strip().upper() if country_code and country_code.strip() else None
        if explicit and explicit in tables.country_offsets:
            return OffsetResolution(tables.country_offsets[explicit], explicit, False, "country")

        tz_country = tables.country_for_timezone(timezone)
        if tz_country and tz_country in tables.country_offsets:
            return OffsetResolution(tables.country_offsets[tz_country], country, False, "timezone-country")

        if timezone in tables.timezone_offsets:
            return OffsetResolution(tables.timezone_offsets[timezone], country, False, "timezone")

        return OffsetResolution(tables.default_offset, country, False, "default")

    def resolve_offset(
        self,
        timezone: str,
        country_code: Optional[str] = None,
        coordinates: Optional[Coordinates] = None,
    ) -> int:
        return self.resolve(timezone, country_code, coordinates).offset
