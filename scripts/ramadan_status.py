#!/usr/bin/env python3
"""
Проверка статуса Рамадана из консоли.
Запуск: python scripts/ramadan_status.py <timezone> [country] [lat lng]
Пример: python scripts/ramadan_status.py Asia/Dhaka BD 23.81 90.41
"""

import asyncio
import json
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.aladhan_api import AlAdhanAPI
from core.announcement_api import AnnouncementAPI
from core.models import RAMADAN, Coordinates, RamadanStatus
from core.ramadan_ordinal import format_ramadan_day
from core.ramadan_status import RamadanStatusEngine
from web_api import build_offset_resolver


def describe(status: RamadanStatus, locale: str = "en") -> str:
    """Короткая подпись для человека."""
    if status.phase == RAMADAN:
        return format_ramadan_day(status.current_day, locale, "full")
    if status.days_until is not None:
        return f"{status.days_until} days until Ramadan"
    return "Ramadan has ended for this year"


def parse_args(argv: list[str]):
    if not argv:
        print("Usage: python scripts/ramadan_status.py <timezone> [country] [lat lng]")
        sys.exit(1)

    timezone = argv[0]
    rest = argv[1:]
    country = None
    if rest and not _is_number(rest[0]):
        country = rest.pop(0)

    coordinates = None
    if len(rest) >= 2:
        coordinates = Coordinates(float(rest[0]), float(rest[1]))
    return timezone, country, coordinates


def _is_number(value: str) -> bool:
    try:
        float(value)
        return True
    except ValueError:
        return False


async def run(timezone, country, coordinates) -> RamadanStatus:
    calendar_api = AlAdhanAPI()
    announcement_api = AnnouncementAPI()
    await calendar_api.init()
    await announcement_api.init()
    try:
        engine = RamadanStatusEngine(
            calendar_api, announcement_api, offset_resolver=build_offset_resolver()
        )
        return await engine.get_ramadan_status(timezone, country, coordinates)
    finally:
        await calendar_api.close()
        await announcement_api.close()


def main():
    timezone, country, coordinates = parse_args(sys.argv[1:])
    status = asyncio.run(run(timezone, country, coordinates))
    print(json.dumps(status.to_dict(), ensure_ascii=False, indent=2))
    locale = "bn" if (country or "").upper() == "BD" else "en"
    print(describe(status, locale))


if __name__ == "__main__":
    main()
