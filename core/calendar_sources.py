"""
Источники «сегодняшней» даты хиджры. Движок перебирает их по порядку
и берёт первый успешный ответ.
"""

import asyncio
from abc import ABC, abstractmethod

import aiohttp

from core.aladhan_api import AlAdhanAPI
from core.announcement_api import AnnouncementAPI
from core.errors import CalendarSourceError
from core.models import ResolvedDate

# Ошибки, после которых переходим к следующему источнику
SOURCE_ERRORS = (CalendarSourceError, aiohttp.ClientError, asyncio.TimeoutError)


class CalendarSource(ABC):
    name = "source"

    @abstractmethod
    async def resolve(self, date_str: str, offset: int) -> ResolvedDate:
        """Дата хиджры на date_str (DD-MM-YYYY) либо исключение из SOURCE_ERRORS."""


class AnnouncementSource(CalendarSource):
    """Официальные объявления. Поправка не применяется: дата уже местная."""
    name = "announcement"

    def __init__(self, api: AnnouncementAPI):
        self.api = api

    async def resolve(self, date_str: str, offset: int) -> ResolvedDate:
        announcement = await self.api.check_date(date_str)
        return ResolvedDate(
            hijri=announcement.hijri,
            source=self.name,
            announced=announcement.is_ramadan,
            total_days=announcement.total_days,
        )


class MathematicalSource(CalendarSource):
    name = "mathematical"

    def __init__(self, api: AlAdhanAPI):
        self.api = api

    async def resolve(self, date_str: str, offset: int) -> ResolvedDate:
        hijri = await self.api.gregorian_to_hijri(date_str, offset)
        return ResolvedDate(hijri=hijri, source=self.name)
