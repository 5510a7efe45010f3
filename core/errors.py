"""
Ошибки календарных источников.
"""


class CalendarSourceError(Exception):
    """Внешний календарный сервис недоступен или вернул неожиданный ответ."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class RamadanTimetableUnavailable(Exception):
    """В просмотренных месяцах не найдено ни одного дня Рамадана."""
