"""
Модели календарного ядра: даты хиджры, границы Рамадана, итоговый статус.
Все модели неизменяемые; статус сериализуется в JSON с camelCase-полями.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional

PRE_RAMADAN = "pre-ramadan"
RAMADAN = "ramadan"
POST_RAMADAN = "post-ramadan"

RAMADAN_MONTH = 9
DEFAULT_RAMADAN_DAYS = 30


class Coordinates(NamedTuple):
    latitude: float
    longitude: float


@dataclass(frozen=True)
class HijriDate:
    month: int
    day: int
    year: str
    month_name: str


@dataclass(frozen=True)
class CalendarDay:
    """Один день из календарей AlAdhan (годового или месячного)."""
    hijri_month: int
    hijri_day: int
    hijri_year: str
    gregorian_date: str  # DD-MM-YYYY
    weekday: str = ""
    timings: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class RamadanBoundary:
    start_gregorian: Optional[str] = None
    end_gregorian: Optional[str] = None
    total_days: int = DEFAULT_RAMADAN_DAYS

    @property
    def is_known(self) -> bool:
        return self.start_gregorian is not None


@dataclass(frozen=True)
class ResolvedDate:
    """
    Результат одного календарного источника.
    announced: True/False: явный флаг «сегодня Рамадан» от сервиса объявлений,
    None: источник флага не даёт (математический календарь).
    """
    hijri: HijriDate
    source: str
    announced: Optional[bool] = None
    total_days: Optional[int] = None


@dataclass(frozen=True)
class OffsetResolution:
    offset: int
    country: Optional[str]
    configured: bool
    rule: str


@dataclass(frozen=True)
class RamadanStatus:
    phase: str
    current_day: Optional[int]
    days_until: Optional[int]
    ramadan_start_gregorian: Optional[str]
    ramadan_end_gregorian: Optional[str]
    hijri_month: int
    hijri_month_name: str
    hijri_day: Optional[int]
    hijri_year: str
    ramadan_total_days: Optional[int]

    def to_dict(self) -> dict:
        return {
            "phase": self.phase,
            "currentDay": self.current_day,
            "daysUntil": self.days_until,
            "ramadanStartGregorian": self.ramadan_start_gregorian,
            "ramadanEndGregorian": self.ramadan_end_gregorian,
            "hijriMonth": self.hijri_month,
            "hijriMonthName": self.hijri_month_name,
            "hijriDay": self.hijri_day,
            "hijriYear": self.hijri_year,
            "ramadanTotalDays": self.ramadan_total_days,
        }
