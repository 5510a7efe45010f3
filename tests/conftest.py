import pytest

from core.hijri_offsets import OffsetResolver, OffsetTables
from core.ramadan_status import RamadanStatusEngine
from core.ttl_cache import TTLCache
from fakes import FakeClock, utc


@pytest.fixture()
def clock() -> FakeClock:
    # 2026-01-20 12:00 UTC → 18:00 в Дакке
    return FakeClock(utc(2026, 1, 20))


@pytest.fixture()
def make_engine(clock):
    def factory(calendar_api, announcement_api=None, configured_offset=None,
                home_regions=("BD",), tables=None, timeout=5):
        return RamadanStatusEngine(
            calendar_api,
            announcement_api,
            offset_resolver=OffsetResolver(tables or OffsetTables(), configured_offset=configured_offset),
            cache=TTLCache(6 * 3600, 500, clock=clock.time),
            clock=clock.now,
            home_regions=list(home_regions),
            timeout=timeout,
        )
    return factory
