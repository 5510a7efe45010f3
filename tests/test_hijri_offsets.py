import json

import pytest

from core.hijri_offsets import (
    CountryBounds,
    OffsetResolver,
    OffsetTables,
    load_tables,
    parse_configured_offset,
)
from core.models import Coordinates

BANGKOK = Coordinates(13.75, 100.50)
RIYADH = Coordinates(24.71, 46.67)
LONDON = Coordinates(51.51, -0.13)


@pytest.fixture()
def resolver() -> OffsetResolver:
    return OffsetResolver(OffsetTables())


# ─── configured override ───

@pytest.mark.parametrize("raw, expected", [
    ("1", 1),
    ("-1", -1),
    (" +2 ", 2),
    ("5", 2),
    ("-9", -2),
    ("1abc", 1),
    ("", None),
    ("   ", None),
    ("abc", None),
    (None, None),
])
def test_parse_configured_offset(raw, expected):
    assert parse_configured_offset(raw) == expected


def test_override_short_circuits_every_table():
    resolver = OffsetResolver(OffsetTables(), configured_offset=2)
    for args in [
        ("Asia/Dhaka", None, None),
        ("Asia/Riyadh", "SA", RIYADH),
        ("Asia/Bangkok", "TH", BANGKOK),
        ("Europe/London", "GB", LONDON),
        ("Nowhere/Unknown", None, None),
    ]:
        resolution = resolver.resolve(*args)
        assert resolution.offset == 2
        assert resolution.configured is True
        assert resolution.rule == "configured"


# ─── resolution ladder ───

def test_coordinates_beat_explicit_country(resolver):
    # Бангкок по координатам (TH = -1) важнее явного SA (0)
    resolution = resolver.resolve("Asia/Riyadh", "SA", BANGKOK)
    assert resolution.rule == "coordinates"
    assert resolution.country == "TH"
    assert resolution.offset == -1


def test_unmatched_coordinates_fall_through_to_country(resolver):
    resolution = resolver.resolve("Asia/Dhaka", "sa", LONDON)
    assert resolution.rule == "country"
    assert resolution.country == "SA"
    assert resolution.offset == 0


def test_country_beats_timezone(resolver):
    assert resolver.resolve_offset("Asia/Riyadh", "BD") == -1
    assert resolver.resolve_offset("Asia/Dhaka", "AE") == 0


def test_timezone_country_when_no_country(resolver):
    resolution = resolver.resolve("Asia/Karachi")
    assert resolution.rule == "timezone-country"
    assert resolution.country == "PK"
    assert resolution.offset == -1


def test_city_heuristic_for_unlisted_timezone(resolver):
    resolution = resolver.resolve("Etc/Dhaka")
    assert resolution.country == "BD"
    assert resolution.offset == -1


def test_timezone_table_when_country_has_no_offset(resolver):
    # AU нет в таблице стран, решает таблица таймзон
    resolution = resolver.resolve("Australia/Sydney")
    assert resolution.rule == "timezone"
    assert resolution.country == "AU"
    assert resolution.offset == -1


def test_timezone_table_for_muscat(resolver):
    assert resolver.resolve_offset("Asia/Muscat") == -1


def test_unknown_everything_defaults_to_zero(resolver):
    resolution = resolver.resolve("America/Lima", "PE", Coordinates(-12.0, -77.0))
    assert resolution.rule == "default"
    assert resolution.offset == 0


def test_coordinates_country_missing_from_table_defaults_to_zero():
    tables = OffsetTables(country_bounds=(CountryBounds(0, 10, 0, 10, "XX"),))
    resolution = OffsetResolver(tables).resolve("Asia/Dhaka", "BD", Coordinates(5, 5))
    assert resolution.rule == "coordinates"
    assert resolution.offset == 0


# ─── tables ───

def test_tables_are_read_only():
    tables = OffsetTables()
    with pytest.raises(TypeError):
        tables.country_offsets["BD"] = 2


def test_load_tables_from_json(tmp_path):
    path = tmp_path / "offsets.json"
    path.write_text(json.dumps({
        "country_offsets": {"my": -1},
        "country_bounds": [
            {"lat_min": 1, "lat_max": 7, "lng_min": 99, "lng_max": 120, "country_code": "my"},
        ],
        "timezone_coordinates": {
            "Asia/Kuala_Lumpur": {"latitude": 3.139, "longitude": 101.6869, "label": "Kuala Lumpur"},
        },
    }), encoding="utf-8")

    tables = load_tables(str(path))

    assert tables.country_offsets == {"MY": -1}
    assert tables.country_for_coordinates(3.1, 101.7) == "MY"
    assert tables.coordinates_for_timezone("Asia/Kuala_Lumpur") == (3.139, 101.6869, "Kuala Lumpur")
    # Не переопределённые таблицы остаются встроенными
    assert tables.timezone_offsets["Australia/Sydney"] == -1

    resolver = OffsetResolver(tables)
    assert resolver.resolve("Asia/Bangkok", None, Coordinates(3.1, 101.7)).offset == -1
    # TH больше нет в таблице стран → таблица таймзон
    assert resolver.resolve("Asia/Bangkok").rule == "timezone"
