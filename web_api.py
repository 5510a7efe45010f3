"""
HTTP API календарного ядра: статус Рамадана и расписание сехри/ифтара.
Запуск: python web_api.py
"""

import json
import sys

from aiohttp import web
from loguru import logger

from config import (
    API_PORT,
    DEFAULT_LATITUDE,
    DEFAULT_LOCATION_LABEL,
    DEFAULT_LONGITUDE,
    DEFAULT_TIMEZONE,
    HIJRI_OFFSET,
    HIJRI_TABLES_PATH,
    LOG_LEVEL,
    LOG_PATH,
)
from core.aladhan_api import AlAdhanAPI
from core.announcement_api import AnnouncementAPI
from core.errors import RamadanTimetableUnavailable
from core.hijri_offsets import OffsetResolver, OffsetTables, load_tables, parse_configured_offset
from core.models import Coordinates
from core.ramadan_status import RamadanStatusEngine
from core.ramadan_timetable import RamadanTimetableService, location_label_from_timezone

STATUS_CACHE_CONTROL = "public, s-maxage=3600, stale-while-revalidate=86400"
TIMETABLE_CACHE_CONTROL = "public, s-maxage=86400, stale-while-revalidate=604800"


def setup_logging():
    """Настройка логирования с ротацией."""
    logger.remove()
    logger.add(sys.stderr, level=LOG_LEVEL)
    logger.add(
        LOG_PATH,
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        level="DEBUG",
        encoding="utf-8",
    )


def _json(data, status=200, headers=None):
    return web.Response(
        text=json.dumps(data, ensure_ascii=False, default=str),
        content_type="application/json",
        status=status,
        headers=headers,
    )


def _float_param(request, name):
    raw = request.query.get(name)
    if raw is None or raw == "":
        return None
    return float(raw)


# ─── Ramadan status ───

async def handle_ramadan(request):
    engine: RamadanStatusEngine = request.app["engine"]
    timezone = request.query.get("tz") or DEFAULT_TIMEZONE
    country = request.query.get("country") or None

    coordinates = None
    try:
        lat = _float_param(request, "lat")
        lng = _float_param(request, "lng")
    except ValueError:
        lat = lng = None
    if lat is not None and lng is not None:
        coordinates = Coordinates(lat, lng)

    status = await engine.get_ramadan_status(timezone, country, coordinates)
    return _json(status.to_dict(), headers={"Cache-Control": STATUS_CACHE_CONTROL})


# ─── Ramadan timetable ───

async def handle_ramadan_timetable(request):
    timetable_service: RamadanTimetableService = request.app["timetable"]
    tables: OffsetTables = request.app["offset_resolver"].tables
    timezone = request.query.get("tz") or DEFAULT_TIMEZONE

    known = tables.coordinates_for_timezone(timezone)
    default_lat, default_lng = (known[0], known[1]) if known else (DEFAULT_LATITUDE, DEFAULT_LONGITUDE)
    try:
        lat = _float_param(request, "lat")
        lng = _float_param(request, "lng")
    except ValueError:
        return _json({"error": "Invalid coordinates"}, 400)
    lat = default_lat if lat is None else lat
    lng = default_lng if lng is None else lng

    location = request.query.get("location")
    if not location:
        if known:
            location = known[2]
        elif timezone == DEFAULT_TIMEZONE:
            location = DEFAULT_LOCATION_LABEL
        else:
            location = location_label_from_timezone(timezone)

    try:
        timetable = await timetable_service.fetch_timetable(lat, lng, timezone, location)
    except RamadanTimetableUnavailable as e:
        logger.warning(f"Ramadan timetable unavailable for {timezone}: {e}")
        return _json({"error": "Failed to fetch Ramadan timetable"}, 502)

    return _json(timetable, headers={"Cache-Control": TIMETABLE_CACHE_CONTROL})


async def handle_health(request):
    return _json({"ok": True})


@web.middleware
async def security_headers_middleware(request, handler):
    """Add security headers to every response."""
    response = await handler(request)
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
    return response


def build_offset_resolver() -> OffsetResolver:
    tables = load_tables(HIJRI_TABLES_PATH) if HIJRI_TABLES_PATH else OffsetTables()
    return OffsetResolver(tables, configured_offset=parse_configured_offset(HIJRI_OFFSET))


async def init_app(
    calendar_api: AlAdhanAPI = None,
    announcement_api: AnnouncementAPI = None,
    offset_resolver: OffsetResolver = None,
    engine: RamadanStatusEngine = None,
    timetable: RamadanTimetableService = None,
):
    app = web.Application(middlewares=[security_headers_middleware])

    calendar_api = calendar_api or AlAdhanAPI()
    announcement_api = announcement_api or AnnouncementAPI()
    offset_resolver = offset_resolver or build_offset_resolver()

    app["calendar_api"] = calendar_api
    app["announcement_api"] = announcement_api
    app["offset_resolver"] = offset_resolver
    app["engine"] = engine or RamadanStatusEngine(
        calendar_api, announcement_api, offset_resolver=offset_resolver
    )
    app["timetable"] = timetable or RamadanTimetableService(calendar_api, offset_resolver)

    async def open_sessions(app):
        await app["calendar_api"].init()
        await app["announcement_api"].init()

    async def close_sessions(app):
        await app["calendar_api"].close()
        await app["announcement_api"].close()

    app.on_startup.append(open_sessions)
    app.on_cleanup.append(close_sessions)

    app.router.add_get("/api/ramadan", handle_ramadan)
    app.router.add_get("/api/ramadan-timetable", handle_ramadan_timetable)
    app.router.add_get("/health", handle_health)

    return app


def main():
    setup_logging()
    logger.info(f"Starting Ramadan status API on port {API_PORT}...")
    web.run_app(init_app(), host="0.0.0.0", port=API_PORT)


if __name__ == "__main__":
    main()
