import os
from dotenv import load_dotenv

load_dotenv()

# Hijri adjustment override (пусто = таблицы по региону)
HIJRI_OFFSET = os.getenv("HIJRI_OFFSET", "")
HIJRI_TABLES_PATH = os.getenv("HIJRI_TABLES_PATH", "")

# Home region: для этих стран сначала спрашиваем сервис официальных объявлений
HOME_REGIONS = [x.strip().upper() for x in os.getenv("HOME_REGIONS", "BD").split(",") if x.strip()]

# External calendar services
ALADHAN_BASE_URL = os.getenv("ALADHAN_BASE_URL", "https://api.aladhan.com/v1")
ANNOUNCEMENT_API_URL = os.getenv("ANNOUNCEMENT_API_URL", "")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
STATUS_TIMEOUT_SECONDS = float(os.getenv("STATUS_TIMEOUT_SECONDS", "8"))

# Cache
STATUS_CACHE_TTL_HOURS = float(os.getenv("STATUS_CACHE_TTL_HOURS", "6"))
TIMETABLE_CACHE_TTL_HOURS = float(os.getenv("TIMETABLE_CACHE_TTL_HOURS", "24"))
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "500"))

# Defaults (Dhaka)
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "Asia/Dhaka")
DEFAULT_LATITUDE = 23.8103
DEFAULT_LONGITUDE = 90.4125
DEFAULT_LOCATION_LABEL = "ঢাকা, বাংলাদেশ"

# HTTP API
API_PORT = int(os.getenv("API_PORT", "8080"))

# Logging
LOG_PATH = os.getenv("LOG_PATH", "./logs/ramadan_status.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
