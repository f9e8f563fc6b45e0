"""Application constants that never change across environments.

These are fixed domain facts (valid coordinate ranges, column limits,
upstream field names) that should never vary between dev/staging/prod.
Tunable values live in config.py.
"""
from decimal import Decimal

# ===== Geographic Constants =====
MIN_LATITUDE = Decimal("-90")
MAX_LATITUDE = Decimal("90")
MIN_LONGITUDE = Decimal("-180")
MAX_LONGITUDE = Decimal("180")

# ===== Location Constants =====
LOCATION_NAME_MAX_LENGTH = 200

# ===== Seed Data =====
# (latitude, longitude, name) inserted into an empty store on startup
DEFAULT_LOCATIONS = (
    (Decimal("52.2297"), Decimal("21.0122"), "Warsaw"),
    (Decimal("51.5074"), Decimal("-0.1278"), "London"),
    (Decimal("40.7128"), Decimal("-74.0060"), "New York"),
)

# ===== Open-Meteo Daily Series =====
OPEN_METEO_DAILY_FIELDS = (
    "temperature_2m_max",
    "temperature_2m_min",
    "weathercode",
    "windspeed_10m_max",
)

# ===== Geolocation =====
GEOLOCATION_STATUS_SUCCESS = "success"

# ===== Data Source Identifiers =====
SOURCE_OPEN_METEO = "open_meteo_api"
SOURCE_IP_API = "ip_api"
