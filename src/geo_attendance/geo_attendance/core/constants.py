"""Geofence, punctuality and schedule defaults."""

from datetime import time

EARTH_RADIUS_KM = 6371.0
DEFAULT_TOLERANCE_METERS = 100
NEAREST_ZONE_MAX_METERS = 1000
UNIDENTIFIED_LOCATION = "Ubicación no identificada"

EARLY_ALERT_MAX_MINUTES = 5
YELLOW_MAX_MINUTES = 15

DEFAULT_PENDING_TTL_SECONDS = 300
DEFAULT_REPORT_DAYS = 30

# Job titles containing this marker get the early schedule.
SECURITY_TITLE_MARKER = "Seguridad"
SECURITY_SCHEDULE = (time(8, 0), time(17, 0))
STANDARD_SCHEDULE = (time(9, 0), time(17, 30))
