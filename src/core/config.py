"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(os.environ.get("CALENDAR_DB_PATH", PROJECT_ROOT / "data" / "db" / "calendar.db"))

# =============================================================================
# GRID LAYOUT
# =============================================================================

HOUR_HEIGHT_PX = 60
MIN_EVENT_HEIGHT_PX = 30  # Keeps zero-length events clickable
HOURS = list(range(24))

MONTH_MAX_VISIBLE_EVENTS = 2
MONTH_MAX_STACK_LAYERS = 2
STACK_OFFSET_PX = 2
STACK_BASE_OPACITY = 0.5
STACK_OPACITY_STEP = 0.15

MOBILE_MAX_DOTS = 3
UPCOMING_LIMIT = 5

TOOLTIP_DISMISS_DELAY_S = 0.1

# =============================================================================
# EVENT STATUSES
# =============================================================================

EVENT_STATUSES = (
    "inquiry",
    "offer_to_send",
    "offer_sent",
    "offer_accepted",
    "in_preparation",
    "in_progress",
    "completed",
    "cancelled",
    "invoiced",
)
DEFAULT_EVENT_STATUS = "inquiry"

STATUS_LABELS = {
    "inquiry": "Zapytanie",
    "offer_to_send": "Oferta do wysłania",
    "offer_sent": "Oferta wysłana",
    "offer_accepted": "Oferta zaakceptowana",
    "in_preparation": "W przygotowaniu",
    "in_progress": "W trakcie",
    "completed": "Zrealizowany",
    "cancelled": "Anulowany",
    "invoiced": "Zafakturowany",
}
UNKNOWN_STATUS_LABEL = "Nieznany status"

STATUS_COLORS = {
    "inquiry": "#3B82F6",
    "offer_to_send": "#6366F1",
    "offer_sent": "#A855F7",
    "offer_accepted": "#22C55E",
    "in_preparation": "#EAB308",
    "in_progress": "#8B5CF6",
    "completed": "#10B981",
    "cancelled": "#EF4444",
    "invoiced": "#d3bb73",
}
FALLBACK_STATUS_COLOR = "#6B7280"

# =============================================================================
# COLORS
# =============================================================================

ACCENT_COLOR = "#d3bb73"
MEETING_COLOR = "#FFFFFF"
MEETING_CATEGORY_NAME = "Spotkanie"

NO_CLIENT_LABEL = "Brak klienta"
MISSING_VALUE_LABEL = "Brak"

# =============================================================================
# LOCALE
# =============================================================================

CALENDAR_LOCALE = os.environ.get("CALENDAR_LOCALE", "pl").lower()

MONTH_NAMES = {
    "pl": [
        "styczeń", "luty", "marzec", "kwiecień", "maj", "czerwiec",
        "lipiec", "sierpień", "wrzesień", "październik", "listopad", "grudzień",
    ],
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
}
# Polish dates use the genitive form ("10 marca 2025")
MONTH_NAMES_GENITIVE = {
    "pl": [
        "stycznia", "lutego", "marca", "kwietnia", "maja", "czerwca",
        "lipca", "sierpnia", "września", "października", "listopada", "grudnia",
    ],
    "en": MONTH_NAMES["en"],
}
MONTH_NAMES_SHORT = {
    "pl": ["sty", "lut", "mar", "kwi", "maj", "cze", "lip", "sie", "wrz", "paź", "lis", "gru"],
    "en": ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
}
WEEKDAY_NAMES = {
    "pl": ["poniedziałek", "wtorek", "środa", "czwartek", "piątek", "sobota", "niedziela"],
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
}
WEEKDAY_NAMES_SHORT = {
    "pl": ["Pon", "Wt", "Śr", "Czw", "Pt", "Sob", "Nie"],
    "en": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
}

# =============================================================================
# PERMISSIONS
# =============================================================================

PERMISSION_EVENTS_MANAGE = "events_manage"
PERMISSION_ADMIN = "admin"
EVENT_CREATE_PERMISSIONS = {PERMISSION_EVENTS_MANAGE, PERMISSION_ADMIN}

# =============================================================================
# API CONFIGURATION
# =============================================================================

CALENDAR_API_KEY = os.environ.get("CALENDAR_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
API_VERSION = "1.0.0"
