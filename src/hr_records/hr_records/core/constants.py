"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""
from .enums import Role

DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100
DEFAULT_SESSION_DAYS = 7

MAX_DOCUMENT_BYTES = 2 * 1024 * 1024
MAX_PHOTO_BYTES = 2 * 1024 * 1024
MAX_TRAVEL_DOCUMENT_BYTES = 5 * 1024 * 1024
MAX_TRAVEL_DOCUMENTS = 5
MAX_SCHEDULE_IMPORT_BYTES = 10 * 1024 * 1024

DOCUMENT_EXTENSIONS = frozenset({"pdf", "doc", "docx"})
PHOTO_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp"})
TRAVEL_DOCUMENT_EXTENSIONS = frozenset({"pdf", "doc", "docx", "jpg", "jpeg", "png"})
# .xls (BIFF) workbooks are not readable by openpyxl
SCHEDULE_IMPORT_EXTENSIONS = frozenset({"xlsx", "csv"})

# Travel order full-day rules (hours).
FULL_DAY_TRAVEL_HOURS = 5
FULL_DAY_COMBINED_HOURS = 8
SHORT_OFFICE_RETURN_HOURS = 3
EARLY_DEPARTURE_HOUR = 9
LATE_RETURN_HOUR = 15

FORCE_APPROVED = "force_approved"
FORCE_APPROVE_DEFAULT_REMARKS = "Force approved by admin"

# Client side
SEARCH_DEBOUNCE_SECONDS = 0.3
TOAST_SECONDS = 3.0
DEFAULT_API_TIMEOUT = 15

# Roles allowed to create, edit, decide and delete HR records.
MANAGER_ROLES = frozenset({Role.SUPERADMIN, Role.HRD})

TRANSPORTATION_TYPES = (
    "Company Vehicle",
    "Public Transportation",
    "Personal Vehicle",
    "Airplane",
    "Train",
    "Bus",
    "Others",
)
