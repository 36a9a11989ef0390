"""Shared constants for the API and the client core."""

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

# Minimum characters for a patient search query
MIN_SEARCH_LENGTH = 2

# Query keys holding per-patient medical data. Every patient context switch
# must treat all of these as stale. Matched exactly, never by prefix.
MEDICAL_DATA_CATEGORIES: frozenset[str] = frozenset(
    {
        "/api/medications",
        "/api/medication-logs",
        "/api/medication-logs/today",
        "/api/medication-history",
        "/api/tests",
        "/api/appointments",
        "/api/notifications",
        "/api/prescriptions",
        "/api/vital-signs/blood-pressure",
        "/api/vital-signs/glucose",
        "/api/vital-signs/heart-rate",
        "/api/vital-signs/temperature",
        "/api/vital-signs/weight",
    }
)

# Client routes
OVERVIEW_ROUTE = "/visao-geral"
HOME_ROUTE = "/home"
