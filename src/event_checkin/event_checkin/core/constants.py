"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_STORE_KEY = "event_checkin_data"

MIN_WALKIN_QUANTITY = 1
MAX_WALKIN_QUANTITY = 10

WALKIN_ID_PREFIX = "WALKIN"
IMPORT_ID_PREFIX = "IMP"
WALKIN_ID_MAX_ATTEMPTS = 1000

CLEAR_ALL_CONFIRMATION = "DELETE"
