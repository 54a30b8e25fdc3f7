"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

POSITION_NAME_MIN = 3
POSITION_NAME_MAX = 100
POSITION_RANK_MIN = 1
POSITION_RANK_MAX = 10
POSITION_MAX_OCCUPANTS_LIMIT = 10
DESCRIPTION_MAX = 500
NOTES_MAX = 500

PERIOD_YEAR_MIN = 2000
PERIOD_YEAR_MAX = 2100

EVENT_TITLE_MIN = 3
EVENT_TITLE_MAX = 200
EVENT_LOCATION_MIN = 3
EVENT_LOCATION_MAX = 300
EVENT_REASON_MIN = 10
EVENT_REASON_MAX = 1000

DEFAULT_EVENT_LIST_LIMIT = 100
MAX_EVENT_LIST_LIMIT = 500
UPCOMING_EVENTS_LIMIT = 5
RECENT_EVENTS_DAYS = 30

DEFAULT_TX_RETRY_ATTEMPTS = 3
DEFAULT_TX_RETRY_MIN_WAIT = 0.05
DEFAULT_TX_RETRY_MAX_WAIT = 1.0
