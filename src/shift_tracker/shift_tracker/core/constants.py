"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MS_PER_HOUR = 60 * 60 * 1000

DEFAULT_HISTORY_LIMIT = 10
DEFAULT_ADMIN_PAGE_LIMIT = 50

MIN_PASSWORD_LENGTH = 6

DEFAULT_NOTIFY_MAX_ATTEMPTS = 3
DEFAULT_NOTIFY_RETRY_DELAY = 2.0
DEFAULT_NOTIFY_WORKERS = 2
