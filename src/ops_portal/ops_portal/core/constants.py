"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_RECENT_LIMIT = 6
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_FINANCE_UNLOCK_MINUTES = 15
DEFAULT_MONTHLY_SERIES_LENGTH = 12

# Soft-duplicate tolerance when comparing final amounts.
DUPLICATE_AMOUNT_TOLERANCE = 0.01

# Alert thresholds for the finance dashboard.
MARGIN_ALERT_THRESHOLD = 20.0
PENDING_ALERT_RATIO = 0.3

DEFAULT_CURRENCY = "PEN"

# Flask session keys.
FINANCE_UNLOCK_SESSION_KEY = "finance_unlock"
AUTH_SESSION_KEY = "portal_auth_session"
