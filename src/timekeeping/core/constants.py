"""Constants and defaults."""

DEFAULT_LUNCH_LIMIT_MINUTES = 60
DEFAULT_OTHER_LIMIT_MINUTES = 15
DEFAULT_OTHER_WARNING_MINUTES = 20

DEFAULT_TICK_SECONDS = 1.0
DEFAULT_REQUIRED_DAILY_HOURS = 8
DEFAULT_HISTORY_LIMIT = 30

SECONDS_PER_HOUR = 3600
