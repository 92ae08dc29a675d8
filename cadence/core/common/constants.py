"""Scheduling constants."""

from datetime import timedelta

# Fire time searches stop once they pass this year
YEAR_TO_GIVE_UP_SCHEDULING_AT = 2099

REPEAT_INDEFINITELY = -1

DEFAULT_MISFIRE_THRESHOLD = timedelta(seconds=60)

DEFAULT_GROUP = "DEFAULT"

DEFAULT_PRIORITY = 5

# Number of periods the nth-included-day trigger scans before giving up
DEFAULT_NEXT_FIRE_CUTOFF_INTERVAL = 12
