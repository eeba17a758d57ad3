"""Constants and defaults.

Note: Grace windows are overridable from the settings module; these are the fallbacks.
"""

DEFAULT_PRE_WINDOW_GRACE_MINUTES = 15
DEFAULT_POST_WINDOW_GRACE_MINUTES = 30
DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_TIMEZONE = "Asia/Manila"
DEFAULT_LIST_LIMIT = 200

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
