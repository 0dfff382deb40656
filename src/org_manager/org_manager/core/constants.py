"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ASSET_CODE_PREFIX = "AST"
ASSET_CODE_PADDING = 5

# Optimistic-lock retries for asset quantity writes.
DEFAULT_ASSET_WRITE_RETRIES = 3

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 1000
DEFAULT_LIST_LIMIT = 500

# Work schedule defaults, overridable through the settings table.
DEFAULT_CHECK_IN_TIME = "09:00"
DEFAULT_CHECK_OUT_TIME = "17:00"
DEFAULT_CHECK_IN_LEVERAGE_MINUTES = 15
DEFAULT_CHECK_OUT_LEVERAGE_MINUTES = 10
DEFAULT_WORKING_HOURS_PER_DAY = 8.0

# Device sync defaults (ZKTeco terminals).
DEFAULT_DEVICE_PORT = 4370
DEFAULT_DEVICE_TIMEOUT_SECONDS = 5
DEFAULT_POLL_SECONDS = 30
