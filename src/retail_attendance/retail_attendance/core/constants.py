"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time
from decimal import Decimal

DEFAULT_TENANT = "default"

# Smart auto-checkout
AUTO_CHECKOUT_TIME = time(22, 0)
AUTO_CHECKOUT_REASON = "Automatic checkout - End of previous day"
AUTO_CHECKOUT_LOCATION_NOTE = "Auto-checkout - Location not captured"

# Penalty policy defaults
DEFAULT_HOURLY_PENALTY_RATE = Decimal("50")
DEFAULT_LEAVE_PENALTY_RATE = Decimal("500")
DEFAULT_LATE_ARRIVAL_THRESHOLD_MINUTES = 15
DEFAULT_EARLY_DEPARTURE_THRESHOLD_MINUTES = 15
DEFAULT_STANDARD_WORK_MINUTES = 8 * 60
DEFAULT_PAID_LEAVES_PER_MONTH = 2

SYSTEM_ACTOR = "system"
DEFAULT_LEAVE_TYPE = "personal"

# Persistence
DEFAULT_PERSISTENCE_RETRIES = 3
DEFAULT_PERSISTENCE_RETRY_DELAY = 0.2
DEFAULT_LOCK_TIMEOUT_SECONDS = 5.0
