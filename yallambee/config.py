# Environment-driven settings shared across modules.
# Values are read at call time so tests and deployments can override them via env vars.
import os
from typing import List, Optional


# Basic truthy parser for env flags (1, true, yes, on)
def truthy(val: Optional[str]) -> bool:
    if val is None:
        return False
    return val.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def to_int(val: Optional[str], default: int) -> int:
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


# Split a comma-separated env value into trimmed, non-empty items
def split_csv(env_value: Optional[str]) -> List[str]:
    if not env_value:
        return []
    return [item.strip() for item in env_value.split(",") if item.strip()]


def cancelled_bookings_block() -> bool:
    """
    Whether 'Cancelled' bookings still occupy their dates.

    Defaults to True so a cancelled booking keeps blocking the slot; set
    CANCELLED_BOOKINGS_BLOCK=false to release cancelled dates.
    """
    return truthy(os.getenv("CANCELLED_BOOKINGS_BLOCK", "true"))


def admin_emails() -> List[str]:
    # Accounts registered with one of these emails are created as admins
    return [e.lower() for e in split_csv(os.getenv("YALLAMBEE_ADMIN_EMAILS"))]


def booking_lock_ttl_ms() -> int:
    return to_int(os.getenv("BOOKING_LOCK_TTL_MS"), 5000)
