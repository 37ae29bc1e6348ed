"""
Time and identifier helpers.

All stored timestamps are integer epoch-milliseconds. Identifiers are
time-based strings with a random alphanumeric suffix so that records
minted in the same millisecond (or by two writers at once) never collide.
"""

import datetime
import secrets
import string
import time

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_ms() -> int:
    """Current time as integer epoch-milliseconds."""
    return time.time_ns() // 1_000_000


def random_suffix(length: int) -> str:
    """Random lowercase alphanumeric string of the given length."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def mint_cookie_id(timestamp_ms: int, index: int | None = None) -> str:
    """
    Build a fresh cookie id.

    With an index (normalizing stored records):  "<ms>-<index>-<6 chars>"
    Without (creating a new cookie):             "<ms>-<9 chars>"
    """
    if index is None:
        return f"{timestamp_ms}-{random_suffix(9)}"
    return f"{timestamp_ms}-{index}-{random_suffix(6)}"


def to_iso_utc(timestamp_ms: int) -> str:
    """Render epoch-ms as ISO-8601 UTC with millisecond precision and `Z`."""
    moment = datetime.datetime.fromtimestamp(
        timestamp_ms / 1000, tz=datetime.timezone.utc,
    )
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
