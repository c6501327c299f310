"""Read server-provided retry delays from response headers"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Checked in order, first value that parses wins
RETRY_HINT_HEADERS = ("Retry-After", "X-RateLimit-Reset")

# Digits are always a relative delay, also for X-RateLimit-Reset. Servers that
# send an epoch timestamp there get a very long wait, bounded by the overall timeout.
_SECONDS_PATTERN = re.compile(r"^\d+$")


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    # Plain dicts are case-sensitive, requests' CaseInsensitiveDict is not
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def _parse_http_date(value: str, now: datetime) -> float:
    timestamp = parsedate_to_datetime(value)
    if timestamp is None:
        raise ValueError(f"not an HTTP-date: {value!r}")
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return (timestamp - now).total_seconds()


def read_retry_hint(
    headers: Mapping[str, str], now: Optional[datetime] = None
) -> Optional[float]:
    """Get the retry delay suggested by the server

    A value made only of digits is a number of seconds. Any other value is
    read as an HTTP-date and the hint is the time left until that date, which
    can be negative if the date is already past.

    Args:
        headers: Response headers
        now: Current time (defaults to ``datetime.now(timezone.utc)``)

    Returns:
        Delay in seconds, or None if no header holds a usable value
    """
    if now is None:
        now = datetime.now(timezone.utc)

    for name in RETRY_HINT_HEADERS:
        value = _get_header(headers, name)
        if value is None:
            continue
        value = value.strip()
        if _SECONDS_PATTERN.match(value):
            return float(value)
        try:
            return _parse_http_date(value, now)
        except (TypeError, ValueError, IndexError) as e:
            logger.debug(f"Ignoring unparsable {name} header {value!r}: {e}")
            continue
    return None
