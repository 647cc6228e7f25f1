"""Parsing of short duration strings such as ``24h`` or ``30d``."""

import re
from datetime import timedelta

from content_importer.core.errors import ConfigurationError

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhdwy])\s*$", re.IGNORECASE)

_UNIT_SECONDS: dict[str, float] = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 60 * 60 * 24,
    "w": 60 * 60 * 24 * 7,
    "y": 60 * 60 * 24 * 365,
}

# Cache entries never expire
FOREVER = "*"


def parse_duration(value: str) -> timedelta | None:
    """Parse a duration string.

    Args:
        value: Number followed by one of s, m, h, d, w, y; or ``*``

    Returns:
        The duration, or None for ``*`` (no expiry)

    Raises:
        ConfigurationError: If the string is not a valid duration
    """
    if value.strip() == FOREVER:
        return None

    match = _DURATION_PATTERN.match(value)
    if not match:
        raise ConfigurationError(
            f"Invalid duration: {value!r}. Expected a number followed by "
            "s, m, h, d, w or y (e.g. 24h), or * for no expiry"
        )

    amount, unit = match.groups()
    return timedelta(seconds=float(amount) * _UNIT_SECONDS[unit.lower()])
