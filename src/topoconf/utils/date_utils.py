import re
from datetime import timedelta
from typing import Union

_DURATION_RE = re.compile(r"^(\d+)([smh])$")
_UNITS = {"s": "seconds", "m": "minutes", "h": "hours"}


def parse_duration(value: Union[str, int, float, timedelta]) -> timedelta:
    """
    Parses a Prometheus-style duration such as '30s', '5m' or '1h'.

    Plain numbers are taken as seconds.

    Raises:
        ValueError: If the string does not match '<int><s|m|h>'.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    match = _DURATION_RE.match(str(value).strip().lower())
    if not match:
        raise ValueError(f"Invalid duration format: '{value}'. Use 's', 'm', or 'h'.")

    amount, unit = int(match.group(1)), match.group(2)
    return timedelta(**{_UNITS[unit]: amount})


def format_duration(delta: timedelta) -> str:
    """Formats a timedelta with the largest whole unit, e.g. 90s -> '90s', 600s -> '10m'."""
    seconds = int(delta.total_seconds())
    if seconds and seconds % 3600 == 0:
        return f"{seconds // 3600}h"
    if seconds and seconds % 60 == 0:
        return f"{seconds // 60}m"
    return f"{seconds}s"
