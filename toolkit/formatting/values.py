"""Plain-text value formatters shared by every destination.

These assume well-typed input; they do not guard against negative sizes
or nonsense dates.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

_SIZE_UNITS = ("B", "KB", "MB", "GB")
_BOOLEAN_PRESETS = {
    "yes/no": ("Yes", "No"),
    "enabled/disabled": ("Enabled", "Disabled"),
    "included/excluded": ("Included", "Excluded"),
}


def format_number(
    value: float,
    min_fraction_digits: int | None = None,
    max_fraction_digits: int | None = None,
) -> str:
    """Group thousands with commas, en-US style (``1,234.5``).

    Defaults match the usual locale formatter: up to three fraction digits,
    trailing zeros dropped.
    """
    min_digits = 0 if min_fraction_digits is None else min_fraction_digits
    max_digits = 3 if max_fraction_digits is None else max_fraction_digits
    max_digits = max(max_digits, min_digits)

    text = _fixed(value, max_digits)
    if max_digits > min_digits and "." in text:
        whole, frac = text.split(".")
        frac = frac.rstrip("0").ljust(min_digits, "0")
        text = f"{whole}.{frac}" if frac else whole
    if text.startswith("-") and text.strip("-0.,") == "":
        text = text[1:]
    return text


def format_bytes(size: float, decimals: int = 1) -> str:
    """Render a byte count with a 1024-based unit, capped at GB."""
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{_fixed(size, decimals)} {_SIZE_UNITS[unit]}"


def _fixed(value: float, decimals: int) -> str:
    """Grouped fixed-point text; ties round away from zero, en-US style."""
    exact = Decimal(str(value)).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return f"{exact:,.{decimals}f}"


def format_size(size: float) -> str:
    return format_bytes(size, 1)


def format_duration(ms: float) -> str:
    """Two largest units of a millisecond duration: ``2d 3h``, ``45m 12s``, ``30s``."""
    seconds = int(ms // 1000)
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def format_time_ago(value: datetime | str, now: datetime | None = None) -> str:
    when = as_datetime(value)
    if now is None:
        now = datetime.now(timezone.utc) if when.tzinfo else datetime.now()
    minutes = int((now - when).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days} day{'' if days == 1 else 's'} ago"
    if hours > 0:
        return f"{hours} hour{'' if hours == 1 else 's'} ago"
    if minutes > 0:
        return f"{minutes} minute{'' if minutes == 1 else 's'} ago"
    return "just now"


def format_boolean(value: bool, fmt: str = "yes/no") -> str:
    """Pick the true or false word of an ``X/Y`` format.

    The presets ``yes/no``, ``enabled/disabled`` and ``included/excluded``
    are capitalised; any other pair is upper-cased.
    """
    if fmt in _BOOLEAN_PRESETS:
        yes, no = _BOOLEAN_PRESETS[fmt]
        return yes if value else no
    true_word, _, false_word = fmt.partition("/")
    return (true_word if value else false_word).upper()


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{_fixed(value, decimals)}%"


def format_speed(value: float, unit: str, decimals: int = 1) -> str:
    return f"{_fixed(value, decimals)} {unit}/s"


def format_progress(current: float, total: float) -> str:
    return f"{format_number(current)}/{format_number(total)}"


def format_timestamp(value: datetime | str) -> str:
    return as_datetime(value).isoformat()


def format_date(value: datetime | date | str) -> str:
    """Human date. Date-only values and unparseable strings pass through as text."""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


def format_time_range(start: datetime | str, end: datetime | str) -> str:
    return f"{as_datetime(start):%H:%M:%S} - {as_datetime(end):%H:%M:%S}"


def truncate(text: str, max_length: int) -> str:
    return f"{text[:max_length]}..." if len(text) > max_length else text


def as_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
