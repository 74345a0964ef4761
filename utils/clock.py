import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
WEEKEND = (5, 6)  # Saturday, Sunday


def parse_hhmm(value: str) -> int:
    """'09:30' -> 570. Raises ValueError for anything but zero-padded 24h HH:MM."""
    if not isinstance(value, str):
        raise ValueError(f"Invalid time {value!r}. Use HH:MM")
    match = _HHMM.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time {value!r}. Use HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_day(value: str) -> date:
    # calendar date as written; never shifted through UTC
    if not isinstance(value, str):
        raise ValueError(f"Invalid date {value!r}. Use YYYY-MM-DD")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date {value!r}. Use YYYY-MM-DD")


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND


def br_date(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def at_minute(day: date, minutes: int) -> datetime:
    return datetime(day.year, day.month, day.day, minutes // 60, minutes % 60)


def local_now(tz_name=None) -> datetime:
    """Naive wall-clock time of the office; sessions are stored in the same terms."""
    if not tz_name:
        return datetime.now()
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
