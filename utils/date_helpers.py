import re
import time
from datetime import date, datetime
from utils.constants import DATE_FORMAT, MONTH_FORMAT, TIME_FORMAT

_MONTH_RE = re.compile(r"\d{4}-(0[1-9]|1[0-2])")
_TIME_RE = re.compile(r"([01]\d|2[0-3]):[0-5]\d")


def today_str() -> str:
    return date.today().strftime(DATE_FORMAT)


def now_time_str() -> str:
    return datetime.now().strftime(TIME_FORMAT)


def current_month_str() -> str:
    return date.today().strftime(MONTH_FORMAT)


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def parse_date(date_str: str) -> date | None:
    """Parse a strict YYYY-MM-DD string, returning None on failure."""
    if not date_str or not isinstance(date_str, str) or len(date_str) != 10:
        return None
    try:
        return datetime.strptime(date_str, DATE_FORMAT).date()
    except ValueError:
        return None


def is_valid_month(month_str: str) -> bool:
    """True for a zero-padded YYYY-MM token."""
    return isinstance(month_str, str) and bool(_MONTH_RE.fullmatch(month_str))


def is_valid_time(time_str: str) -> bool:
    """True for a zero-padded 24h HH:MM string."""
    return isinstance(time_str, str) and bool(_TIME_RE.fullmatch(time_str))


def parse_month(month_str: str) -> date | None:
    """Return the first day of the given YYYY-MM month string."""
    if not is_valid_month(month_str):
        return None
    return datetime.strptime(month_str, MONTH_FORMAT).date()


def format_month(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def month_bounds(month_str: str) -> tuple[str, str]:
    """Return the ("YYYY-MM-01", "YYYY-MM-31") string bound for a month.

    The upper bound is always the literal day 31: dates are compared as
    zero-padded strings, so every real day of the month sorts inside it.
    """
    return f"{month_str}-01", f"{month_str}-31"


def prev_month(month_str: str) -> str:
    d = parse_month(month_str)
    if d is None:
        raise ValueError(f"Invalid month: {month_str}")
    if d.month == 1:
        return format_month(d.replace(year=d.year - 1, month=12))
    return format_month(d.replace(month=d.month - 1))


def next_month(month_str: str) -> str:
    d = parse_month(month_str)
    if d is None:
        raise ValueError(f"Invalid month: {month_str}")
    if d.month == 12:
        return format_month(d.replace(year=d.year + 1, month=1))
    return format_month(d.replace(month=d.month + 1))


def friendly_month(month_str: str) -> str:
    """Convert YYYY-MM to e.g. 'February 2026'."""
    d = parse_month(month_str)
    if d is None:
        return month_str
    return d.strftime("%B %Y")


def format_display_date(date_str: str) -> str:
    """'2024-05-10' -> 'Fri, May 10'. Unparseable input is returned as-is."""
    d = parse_date(date_str)
    if d is None:
        return date_str
    return d.strftime("%a, %b ") + str(d.day)
