"""Local calendar-day arithmetic for Momentum.

Dates travel as ``YYYY-MM-DD`` strings and always mean a local calendar
day. Nothing here converts through UTC, so a date never slides by one
around midnight. Weeks start on Sunday.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta


_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
WEEKDAY_SHORT = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
_MONTH_SHORT = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# Days away after which a return counts as "welcome back" rather than a new day.
WELCOME_BACK_AFTER_DAYS = 3


# ── Parsing & formatting ──────────────────────────────────────


def parse_local_date(s: str) -> date:
    """Parse 'YYYY-MM-DD' into a date. Raises ValueError on anything else."""
    m = _DATE_RE.match(s) if isinstance(s, str) else None
    if not m:
        raise ValueError(f"Invalid local date (expected YYYY-MM-DD): {s!r}")
    year, month, day = (int(g) for g in m.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ValueError(f"Invalid local date {s!r}: {e}") from e


def local_date_string(d: date | datetime) -> str:
    if isinstance(d, datetime):
        d = d.date()
    return d.isoformat()


def local_date_of(timestamp: str) -> str:
    """Local calendar day of an ISO timestamp.

    Offset-aware instants are converted to local time first; naive
    timestamps and bare dates are taken as already local.
    """
    ts = timestamp.strip()
    if _DATE_RE.match(ts):
        return ts
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    dt = datetime.fromisoformat(ts)
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.date().isoformat()


def _shift(s: str, days: int) -> str:
    return (parse_local_date(s) + timedelta(days=days)).isoformat()


# ── Day & week arithmetic ─────────────────────────────────────


def day_of_week(s: str) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (parse_local_date(s).weekday() + 1) % 7


def days_between(a: str, b: str) -> int:
    """Whole calendar days between two dates, order-independent."""
    return abs((parse_local_date(b) - parse_local_date(a)).days)


def is_next_day(earlier: str, later: str) -> bool:
    return (parse_local_date(later) - parse_local_date(earlier)).days == 1


def week_start(s: str) -> str:
    """The Sunday on or before the given date."""
    return _shift(s, -day_of_week(s))


def week_end(s: str) -> str:
    """The Saturday of the same week."""
    return _shift(s, 6 - day_of_week(s))


def week_dates(week_start_date: str) -> list[str]:
    return [_shift(week_start_date, i) for i in range(7)]


def next_week_start(week_start_date: str) -> str:
    return _shift(week_start_date, 7)


def prev_week_start(week_start_date: str) -> str:
    return _shift(week_start_date, -7)


def last_n_days(n: int, from_date: str) -> list[str]:
    """The n days ending at from_date (inclusive), oldest first."""
    return [_shift(from_date, -i) for i in range(n - 1, -1, -1)]


def last_n_week_starts(n: int, from_date: str) -> list[str]:
    """Week starts of the n weeks ending with the week of from_date, oldest first."""
    current = week_start(from_date)
    return [_shift(current, -7 * i) for i in range(n - 1, -1, -1)]


# ── Display helpers ───────────────────────────────────────────


def weekday_name(index: int) -> str:
    return WEEKDAY_NAMES[index]


def weekday_short(index: int) -> str:
    return WEEKDAY_SHORT[index]


def format_day_short(s: str) -> str:
    return WEEKDAY_SHORT[day_of_week(s)]


def _month_day(d: date) -> str:
    return f"{_MONTH_SHORT[d.month - 1]} {d.day}"


def format_date_for_display(s: str) -> str:
    """'Wed, Jan 15'."""
    return f"{format_day_short(s)}, {_month_day(parse_local_date(s))}"


def format_week_range(week_start_date: str) -> str:
    """'Jan 12 - Jan 18'."""
    start = parse_local_date(week_start_date)
    end = start + timedelta(days=6)
    return f"{_month_day(start)} - {_month_day(end)}"


# ── Fresh start ───────────────────────────────────────────────


def fresh_start_kind(last_open: str | None, today: str) -> str | None:
    """Which fresh-start banner to show when the app is opened on *today*.

    Returns "welcome_back", "new_week", "new_day", or None (first open,
    or already opened today).
    """
    if not last_open or last_open == today:
        return None
    gap = (parse_local_date(today) - parse_local_date(last_open)).days
    if gap > WELCOME_BACK_AFTER_DAYS:
        return "welcome_back"
    if week_start(last_open) != week_start(today):
        return "new_week"
    if gap >= 1:
        return "new_day"
    return None
