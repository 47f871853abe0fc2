from datetime import date, datetime, timedelta
import calendar
from utils.constants import DATE_FORMAT

# ── Display date format options ───────────────────────────────────────────────

DATE_FORMAT_OPTIONS = ["DD.MM.YYYY", "MM/DD/YYYY", "DD/MM/YYYY", "YYYY-MM-DD"]

_STRFTIME_MAP = {
    "MM/DD/YYYY": "%m/%d/%Y",
    "DD/MM/YYYY": "%d/%m/%Y",
    "YYYY-MM-DD": "%Y-%m-%d",
    "DD.MM.YYYY": "%d.%m.%Y",
}


def today() -> date:
    return date.today()


def today_str() -> str:
    return date.today().strftime(DATE_FORMAT)


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure."""
    if not date_str:
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    return None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def storage_date(date_str: str) -> str | None:
    """Canonical YYYY-MM-DD form of any accepted date string, or None if unparseable."""
    d = parse_date(date_str)
    return format_date(d) if d else None


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)


# ── Periods ───────────────────────────────────────────────────────────────────

def period_start(period: str, d: date) -> date:
    """First day of the day/week/month/year containing d. Weeks start on Monday."""
    if period == "day":
        return d
    if period == "week":
        return d - timedelta(days=d.weekday())
    if period == "month":
        return d.replace(day=1)
    if period == "year":
        return d.replace(month=1, day=1)
    raise ValueError(f"Unknown period: {period}")


def period_range(period: str, d: date) -> tuple[date, date]:
    """Inclusive (start, end) of the period containing d."""
    start = period_start(period, d)
    if period == "day":
        end = start
    elif period == "week":
        end = start + timedelta(days=6)
    elif period == "month":
        end = start.replace(day=calendar.monthrange(start.year, start.month)[1])
    else:
        end = start.replace(month=12, day=31)
    return start, end


def next_period_start(period: str, d: date) -> date:
    return period_range(period, d)[1] + timedelta(days=1)


def period_label(period: str, d: date) -> str:
    """Short axis label for a period start."""
    if period == "day":
        return d.strftime("%d.%m")
    if period == "week":
        return f"W{d.isocalendar()[1]:02d} {d.year}"
    if period == "month":
        return d.strftime("%b %Y")
    return str(d.year)


# ── Display formats ───────────────────────────────────────────────────────────

def format_display_date(date_str: str, fmt_key: str = "DD.MM.YYYY") -> str:
    """Convert a YYYY-MM-DD storage string to the user-facing display format."""
    if not date_str:
        return date_str
    d = parse_date(date_str)
    if d is None:
        return date_str
    return d.strftime(_STRFTIME_MAP.get(fmt_key, "%d.%m.%Y"))


def parse_display_date(display_str: str, fmt_key: str) -> date | None:
    """Parse a date in the given display format. Returns None on failure.

    Falls back to ISO 8601 parse if the display format doesn't match.
    """
    if not display_str:
        return None
    fmt = _STRFTIME_MAP.get(fmt_key, "%d.%m.%Y")
    try:
        return datetime.strptime(display_str.strip(), fmt).date()
    except ValueError:
        return parse_date(display_str)


def friendly_day(date_str: str) -> str:
    """'Today', 'Yesterday' or e.g. 'Mon, 14 Oct 2026' for group headers."""
    d = parse_date(date_str)
    if d is None:
        return date_str
    delta = (today() - d).days
    if delta == 0:
        return "Today"
    if delta == 1:
        return "Yesterday"
    return d.strftime("%a, %d %b %Y")
