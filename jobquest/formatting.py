"""Display helpers shared by every job card: deadline, salary, posted time, status."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from jobquest.models import Salary

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
}


class DeadlineBucket(str, Enum):
    EXPIRED = "expired"
    TODAY = "today"
    ONE_DAY = "one_day"
    URGENT = "urgent"
    SOON = "soon"
    NORMAL = "normal"
    LATER = "later"


@dataclass(frozen=True)
class DeadlineInfo:
    text: str
    bucket: DeadlineBucket
    is_expired: bool = False
    is_urgent: bool = False


def _local(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.astimezone()


def parse_timestamp(value: str | datetime | date | None, tz=None) -> datetime | None:
    """ISO-8601 string (``Z`` suffix allowed), date or datetime; None if unusable.

    Naive values are read in ``tz`` (local time when omitted).
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz) if tz is not None else parsed.astimezone()
    return parsed


def _month_day(d: datetime) -> str:
    return f"{d.strftime('%b')} {d.day}"


def classify_deadline(deadline: str | datetime | date | None, now: datetime | None = None) -> DeadlineInfo | None:
    """Bucket an application deadline relative to ``now``.

    Day counts are calendar days in ``now``'s timezone. A deadline earlier
    than ``now`` is expired even on the same day.
    """
    now = _local(now or datetime.now().astimezone())
    d = parse_timestamp(deadline, tz=now.tzinfo)
    if d is None:
        return None
    d = d.astimezone(now.tzinfo)

    if d < now:
        return DeadlineInfo("Expired", DeadlineBucket.EXPIRED, is_expired=True)

    days = (d.date() - now.date()).days
    if days == 0:
        return DeadlineInfo("Today", DeadlineBucket.TODAY, is_urgent=True)
    if days == 1:
        return DeadlineInfo("1 day left", DeadlineBucket.ONE_DAY, is_urgent=True)
    if days <= 3:
        return DeadlineInfo(f"{days} days left", DeadlineBucket.URGENT, is_urgent=True)
    if days <= 7:
        return DeadlineInfo(f"{days} days left", DeadlineBucket.SOON)
    if days <= 30:
        return DeadlineInfo(f"{days} days left", DeadlineBucket.NORMAL)

    text = _month_day(d)
    if d.year != now.year:
        text += f", {d.year}"
    return DeadlineInfo(f"Until {text}", DeadlineBucket.LATER)


def format_money(amount: float, currency: str = "USD") -> str:
    code = (currency or "USD").upper()
    whole = int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    return f"{symbol}{whole:,}"


def format_salary(salary: Salary | None) -> str | None:
    """Range text, or None when neither bound is a positive number."""
    if salary is None:
        return None
    low = salary.min if salary.min and salary.min > 0 else None
    high = salary.max if salary.max and salary.max > 0 else None
    if low is None and high is None:
        return None
    if low is not None and high is not None:
        return f"{format_money(low, salary.currency)} - {format_money(high, salary.currency)}"
    if low is not None:
        return f"From {format_money(low, salary.currency)}"
    return f"Up to {format_money(high, salary.currency)}"


def time_ago(ts: str | datetime | None, now: datetime | None = None) -> str:
    now = _local(now or datetime.now().astimezone())
    then = parse_timestamp(ts, tz=now.tzinfo)
    if then is None:
        return "Recently posted"

    seconds = (now - then).total_seconds()
    minutes = int(seconds // 60)
    if minutes <= 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} minutes ago"
    hours = minutes // 60
    if hours < 24:
        return "1 hour ago" if hours == 1 else f"{hours} hours ago"
    days = hours // 24
    if days == 1:
        return "1 day ago"
    if days < 30:
        return f"{days} days ago"
    months = days // 30
    return "1 month ago" if months == 1 else f"{months} months ago"


def format_date(ts: str | datetime | None, fallback: str = "-") -> str:
    d = parse_timestamp(ts)
    if d is None:
        return fallback
    return f"{_month_day(d)}, {d.year}"


def status_label(status: str) -> str:
    """``interview_scheduled`` -> ``Interview Scheduled``."""
    return " ".join(w.capitalize() for w in (status or "").replace("_", " ").split())


def job_type_label(job_type: str) -> str:
    return " ".join(w.capitalize() for w in (job_type or "").replace("-", " ").split())
