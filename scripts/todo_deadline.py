"""
Deadline parsing and human-readable time formatting.

Accepted deadline text:
    30m, 2h, 1d              relative to now (minutes, hours, days)
    2024-01-15 15:30         absolute date and time
    2024-01-15               absolute date, midnight
    01-15 15:30              current year
    01-15                    current year, midnight

All datetimes handed out are timezone-aware, in local time.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta

FORMAT_HINT = "Use formats like '2h', '1d', '2024-01-15' or '2024-01-15 15:30'"

RELATIVE_RE = re.compile(r"([0-9]+)([mhd])")

UNIT_SECONDS = {
    "m": 60,
    "h": 3600,
    "d": 86400,
}

# (shape, strptime format, has year); tried in this order
ABSOLUTE_FORMATS = (
    (re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}"), "%Y-%m-%d %H:%M", True),
    (re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}"), "%Y-%m-%d", True),
    (re.compile(r"[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}"), "%Y-%m-%d %H:%M", False),
    (re.compile(r"[0-9]{2}-[0-9]{2}"), "%Y-%m-%d", False),
)


class DeadlineParseError(ValueError):
    """Deadline text matched none of the accepted formats."""

    def __init__(self, text: str, reason: str | None = None):
        self.text = text
        self.reason = reason or f"unable to parse deadline format: {text}"
        super().__init__(f"{self.reason}. {FORMAT_HINT}")


def now_local() -> datetime:
    return datetime.now().astimezone()


def to_local(ts: datetime) -> datetime:
    """Attach the local zone to naive datetimes, convert aware ones."""
    return ts.astimezone()


def parse_deadline(text: str, now: datetime | None = None) -> datetime:
    """Parse deadline text into an aware local datetime.

    Raises DeadlineParseError when no format matches or the result does
    not fit in a local datetime.
    """
    now = to_local(now) if now is not None else now_local()

    match = RELATIVE_RE.fullmatch(text)
    if match:
        value, unit = int(match.group(1)), match.group(2)
        try:
            return now + timedelta(seconds=value * UNIT_SECONDS[unit])
        except OverflowError:
            raise DeadlineParseError(text, f"deadline too far in the future: {text}") from None

    for shape, fmt, has_year in ABSOLUTE_FORMATS:
        if not shape.fullmatch(text):
            continue
        candidate = text if has_year else f"{now.year:04d}-{text}"
        try:
            parsed = datetime.strptime(candidate, fmt)
        except ValueError:
            continue
        try:
            return to_local(parsed)
        except (OverflowError, ValueError):
            raise DeadlineParseError(text, f"deadline out of range: {text}") from None

    raise DeadlineParseError(text)


def _whole_hours(delta: timedelta) -> int:
    return int(delta.total_seconds() // 3600)


def format_deadline(
    deadline: datetime | None, hard: bool = False, now: datetime | None = None
) -> str:
    """Format a deadline relative to now, e.g. '1d', '! Overdue 3h', 'Soon'."""
    if deadline is None:
        return ""

    now = to_local(now) if now is not None else now_local()
    diff = to_local(deadline) - now
    prefix = "! " if hard else ""

    if diff < timedelta(0):
        total_hours = _whole_hours(-diff)
        days, hours = total_hours // 24, total_hours % 24
        if days > 0:
            return f"{prefix}Overdue {days}d"
        if hours > 0:
            return f"{prefix}Overdue {hours}h"
        return f"{prefix}Overdue"

    total_hours = _whole_hours(diff)
    days, hours = total_hours // 24, total_hours % 24
    if days > 0:
        return f"{prefix}{days}d"
    if hours > 0:
        return f"{prefix}{hours}h"
    return f"{prefix}Soon"


def is_overdue(deadline: datetime | None, now: datetime | None = None) -> bool:
    if deadline is None:
        return False
    now = to_local(now) if now is not None else now_local()
    return to_local(deadline) < now


def format_relative_age(ts: datetime, now: datetime | None = None) -> str:
    """Format elapsed time since ts as 'Nh', 'Nm' or 'now'."""
    now = to_local(now) if now is not None else now_local()
    elapsed = max(int((now - to_local(ts)).total_seconds()), 0)
    hours = elapsed // 3600
    minutes = (elapsed // 60) % 60
    if hours > 0:
        return f"{hours}h"
    if minutes > 0:
        return f"{minutes}m"
    return "now"


def format_timestamp(ts: datetime) -> str:
    return to_local(ts).strftime("%Y-%m-%d %H:%M")
