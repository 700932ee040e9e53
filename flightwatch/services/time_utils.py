"""
Time helpers - HH:MM extraction and entered-vs-scheduled mismatch detection
"""

import re
from datetime import datetime
from typing import Optional


_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?$")

DEFAULT_MISMATCH_THRESHOLD = 30


def extract_time(value: Optional[str]) -> Optional[str]:
    """
    Extract the wall-clock HH:MM from a provider time value

    Accepts plain "HH:MM" (optionally with seconds) or an ISO datetime such as
    "2026-01-18T15:15:00+08:00". The local time printed in the value is kept;
    no timezone conversion is applied, so airport-local times stay local.
    """
    if not value:
        return None
    value = value.strip()

    match = _HHMM_RE.match(value)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.strftime("%H:%M")


def to_minutes(value: Optional[str]) -> Optional[int]:
    """Minutes since midnight for an HH:MM string, None when unparseable"""
    if not value:
        return None
    match = _HHMM_RE.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def has_time_mismatch(
    entered: Optional[str],
    scheduled: Optional[str],
    threshold_minutes: int = DEFAULT_MISMATCH_THRESHOLD
) -> bool:
    """
    True when entered and scheduled times differ by more than the threshold

    A missing or unparseable side cannot be assessed and never counts as a
    mismatch.
    """
    entered_minutes = to_minutes(entered)
    scheduled_minutes = to_minutes(scheduled)
    if entered_minutes is None or scheduled_minutes is None:
        return False
    return abs(entered_minutes - scheduled_minutes) > threshold_minutes


def format_time_difference(entered: Optional[str], scheduled: Optional[str]) -> str:
    """
    Signed human-readable difference, scheduled minus entered

    Examples:
        format_time_difference("18:10", "15:15") -> "-2h 55m"
        format_time_difference("10:00", "12:15") -> "+2h 15m"
        format_time_difference("10:00", "09:15") -> "-45m"
    """
    entered_minutes = to_minutes(entered)
    scheduled_minutes = to_minutes(scheduled)
    if entered_minutes is None or scheduled_minutes is None:
        return ""

    diff = scheduled_minutes - entered_minutes
    if diff == 0:
        return "0m"

    sign = "+" if diff > 0 else "-"
    hours, mins = divmod(abs(diff), 60)
    if hours:
        return f"{sign}{hours}h {mins}m"
    return f"{sign}{mins}m"
