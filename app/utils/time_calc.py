"""
Worked-time arithmetic for the daily report worker table.

Clock strings are local ``HH:MM``. Shifts crossing midnight are not supported:
an end time before the start time yields no result.
"""
import re
from dataclasses import dataclass
from typing import Optional

_CLOCK_RE = re.compile(r'^\s*(\d{1,2}):(\d{2})\s*$')


@dataclass(frozen=True)
class LunchBreakPolicy:
    deduct_lunch_break: bool = True
    lunch_break_minutes: int = 60


DEFAULT_LUNCH_POLICY = LunchBreakPolicy()


def parse_clock(value) -> Optional[int]:
    """Minutes since midnight for an ``HH:MM`` string, or None"""
    if not value or not isinstance(value, str):
        return None
    match = _CLOCK_RE.match(value)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def compute_worked_minutes(start_time, end_time, no_lunch_break=False,
                           policy: Optional[LunchBreakPolicy] = None) -> Optional[int]:
    """Net worked minutes, or None when the times cannot be used"""
    policy = policy or DEFAULT_LUNCH_POLICY
    start = parse_clock(start_time)
    end = parse_clock(end_time)
    if start is None or end is None:
        return None

    diff = end - start
    if diff < 0:
        return None

    if policy.deduct_lunch_break and not no_lunch_break:
        diff = max(0, diff - policy.lunch_break_minutes)
    return diff


def format_duration(minutes: int) -> str:
    """7h05 -> '7:05', 8h -> '8:00'"""
    hours, rest = divmod(minutes, 60)
    if rest > 0:
        return f"{hours}:{rest:02d}"
    return f"{hours}:00"


def compute_worked_duration(start_time, end_time, no_lunch_break=False,
                            policy: Optional[LunchBreakPolicy] = None) -> str:
    """
    Net worked duration as printed in the report table.

    Returns an empty string for missing or unparsable times and for
    end-before-start; lunch break is deducted unless the worker skipped it.
    """
    minutes = compute_worked_minutes(start_time, end_time, no_lunch_break, policy)
    if minutes is None:
        return ''
    return format_duration(minutes)
