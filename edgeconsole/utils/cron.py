"""Cron helpers.

Schedules are stored and described but never evaluated: the next run time is
a placeholder one hour ahead of the reference time.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from edgeconsole.utils.timestamps import to_iso, utc_now

DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']

NEXT_RUN_PLACEHOLDER = timedelta(hours=1)


def describe_cron(expression: str) -> str:
    """Return a short human-readable phrase for common cron expressions."""
    parts = expression.split(' ')
    if len(parts) < 5:
        return expression

    minute, hour, day_of_month, month, day_of_week = parts[:5]

    if expression == '* * * * *':
        return 'Every minute'
    if expression == '0 * * * *':
        return 'Every hour'
    if expression == '0 0 * * *':
        return 'Daily at midnight'

    if minute.startswith('*/'):
        return f'Every {minute[2:]} minutes'

    if hour.startswith('*/') and minute == '0':
        return f'Every {hour[2:]} hours'

    if day_of_week != '*' and day_of_month == '*' and month == '*':
        if day_of_week.isdigit() and 0 <= int(day_of_week) <= 6:
            return f'Weekly on {DAY_NAMES[int(day_of_week)]} at {hour}:{minute.zfill(2)}'

    if day_of_month != '*' and day_of_week == '*':
        return f'Monthly on day {day_of_month} at {hour}:{minute.zfill(2)}'

    return expression


def next_run_time(expression: str, timezone: str = 'UTC', now: Optional[datetime] = None) -> str:
    """Placeholder next-run calculation; ignores the expression and timezone."""
    _ = (expression, timezone)
    return to_iso((now or utc_now()) + NEXT_RUN_PLACEHOLDER)
