"""Delivery estimates expressed in business days."""

from datetime import date, timedelta

WINDOW_START_DAYS = 3
WINDOW_END_DAYS = 5
ESTIMATE_DAYS = 4


def add_business_days(start: date, days: int) -> date:
    current = start
    remaining = days
    while remaining > 0:
        current += timedelta(days=1)
        if current.weekday() < 5:
            remaining -= 1
    return current


def format_day(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def delivery_window(start: date) -> str:
    """Human-readable range, e.g. ``"March 4, 2026 - March 6, 2026"``."""
    first = add_business_days(start, WINDOW_START_DAYS)
    last = add_business_days(start, WINDOW_END_DAYS)
    return f"{format_day(first)} - {format_day(last)}"


def estimated_delivery(start: date) -> date:
    return add_business_days(start, ESTIMATE_DAYS)
