"""
Date tokens used to match flight designators against "today".

Flight numbers and callsigns are matched heuristically against short
calendar tokens (day, month/day pairs, month and weekday prefixes).
"""

from datetime import datetime

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

WEEKDAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)


def build_date_patterns(now: datetime) -> tuple[str, ...]:
    """
    Derive the date pattern set for the given (frozen) run time.

    Args:
        now: Run timestamp; its local calendar fields are used

    Returns:
        Ordered, de-duplicated tuple of uppercase tokens:
        DD, MMDD, DDMM, month[:2], month[:3], weekday[:2], weekday[:3]
    """
    day = f"{now.day:02d}"
    month = f"{now.month:02d}"
    month_name = MONTH_NAMES[now.month - 1]
    weekday_name = WEEKDAY_NAMES[now.weekday()]

    candidates = [
        day,
        month + day,
        day + month,
        month_name[:2],
        month_name[:3],
        weekday_name[:2],
        weekday_name[:3],
    ]

    # dict preserves first-seen order
    return tuple(dict.fromkeys(token.upper() for token in candidates))


def matching_patterns(text: str, patterns: tuple[str, ...]) -> list[str]:
    """Return the patterns that occur in text (case-insensitive)."""
    haystack = text.upper()
    return [p for p in patterns if p in haystack]


__all__ = ["MONTH_NAMES", "WEEKDAY_NAMES", "build_date_patterns", "matching_patterns"]
