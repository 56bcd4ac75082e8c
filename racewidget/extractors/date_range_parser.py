"""
Date range parser for race card date labels.
Turns loosely formatted labels such as "28 - 30 Nov" or "30 Nov - 2 Dec"
into a calendar DateInterval for a known season year.
"""
from __future__ import annotations

import re
from datetime import date
from typing import List, Optional

from ..models import DateInterval

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_DASHES = re.compile(r"[-–—]")
_ALPHA_TOKEN = re.compile(r"^[A-Za-z]{3,}$")


def _tokenize(text: str) -> List[str]:
    return _DASHES.sub(" ", text).split()


def _month_number(token: str) -> Optional[int]:
    if not _ALPHA_TOKEN.match(token):
        return None
    return MONTHS.get(token[:3].lower())


def parse_date_range(text: Optional[str], season_year: int) -> Optional[DateInterval]:
    """
    Parse a card date label into a DateInterval.

    Args:
        text: Raw label, e.g. "28 - 30 Nov", "30 Nov - 2 Dec" or "7 Sep"
        season_year: Year every parsed date is placed in

    Returns:
        DateInterval, or None when the label has no day number or no month
    """
    if not text:
        return None

    tokens = _tokenize(text)
    days = [int(t) for t in tokens if t.isdecimal()]
    months = [m for m in (_month_number(t) for t in tokens) if m is not None]
    if not days or not months:
        return None

    distinct_months = list(dict.fromkeys(months))
    if len(distinct_months) == 1:
        # "day - day Month": the trailing month covers both days
        start_month = end_month = distinct_months[-1]
    else:
        start_month, end_month = distinct_months[0], distinct_months[-1]

    start_day = days[0]
    end_day = days[1] if len(days) > 1 else start_day

    try:
        start = date(season_year, start_month, start_day)
        end = date(season_year, end_month, end_day)
        if end < start:
            end = end.replace(year=season_year + 1)
    except ValueError:
        return None

    return DateInterval(start=start, end=end)
