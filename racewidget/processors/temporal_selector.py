"""
Temporal selection of the last and next race cards.
Pure functions of the extracted cards and a reference instant.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, List, Union

from ..models import RaceCard, SelectionResult


def to_calendar_date(now: Union[date, datetime]) -> date:
    """Truncate a reference instant to a calendar date (UTC for aware datetimes)."""
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.date()
    return now


def select_last_and_next(cards: Iterable[RaceCard], now: Union[date, datetime]) -> SelectionResult:
    """
    Select the most recent past card and the soonest upcoming card.

    A card whose weekend ends today is still upcoming. A card flagged as
    current by the page replaces the date-derived next card.

    Args:
        cards: Extracted cards in document order
        now: Reference instant or date

    Returns:
        SelectionResult; either side may be None
    """
    today = to_calendar_date(now)
    cards = list(cards)
    dated: List[RaceCard] = [c for c in cards if c.interval is not None]

    past = [c for c in dated if c.interval.end < today]
    upcoming = [c for c in dated if c.interval.end >= today]

    # Equal end dates resolve to the later card in the document
    last = max(past, key=lambda c: (c.interval.end, c.identifier), default=None)
    next_card = min(upcoming, key=lambda c: (c.interval.start, c.identifier), default=None)

    flagged = [c for c in cards if c.is_current]
    if flagged:
        next_card = min(flagged, key=lambda c: c.identifier)

    return SelectionResult(last=last, next=next_card)
