"""
Race card extractor module for the season calendar page.
Reads the rendered page markup and turns every race card into a RaceCard.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from bs4 import BeautifulSoup
try:
    import pandas as pd  # type: ignore
except Exception:  # pragma: no cover
    pd = None  # type: ignore

from ..models import RaceCard
from ..utils.config import config
from .date_range_parser import parse_date_range

logger = logging.getLogger(__name__)


class RaceCardExtractor:
    """Extracts race cards from a calendar page snapshot.

    Each call to ``extract`` re-reads the markup it is given; nothing is cached
    between calls.
    """

    def __init__(self, season_year: int, selectors: Optional[Dict] = None):
        self.season_year = season_year
        self.selectors = dict(config.SELECTORS)
        if selectors:
            self.selectors.update(selectors)
        self.excluded_types = {t.upper() for t in self.selectors.get("excluded_types", [])}

    def extract(self, markup: str) -> List[RaceCard]:
        """
        Extract cards in document order.

        Args:
            markup: Rendered page HTML (e.g. driver.page_source)

        Returns:
            List of RaceCard; cards with an unparseable date keep interval=None
        """
        soup = BeautifulSoup(markup or "", "html.parser")
        nodes = soup.select(self.selectors["card"])
        cards: List[RaceCard] = []
        dropped_types = dropped_empty = 0
        marker = self.selectors["current_marker"].upper()

        for index, node in enumerate(nodes):
            badges = self._badge_texts(node)
            card_type = self._card_type(badges)
            if card_type is not None:
                dropped_types += 1
                continue

            title = self._extract_title(node)
            date_text = self._extract_date_text(node)
            if not title and not date_text:
                dropped_empty += 1
                continue

            cards.append(RaceCard(
                identifier=index,
                title=title,
                raw_date_text=date_text,
                interval=parse_date_range(date_text, self.season_year),
                is_current=marker in badges,
                card_type=next((b for b in badges if b != marker), None),
            ))

        unparsed = sum(1 for c in cards if c.interval is None)
        logger.info(
            "Extracted %d cards from %d nodes (unparsed dates=%d, excluded types=%d, empty=%d)",
            len(cards), len(nodes), unparsed, dropped_types, dropped_empty,
        )
        return cards

    def _extract_title(self, node) -> str:
        # Card variants use different title markup
        title_el = node.select_one(self.selectors["title"])
        title = title_el.get_text(" ", strip=True) if title_el else ""
        if not title:
            fallback = node.select_one(self.selectors["title_fallback"])
            title = fallback.get_text(" ", strip=True) if fallback else ""
        return title

    def _extract_date_text(self, node) -> str:
        """Upcoming-style date label first, past-style label otherwise."""
        for key in ("date_upcoming", "date_past"):
            el = node.select_one(self.selectors[key])
            if el is not None:
                text = el.get_text(" ", strip=True)
                if text:
                    return text
        return ""

    def _badge_texts(self, node) -> List[str]:
        return [b.get_text(strip=True).upper() for b in node.select(self.selectors["badge"])]

    def _card_type(self, badges: List[str]) -> Optional[str]:
        """Return the excluded category a card belongs to, if any."""
        for badge in badges:
            if badge in self.excluded_types:
                return badge
        return None


def cards_to_dataframe(cards: List[RaceCard]):
    """
    Build a DataFrame with one row per card.

    Args:
        cards: Extracted race cards

    Returns:
        pandas DataFrame with ISO formatted dates
    """
    if pd is None:
        raise ImportError("pandas is required to build the cards DataFrame. Install the project dependencies")
    rows = []
    for card in cards:
        rows.append({
            "Index": card.identifier,
            "Title": card.title,
            "Date_Text": card.raw_date_text,
            "Start": card.interval.start.isoformat() if card.interval else None,
            "End": card.interval.end.isoformat() if card.interval else None,
            "Is_Current": card.is_current,
        })
    return pd.DataFrame(rows, columns=["Index", "Title", "Date_Text", "Start", "End", "Is_Current"])

