"""
Element resolver for re-locating a selected race card on the live page.

The card was chosen from one markup snapshot; the live page may have been
re-rendered since. Resolution walks an ordered chain of strategies against a
fresh element list:

  1. exact     - element text contains both title and date label
  2. partial   - element text contains title or date label
  3. position  - element at the card's original index
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Iterator, List, Optional, Tuple

from selenium.common.exceptions import WebDriverException

from ..models import RaceCard

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def iter_element_texts(elements: List) -> Iterator[Tuple[int, object, str]]:
    """Yield (index, element, text), skipping elements that fail on access."""
    for index, element in enumerate(elements):
        try:
            text = normalize_text(element.text)
        except WebDriverException as e:
            logger.debug("Skipping element %d: %s", index, e.__class__.__name__)
            continue
        yield index, element, text


class ElementResolver:
    """Resolves a RaceCard to a live element handle."""

    def __init__(self):
        self.strategies: List[Tuple[str, Callable]] = [
            ("exact", self._exact_match),
            ("partial", self._partial_match),
            ("position", self._positional_match),
        ]

    def resolve(self, live_query, card: RaceCard):
        """
        Find the live element for a card.

        Args:
            live_query: Object with an ``elements()`` method returning the
                current card elements in document order
            card: Card selected from an earlier snapshot

        Returns:
            Element handle, or None when no strategy matched
        """
        try:
            elements = list(live_query.elements())
        except WebDriverException as e:
            logger.warning("Could not list live cards: %s", e)
            return None

        title = normalize_text(card.title)
        date_text = normalize_text(card.raw_date_text)

        for name, strategy in self.strategies:
            element = strategy(elements, card, title, date_text)
            if element is not None:
                logger.debug("Resolved %s via %s match", card.describe(), name)
                return element

        logger.info("No live element for %s among %d cards", card.describe(), len(elements))
        return None

    def _exact_match(self, elements, card, title, date_text):
        if not title or not date_text:
            return None
        for _, element, text in iter_element_texts(elements):
            if title in text and date_text in text:
                return element
        return None

    def _partial_match(self, elements, card, title, date_text):
        if not title and not date_text:
            return None
        for _, element, text in iter_element_texts(elements):
            if (title and title in text) or (date_text and date_text in text):
                return element
        return None

    def _positional_match(self, elements, card, title, date_text):
        if 0 <= card.identifier < len(elements):
            return elements[card.identifier]
        return None
