"""
Live card query backed by a Selenium WebDriver.
Every call re-queries the page; element handles are never cached.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Union

from selenium.webdriver.common.by import By

from ..utils.config import config


class LiveCardQuery:
    """Query, scroll and screenshot race card elements on the live page."""

    def __init__(self, driver, card_selector: str = None):
        self.driver = driver
        self.card_selector = card_selector or config.SELECTORS["card"]

    def elements(self) -> List:
        """Current card elements in document order."""
        return self.driver.find_elements(By.CSS_SELECTOR, self.card_selector)

    def scroll_into_view(self, element) -> None:
        self.driver.execute_script(
            "arguments[0].scrollIntoView({behavior: 'auto', block: 'center'});", element
        )

    def capture(self, element, path: Union[str, Path]) -> bool:
        """
        Screenshot an element's visual bounds to a PNG file.

        Returns:
            True when the file was written
        """
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return bool(element.screenshot(str(path)))
