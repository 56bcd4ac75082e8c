"""
Browser utilities for loading and preparing the calendar page.
"""

import logging
import os
import time
from typing import Optional

from selenium.webdriver.chrome.options import Options

from .config import config

logger = logging.getLogger(__name__)


def setup_chrome_options(headless: Optional[bool] = None) -> Options:
    """
    Setup Chrome options for rendering and screenshotting the calendar.

    Images stay enabled since the cards are captured visually.

    Args:
        headless: Override for the configured headless flag

    Returns:
        Configured Chrome options
    """
    settings = config.BROWSER_SETTINGS
    if headless is None:
        headless = settings["headless"]

    chrome_options = Options()
    if headless:
        chrome_options.add_argument("--headless=new")
    chrome_options.add_argument("--no-sandbox")
    chrome_options.add_argument("--disable-setuid-sandbox")
    chrome_options.add_argument("--disable-dev-shm-usage")
    chrome_options.add_argument("--disable-gpu")
    chrome_options.add_argument("--hide-scrollbars")
    chrome_options.add_argument(f"--window-size={settings['window_size']}")
    chrome_options.add_argument(f"--user-agent={settings['user_agent']}")
    chrome_options.add_argument("--disable-blink-features=AutomationControlled")
    chrome_options.add_experimental_option("excludeSwitches", ["enable-automation"])
    chrome_options.add_experimental_option('useAutomationExtension', False)

    prefs = {
        "profile.default_content_setting_values": {
            "popups": 2,  # Block popups
            "geolocation": 2,  # Block location sharing
            "notifications": 2,  # Block notifications
        },
    }
    chrome_options.add_experimental_option("prefs", prefs)

    return chrome_options


def create_driver(headless: Optional[bool] = None):
    """Create a Chrome driver, preferring a system chromedriver."""
    from selenium import webdriver
    from selenium.webdriver.chrome.service import Service

    chrome_options = setup_chrome_options(headless)
    # Prefer system-installed chromedriver with optional CHROMEDRIVER override
    driver_path = os.environ.get("CHROMEDRIVER")
    if not driver_path:
        for p in [
            "/usr/bin/chromedriver",
            "/usr/local/bin/chromedriver",
        ]:
            if os.path.exists(p):
                driver_path = p
                break
    if driver_path and os.path.exists(driver_path):
        service = Service(driver_path)
    else:
        # Fallback to webdriver-manager auto install
        from webdriver_manager.chrome import ChromeDriverManager
        service = Service(ChromeDriverManager().install())

    driver = webdriver.Chrome(service=service, options=chrome_options)
    driver.set_page_load_timeout(config.BROWSER_SETTINGS["page_load_timeout"])
    return driver


def prepare_new_documents(driver, theme: str) -> None:
    """
    Seed the theme and hide webdriver before any page script runs.

    Args:
        driver: Selenium Chrome driver
        theme: "light" or "dark", stored as sessionStorage["dark-mode"]
    """
    script = (
        "try { sessionStorage.setItem('dark-mode', %r); } catch (e) {}\n"
        "Object.defineProperty(navigator, 'webdriver', {get: () => false});"
    ) % theme
    driver.execute_cdp_cmd("Page.addScriptToEvaluateOnNewDocument", {"source": script})


def wait_for_cards(driver, timeout: Optional[float] = None) -> int:
    """
    Wait until at least one race card is rendered.

    Returns:
        Number of cards present, 0 on timeout
    """
    from selenium.common.exceptions import TimeoutException
    from selenium.webdriver.common.by import By
    from selenium.webdriver.support.ui import WebDriverWait

    timeout = timeout or config.BROWSER_SETTINGS["card_wait_timeout"]
    selector = config.SELECTORS["card"]
    try:
        WebDriverWait(driver, timeout, poll_frequency=0.5).until(
            lambda d: len(d.find_elements(By.CSS_SELECTOR, selector)) > 0
        )
    except TimeoutException:
        logger.warning("No race cards rendered within %ss", timeout)
        return 0
    return len(driver.find_elements(By.CSS_SELECTOR, selector))


def click_accept_in_page(driver) -> bool:
    """
    Click an accept button rendered in the page itself (OneTrust banner).

    Returns:
        True if a button was clicked
    """
    from selenium.common.exceptions import WebDriverException
    from selenium.webdriver.common.by import By

    for selector in config.CONSENT_SETTINGS["page_accept_selectors"]:
        try:
            buttons = [b for b in driver.find_elements(By.CSS_SELECTOR, selector) if b.is_displayed()]
            if buttons:
                buttons[0].click()
                logger.info("Clicked accept button via %s", selector)
                return True
        except WebDriverException as e:
            logger.debug("Accept via %s failed: %s", selector, e)
    return False


def click_accept_in_consent_frame(driver) -> bool:
    """
    Click the accept button inside the consent iframe.

    Returns:
        True if a button was clicked
    """
    from selenium.common.exceptions import WebDriverException
    from selenium.webdriver.common.by import By
    from selenium.webdriver.support import expected_conditions as EC
    from selenium.webdriver.support.ui import WebDriverWait

    consent = config.CONSENT_SETTINGS
    timeout = config.BROWSER_SETTINGS["consent_timeout"]

    frames = driver.find_elements(By.CSS_SELECTOR, consent["iframe_selector"])
    if not frames:
        frames = [
            f for f in driver.find_elements(By.TAG_NAME, "iframe")
            if consent["iframe_url_fragment"] in (f.get_attribute("src") or "")
        ]
    if not frames:
        logger.info("Consent iframe not found.")
        return False

    try:
        driver.switch_to.frame(frames[0])
        locators = [(By.CSS_SELECTOR, s) for s in consent["accept_selectors"]]
        locators += [(By.XPATH, x) for x in consent["accept_xpaths"]]
        for by, value in locators:
            try:
                button = WebDriverWait(driver, timeout).until(EC.element_to_be_clickable((by, value)))
                button.click()
                logger.info("Clicked accept button via %s", value)
                return True
            except WebDriverException:
                continue
        logger.info("Accept button not found inside consent iframe.")
        return False
    except WebDriverException as e:
        logger.warning("Consent frame handling failed: %s", e)
        return False
    finally:
        driver.switch_to.default_content()


def remove_consent_containers(driver) -> bool:
    """Remove consent overlay containers from the DOM."""
    from selenium.common.exceptions import WebDriverException

    consent = config.CONSENT_SETTINGS
    selector = f"{consent['container_selector']}, {consent['page_banner_selector']}"
    try:
        driver.execute_script(
            "document.querySelectorAll(arguments[0]).forEach(e => e.remove());", selector
        )
        time.sleep(0.3)
        logger.info("Removed consent containers (fallback).")
        return True
    except WebDriverException as e:
        logger.warning("Failed to remove consent containers: %s", e)
        return False


def dismiss_consent(driver) -> bool:
    """Accept the consent banner, or remove it if it cannot be accepted."""
    if click_accept_in_page(driver) or click_accept_in_consent_frame(driver):
        time.sleep(config.BROWSER_SETTINGS["ui_settle_delay"])
        # The overlay container can linger after accepting
        remove_consent_containers(driver)
        return True
    return remove_consent_containers(driver)


def nudge_scroll(driver, offset: int = 400, pause: float = 0.4) -> None:
    """Scroll down and back to trigger lazy-loaded card content."""
    from selenium.common.exceptions import WebDriverException

    try:
        driver.execute_script("window.scrollTo(0, arguments[0]);", offset)
        time.sleep(pause)
        driver.execute_script("window.scrollTo(0, 0);")
        time.sleep(pause)
    except WebDriverException as e:
        logger.debug("Scroll nudge failed: %s", e)
