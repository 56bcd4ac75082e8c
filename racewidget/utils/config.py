"""
Configuration settings for the race widget capture pipeline.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional


class Config:
    """Configuration class for pipeline settings."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    DATA_DIR = PROJECT_ROOT / "data"
    RAW_DATA_DIR = DATA_DIR / "raw"
    OUTPUT_DIR = PROJECT_ROOT / "output"
    LOGS_DIR = PROJECT_ROOT / "logs"
    CONFIG_DIR = PROJECT_ROOT / "config"

    # Season
    SEASON_YEAR = 2025
    SEASON_ENV_VAR = "RACEWIDGET_SEASON"

    # URLs
    CALENDAR_URL = "https://www.formula1.com/en/racing/{season}.html"

    # Card markup on the calendar page
    SELECTORS = {
        "card": "a.group",
        "title": "p.typography-module_display-xl-bold__Gyl5W",
        "title_fallback": "p",
        "date_upcoming": (
            "span.typography-module_technical-m-bold__JDsxP, "
            "span.typography-module_lg_technical-l-bold__d8tzL"
        ),
        "date_past": "span.typography-module_technical-xs-regular__-W0Gs",
        "badge": "span.typography-module_body-2-xs-bold__M03Ei",
        "current_marker": "NEXT RACE",
        "excluded_types": ["TESTING"],
    }

    # Consent overlay
    CONSENT_SETTINGS = {
        # OneTrust banner rendered in the page itself
        "page_accept_selectors": [
            "#onetrust-accept-btn-handler",
            "button[id^='onetrust-accept']",
        ],
        "page_banner_selector": "#onetrust-banner-sdk, #onetrust-consent-sdk",
        "iframe_url_fragment": "consent.formula1.com",
        "iframe_selector": "iframe[id^='sp_message_iframe_']",
        "container_selector": "div[id^='sp_message_container_']",
        "accept_selectors": [
            'button[aria-label="Accept all"]',
            'button[title="Accept all"]',
            'button[aria-label="Accept"]',
            'button[title="Accept"]',
        ],
        "accept_xpaths": [
            "//button[contains(normalize-space(.),'Accept all')]",
            "//button[contains(translate(normalize-space(.),'ABCDEFGHIJKLMNOPQRSTUVWXYZ','abcdefghijklmnopqrstuvwxyz'),'accept')]",
        ],
    }

    # Capture settings
    CAPTURE_SETTINGS = {
        "retries": 3,
        "settle_delay": 0.5,  # Seconds
        "backoff_delay": 1.0,  # Seconds, multiplied by the round number
        "overall_timeout": 120,  # Seconds for all captures of one run
    }

    # Browser settings
    BROWSER_SETTINGS = {
        "headless": True,
        "window_size": "1280,900",
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/123 Safari/537.36"
        ),
        "page_load_timeout": 60,  # Seconds
        "card_wait_timeout": 30,  # Seconds
        "consent_timeout": 2.5,  # Seconds per selector
        "ui_settle_delay": 0.8,  # Seconds
    }

    # Theme name -> file suffix
    THEMES = {
        "light": "wt",
        "dark": "bk",
    }

    # File naming patterns
    FILE_PATTERNS = {
        "last_race": "f1_last_race_{suffix}.png",
        "next_race": "f1_next_race_{suffix}.png",
        "race_widget": "f1_racewidget_{suffix}.png",
        "race_cards": "race_cards_{date}_{suffix}.csv",
        "logs": "pipeline_{date}.log"
    }

    # Logging settings
    LOGGING_SETTINGS = {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    }

    @classmethod
    def ensure_directories(cls):
        """Ensure all required directories exist."""
        directories = [
            cls.DATA_DIR,
            cls.RAW_DATA_DIR,
            cls.OUTPUT_DIR,
            cls.LOGS_DIR,
            cls.CONFIG_DIR
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_file_path(cls, file_type: str, suffix: str = "", date_str: str = None,
                      output_dir: Optional[Path] = None) -> Path:
        """
        Get file path for a specific file type.

        Args:
            file_type: Type of file (last_race, next_race, race_widget, race_cards, logs)
            suffix: Theme suffix for theme-specific files
            date_str: Date string for date-based files
            output_dir: Override for the image output directory

        Returns:
            Path object for the file
        """
        if date_str is None:
            from datetime import datetime
            date_str = datetime.now().strftime("%Y-%m-%d")

        pattern = cls.FILE_PATTERNS.get(file_type, f"{file_type}_{{date}}_{{suffix}}")
        filename = pattern.format(date=date_str, suffix=suffix)

        if file_type in ["last_race", "next_race", "race_widget"]:
            return Path(output_dir or cls.OUTPUT_DIR) / filename
        elif file_type == "race_cards":
            return cls.RAW_DATA_DIR / filename
        elif file_type == "logs":
            return cls.LOGS_DIR / filename
        else:
            return cls.DATA_DIR / filename

    @classmethod
    def calendar_url(cls, season_year: int) -> str:
        return cls.CALENDAR_URL.format(season=season_year)

    @classmethod
    def season_year(cls) -> int:
        """
        Resolve the season year: environment, then custom config, then default.

        Returns:
            Season year as an integer
        """
        env_value = os.environ.get(cls.SEASON_ENV_VAR)
        if env_value:
            try:
                return int(env_value)
            except ValueError:
                print(f"Ignoring invalid {cls.SEASON_ENV_VAR}={env_value!r}")

        custom = cls.load_custom_config()
        if "season_year" in custom:
            try:
                return int(custom["season_year"])
            except (TypeError, ValueError):
                print(f"Ignoring invalid season_year in custom config: {custom['season_year']!r}")

        return cls.SEASON_YEAR

    @classmethod
    def load_custom_config(cls, config_file: str = "custom_config.json") -> Dict[str, Any]:
        """
        Load custom configuration from JSON file.

        Args:
            config_file: Name of the config file

        Returns:
            Dictionary with custom configuration
        """
        import json

        config_path = cls.CONFIG_DIR / config_file
        if config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    return json.load(f)
            except Exception as e:
                print(f"Error loading custom config: {e}")

        return {}


# Create default configuration instance
config = Config()

# Ensure directories exist on import
config.ensure_directories()
