"""Canonical pipeline entry point for the race widget capture.

Usage:
    python pipeline.py [--season 2025] [--theme light|dark|all]

For each theme this orchestrates:
 1. Page load (theme seeded, consent dismissed, cards rendered)
 2. Race card extraction from the rendered markup
 3. Last / next race selection
 4. Element capture of both selected cards (independent outcomes)
 5. Side-by-side widget composite + summary report
"""
from __future__ import annotations

import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from racewidget.capture.capture_orchestrator import CaptureOrchestrator
from racewidget.capture.element_resolver import ElementResolver
from racewidget.capture.live_query import LiveCardQuery
from racewidget.extractors.race_card_extractor import RaceCardExtractor, cards_to_dataframe
from racewidget.models import STATUS_FAILED, CaptureOutcome, SelectionResult
from racewidget.processors.image_compositor import combine_side_by_side
from racewidget.processors.temporal_selector import select_last_and_next
from racewidget.utils import browser_utils
from racewidget.utils.config import config
from racewidget.utils.file_utils import ensure_directory, existing_files, remove_stale_outputs, save_to_csv
from racewidget.utils.logging_utils import get_logger, configure_root_logging


class RaceWidgetPipeline:
    """Main pipeline orchestrator."""

    def __init__(
        self,
        season_year: Optional[int] = None,
        output_dir: Optional[Path] = None,
        headless: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> None:
        configure_root_logging()
        self.logger = get_logger(__name__)
        self.season_year = season_year or config.season_year()
        self.output_dir = Path(output_dir or config.OUTPUT_DIR)
        self.headless = headless
        self.now = now
        self.results: Dict[str, List[CaptureOutcome]] = {}

    # --- Public API -----------------------------------------------------------------
    def run_full_pipeline(self, themes: Optional[List[str]] = None) -> bool:
        self.logger.info("=" * 60)
        self.logger.info("RACE WIDGET CAPTURE STARTED (season %s)", self.season_year)
        self.logger.info("=" * 60)
        start_time = datetime.now()
        themes = themes or list(config.THEMES)
        ensure_directory(str(self.output_dir))
        ok = True

        try:
            driver = browser_utils.create_driver(self.headless)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("Browser startup failed: %s", exc, exc_info=True)
            return False

        try:
            for theme in themes:
                suffix = config.THEMES[theme]
                try:
                    outcomes = self.run_theme(driver, theme)
                except Exception as exc:  # noqa: BLE001
                    self.logger.error("Error capturing %s theme: %s", theme, exc, exc_info=True)
                    self.results[suffix] = []
                    ok = False
                    continue
                self.results[suffix] = outcomes
                if any(o.status == STATUS_FAILED for o in outcomes):
                    ok = False
                self._combine(suffix)

            self._generate_summary_report()
            duration = datetime.now() - start_time
            self.logger.info("Pipeline finished in %s (all artifacts ok=%s)", duration, ok)
            return ok
        finally:
            driver.quit()
            self.logger.info("Browser closed")
            self.logger.info("=" * 60)
            self.logger.info("PIPELINE EXECUTION COMPLETED")
            self.logger.info("=" * 60)

    def run_theme(self, driver, theme: str) -> List[CaptureOutcome]:
        """Load the calendar in one theme and capture last/next cards."""
        suffix = config.THEMES[theme]
        last_path = config.get_file_path("last_race", suffix, output_dir=self.output_dir)
        next_path = config.get_file_path("next_race", suffix, output_dir=self.output_dir)
        widget_path = config.get_file_path("race_widget", suffix, output_dir=self.output_dir)
        removed = remove_stale_outputs([str(last_path), str(next_path), str(widget_path)])
        if removed:
            self.logger.info("[%s] removed previous outputs: %s", theme, ", ".join(removed))

        markup = self._load_page(driver, theme)
        selection = self._select(markup, suffix)

        deadline = time.monotonic() + config.CAPTURE_SETTINGS["overall_timeout"]
        orchestrator = CaptureOrchestrator(
            LiveCardQuery(driver),
            resolver=ElementResolver(),
            deadline=deadline,
        )
        # Each capture reports its own outcome; neither blocks the other
        return [
            orchestrator.capture(f"{theme}/next", selection.next, next_path),
            orchestrator.capture(f"{theme}/last", selection.last, last_path),
        ]

    # --- Internal Steps -------------------------------------------------------------
    def _load_page(self, driver, theme: str) -> str:
        self.logger.info("Step 1 [%s]: Loading calendar ...", theme)
        settle = config.BROWSER_SETTINGS["ui_settle_delay"]
        browser_utils.prepare_new_documents(driver, theme)
        driver.get("about:blank")
        driver.get(config.calendar_url(self.season_year))

        count = browser_utils.wait_for_cards(driver)
        self.logger.info("[%s] initial card count: %d", theme, count)
        time.sleep(settle)
        browser_utils.dismiss_consent(driver)
        browser_utils.nudge_scroll(driver)
        if count == 0:
            count = browser_utils.wait_for_cards(driver)
            if count == 0:
                raise RuntimeError("Calendar cards never rendered; page structure may have changed")
        return driver.page_source

    def _select(self, markup: str, suffix: str) -> SelectionResult:
        self.logger.info("Step 2: Extracting race cards ...")
        cards = RaceCardExtractor(self.season_year).extract(markup)
        try:
            cards_file = config.get_file_path("race_cards", suffix)
            save_to_csv(cards_to_dataframe(cards), str(cards_file))
            self.logger.info("Race cards saved: %d entries | File=%s", len(cards), cards_file)
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("Could not save race cards CSV: %s", exc)

        self.logger.info("Step 3: Selecting last/next race ...")
        now = self.now or datetime.now(timezone.utc)
        selection = select_last_and_next(cards, now)
        self.logger.info("next: %s", selection.next.describe() if selection.next else "NONE")
        self.logger.info("last: %s", selection.last.describe() if selection.last else "NONE")
        return selection

    def _combine(self, suffix: str) -> Optional[Path]:
        self.logger.info("Step 4 [%s]: Combining widget image ...", suffix)
        return combine_side_by_side(
            config.get_file_path("last_race", suffix, output_dir=self.output_dir),
            config.get_file_path("next_race", suffix, output_dir=self.output_dir),
            config.get_file_path("race_widget", suffix, output_dir=self.output_dir),
        )

    def _generate_summary_report(self) -> None:
        self.logger.info("Step 5: Generating summary report ...")
        try:
            lines = []
            for suffix, outcomes in self.results.items():
                if not outcomes:
                    lines.append(f"[{suffix}] failed: theme run aborted")
                for outcome in outcomes:
                    lines.append(f"[{suffix}] {outcome.label}: {outcome.summary()}")
            for line in lines:
                self.logger.info("  %s", line)
            produced = existing_files([
                str(config.get_file_path(kind, suffix, output_dir=self.output_dir))
                for suffix in self.results
                for kind in ("last_race", "next_race", "race_widget")
            ])
            self.logger.info("Output files: %s", ", ".join(produced) or "none")
            summary_file = config.LOGS_DIR / f"summary_{datetime.now().strftime('%Y-%m-%d')}.txt"
            with summary_file.open("w", encoding="utf-8") as fh:
                fh.write("RACE WIDGET CAPTURE SUMMARY\n" + "=" * 40 + "\n\n")
                fh.write(f"Season: {self.season_year}\n\n")
                for line in lines:
                    fh.write(line + "\n")
            self.logger.info("Summary report saved: %s", summary_file)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("Summary generation error: %s", exc, exc_info=True)


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Race Widget Capture")
    parser.add_argument("--season", type=int, default=None, help="Season year (default from config)")
    parser.add_argument("--theme", choices=["light", "dark", "all"], default="all", help="Theme(s) to capture")
    parser.add_argument("--output-dir", dest="output_dir", default=None, help="Directory for captured images")
    parser.add_argument("--no-headless", dest="headless", action="store_false", default=None,
                        help="Show the browser window")
    args = parser.parse_args()

    themes = list(config.THEMES) if args.theme == "all" else [args.theme]
    pipeline = RaceWidgetPipeline(season_year=args.season, output_dir=args.output_dir, headless=args.headless)
    success = pipeline.run_full_pipeline(themes=themes)
    if success:
        print("\nCapture completed. See logs & output/.")
    else:
        print("\nCapture incomplete. Check logs for details.")
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
