"""
Lightweight smoke test for the pipeline plumbing (no browser, no network).

The page load step is replaced with a fixed calendar snapshot and the driver
with a fake that serves matching live elements.
"""
from datetime import datetime
import sys
from pathlib import Path

# Ensure project root is on sys.path when running the test directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from fakes import FakeDriver, FakeElement
from pipeline import RaceWidgetPipeline
from racewidget.utils.config import Config

CALENDAR = """
<main>
  <a class="group"><p class="typography-module_display-xl-bold__Gyl5W">Race A</p>
    <span class="typography-module_technical-xs-regular__-W0Gs">1 - 2 Mar</span></a>
  <a class="group"><p class="typography-module_display-xl-bold__Gyl5W">Race B</p>
    <span class="typography-module_technical-m-bold__JDsxP">5 - 6 Apr</span></a>
</main>
"""


def _pipeline(monkeypatch, tmp_path, now):
    monkeypatch.setattr(Config, "RAW_DATA_DIR", tmp_path / "raw")
    monkeypatch.setitem(Config.CAPTURE_SETTINGS, "settle_delay", 0)
    monkeypatch.setitem(Config.CAPTURE_SETTINGS, "backoff_delay", 0)
    pipeline = RaceWidgetPipeline(season_year=2025, output_dir=tmp_path / "out", now=now)
    monkeypatch.setattr(pipeline, "_load_page", lambda driver, theme: CALENDAR)
    return pipeline


def test_run_theme_captures_last_and_next(monkeypatch, tmp_path):
    pipeline = _pipeline(monkeypatch, tmp_path, datetime(2025, 3, 10))
    driver = FakeDriver([FakeElement("Race A\n1 - 2 Mar"), FakeElement("Race B\n5 - 6 Apr")])

    outcomes = {o.label: o for o in pipeline.run_theme(driver, "light")}

    assert outcomes["light/next"].status == "saved"
    assert outcomes["light/last"].status == "saved"
    assert (tmp_path / "out" / "f1_next_race_wt.png").exists()
    assert (tmp_path / "out" / "f1_last_race_wt.png").exists()
    assert len(list((tmp_path / "raw").glob("race_cards_*_wt.csv"))) == 1


def test_run_theme_reports_skip_and_failure_separately(monkeypatch, tmp_path):
    pipeline = _pipeline(monkeypatch, tmp_path, datetime(2025, 2, 1))
    # Live page no longer shows Race A and has fewer cards than the snapshot
    driver = FakeDriver([])

    outcomes = {o.label: o for o in pipeline.run_theme(driver, "dark")}

    assert outcomes["dark/last"].summary() == "skipped: no such record"
    assert outcomes["dark/next"].summary() == "failed: elementNotFound"
