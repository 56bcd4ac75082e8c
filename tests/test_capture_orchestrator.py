"""
Capture retry loop tests with fake live cards (no browser, no real sleeps).
"""
import sys
from pathlib import Path

# Ensure project root is on sys.path when running the test directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from fakes import FakeElement, FakeLiveQuery, detached
from racewidget.capture.capture_orchestrator import CaptureOrchestrator
from racewidget.models import RaceCard


RECORD = RaceCard(identifier=7, title="Qatar", raw_date_text="28 - 30 Nov")


class Recorder:
    """Collects sleep calls and drives a fake monotonic clock."""

    def __init__(self):
        self.sleeps = []
        self.now = 0.0

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def clock(self):
        return self.now


def _orchestrator(query, recorder=None, **kwargs):
    recorder = recorder or Recorder()
    kwargs.setdefault("retries", 3)
    kwargs.setdefault("settle_delay", 0.5)
    kwargs.setdefault("backoff_delay", 1.0)
    return CaptureOrchestrator(query, sleep=recorder.sleep, clock=recorder.clock, **kwargs)


def test_absent_record_is_skipped(tmp_path):
    query = FakeLiveQuery([FakeElement("Qatar 28 - 30 Nov")])
    outcome = _orchestrator(query).capture("last", None, tmp_path / "last.png")
    assert outcome.status == "skipped"
    assert outcome.ok
    assert outcome.summary() == "skipped: no such record"
    assert query.calls == 0


def test_saves_on_first_round(tmp_path):
    element = FakeElement("Qatar\n28 - 30 Nov")
    query = FakeLiveQuery([element])
    recorder = Recorder()
    outcome = _orchestrator(query, recorder).capture("next", RECORD, tmp_path / "next.png")
    assert outcome.status == "saved"
    assert outcome.path == tmp_path / "next.png"
    assert (tmp_path / "next.png").exists()
    assert query.scrolled == [element]
    assert recorder.sleeps == [0.5]
    assert [a.outcome for a in outcome.attempts] == ["success"]


def test_not_found_after_all_rounds(tmp_path):
    # Neither text matches and index 7 is beyond the live list
    query = FakeLiveQuery([FakeElement("Brazil 07 - 09 Nov")])
    recorder = Recorder()
    outcome = _orchestrator(query, recorder).capture("next", RECORD, tmp_path / "next.png")
    assert outcome.status == "failed"
    assert outcome.reason == "elementNotFound"
    assert outcome.summary() == "failed: elementNotFound"
    assert len(outcome.attempts) == 3
    assert query.calls == 3
    assert recorder.sleeps == [1.0, 2.0]
    assert not (tmp_path / "next.png").exists()


def test_re_resolves_every_round(tmp_path):
    stale = FakeElement("Qatar 28 - 30 Nov", screenshot_error=detached())
    fresh = FakeElement("Qatar 28 - 30 Nov")
    query = FakeLiveQuery([stale], [fresh])
    outcome = _orchestrator(query).capture("next", RECORD, tmp_path / "next.png")
    assert outcome.status == "saved"
    assert [a.outcome for a in outcome.attempts] == ["captureFailed", "success"]
    assert query.captured[0][0] is fresh


def test_capture_failure_reported_after_budget(tmp_path):
    element = FakeElement("Qatar 28 - 30 Nov", screenshot_error=OSError("disk full"))
    query = FakeLiveQuery([element])
    outcome = _orchestrator(query, retries=2).capture("last", RECORD, tmp_path / "last.png")
    assert outcome.status == "failed"
    assert outcome.reason == "captureFailed"
    assert outcome.attempts[-1].error == "disk full"
    assert len(outcome.attempts) == 2


def test_unwritten_screenshot_counts_as_failure(tmp_path):
    query = FakeLiveQuery([FakeElement("Qatar 28 - 30 Nov", writes=False)])
    outcome = _orchestrator(query, retries=1).capture("last", RECORD, tmp_path / "last.png")
    assert outcome.reason == "captureFailed"


def test_deadline_stops_further_rounds(tmp_path):
    query = FakeLiveQuery([FakeElement("Brazil 07 - 09 Nov")])
    recorder = Recorder()
    # First round runs at t=0; the backoff before round 2 moves the clock past the deadline
    outcome = _orchestrator(query, recorder, deadline=0.5).capture("next", RECORD, tmp_path / "next.png")
    assert outcome.status == "failed"
    assert outcome.reason == "deadlineExceeded"
    assert len(outcome.attempts) == 1


def test_expired_deadline_makes_no_attempt(tmp_path):
    query = FakeLiveQuery([FakeElement("Qatar 28 - 30 Nov")])
    recorder = Recorder()
    recorder.now = 10.0
    outcome = _orchestrator(query, recorder, deadline=5.0).capture("next", RECORD, tmp_path / "next.png")
    assert outcome.reason == "deadlineExceeded"
    assert outcome.attempts == []
    assert query.calls == 0


def test_one_failure_does_not_block_the_other_capture(tmp_path):
    query = FakeLiveQuery([FakeElement("Qatar 28 - 30 Nov")])
    orchestrator = _orchestrator(query, retries=1)
    missing = RaceCard(identifier=9, title="Abu Dhabi", raw_date_text="05 - 07 Dec")
    failed = orchestrator.capture("next", missing, tmp_path / "next.png")
    saved = orchestrator.capture("last", RECORD, tmp_path / "last.png")
    assert failed.status == "failed"
    assert saved.status == "saved"


class DroppedDriverQuery(FakeLiveQuery):
    """Live query whose driver connection has gone away."""

    def elements(self):
        self.calls += 1
        raise ConnectionError("driver process gone")


class UnreadableElement(FakeElement):
    @property
    def text(self):
        raise ConnectionError("remote end closed")


def test_lookup_errors_outside_selenium_are_reported(tmp_path):
    query = DroppedDriverQuery([])
    outcome = _orchestrator(query, retries=2).capture("next", RECORD, tmp_path / "next.png")
    assert outcome.status == "failed"
    assert outcome.reason == "elementNotFound"
    assert outcome.attempts[-1].error == "driver process gone"
    assert query.calls == 2


def test_element_text_errors_are_reported(tmp_path):
    query = FakeLiveQuery([UnreadableElement("Qatar 28 - 30 Nov")])
    outcome = _orchestrator(query, retries=1).capture("next", RECORD, tmp_path / "next.png")
    assert outcome.status == "failed"
    assert outcome.reason == "elementNotFound"


def test_dropped_driver_does_not_block_the_other_capture(tmp_path):
    query = DroppedDriverQuery([])
    orchestrator = _orchestrator(query, retries=1)
    first = orchestrator.capture("next", RECORD, tmp_path / "next.png")
    second = orchestrator.capture("last", RECORD, tmp_path / "last.png")
    assert first.status == second.status == "failed"
    assert query.calls == 2


def test_backoff_is_cut_short_by_the_deadline(tmp_path):
    query = FakeLiveQuery([FakeElement("Brazil 07 - 09 Nov")])
    recorder = Recorder()
    outcome = _orchestrator(query, recorder, backoff_delay=10.0, deadline=3.0).capture(
        "next", RECORD, tmp_path / "next.png"
    )
    assert outcome.reason == "deadlineExceeded"
    assert recorder.sleeps == [3.0]


def test_no_backoff_once_deadline_has_passed(tmp_path):
    query = FakeLiveQuery([FakeElement("Brazil 07 - 09 Nov")])
    recorder = Recorder()

    def slow_lookup():
        recorder.now += 5.0
        return [FakeElement("Brazil 07 - 09 Nov")]

    query.elements = slow_lookup
    outcome = _orchestrator(query, recorder, deadline=2.0).capture("next", RECORD, tmp_path / "next.png")
    assert outcome.reason == "deadlineExceeded"
    assert recorder.sleeps == []
