"""Data models for race card extraction, selection and capture."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class DateInterval:
    """Calendar-date range of a race weekend. Inclusive on both ends."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Interval start {self.start} is after end {self.end}")


@dataclass(frozen=True)
class RaceCard:
    """One card extracted from a calendar snapshot.

    ``identifier`` is the card's position among the card nodes of the snapshot
    it was read from. It is only meaningful against that snapshot.
    """

    identifier: int
    title: str
    raw_date_text: str
    interval: Optional[DateInterval] = None
    is_current: bool = False
    card_type: Optional[str] = None

    def describe(self) -> str:
        return f"{self.title or '?'} ({self.raw_date_text or 'no date'})"


@dataclass(frozen=True)
class SelectionResult:
    """Selected last (most recent past) and next (upcoming or live) cards."""

    last: Optional[RaceCard] = None
    next: Optional[RaceCard] = None


# Per-round outcomes
ATTEMPT_SUCCESS = "success"
ATTEMPT_NOT_FOUND = "elementNotFound"
ATTEMPT_CAPTURE_FAILED = "captureFailed"

# Overall capture statuses
STATUS_SAVED = "saved"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"

# Failure reason beyond the per-round outcomes
REASON_DEADLINE = "deadlineExceeded"


@dataclass(frozen=True)
class CaptureAttempt:
    record: RaceCard
    attempt_number: int
    outcome: str
    error: Optional[str] = None


@dataclass
class CaptureOutcome:
    """Reported result of capturing one selected card."""

    label: str
    record: Optional[RaceCard]
    status: str
    reason: Optional[str] = None
    path: Optional[Path] = None
    attempts: List[CaptureAttempt] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in (STATUS_SAVED, STATUS_SKIPPED)

    def summary(self) -> str:
        if self.status == STATUS_SAVED:
            return f"saved {self.path}"
        if self.status == STATUS_SKIPPED:
            return "skipped: no such record"
        return f"failed: {self.reason}"
