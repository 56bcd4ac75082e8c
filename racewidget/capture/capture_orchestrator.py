"""
Capture orchestrator: resolve a selected card on the live page and screenshot it
with bounded retries. Failures are reported as CaptureOutcome values.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

from ..models import (
    ATTEMPT_CAPTURE_FAILED,
    ATTEMPT_NOT_FOUND,
    ATTEMPT_SUCCESS,
    REASON_DEADLINE,
    STATUS_FAILED,
    STATUS_SAVED,
    STATUS_SKIPPED,
    CaptureAttempt,
    CaptureOutcome,
    RaceCard,
)
from ..utils.config import config
from .element_resolver import ElementResolver

logger = logging.getLogger(__name__)


class CaptureOrchestrator:
    """Drives ElementResolver and the capture primitive for one page."""

    def __init__(
        self,
        live_query,
        resolver: Optional[ElementResolver] = None,
        retries: Optional[int] = None,
        settle_delay: Optional[float] = None,
        backoff_delay: Optional[float] = None,
        deadline: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            live_query: Provides elements(), scroll_into_view() and capture()
            resolver: Element resolver, a default one when omitted
            retries: Maximum rounds per card
            settle_delay: Seconds to wait between scrolling and capturing
            backoff_delay: Base wait before a retry round, multiplied by the round number
            deadline: Absolute clock() value after which no round is started
            sleep: Sleep function
            clock: Monotonic clock used for the deadline
        """
        settings = config.CAPTURE_SETTINGS
        self.live_query = live_query
        self.resolver = resolver or ElementResolver()
        self.retries = max(1, retries if retries is not None else settings["retries"])
        self.settle_delay = settle_delay if settle_delay is not None else settings["settle_delay"]
        self.backoff_delay = backoff_delay if backoff_delay is not None else settings["backoff_delay"]
        self.deadline = deadline
        self._sleep = sleep
        self._clock = clock

    def capture(self, label: str, card: Optional[RaceCard], output_path: Union[str, Path]) -> CaptureOutcome:
        """
        Capture one selected card to an image file.

        Args:
            label: Name of the artifact, e.g. "last" or "next"
            card: Selected card, or None when nothing was selected
            output_path: PNG file to write

        Returns:
            CaptureOutcome with status saved, skipped or failed
        """
        if card is None:
            logger.info("[%s] skip %s (no card)", label, output_path)
            return CaptureOutcome(label=label, record=None, status=STATUS_SKIPPED)

        output_path = Path(output_path)
        outcome = CaptureOutcome(label=label, record=card, status=STATUS_FAILED)

        for attempt_number in range(1, self.retries + 1):
            if attempt_number > 1:
                self._backoff(attempt_number)
            if self._deadline_passed():
                logger.warning("[%s] deadline reached before round %d", label, attempt_number)
                outcome.reason = REASON_DEADLINE
                return outcome

            attempt = self._attempt(card, attempt_number, output_path)
            outcome.attempts.append(attempt)

            if attempt.outcome == ATTEMPT_SUCCESS:
                logger.info("[%s] Saved %s (round %d)", label, output_path, attempt_number)
                outcome.status = STATUS_SAVED
                outcome.path = output_path
                return outcome

            logger.warning(
                "[%s] round %d/%d failed: %s%s",
                label, attempt_number, self.retries, attempt.outcome,
                f" ({attempt.error})" if attempt.error else "",
            )

        outcome.reason = outcome.attempts[-1].outcome
        logger.error("[%s] giving up on %s: %s", label, card.describe(), outcome.reason)
        return outcome

    def _attempt(self, card: RaceCard, attempt_number: int, output_path: Path) -> CaptureAttempt:
        # Handles from earlier rounds may be detached; always resolve again
        try:
            element = self.resolver.resolve(self.live_query, card)
        except Exception as e:  # noqa: BLE001
            return CaptureAttempt(card, attempt_number, ATTEMPT_NOT_FOUND, error=str(e) or e.__class__.__name__)
        if element is None:
            return CaptureAttempt(card, attempt_number, ATTEMPT_NOT_FOUND)

        try:
            self.live_query.scroll_into_view(element)
            self._sleep(self.settle_delay)
            written = self.live_query.capture(element, output_path)
        except Exception as e:  # noqa: BLE001
            return CaptureAttempt(card, attempt_number, ATTEMPT_CAPTURE_FAILED, error=str(e) or e.__class__.__name__)

        if not written:
            return CaptureAttempt(card, attempt_number, ATTEMPT_CAPTURE_FAILED, error="no image written")
        return CaptureAttempt(card, attempt_number, ATTEMPT_SUCCESS)

    def _backoff(self, attempt_number: int) -> None:
        """Wait before a retry round, never past the deadline."""
        delay = self.backoff_delay * (attempt_number - 1)
        if self.deadline is not None:
            delay = min(delay, max(0.0, self.deadline - self._clock()))
        if delay > 0:
            self._sleep(delay)

    def _deadline_passed(self) -> bool:
        return self.deadline is not None and self._clock() >= self.deadline
