"""Per-video sliding window attempt limiter.

Counts failed download attempts per identifier (a YouTube video ID) inside a
fixed time window and reports when the count reaches the threshold.

Key behaviors:
- record_attempt() appends the current time and never prunes
- is_rate_limited() drops attempts older than the window, stores the
  compacted history back, then compares the remaining count to the threshold
- sweep() forgets identifiers with no attempts left inside the window
- Attempts for one identifier never affect another

The check and the later record are separate calls, so two concurrent
requests for the same video can both pass the check. The limiter is
advisory; it does not reserve slots.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_WINDOW_SECONDS = 60.0


@dataclass
class AttemptHistory:
    """Attempt timestamps recorded for a single identifier, oldest first."""

    identifier: str
    timestamps: list[float] = field(default_factory=list)


class AttemptRateLimiter:
    """Sliding window limiter keyed by identifier.

    Args:
        max_attempts: Attempts inside the window at which the identifier is limited.
        window_seconds: Length of the counting window in seconds.
        clock: Monotonic time source, in seconds.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_attempts = max_attempts
        self._window_seconds = window_seconds
        self._clock = clock
        self._histories: dict[str, AttemptHistory] = {}

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _in_window(self, timestamps: list[float], now: float) -> list[float]:
        return [ts for ts in timestamps if now - ts < self._window_seconds]

    def is_rate_limited(self, identifier: str) -> bool:
        """Return True if ``identifier`` has reached the attempt threshold.

        Compacts the stored history as a side effect.
        """
        now = self._clock()
        history = self._histories.get(identifier)
        recent = self._in_window(history.timestamps, now) if history else []
        self._histories[identifier] = AttemptHistory(identifier, recent)

        limited = len(recent) >= self._max_attempts
        if limited:
            logger.info(
                "Attempt limit reached for %s (%d in %.0fs)",
                identifier,
                len(recent),
                self._window_seconds,
                extra={"video_id": identifier, "attempts": len(recent)},
            )
        return limited

    def record_attempt(self, identifier: str) -> None:
        """Append the current time to the history of ``identifier``."""
        history = self._histories.setdefault(identifier, AttemptHistory(identifier))
        history.timestamps.append(self._clock())

    def sweep(self) -> int:
        """Drop identifiers with no attempts inside the window.

        Returns:
            Number of identifiers removed.
        """
        now = self._clock()
        stale = [
            identifier
            for identifier, history in self._histories.items()
            if not self._in_window(history.timestamps, now)
        ]
        for identifier in stale:
            del self._histories[identifier]

        if stale:
            logger.debug("Swept %d idle attempt histories", len(stale))
        return len(stale)

    def get_stats(self) -> dict:
        """Get limiter configuration and the number of tracked identifiers."""
        return {
            "tracked_identifiers": len(self._histories),
            "max_attempts": self._max_attempts,
            "window_seconds": self._window_seconds,
        }
