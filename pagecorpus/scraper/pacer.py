"""Randomised courtesy delay between consecutive page visits."""

from __future__ import annotations

import random
import time
from typing import Callable

from pagecorpus.scraper.errors import ConfigError

DEFAULT_MIN_DELAY = 0.2
DEFAULT_MAX_DELAY = 0.5


class Pacer:
    """Sleep for a uniform duration in ``[min_delay, max_delay]`` seconds."""

    def __init__(
        self,
        min_delay: float = DEFAULT_MIN_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        *,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        if min_delay < 0 or max_delay < min_delay:
            raise ConfigError(f"invalid delay window {min_delay}..{max_delay} seconds")
        self.min_delay = min_delay
        self.max_delay = max_delay
        self._sleep = sleep
        self._rng = rng or random.Random()

    def next_delay(self) -> float:
        return self._rng.uniform(self.min_delay, self.max_delay)

    def wait(self) -> float:
        """Block for one randomised delay and return how long it was."""
        delay = self.next_delay()
        self._sleep(delay)
        return delay
