import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from tenacity import RetryCallState


class BackoffStrategy(ABC):
    """Maps a zero-based retry number to the delay before that retry.

    Strategies are pure, apart from optional jitter, and can be handed to
    tenacity directly as a ``wait`` callable.
    """

    @abstractmethod
    def get_delay_ms(self, attempt_number: int) -> int:
        """Delay in milliseconds before retry ``attempt_number`` (0 = first retry)."""

    def __call__(self, retry_state: RetryCallState) -> float:
        return self.get_delay_ms(retry_state.attempt_number - 1) / 1000


@dataclass(frozen=True)
class FixedBackoff(BackoffStrategy):
    delay_ms: int = 1000

    def get_delay_ms(self, attempt_number: int) -> int:
        return self.delay_ms


@dataclass(frozen=True)
class LinearBackoff(BackoffStrategy):
    initial_delay_ms: int = 1000
    increment_ms: int = 1000
    max_delay_ms: Optional[int] = None

    def get_delay_ms(self, attempt_number: int) -> int:
        delay = self.initial_delay_ms + self.increment_ms * attempt_number
        if self.max_delay_ms is not None:
            delay = min(delay, self.max_delay_ms)
        return delay


@dataclass(frozen=True)
class ExponentialBackoff(BackoffStrategy):
    """``base * multiplier ** attempt``, optionally capped and jittered.

    With ``jitter`` enabled the capped delay is replaced by a value drawn
    uniformly from ``[0, delay]`` (full jitter).
    """

    base_delay_ms: int = 1000
    multiplier: float = 2.0
    max_delay_ms: Optional[int] = None
    jitter: bool = False

    def get_delay_ms(self, attempt_number: int) -> int:
        try:
            delay = self.base_delay_ms * self.multiplier**attempt_number
        except OverflowError:
            delay = math.inf
        if self.max_delay_ms is not None:
            delay = min(delay, self.max_delay_ms)
        if self.jitter:
            return random.randint(0, int(delay))
        return int(delay)
