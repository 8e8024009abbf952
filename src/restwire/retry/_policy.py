from dataclasses import dataclass, field
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import FrozenSet, Iterable, Optional

from tenacity import RetryCallState
from tenacity.retry import retry_base

from .._utils.constants import HEADER_RETRY_AFTER
from ..models.errors import ErrorKind
from ..models.http import Request, Response
from ._backoff import BackoffStrategy, ExponentialBackoff

DEFAULT_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
DEFAULT_RETRYABLE_ERROR_KINDS = frozenset(
    {ErrorKind.CONNECT, ErrorKind.TIMEOUT, ErrorKind.NETWORK}
)


@dataclass(frozen=True)
class RetryPolicy:
    """Decides whether a failed attempt is retried and how long to wait first.

    Attributes:
        max_attempts: Total number of attempts, the first one included. ``0``
            disables retrying altogether.
        retryable_status_codes: Response status codes worth another attempt.
        retryable_error_kinds: ``ErrorKind`` tags of transport errors worth
            another attempt.
        backoff: Strategy computing the delay before each retry.
        respect_retry_after: When a retryable response carries a
            ``Retry-After`` header, wait for the time it asks instead of the
            backoff delay.
    """

    max_attempts: int = 3
    retryable_status_codes: FrozenSet[int] = DEFAULT_RETRYABLE_STATUS_CODES
    retryable_error_kinds: FrozenSet[ErrorKind] = DEFAULT_RETRYABLE_ERROR_KINDS
    backoff: BackoffStrategy = field(default_factory=ExponentialBackoff)
    respect_retry_after: bool = True

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError("max_attempts must not be negative")
        object.__setattr__(
            self, "retryable_status_codes", frozenset(self.retryable_status_codes)
        )
        object.__setattr__(
            self, "retryable_error_kinds", _as_kinds(self.retryable_error_kinds)
        )

    @classmethod
    def default(cls) -> "RetryPolicy":
        return cls()

    @classmethod
    def none(cls) -> "RetryPolicy":
        """A policy that never retries."""
        return cls(max_attempts=0)

    @property
    def enabled(self) -> bool:
        return self.max_attempts > 0

    def should_retry(
        self,
        request: Request,
        response: Optional[Response],
        error: Optional[BaseException],
        attempt_number: int,
    ) -> bool:
        """Decide whether to make another attempt.

        Args:
            request: The request that was attempted.
            response: The response of the attempt, if one was received.
            error: The error raised by the attempt, if any.
            attempt_number: Zero-based number of the attempt just completed.

        Returns:
            bool: True if another attempt should be made.
        """
        if attempt_number + 1 >= self.max_attempts:
            return False

        if response is not None and response.code in self.retryable_status_codes:
            return True

        if error is not None and getattr(error, "kind", None) in self.retryable_error_kinds:
            return True

        return False

    def is_retryable_response(self, response: Response) -> bool:
        return response.code in self.retryable_status_codes

    def get_delay_ms(
        self, attempt_number: int, response: Optional[Response] = None
    ) -> int:
        if self.respect_retry_after and response is not None:
            retry_after = parse_retry_after(response.header(HEADER_RETRY_AFTER))
            if retry_after is not None:
                return int(retry_after * 1000)
        return self.backoff.get_delay_ms(attempt_number)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header (RFC 7231).

    Args:
        value: Raw header value, either delta-seconds or an HTTP date.

    Returns:
        Optional[float]: Seconds to wait (never negative), or None when the
            header is missing or unparseable.
    """
    if not value:
        return None

    try:
        return max(float(value), 0.0)
    except ValueError:
        pass

    try:
        retry_date = parsedate_to_datetime(value)
        delta = (retry_date - datetime.now(retry_date.tzinfo)).total_seconds()
        return max(delta, 0.0)
    except (ValueError, TypeError):
        return None


def _as_kinds(kinds: Iterable) -> FrozenSet[ErrorKind]:
    return frozenset(ErrorKind(kind) for kind in kinds)


class retry_if_policy(retry_base):
    """Tenacity retry predicate delegating to ``RetryPolicy.should_retry``."""

    def __init__(self, policy: RetryPolicy, request: Request) -> None:
        self.policy = policy
        self.request = request

    def __call__(self, retry_state: RetryCallState) -> bool:
        outcome = retry_state.outcome
        if outcome is None:
            return False
        attempt_number = retry_state.attempt_number - 1
        if outcome.failed:
            return self.policy.should_retry(
                self.request, None, outcome.exception(), attempt_number
            )
        return self.policy.should_retry(
            self.request, outcome.result(), None, attempt_number
        )


class wait_for_policy:
    """Tenacity wait callable using the policy's backoff and Retry-After handling."""

    def __init__(self, policy: RetryPolicy) -> None:
        self.policy = policy

    def __call__(self, retry_state: RetryCallState) -> float:
        response = None
        outcome = retry_state.outcome
        if outcome is not None and not outcome.failed:
            response = outcome.result()
        return self.policy.get_delay_ms(retry_state.attempt_number - 1, response) / 1000
