"""Retry decisions and backoff strategies."""

from ._backoff import BackoffStrategy, ExponentialBackoff, FixedBackoff, LinearBackoff
from ._policy import (
    DEFAULT_RETRYABLE_ERROR_KINDS,
    DEFAULT_RETRYABLE_STATUS_CODES,
    RetryPolicy,
    parse_retry_after,
    retry_if_policy,
    wait_for_policy,
)

__all__ = [
    "BackoffStrategy",
    "ExponentialBackoff",
    "FixedBackoff",
    "LinearBackoff",
    "RetryPolicy",
    "DEFAULT_RETRYABLE_ERROR_KINDS",
    "DEFAULT_RETRYABLE_STATUS_CODES",
    "parse_retry_after",
    "retry_if_policy",
    "wait_for_policy",
]
