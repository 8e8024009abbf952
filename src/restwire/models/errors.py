from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .http import Response


class RestwireError(Exception):
    """Base class for every error raised by restwire."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(RestwireError):
    """Raised when an endpoint or client is configured inconsistently.

    Configuration errors are detected while the endpoint table is loaded and are
    never recoverable at call time.
    """


class BaseUrlMissingError(ConfigurationError):
    def __init__(
        self,
        message="Base URL is not configured. Pass base_url explicitly or set the RESTWIRE_BASE_URL environment variable.",
    ):
        super().__init__(message)


class EndpointNotFoundError(RestwireError, KeyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No endpoint named '{name}' is registered.")

    def __str__(self) -> str:
        return self.message


class ErrorKind(str, Enum):
    """Classification tag attached to transport failures.

    Retry decisions are made on these tags, never on exception types.
    """

    CONNECT = "connect"
    TIMEOUT = "timeout"
    NETWORK = "network"
    PROTOCOL = "protocol"
    UNKNOWN = "unknown"


class TransportError(RestwireError):
    """Raised by a transport when no response could be obtained."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN):
        self.kind = kind
        super().__init__(message)


class RetryExhaustedError(RestwireError):
    """Raised when every allowed attempt produced a retryable failure response."""

    def __init__(
        self,
        status_code: int,
        attempts: int,
        response: Optional["Response"] = None,
    ):
        self.status_code = status_code
        self.attempts = attempts
        self.response = response
        super().__init__(
            f"Request still failing with status {status_code} after {attempts} attempt(s)."
        )


class CallCanceledError(RestwireError):
    def __init__(self, message: str = "Call has been canceled."):
        super().__init__(message)


class CallAlreadyExecutedError(RestwireError, RuntimeError):
    def __init__(
        self, message: str = "Call has already been executed. Use clone() to re-issue it."
    ):
        super().__init__(message)


class ConversionError(RestwireError):
    """Raised when a request or response body cannot be converted."""


class HydrationError(ConversionError):
    """Raised when a decoded payload does not have the shape of the target type."""

    def __init__(self, message: str, target_type: Optional[type] = None):
        self.target_type = target_type
        super().__init__(message)
