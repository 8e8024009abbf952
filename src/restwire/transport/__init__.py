from ._base import AsyncTransport, Transport
from ._httpx import HttpxTransport, classify_error, to_httpx_kwargs, to_response

__all__ = [
    "AsyncTransport",
    "Transport",
    "HttpxTransport",
    "classify_error",
    "to_httpx_kwargs",
    "to_response",
]
