"""Interceptor chain and the built-in interceptors."""

from ._chain import (
    AsyncExecutor,
    AsyncInterceptorChain,
    Executor,
    Interceptor,
    InterceptorChain,
    RequestInterceptor,
)
from ._headers import BearerAuthInterceptor, HeadersInterceptor
from ._logging import LoggingInterceptor
from ._tracing import TracingInterceptor

__all__ = [
    "AsyncExecutor",
    "AsyncInterceptorChain",
    "Executor",
    "Interceptor",
    "InterceptorChain",
    "RequestInterceptor",
    "BearerAuthInterceptor",
    "HeadersInterceptor",
    "LoggingInterceptor",
    "TracingInterceptor",
]
