import logging
import time
from logging import getLogger
from typing import Dict, Iterable

from httpx import Headers

from .._utils.constants import HEADER_AUTHORIZATION
from ..models.http import Request, Response
from ._chain import AsyncInterceptorChain, Interceptor, InterceptorChain

REDACTED = "[REDACTED]"


class LoggingInterceptor(Interceptor):
    """Logs each request and the response it produced.

    Values of sensitive headers (``Authorization`` by default) are redacted.
    """

    def __init__(
        self,
        level: int = logging.DEBUG,
        log_headers: bool = True,
        redact_headers: Iterable[str] = (HEADER_AUTHORIZATION,),
        logger: logging.Logger = getLogger(__name__),
    ) -> None:
        self._level = level
        self._log_headers = log_headers
        self._redact = {name.lower() for name in redact_headers}
        self._logger = logger

    def _redacted(self, headers: Headers) -> Dict[str, str]:
        return {
            name: REDACTED if name.lower() in self._redact else value
            for name, value in headers.items()
        }

    def _log_request(self, request: Request) -> None:
        self._logger.log(self._level, f"Request: {request.method} {request.full_url}")
        if self._log_headers:
            self._logger.log(self._level, f"HEADERS: {self._redacted(request.headers)}")

    def _log_response(self, request: Request, response: Response, started: float) -> None:
        elapsed_ms = (time.monotonic() - started) * 1000
        self._logger.log(
            self._level,
            f"Response: {response.code} {response.reason_phrase} for {request.method} {request.full_url} ({elapsed_ms:.0f}ms)",
        )

    def intercept(self, chain: InterceptorChain) -> Response:
        request = chain.request
        self._log_request(request)
        started = time.monotonic()
        response = chain.proceed(request)
        self._log_response(request, response, started)
        return response

    async def intercept_async(self, chain: AsyncInterceptorChain) -> Response:
        request = chain.request
        self._log_request(request)
        started = time.monotonic()
        response = await chain.proceed(request)
        self._log_response(request, response, started)
        return response
