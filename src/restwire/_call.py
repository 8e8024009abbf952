import asyncio
import threading
from enum import Enum
from logging import getLogger
from typing import Optional, Sequence

from tenacity import AsyncRetrying, RetryCallState, Retrying

from .cache import Cache, CachePolicy
from .converters import Converter
from .interceptors import AsyncInterceptorChain, Interceptor, InterceptorChain
from .models.errors import (
    CallAlreadyExecutedError,
    CallCanceledError,
    RetryExhaustedError,
)
from .models.http import Request, Response
from .retry import RetryPolicy, retry_if_policy, wait_for_policy
from .transport import Transport

logger = getLogger(__name__)


class CallState(str, Enum):
    CREATED = "created"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"


class Call:
    """One invocation of an endpoint.

    A call runs at most once. It converts the request body, consults the
    cache, sends the request through the interceptors to the transport under
    the retry policy, stores an eligible response and finally converts the
    response body. Use ``clone()`` to issue the same request again.

    Args:
        request: The request built for this invocation.
        transport: Sends the request. ``execute_async`` uses the transport's
            ``execute_async`` when it has one and runs ``execute`` in a worker
            thread otherwise.
        request_converter: Converts the request body before sending.
        response_converter: Converts the raw body of successful responses.
        error_converter: Converts the raw body of non-2xx responses. Without
            one, error responses keep ``body=None``.
        interceptors: Middleware, outermost first.
        retry_policy: Retry policy; ``None`` makes exactly one attempt.
        cache: Response store. Caching needs both a cache and a cache policy.
        cache_policy: Eligibility, key and default TTL for cached responses.
        cache_ttl: TTL of this endpoint's cache entries, overriding the
            policy's default.
    """

    def __init__(
        self,
        request: Request,
        transport: Transport,
        request_converter: Optional[Converter] = None,
        response_converter: Optional[Converter] = None,
        error_converter: Optional[Converter] = None,
        interceptors: Sequence[Interceptor] = (),
        retry_policy: Optional[RetryPolicy] = None,
        cache: Optional[Cache] = None,
        cache_policy: Optional[CachePolicy] = None,
        cache_ttl: Optional[float] = None,
    ) -> None:
        self._request = request
        self._transport = transport
        self._request_converter = request_converter
        self._response_converter = response_converter
        self._error_converter = error_converter
        self._interceptors = tuple(interceptors)
        self._retry_policy = retry_policy
        self._cache = cache
        self._cache_policy = cache_policy
        self._cache_ttl = cache_ttl

        self._state = CallState.CREATED
        self._executed = False
        self._canceled = False
        self._lock = threading.Lock()

    @property
    def request(self) -> Request:
        return self._request

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def is_executed(self) -> bool:
        return self._executed

    @property
    def is_canceled(self) -> bool:
        return self._canceled

    def cancel(self) -> None:
        """Stop the call at its next checkpoint.

        A request already handed to the transport is not interrupted; the call
        fails with ``CallCanceledError`` before the next attempt instead.
        """
        with self._lock:
            self._canceled = True
            if self._state == CallState.CREATED:
                self._state = CallState.CANCELED

    def clone(self) -> "Call":
        """A fresh, unexecuted call sharing this call's request and configuration."""
        return Call(
            request=self._request,
            transport=self._transport,
            request_converter=self._request_converter,
            response_converter=self._response_converter,
            error_converter=self._error_converter,
            interceptors=self._interceptors,
            retry_policy=self._retry_policy,
            cache=self._cache,
            cache_policy=self._cache_policy,
            cache_ttl=self._cache_ttl,
        )

    def execute(self) -> Response:
        """Run the call and return its response.

        Returns:
            Response: The response. ``body`` holds the converted raw body,
                typed for successful responses and decoded only for errors.

        Raises:
            CallCanceledError: If the call was canceled.
            CallAlreadyExecutedError: If the call already ran.
            RetryExhaustedError: If every attempt got a retryable error status.
            TransportError: If the last attempt failed without a response.
            ConversionError: If a body could not be converted.
        """
        self._begin()
        try:
            response = self._run()
        except BaseException:
            self._state = CallState.FAILED
            raise
        self._state = CallState.COMPLETED
        return response

    async def execute_async(self) -> Response:
        """Asynchronous ``execute``; waits between attempts with ``asyncio.sleep``."""
        self._begin()
        try:
            response = await self._run_async()
        except BaseException:
            self._state = CallState.FAILED
            raise
        self._state = CallState.COMPLETED
        return response

    def _begin(self) -> None:
        with self._lock:
            if self._canceled:
                raise CallCanceledError()
            if self._executed:
                raise CallAlreadyExecutedError()
            self._executed = True
            self._state = CallState.EXECUTING

    def _check_canceled(self) -> None:
        if self._canceled:
            raise CallCanceledError()

    def _prepare_request(self) -> Request:
        request = self._request
        if self._request_converter is not None and request.body is not None:
            request = request.with_body(self._request_converter.convert(request.body))
        return request

    def _cache_key(self, request: Request) -> Optional[str]:
        if self._cache is None or self._cache_policy is None:
            return None
        self._check_canceled()
        if not self._cache_policy.is_cacheable(request):
            return None
        return self._cache_policy.generate_key(request)

    def _lookup(self, key: Optional[str]) -> Optional[Response]:
        if key is None or self._cache is None:
            return None
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {self._request.method} {self._request.url}")
        return cached

    def _store(self, key: Optional[str], request: Request, response: Response) -> None:
        if key is None or self._cache is None or self._cache_policy is None:
            return
        if not self._cache_policy.is_cacheable(request, response):
            return
        ttl = self._cache_ttl if self._cache_ttl is not None else self._cache_policy.ttl
        self._cache.set(key, response, ttl)

    def _convert_response(self, response: Response) -> Response:
        if response.is_successful:
            converter = self._response_converter
        else:
            converter = self._error_converter
        if converter is None:
            return response
        return response.with_body(converter.convert(response.raw_body))

    def _check_exhausted(self, response: Response, attempts: int) -> Response:
        policy = self._retry_policy
        if (
            policy is not None
            and not response.is_successful
            and policy.is_retryable_response(response)
        ):
            raise RetryExhaustedError(response.code, attempts, response)
        return response

    def _log_retry(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        if outcome is not None and outcome.failed:
            reason = repr(outcome.exception())
        elif outcome is not None:
            reason = f"status {outcome.result().code}"
        else:
            reason = "unknown outcome"
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        max_attempts = self._retry_policy.max_attempts if self._retry_policy else 1
        logger.warning(
            f"{self._request.method} {self._request.url} failed with {reason}. "
            f"Retrying after {delay:.2f}s (attempt {retry_state.attempt_number}/{max_attempts})"
        )

    def _run(self) -> Response:
        request = self._prepare_request()
        key = self._cache_key(request)
        cached = self._lookup(key)
        if cached is not None:
            return self._convert_response(cached)

        response = self._send(request)
        self._store(key, request, response)
        return self._convert_response(response)

    def _send(self, request: Request) -> Response:
        def proceed(current: Request) -> Response:
            chain = InterceptorChain(self._interceptors, self._transport.execute, current)
            return chain.proceed(current)

        policy = self._retry_policy
        if policy is None or not policy.enabled:
            self._check_canceled()
            return proceed(request)

        attempts = 0

        def before(retry_state: RetryCallState) -> None:
            nonlocal attempts
            self._check_canceled()
            attempts = retry_state.attempt_number

        retrying = Retrying(
            retry=retry_if_policy(policy, request),
            wait=wait_for_policy(policy),
            before=before,
            before_sleep=self._log_retry,
            reraise=True,
        )
        response = retrying(proceed, request)
        return self._check_exhausted(response, attempts)

    async def _run_async(self) -> Response:
        request = self._prepare_request()
        key = self._cache_key(request)
        cached = self._lookup(key)
        if cached is not None:
            return self._convert_response(cached)

        response = await self._send_async(request)
        self._store(key, request, response)
        return self._convert_response(response)

    async def _execute_transport_async(self, request: Request) -> Response:
        execute_async = getattr(self._transport, "execute_async", None)
        if execute_async is not None:
            return await execute_async(request)
        return await asyncio.to_thread(self._transport.execute, request)

    async def _send_async(self, request: Request) -> Response:
        async def proceed(current: Request) -> Response:
            chain = AsyncInterceptorChain(
                self._interceptors, self._execute_transport_async, current
            )
            return await chain.proceed(current)

        policy = self._retry_policy
        if policy is None or not policy.enabled:
            self._check_canceled()
            return await proceed(request)

        attempts = 0

        def before(retry_state: RetryCallState) -> None:
            nonlocal attempts
            self._check_canceled()
            attempts = retry_state.attempt_number

        retrying = AsyncRetrying(
            retry=retry_if_policy(policy, request),
            wait=wait_for_policy(policy),
            before=before,
            before_sleep=self._log_retry,
            reraise=True,
        )
        response = await retrying(proceed, request)
        return self._check_exhausted(response, attempts)

    def __repr__(self) -> str:
        return f"Call({self._request.method} {self._request.url}, state={self._state.value})"