import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Sequence, Tuple

from ..models.http import Request, Response

Executor = Callable[[Request], Response]
AsyncExecutor = Callable[[Request], Awaitable[Response]]


class Interceptor(ABC):
    """Middleware wrapped around the transport call.

    An interceptor reads ``chain.request``, may derive a modified request, and
    either passes it on with ``chain.proceed(request)`` or short-circuits by
    returning a response of its own. Whatever ``proceed`` returns can be
    transformed before it is handed back up the chain.
    """

    @abstractmethod
    def intercept(self, chain: "InterceptorChain") -> Response:
        pass

    async def intercept_async(self, chain: "AsyncInterceptorChain") -> Response:
        """Run ``intercept`` for an asynchronous call.

        The synchronous ``intercept`` runs in a worker thread. Its
        ``chain.proceed`` schedules the rest of the asynchronous chain back on
        the event loop and blocks the worker until it finishes, so interceptors
        that only implement ``intercept`` behave the same in both modes.
        Override this method to avoid the thread hop.
        """
        loop = asyncio.get_running_loop()

        def proceed(request: Request) -> Response:
            return asyncio.run_coroutine_threadsafe(chain.proceed(request), loop).result()

        bridge = InterceptorChain((), proceed, chain.request, chain.index)
        return await asyncio.to_thread(self.intercept, bridge)


class RequestInterceptor(Interceptor):
    """Interceptor that only rewrites the outgoing request."""

    @abstractmethod
    def transform(self, request: Request) -> Request:
        pass

    def intercept(self, chain: "InterceptorChain") -> Response:
        return chain.proceed(self.transform(chain.request))

    async def intercept_async(self, chain: "AsyncInterceptorChain") -> Response:
        return await chain.proceed(self.transform(chain.request))


class InterceptorChain:
    """Cursor over an immutable interceptor sequence ending in the transport.

    Each ``proceed`` hands a fresh cursor, positioned one step further and
    holding the request it was given, to the next interceptor. The first
    interceptor therefore sees the request first and the response last.
    """

    def __init__(
        self,
        interceptors: Sequence[Interceptor],
        executor: Executor,
        request: Request,
        index: int = 0,
    ) -> None:
        self._interceptors: Tuple[Interceptor, ...] = tuple(interceptors)
        self._executor = executor
        self._request = request
        self._index = index

    @property
    def request(self) -> Request:
        return self._request

    @property
    def index(self) -> int:
        return self._index

    def proceed(self, request: Request) -> Response:
        if self._index < len(self._interceptors):
            next_chain = InterceptorChain(
                self._interceptors, self._executor, request, self._index + 1
            )
            return self._interceptors[self._index].intercept(next_chain)
        return self._executor(request)


class AsyncInterceptorChain:
    """Asynchronous counterpart of ``InterceptorChain``."""

    def __init__(
        self,
        interceptors: Sequence[Interceptor],
        executor: AsyncExecutor,
        request: Request,
        index: int = 0,
    ) -> None:
        self._interceptors: Tuple[Interceptor, ...] = tuple(interceptors)
        self._executor = executor
        self._request = request
        self._index = index

    @property
    def request(self) -> Request:
        return self._request

    @property
    def index(self) -> int:
        return self._index

    async def proceed(self, request: Request) -> Response:
        if self._index < len(self._interceptors):
            next_chain = AsyncInterceptorChain(
                self._interceptors, self._executor, request, self._index + 1
            )
            return await self._interceptors[self._index].intercept_async(next_chain)
        return await self._executor(request)
