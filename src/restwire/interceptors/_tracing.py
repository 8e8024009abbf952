from typing import Optional

from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from ..models.http import Request, Response
from ._chain import AsyncInterceptorChain, Interceptor, InterceptorChain


class TracingInterceptor(Interceptor):
    """Wraps every attempt in an OpenTelemetry client span.

    Spans are named ``HTTP <METHOD>`` and carry the method, full URL and
    response status. Responses with a status of 400 or above mark the span as
    an error; raised exceptions are recorded on it.
    """

    def __init__(self, tracer: Optional[trace.Tracer] = None) -> None:
        self._tracer = tracer or trace.get_tracer(__name__)

    def _start(self, request: Request):
        return self._tracer.start_as_current_span(
            f"HTTP {request.method}",
            kind=SpanKind.CLIENT,
            attributes={
                "http.request.method": request.method,
                "url.full": request.full_url,
            },
        )

    @staticmethod
    def _finish(span: trace.Span, response: Response) -> None:
        span.set_attribute("http.response.status_code", response.code)
        if response.code >= 400:
            span.set_status(Status(StatusCode.ERROR, f"HTTP {response.code}"))

    def intercept(self, chain: InterceptorChain) -> Response:
        with self._start(chain.request) as span:
            response = chain.proceed(chain.request)
            self._finish(span, response)
            return response

    async def intercept_async(self, chain: AsyncInterceptorChain) -> Response:
        with self._start(chain.request) as span:
            response = await chain.proceed(chain.request)
            self._finish(span, response)
            return response
