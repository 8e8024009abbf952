from logging import getLogger
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from .._config import RestwireConfig
from .._utils import get_httpx_client_kwargs, user_agent_value
from .._utils.constants import (
    CONTENT_TYPE_FORM,
    CONTENT_TYPE_OCTET_STREAM,
    HEADER_CONTENT_TYPE,
    HEADER_USER_AGENT,
)
from ..models.errors import ErrorKind, TransportError
from ..models.http import FileUpload, Part, Request, Response, encode_query_params

logger = getLogger(__name__)


def classify_error(error: httpx.RequestError) -> ErrorKind:
    """Tag an httpx failure with the ``ErrorKind`` used for retry decisions."""
    # ConnectTimeout is both a timeout and a connect error; timeout wins
    if isinstance(error, httpx.TimeoutException):
        return ErrorKind.TIMEOUT
    if isinstance(error, httpx.ConnectError):
        return ErrorKind.CONNECT
    if isinstance(error, httpx.NetworkError):
        return ErrorKind.NETWORK
    if isinstance(error, httpx.ProtocolError):
        return ErrorKind.PROTOCOL
    return ErrorKind.UNKNOWN


def _multipart_file(part: Part) -> Tuple[str, Tuple[Optional[str], Any, Optional[str]]]:
    value = part.value
    if isinstance(value, FileUpload):
        return part.name, (
            value.filename,
            value.content,
            part.content_type or value.content_type,
        )
    if isinstance(value, bytes):
        return part.name, (
            part.name,
            value,
            part.content_type or CONTENT_TYPE_OCTET_STREAM,
        )
    # no filename: rendered as a plain form field
    return part.name, (None, str(value), part.content_type)


def _is_part_list(body: Any) -> bool:
    return isinstance(body, list) and bool(body) and all(isinstance(p, Part) for p in body)


def to_httpx_kwargs(request: Request) -> Dict[str, Any]:
    """Map a ``Request`` to keyword arguments of ``httpx.Client.request``.

    Bodies map by shape: ``bytes``/``str`` are sent as-is, a list of ``Part``
    becomes a multipart upload, a mapping on a form-encoded request becomes
    form data, and anything else is sent as JSON.
    """
    kwargs: Dict[str, Any] = {"headers": request.headers}
    if request.query:
        kwargs["params"] = encode_query_params(request.query)

    body = request.body
    if body is None:
        pass
    elif isinstance(body, (bytes, str)):
        kwargs["content"] = body
    elif _is_part_list(body):
        files: List[Tuple[str, Any]] = [_multipart_file(part) for part in body]
        kwargs["files"] = files
    elif isinstance(body, Mapping) and (
        request.header(HEADER_CONTENT_TYPE, "") or ""
    ).startswith(CONTENT_TYPE_FORM):
        kwargs["data"] = encode_query_params(body)
    else:
        kwargs["json"] = body

    if request.timeout is not None:
        kwargs["timeout"] = request.timeout
    return kwargs


def to_response(response: httpx.Response) -> Response:
    return Response(
        code=response.status_code,
        reason_phrase=response.reason_phrase,
        headers=response.headers,
        raw_body=response.content,
    )


class HttpxTransport:
    """Transport backed by ``httpx.Client`` and ``httpx.AsyncClient``.

    Clients are created on first use from the shared httpx settings (SSL
    context, timeout, redirects) unless supplied. Supplied clients are not
    closed by the transport.
    """

    def __init__(
        self,
        config: Optional[RestwireConfig] = None,
        client: Optional[httpx.Client] = None,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._client = client
        self._async_client = async_client
        self._owns_client = client is None
        self._owns_async_client = async_client is None

    def _client_kwargs(self) -> Dict[str, Any]:
        config = self._config
        headers = {HEADER_USER_AGENT: user_agent_value()}
        if config is None:
            return {**get_httpx_client_kwargs(), "headers": headers}
        headers.update(config.headers)
        return {
            **get_httpx_client_kwargs(
                timeout=config.timeout, follow_redirects=config.follow_redirects
            ),
            "headers": httpx.Headers(headers),
        }

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(**self._client_kwargs())
        return self._client

    @property
    def async_client(self) -> httpx.AsyncClient:
        if self._async_client is None:
            self._async_client = httpx.AsyncClient(**self._client_kwargs())
        return self._async_client

    def execute(self, request: Request) -> Response:
        logger.debug(f"Request: {request.method} {request.full_url}")
        try:
            response = self.client.request(
                request.method, request.url, **to_httpx_kwargs(request)
            )
        except httpx.RequestError as e:
            kind = classify_error(e)
            logger.debug(f"Transport failure ({kind.value}): {e!r}")
            raise TransportError(
                f"{request.method} {request.url} failed: {e}", kind
            ) from e
        return to_response(response)

    async def execute_async(self, request: Request) -> Response:
        logger.debug(f"Request: {request.method} {request.full_url}")
        try:
            response = await self.async_client.request(
                request.method, request.url, **to_httpx_kwargs(request)
            )
        except httpx.RequestError as e:
            kind = classify_error(e)
            logger.debug(f"Transport failure ({kind.value}): {e!r}")
            raise TransportError(
                f"{request.method} {request.url} failed: {e}", kind
            ) from e
        return to_response(response)

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    async def aclose(self) -> None:
        self.close()
        if self._owns_async_client and self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
