import os
from typing import Callable, Mapping, Union

from .._utils.constants import ENV_ACCESS_TOKEN, HEADER_AUTHORIZATION
from ..models.errors import ConfigurationError
from ..models.http import Request
from ._chain import RequestInterceptor


class HeadersInterceptor(RequestInterceptor):
    """Adds default headers to every request.

    Headers already present on the request, from the endpoint's static headers
    or a Header binding, are left alone unless ``override`` is set.
    """

    def __init__(self, headers: Mapping[str, str], override: bool = False) -> None:
        self._headers = dict(headers)
        self._override = override

    def transform(self, request: Request) -> Request:
        if self._override:
            return request.with_headers(self._headers)
        missing = {
            name: value
            for name, value in self._headers.items()
            if name not in request.headers
        }
        if not missing:
            return request
        return request.with_headers(missing)


class BearerAuthInterceptor(RequestInterceptor):
    """Sends ``Authorization: Bearer <token>`` unless the request has its own.

    Args:
        token: The access token, or a callable returning the current one. The
            callable is invoked for every request, so it can refresh tokens.
    """

    def __init__(self, token: Union[str, Callable[[], str]]) -> None:
        self._token = token

    @classmethod
    def from_env(cls) -> "BearerAuthInterceptor":
        """Use the token in ``RESTWIRE_ACCESS_TOKEN``.

        Raises:
            ConfigurationError: If the variable is not set.
        """
        token = os.getenv(ENV_ACCESS_TOKEN)
        if not token:
            raise ConfigurationError(f"{ENV_ACCESS_TOKEN} is not set.")
        return cls(token)

    def _current_token(self) -> str:
        return self._token() if callable(self._token) else self._token

    def transform(self, request: Request) -> Request:
        if HEADER_AUTHORIZATION in request.headers:
            return request
        return request.with_header(HEADER_AUTHORIZATION, f"Bearer {self._current_token()}")
