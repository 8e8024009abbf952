from logging import getLogger
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ._call import Call
from ._config import RestwireConfig
from ._utils._request_builder import RequestBuilder
from .cache import Cache, CachePolicy
from .converters import Converter, ConverterFactory, JsonConverterFactory
from .interceptors import Interceptor
from .models.endpoint import EndpointDescriptor
from .models.errors import EndpointNotFoundError
from .retry import RetryPolicy
from .transport import HttpxTransport, Transport

logger = getLogger(__name__)


class _Endpoint:
    """Per-endpoint state resolved once when the endpoint is registered."""

    def __init__(
        self,
        builder: RequestBuilder,
        request_converter: Optional[Converter],
        response_converter: Optional[Converter],
        error_converter: Optional[Converter],
    ) -> None:
        self.builder = builder
        self.request_converter = request_converter
        self.response_converter = response_converter
        self.error_converter = error_converter


class RestwireClient:
    """Entry point that turns endpoint names plus arguments into ``Call`` objects.

    Every endpoint is validated when it is registered, so configuration
    mistakes surface while the client is constructed instead of on first use.

    Args:
        config: Client settings. Read from the environment when omitted.
        endpoints: Endpoint descriptors by name.
        transport: Sends requests. Defaults to an ``HttpxTransport`` owned and
            closed by the client.
        converter_factories: Consulted in order, separately for each kind of
            converter; the first factory returning one for an endpoint wins.
            Defaults to JSON.
        interceptors: Middleware applied to every call, outermost first.
        retry_policy: Retry policy of every call. ``None`` disables retries.
        cache: Response store shared by every call.
        cache_policy: Cache eligibility and default TTL.

    Examples:
        ```python
        from restwire import EndpointDescriptor, ParameterBinding, RestwireClient

        endpoints = {
            "get_user": EndpointDescriptor.get("/users/{id}", ParameterBinding.path("id")),
        }
        with RestwireClient(endpoints=endpoints) as client:
            user = client.invoke("get_user", [42]).execute().body
        ```
    """

    def __init__(
        self,
        config: Optional[RestwireConfig] = None,
        endpoints: Optional[Mapping[str, EndpointDescriptor]] = None,
        transport: Optional[Transport] = None,
        converter_factories: Sequence[ConverterFactory] = (),
        interceptors: Sequence[Interceptor] = (),
        retry_policy: Optional[RetryPolicy] = None,
        cache: Optional[Cache] = None,
        cache_policy: Optional[CachePolicy] = None,
    ) -> None:
        self._config = config or RestwireConfig.from_env()
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(self._config)
        self._converter_factories: Tuple[ConverterFactory, ...] = tuple(
            converter_factories
        ) or (JsonConverterFactory(),)
        self._interceptors = tuple(interceptors)
        self._retry_policy = retry_policy
        self._cache = cache
        self._cache_policy = cache_policy
        self._endpoints: Dict[str, _Endpoint] = {}

        for name, descriptor in (endpoints or {}).items():
            self.register(name, descriptor)

    @property
    def config(self) -> RestwireConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def endpoint_names(self) -> list[str]:
        return list(self._endpoints)

    def __contains__(self, name: object) -> bool:
        return name in self._endpoints

    def register(self, name: str, descriptor: EndpointDescriptor) -> None:
        """Validate ``descriptor`` and make it invocable as ``name``.

        Raises:
            ConfigurationError: If the descriptor is inconsistent.
        """
        builder = RequestBuilder(
            descriptor,
            self._config.base_url,
            string_converter=self._first(
                lambda factory: factory.string_converter(descriptor)
            ),
        )
        self._endpoints[name] = _Endpoint(
            builder=builder,
            request_converter=self._first(
                lambda factory: factory.request_body_converter(descriptor)
            ),
            response_converter=self._first(
                lambda factory: factory.response_body_converter(descriptor)
            ),
            error_converter=self._first(
                lambda factory: factory.error_body_converter(descriptor)
            ),
        )
        logger.debug(f"Registered endpoint {name}: {descriptor.http_method} {descriptor.path}")

    def _first(self, pick) -> Optional[Converter]:
        for factory in self._converter_factories:
            converter = pick(factory)
            if converter is not None:
                return converter
        return None

    def invoke(self, name: str, args: Sequence[Any] = ()) -> Call:
        """Build the call for one invocation of the endpoint ``name``.

        Args:
            name: Registered endpoint name.
            args: Positional arguments, one per parameter binding.

        Returns:
            Call: An unexecuted call.

        Raises:
            EndpointNotFoundError: If no endpoint is registered under ``name``.
            ConfigurationError: If a Path argument is ``None``.
        """
        endpoint = self._endpoints.get(name)
        if endpoint is None:
            raise EndpointNotFoundError(name)

        request = endpoint.builder.build(args)
        return Call(
            request=request,
            transport=self._transport,
            request_converter=endpoint.request_converter,
            response_converter=endpoint.response_converter,
            error_converter=endpoint.error_converter,
            interceptors=self._interceptors,
            retry_policy=self._retry_policy,
            cache=self._cache,
            cache_policy=self._cache_policy,
            cache_ttl=endpoint.builder.descriptor.cache_ttl,
        )

    def close(self) -> None:
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            self._transport.close()

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            await self._transport.aclose()

    def __enter__(self) -> "RestwireClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    async def __aenter__(self) -> "RestwireClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
