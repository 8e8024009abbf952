"""Declarative HTTP endpoints executed through interceptors, retries and caching.

Describe each remote operation once as an ``EndpointDescriptor``, register the
table with a ``RestwireClient``, and invoke endpoints by name:

```python
from restwire import EndpointDescriptor, ParameterBinding, RestwireClient, RestwireConfig

client = RestwireClient(
    RestwireConfig(base_url="https://api.example.com"),
    endpoints={"get_user": EndpointDescriptor.get("/users/{id}", ParameterBinding.path("id"))},
)
response = client.invoke("get_user", [42]).execute()
```
"""

from ._call import Call, CallState
from ._client import RestwireClient
from ._config import RestwireConfig
from ._utils._request_builder import RequestBuilder, build_request
from .cache import Cache, CachePolicy, InMemoryCache
from .converters import (
    Converter,
    ConverterFactory,
    HydrationDescriptor,
    JsonConverterFactory,
    ObjectHydrator,
    XmlConverterFactory,
    wire_field,
)
from .interceptors import (
    AsyncInterceptorChain,
    BearerAuthInterceptor,
    HeadersInterceptor,
    Interceptor,
    InterceptorChain,
    LoggingInterceptor,
    RequestInterceptor,
    TracingInterceptor,
)
from .models import (
    BaseUrlMissingError,
    BodyEncoding,
    CallAlreadyExecutedError,
    CallCanceledError,
    ConfigurationError,
    ConversionError,
    EndpointDescriptor,
    EndpointNotFoundError,
    ErrorKind,
    FileUpload,
    HydrationError,
    ParameterBinding,
    ParameterRole,
    Part,
    Request,
    Response,
    ResponseType,
    RestwireError,
    RetryExhaustedError,
    TransportError,
)
from .retry import (
    BackoffStrategy,
    ExponentialBackoff,
    FixedBackoff,
    LinearBackoff,
    RetryPolicy,
)
from .transport import HttpxTransport, Transport

__all__ = [
    "Call",
    "CallState",
    "RestwireClient",
    "RestwireConfig",
    "RequestBuilder",
    "build_request",
    "Cache",
    "CachePolicy",
    "InMemoryCache",
    "Converter",
    "ConverterFactory",
    "HydrationDescriptor",
    "JsonConverterFactory",
    "ObjectHydrator",
    "XmlConverterFactory",
    "wire_field",
    "AsyncInterceptorChain",
    "BearerAuthInterceptor",
    "HeadersInterceptor",
    "Interceptor",
    "InterceptorChain",
    "LoggingInterceptor",
    "RequestInterceptor",
    "TracingInterceptor",
    "BaseUrlMissingError",
    "BodyEncoding",
    "CallAlreadyExecutedError",
    "CallCanceledError",
    "ConfigurationError",
    "ConversionError",
    "EndpointDescriptor",
    "EndpointNotFoundError",
    "ErrorKind",
    "FileUpload",
    "HydrationError",
    "ParameterBinding",
    "ParameterRole",
    "Part",
    "Request",
    "Response",
    "ResponseType",
    "RestwireError",
    "RetryExhaustedError",
    "TransportError",
    "BackoffStrategy",
    "ExponentialBackoff",
    "FixedBackoff",
    "LinearBackoff",
    "RetryPolicy",
    "HttpxTransport",
    "Transport",
]
