from .endpoint import (
    BodyEncoding,
    EndpointDescriptor,
    ParameterBinding,
    ParameterRole,
    ResponseType,
)
from .errors import (
    BaseUrlMissingError,
    CallAlreadyExecutedError,
    CallCanceledError,
    ConfigurationError,
    ConversionError,
    EndpointNotFoundError,
    ErrorKind,
    HydrationError,
    RestwireError,
    RetryExhaustedError,
    TransportError,
)
from .http import FileUpload, Part, Request, Response

__all__ = [
    "BodyEncoding",
    "EndpointDescriptor",
    "ParameterBinding",
    "ParameterRole",
    "ResponseType",
    "BaseUrlMissingError",
    "CallAlreadyExecutedError",
    "CallCanceledError",
    "ConfigurationError",
    "ConversionError",
    "EndpointNotFoundError",
    "ErrorKind",
    "HydrationError",
    "RestwireError",
    "RetryExhaustedError",
    "TransportError",
    "FileUpload",
    "Part",
    "Request",
    "Response",
]
