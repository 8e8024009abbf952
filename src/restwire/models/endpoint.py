import re
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


class ParameterRole(str, Enum):
    PATH = "path"
    QUERY = "query"
    QUERY_MAP = "query_map"
    BODY = "body"
    FIELD = "field"
    FIELD_MAP = "field_map"
    HEADER = "header"
    HEADER_MAP = "header_map"
    PART = "part"
    PART_MAP = "part_map"
    URL = "url"


class BodyEncoding(str, Enum):
    NONE = "none"
    JSON = "json"
    FORM_URL_ENCODED = "form_url_encoded"
    MULTIPART = "multipart"
    XML = "xml"


class ParameterBinding(BaseModel):
    """Binds one positional argument of an endpoint to a part of the request."""

    model_config = ConfigDict(frozen=True)

    role: ParameterRole
    key: Optional[str] = None
    encoded: bool = False
    content_type: Optional[str] = None

    @classmethod
    def path(cls, key: str, *, encoded: bool = False) -> "ParameterBinding":
        return cls(role=ParameterRole.PATH, key=key, encoded=encoded)

    @classmethod
    def query(cls, key: str, *, encoded: bool = False) -> "ParameterBinding":
        return cls(role=ParameterRole.QUERY, key=key, encoded=encoded)

    @classmethod
    def query_map(cls) -> "ParameterBinding":
        return cls(role=ParameterRole.QUERY_MAP)

    @classmethod
    def body(cls) -> "ParameterBinding":
        return cls(role=ParameterRole.BODY)

    @classmethod
    def field(cls, key: str, *, encoded: bool = False) -> "ParameterBinding":
        return cls(role=ParameterRole.FIELD, key=key, encoded=encoded)

    @classmethod
    def field_map(cls) -> "ParameterBinding":
        return cls(role=ParameterRole.FIELD_MAP)

    @classmethod
    def header(cls, key: str) -> "ParameterBinding":
        return cls(role=ParameterRole.HEADER, key=key)

    @classmethod
    def header_map(cls) -> "ParameterBinding":
        return cls(role=ParameterRole.HEADER_MAP)

    @classmethod
    def part(cls, key: str, *, content_type: Optional[str] = None) -> "ParameterBinding":
        return cls(role=ParameterRole.PART, key=key, content_type=content_type)

    @classmethod
    def part_map(cls, *, content_type: Optional[str] = None) -> "ParameterBinding":
        return cls(role=ParameterRole.PART_MAP, content_type=content_type)

    @classmethod
    def url(cls) -> "ParameterBinding":
        return cls(role=ParameterRole.URL)


class ResponseType(BaseModel):
    """Hint telling the response converter which type to hydrate into."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Any
    is_array: bool = False


class EndpointDescriptor(BaseModel):
    """Static description of one remote operation.

    Descriptors are plain data: they are built once while the client is set up
    and shared read-only by every invocation of the endpoint.

    Examples:
        ```python
        from restwire import EndpointDescriptor, ParameterBinding

        get_user = EndpointDescriptor.get(
            "/users/{id}",
            ParameterBinding.path("id"),
            ParameterBinding.query("fields"),
            cache_ttl=30,
        )
        ```
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    http_method: str
    path: str = ""
    static_headers: Dict[str, str] = Field(default_factory=dict)
    bindings: Tuple[ParameterBinding, ...] = ()
    body_encoding: BodyEncoding = BodyEncoding.NONE
    cache_ttl: Optional[float] = None
    response_type: Optional[ResponseType] = None
    timeout: Optional[float] = None

    @property
    def placeholders(self) -> list[str]:
        """Names of the ``{name}`` placeholders in the path template, in order."""
        return _PLACEHOLDER.findall(self.path)

    def bindings_with_role(self, role: ParameterRole) -> list[ParameterBinding]:
        return [binding for binding in self.bindings if binding.role == role]

    @classmethod
    def of(
        cls, http_method: str, path: str, *bindings: ParameterBinding, **kwargs: Any
    ) -> "EndpointDescriptor":
        return cls(
            http_method=http_method.upper(), path=path, bindings=bindings, **kwargs
        )

    @classmethod
    def get(cls, path: str, *bindings: ParameterBinding, **kwargs: Any) -> "EndpointDescriptor":
        return cls.of("GET", path, *bindings, **kwargs)

    @classmethod
    def post(cls, path: str, *bindings: ParameterBinding, **kwargs: Any) -> "EndpointDescriptor":
        return cls.of("POST", path, *bindings, **kwargs)

    @classmethod
    def put(cls, path: str, *bindings: ParameterBinding, **kwargs: Any) -> "EndpointDescriptor":
        return cls.of("PUT", path, *bindings, **kwargs)

    @classmethod
    def patch(cls, path: str, *bindings: ParameterBinding, **kwargs: Any) -> "EndpointDescriptor":
        return cls.of("PATCH", path, *bindings, **kwargs)

    @classmethod
    def delete(cls, path: str, *bindings: ParameterBinding, **kwargs: Any) -> "EndpointDescriptor":
        return cls.of("DELETE", path, *bindings, **kwargs)
