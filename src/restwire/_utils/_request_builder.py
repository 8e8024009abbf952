from typing import Any, Dict, Mapping, Optional, Sequence
from urllib.parse import quote

from httpx import URL, Headers

from ..models.endpoint import (
    BodyEncoding,
    EndpointDescriptor,
    ParameterBinding,
    ParameterRole,
)
from ..converters import Converter, JsonStringConverter
from ..models.errors import ConfigurationError
from ..models.http import Part, Request
from .constants import (
    CONTENT_TYPE_FORM,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_XML,
    HEADER_CONTENT_TYPE,
)

_KEYED_ROLES = {
    ParameterRole.PATH,
    ParameterRole.QUERY,
    ParameterRole.FIELD,
    ParameterRole.HEADER,
    ParameterRole.PART,
}


class RequestBuilder:
    """Turns an endpoint descriptor plus call arguments into a ``Request``.

    The descriptor is validated once, when the builder is created, so that a
    misconfigured endpoint fails while the client is being set up rather than
    on the first call.

    Args:
        descriptor: The endpoint to build requests for.
        base_url: Prefix of every relative URL.
        string_converter: Renders Path, Query and Header values as text.
            Defaults to ``JsonStringConverter``, so ``True`` becomes ``true``
            in every position.
    """

    def __init__(
        self,
        descriptor: EndpointDescriptor,
        base_url: str = "",
        string_converter: Optional[Converter] = None,
    ) -> None:
        self._descriptor = descriptor
        self._base_url = base_url.rstrip("/")
        self._string_converter = string_converter or JsonStringConverter()
        self._validate()

    @property
    def descriptor(self) -> EndpointDescriptor:
        return self._descriptor

    def _validate(self) -> None:
        descriptor = self._descriptor

        if len(descriptor.bindings_with_role(ParameterRole.BODY)) > 1:
            raise ConfigurationError(
                f"{descriptor.http_method} {descriptor.path}: only one Body binding is allowed."
            )

        for binding in descriptor.bindings:
            if binding.role in _KEYED_ROLES and not binding.key:
                raise ConfigurationError(
                    f"{descriptor.http_method} {descriptor.path}: {binding.role.value} binding requires a key."
                )

        placeholders = descriptor.placeholders
        path_keys = [b.key for b in descriptor.bindings_with_role(ParameterRole.PATH)]
        for key in path_keys:
            if key not in placeholders:
                raise ConfigurationError(
                    f"{descriptor.http_method} {descriptor.path}: Path binding '{key}' has no matching '{{{key}}}' placeholder."
                )

        has_url = bool(descriptor.bindings_with_role(ParameterRole.URL))
        if not has_url:
            for placeholder in placeholders:
                if placeholder not in path_keys:
                    raise ConfigurationError(
                        f"{descriptor.http_method} {descriptor.path}: placeholder '{{{placeholder}}}' is not bound to any Path parameter."
                    )

    def build(self, args: Sequence[Any] = ()) -> Request:
        """Build the concrete request for one invocation.

        Args:
            args: Positional arguments, one per binding in declaration order.
                Missing trailing arguments are treated as ``None``.

        Returns:
            Request: The materialized request.

        Raises:
            ConfigurationError: If a Path argument is ``None``.
            TypeError: If more arguments than bindings are supplied.
        """
        descriptor = self._descriptor
        bindings = descriptor.bindings
        if len(args) > len(bindings):
            raise TypeError(
                f"{descriptor.http_method} {descriptor.path} takes {len(bindings)} argument(s) but {len(args)} were given."
            )

        path = descriptor.path
        query: Dict[str, Any] = {}
        headers = Headers(descriptor.static_headers)
        fields: Dict[str, Any] = {}
        parts: Dict[str, Part] = {}
        body: Any = None
        dynamic_url: Optional[str] = None

        for index, binding in enumerate(bindings):
            value = args[index] if index < len(args) else None
            role = binding.role

            if role == ParameterRole.PATH:
                path = self._substitute_path(path, binding, value)
                continue

            if value is None:
                continue

            if role == ParameterRole.QUERY:
                query[binding.key] = self._query_value(value)
            elif role == ParameterRole.QUERY_MAP:
                for name, query_value in _non_null(value, binding).items():
                    query[name] = self._query_value(query_value)
            elif role == ParameterRole.FIELD:
                fields[binding.key] = value
            elif role == ParameterRole.FIELD_MAP:
                fields.update(_non_null(value, binding))
            elif role == ParameterRole.HEADER:
                headers[binding.key] = self._to_string(value)
            elif role == ParameterRole.HEADER_MAP:
                for name, header_value in _non_null(value, binding).items():
                    headers[name] = self._to_string(header_value)
            elif role == ParameterRole.PART:
                parts[binding.key] = Part(binding.key, value, binding.content_type)
            elif role == ParameterRole.PART_MAP:
                for name, part_value in _non_null(value, binding).items():
                    parts[name] = Part(name, part_value, binding.content_type)
            elif role == ParameterRole.BODY:
                body = value
            elif role == ParameterRole.URL:
                dynamic_url = str(value)

        url = self._resolve_url(path, dynamic_url)

        encoding = descriptor.body_encoding
        if encoding == BodyEncoding.FORM_URL_ENCODED and fields:
            body = fields
            if HEADER_CONTENT_TYPE not in headers:
                headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_FORM
        elif encoding == BodyEncoding.MULTIPART and parts:
            body = list(parts.values())
        elif (
            encoding in (BodyEncoding.JSON, BodyEncoding.NONE)
            and body is not None
            and HEADER_CONTENT_TYPE not in headers
        ):
            headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_JSON
        elif (
            encoding == BodyEncoding.XML
            and body is not None
            and HEADER_CONTENT_TYPE not in headers
        ):
            headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_XML

        return Request(
            method=descriptor.http_method,
            url=url,
            headers=headers,
            query=query,
            body=body,
            timeout=descriptor.timeout,
        )

    def _substitute_path(self, path: str, binding: ParameterBinding, value: Any) -> str:
        if value is None:
            raise ConfigurationError(
                f"{self._descriptor.http_method} {self._descriptor.path}: Path parameter '{binding.key}' must not be None."
            )
        text = self._to_string(value)
        replacement = text if binding.encoded else quote(text, safe="")
        return path.replace(f"{{{binding.key}}}", replacement, 1)

    def _to_string(self, value: Any) -> str:
        return str(self._string_converter.convert(value))

    def _query_value(self, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [self._to_string(item) for item in value]
        return self._to_string(value)

    def _resolve_url(self, path: str, dynamic_url: Optional[str]) -> str:
        if dynamic_url is not None:
            if URL(dynamic_url).is_absolute_url:
                return dynamic_url
            path = dynamic_url
        if not path:
            return self._base_url
        return f"{self._base_url}/{path.lstrip('/')}"


def _non_null(value: Any, binding: ParameterBinding) -> Dict[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(
            f"{binding.role.value} argument must be a mapping, got {type(value).__name__}."
        )
    return {str(key): item for key, item in value.items() if item is not None}


def build_request(
    descriptor: EndpointDescriptor,
    args: Sequence[Any] = (),
    base_url: str = "",
    string_converter: Optional[Converter] = None,
) -> Request:
    """Validate ``descriptor`` and build the request for ``args`` in one step."""
    return RequestBuilder(descriptor, base_url, string_converter).build(args)
