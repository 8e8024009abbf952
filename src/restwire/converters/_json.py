import json
from enum import Enum
from logging import getLogger
from typing import Any, Optional

from ..models.endpoint import BodyEncoding, EndpointDescriptor, ResponseType
from ..models.errors import ConversionError
from ._base import ConverterFactory
from ._hydrator import ObjectHydrator

logger = getLogger(__name__)


class JsonRequestConverter:
    """Serializes typed bodies to JSON text.

    ``bytes`` and ``str`` bodies are assumed to be encoded already and pass
    through untouched.
    """

    def __init__(self, hydrator: ObjectHydrator) -> None:
        self._hydrator = hydrator

    def convert(self, value: Any) -> Any:
        if value is None or isinstance(value, (bytes, str)):
            return value
        try:
            return json.dumps(self._hydrator.serialize(value))
        except (TypeError, ValueError) as e:
            raise ConversionError(
                f"Cannot encode {type(value).__name__} as JSON: {e}"
            ) from e


class JsonResponseConverter:
    """Decodes a raw JSON body, hydrating it when a response type is known.

    Args:
        hydrator: Materializes decoded payloads into ``response_type``.
        response_type: Target type; ``None`` returns the decoded payload.
        strict: Raise ``ConversionError`` on invalid JSON. When False the
            body converts to ``None`` instead.
    """

    def __init__(
        self,
        hydrator: ObjectHydrator,
        response_type: Optional[ResponseType] = None,
        strict: bool = True,
    ) -> None:
        self._hydrator = hydrator
        self._response_type = response_type
        self._strict = strict

    def convert(self, value: Any) -> Any:
        if not value:
            return None
        try:
            decoded = json.loads(value)
        except ValueError as e:
            if not self._strict:
                logger.debug(f"Body is not JSON, leaving it unconverted: {e}")
                return None
            raise ConversionError(f"Response body is not valid JSON: {e}") from e

        response_type = self._response_type
        if response_type is None or not self._hydrator.can_hydrate(response_type.type):
            return decoded
        if response_type.is_array:
            return self._hydrator.hydrate_list(decoded, response_type.type)
        return self._hydrator.hydrate(decoded, response_type.type)


class JsonStringConverter:
    """Renders argument values the way they appear in JSON.

    Strings pass through, booleans become ``true``/``false``, numbers keep
    their decimal form and ``None`` becomes an empty string. Lists, mappings
    and typed objects are rendered as compact JSON; any other value, such as a
    UUID, uses ``str()``.
    """

    def __init__(self, hydrator: Optional[ObjectHydrator] = None) -> None:
        self._hydrator = hydrator or ObjectHydrator()

    def convert(self, value: Any) -> str:
        if isinstance(value, Enum):
            value = value.value
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        if not isinstance(value, (list, tuple, dict)) and not self._hydrator.can_hydrate(
            type(value)
        ):
            return str(value)
        try:
            return json.dumps(self._hydrator.serialize(value), separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise ConversionError(
                f"Cannot render {type(value).__name__} as a string: {e}"
            ) from e


class JsonConverterFactory(ConverterFactory):
    """Converters for JSON endpoints.

    Request bodies are handled for the ``JSON`` and ``NONE`` encodings only;
    form and multipart bodies are left to the transport. Every response body
    is decoded as JSON. Error bodies are decoded without hydration, and ones
    that are not JSON convert to ``None``.
    """

    def __init__(self, hydrator: Optional[ObjectHydrator] = None) -> None:
        self._hydrator = hydrator or ObjectHydrator()
        self._string_converter = JsonStringConverter(self._hydrator)

    @property
    def hydrator(self) -> ObjectHydrator:
        return self._hydrator

    def request_body_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[JsonRequestConverter]:
        if descriptor.body_encoding not in (BodyEncoding.JSON, BodyEncoding.NONE):
            return None
        return JsonRequestConverter(self._hydrator)

    def response_body_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[JsonResponseConverter]:
        return JsonResponseConverter(self._hydrator, descriptor.response_type)

    def error_body_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[JsonResponseConverter]:
        return JsonResponseConverter(self._hydrator, strict=False)

    def string_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[JsonStringConverter]:
        return self._string_converter
