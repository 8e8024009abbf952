from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol

from ..models.endpoint import EndpointDescriptor


class Converter(Protocol):
    """Converts one value, either an outgoing body or an incoming raw body."""

    def convert(self, value: Any) -> Any: ...


class ConverterFactory(ABC):
    """Hands out converters for the endpoints whose content kind it handles.

    Factories return ``None`` for endpoints they do not handle so that the
    client can fall through to the next registered factory.
    """

    @abstractmethod
    def request_body_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[Converter]:
        pass

    @abstractmethod
    def response_body_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[Converter]:
        pass

    def error_body_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[Converter]:
        """Converter for the raw body of non-2xx responses.

        Error bodies rarely match the endpoint's response type, so this
        converter should decode without hydrating, and should not fail on
        payloads it cannot read.
        """
        return None

    def string_converter(self, descriptor: EndpointDescriptor) -> Optional[Converter]:
        """Converter rendering Path, Query and Header argument values as text."""
        return None
