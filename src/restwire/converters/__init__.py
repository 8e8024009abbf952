"""Body and argument converters and the typed-object hydrator behind them."""

from ._base import Converter, ConverterFactory
from ._hydrator import (
    FieldKind,
    FieldMapping,
    HydrationDescriptor,
    ObjectHydrator,
    describe,
    wire_field,
)
from ._json import (
    JsonConverterFactory,
    JsonRequestConverter,
    JsonResponseConverter,
    JsonStringConverter,
)
from ._xml import (
    XmlConverterFactory,
    XmlRequestConverter,
    XmlResponseConverter,
    XmlStringConverter,
)

__all__ = [
    "Converter",
    "ConverterFactory",
    "FieldKind",
    "FieldMapping",
    "HydrationDescriptor",
    "ObjectHydrator",
    "describe",
    "wire_field",
    "JsonConverterFactory",
    "JsonRequestConverter",
    "JsonResponseConverter",
    "JsonStringConverter",
    "XmlConverterFactory",
    "XmlRequestConverter",
    "XmlResponseConverter",
    "XmlStringConverter",
]
