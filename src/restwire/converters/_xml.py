import xml.etree.ElementTree as ET
from enum import Enum
from logging import getLogger
from typing import Any, Dict, List, Mapping, Optional

from ..models.endpoint import BodyEncoding, EndpointDescriptor, ResponseType
from ..models.errors import ConversionError
from ._base import ConverterFactory
from ._hydrator import ObjectHydrator

logger = getLogger(__name__)

ATTRIBUTE_PREFIX = "@"
TEXT_KEY = "_value"
ITEM_TAG = "item"


def _scalar_text(value: Any) -> Optional[str]:
    if isinstance(value, Enum):
        value = value.value
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _singularize(word: str) -> str:
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith(("sses", "xes", "ches", "shes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss") and len(word) > 1:
        return word[:-1]
    return word


def _tag(key: Any) -> str:
    if isinstance(key, int):
        return ITEM_TAG
    return str(key)


def _append(parent: ET.Element, tag: str, value: Any) -> None:
    child = ET.SubElement(parent, tag)
    if isinstance(value, Mapping):
        _fill(child, value)
    elif isinstance(value, (list, tuple)):
        item_tag = _singularize(tag)
        for item in value:
            _append(child, item_tag, item)
    else:
        child.text = _scalar_text(value)


def _fill(element: ET.Element, mapping: Mapping) -> None:
    for key, value in mapping.items():
        _append(element, _tag(key), value)


def build_element(tag: str, data: Any) -> ET.Element:
    """Build the element ``tag`` holding plain ``data``."""
    root = ET.Element(tag)
    if isinstance(data, Mapping):
        _fill(root, data)
    elif isinstance(data, list):
        for item in data:
            _append(root, ITEM_TAG, item)
    else:
        root.text = _scalar_text(data)
    return root


def element_to_value(element: ET.Element) -> Any:
    """Convert an element to plain data.

    Attributes become ``@name`` keys. A leaf's text is returned as a string,
    or stored under ``_value`` when the element also has attributes. Children
    are keyed by tag, and repeated tags collect into a list.
    """
    value: Dict[str, Any] = {
        f"{ATTRIBUTE_PREFIX}{name}": text for name, text in element.attrib.items()
    }
    children = list(element)
    if not children:
        text = (element.text or "").strip()
        if text:
            if not value:
                return text
            value[TEXT_KEY] = text
        return value

    grouped: Dict[str, List[Any]] = {}
    for child in children:
        grouped.setdefault(child.tag, []).append(element_to_value(child))
    for tag, items in grouped.items():
        value[tag] = items[0] if len(items) == 1 else items
    return value


class XmlRequestConverter:
    """Serializes typed bodies to an XML document.

    Mappings become child elements, lists become a wrapper element whose
    children use the singular of the wrapper's tag, and scalars become text.
    ``bytes`` and ``str`` bodies pass through untouched.

    Args:
        hydrator: Turns typed objects into mappings keyed by wire key.
        root_element: Tag of the document element.
        version: XML declaration version.
        encoding: XML declaration encoding.
    """

    def __init__(
        self,
        hydrator: ObjectHydrator,
        root_element: str = "root",
        version: str = "1.0",
        encoding: str = "UTF-8",
    ) -> None:
        self._hydrator = hydrator
        self._root_element = root_element
        self._version = version
        self._encoding = encoding

    def convert(self, value: Any) -> Any:
        if value is None or isinstance(value, (bytes, str)):
            return value

        root = build_element(self._root_element, self._hydrator.serialize(value))
        declaration = f'<?xml version="{self._version}" encoding="{self._encoding}"?>'
        return f"{declaration}\n{ET.tostring(root, encoding='unicode')}\n"


class XmlResponseConverter:
    """Parses a raw XML body into plain data, hydrating it when a type is known.

    The document element itself is dropped and its content returned, see
    ``element_to_value``. For array response types the single child group of
    the document element is used, so ``<users><user/><user/></users>`` and
    ``<users><user/></users>`` both hydrate to a list.

    Args:
        hydrator: Materializes parsed payloads into ``response_type``.
        response_type: Target type; ``None`` returns the parsed payload.
        strict: Raise ``ConversionError`` on malformed XML. When False the
            body converts to ``None`` instead.
    """

    def __init__(
        self,
        hydrator: Optional[ObjectHydrator] = None,
        response_type: Optional[ResponseType] = None,
        strict: bool = True,
    ) -> None:
        self._hydrator = hydrator or ObjectHydrator()
        self._response_type = response_type
        self._strict = strict

    def convert(self, value: Any) -> Any:
        if not value:
            return None
        try:
            root = ET.fromstring(value)
        except ET.ParseError as e:
            if not self._strict:
                logger.debug(f"Body is not XML, leaving it unconverted: {e}")
                return None
            raise ConversionError(f"Response body is not valid XML: {e}") from e

        parsed = element_to_value(root)
        response_type = self._response_type
        if response_type is None or not self._hydrator.can_hydrate(response_type.type):
            return parsed
        if response_type.is_array:
            return self._hydrator.hydrate_list(_as_list(parsed), response_type.type)
        return self._hydrator.hydrate(parsed, response_type.type)


def _as_list(parsed: Any) -> List[Any]:
    if isinstance(parsed, Mapping):
        if not parsed:
            return []
        if len(parsed) == 1:
            parsed = next(iter(parsed.values()))
    if isinstance(parsed, list):
        return parsed
    return [parsed]


class XmlStringConverter:
    """Renders argument values as text, with mappings and objects as XML."""

    def __init__(self, hydrator: Optional[ObjectHydrator] = None) -> None:
        self._hydrator = hydrator or ObjectHydrator()

    def convert(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (str, bool, int, float, Enum)):
            return _scalar_text(value) or ""
        root = build_element("root", self._hydrator.serialize(value))
        return ET.tostring(root, encoding="unicode")


class XmlConverterFactory(ConverterFactory):
    """Converters for XML endpoints.

    Request bodies are handled for the ``XML`` encoding only. Like the JSON
    factory it converts every response body, so register it ahead of other
    factories when the API speaks XML.

    Args:
        root_element: Tag of the document element of request bodies.
        hydrator: Shared with the converters; one is created when omitted.
    """

    def __init__(
        self,
        root_element: str = "root",
        version: str = "1.0",
        encoding: str = "UTF-8",
        hydrator: Optional[ObjectHydrator] = None,
    ) -> None:
        self._hydrator = hydrator or ObjectHydrator()
        self._request_converter = XmlRequestConverter(
            self._hydrator, root_element, version, encoding
        )
        self._string_converter = XmlStringConverter(self._hydrator)

    @property
    def hydrator(self) -> ObjectHydrator:
        return self._hydrator

    def request_body_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[XmlRequestConverter]:
        if descriptor.body_encoding != BodyEncoding.XML:
            return None
        return self._request_converter

    def response_body_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[XmlResponseConverter]:
        return XmlResponseConverter(self._hydrator, descriptor.response_type)

    def error_body_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[XmlResponseConverter]:
        return XmlResponseConverter(self._hydrator, strict=False)

    def string_converter(
        self, descriptor: EndpointDescriptor
    ) -> Optional[XmlStringConverter]:
        return self._string_converter
