from dataclasses import dataclass, field
from typing import List

import pytest

from restwire import (
    BodyEncoding,
    ConversionError,
    EndpointDescriptor,
    ParameterBinding,
    ResponseType,
    XmlConverterFactory,
    wire_field,
)

DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


@dataclass
class Book:
    id: str
    title: str = wire_field("bookTitle", default="")


@dataclass
class Shelf:
    name: str = ""
    books: List[Book] = field(default_factory=list)


@pytest.fixture
def factory() -> XmlConverterFactory:
    return XmlConverterFactory(root_element="book")


def xml_endpoint(**kwargs) -> EndpointDescriptor:
    return EndpointDescriptor.post(
        "/books", ParameterBinding.body(), body_encoding=BodyEncoding.XML, **kwargs
    )


class TestXmlRequestConverter:
    def test_serializes_typed_body(self, factory: XmlConverterFactory) -> None:
        converter = factory.request_body_converter(xml_endpoint())

        assert converter is not None
        assert converter.convert(Book("1", "Dune")) == (
            f"{DECLARATION}\n<book><id>1</id><bookTitle>Dune</bookTitle></book>\n"
        )

    def test_lists_use_singular_child_tags(self) -> None:
        converter = XmlConverterFactory(root_element="library").request_body_converter(
            xml_endpoint()
        )

        assert converter is not None
        body = converter.convert(
            {"categories": ["sci-fi", "poetry"], "boxes": [1], "active": True}
        )

        assert body == (
            f"{DECLARATION}\n<library>"
            "<categories><category>sci-fi</category><category>poetry</category></categories>"
            "<boxes><box>1</box></boxes>"
            "<active>true</active>"
            "</library>\n"
        )

    def test_escapes_text(self, factory: XmlConverterFactory) -> None:
        converter = factory.request_body_converter(xml_endpoint())

        assert converter is not None
        assert "<title>Tom &amp; Jerry &lt;3</title>" in converter.convert(
            {"title": "Tom & Jerry <3"}
        )

    def test_passes_encoded_bodies_through(self, factory: XmlConverterFactory) -> None:
        converter = factory.request_body_converter(xml_endpoint())

        assert converter is not None
        assert converter.convert("<raw/>") == "<raw/>"
        assert converter.convert(None) is None

    def test_only_used_for_xml_bodies(self, factory: XmlConverterFactory) -> None:
        descriptor = EndpointDescriptor.post(
            "/books", ParameterBinding.body(), body_encoding=BodyEncoding.JSON
        )

        assert factory.request_body_converter(descriptor) is None


class TestXmlResponseConverter:
    def test_parses_without_hint(self, factory: XmlConverterFactory) -> None:
        converter = factory.response_body_converter(EndpointDescriptor.get("/books"))

        assert converter is not None
        assert converter.convert(
            b'<shelf kind="main"><name>Fiction</name><tag>a</tag><tag>b</tag>'
            b'<note lang="en">hi</note><empty/></shelf>'
        ) == {
            "@kind": "main",
            "name": "Fiction",
            "tag": ["a", "b"],
            "note": {"@lang": "en", "_value": "hi"},
            "empty": {},
        }

    def test_empty_body(self, factory: XmlConverterFactory) -> None:
        converter = factory.response_body_converter(EndpointDescriptor.get("/books"))

        assert converter is not None
        assert converter.convert(b"") is None

    def test_invalid_xml(self, factory: XmlConverterFactory) -> None:
        converter = factory.response_body_converter(EndpointDescriptor.get("/books"))

        assert converter is not None
        with pytest.raises(ConversionError):
            converter.convert(b"<unclosed>")

    def test_hydrates_object(self, factory: XmlConverterFactory) -> None:
        descriptor = EndpointDescriptor.get(
            "/shelf", response_type=ResponseType(type=Shelf)
        )
        converter = factory.response_body_converter(descriptor)

        assert converter is not None
        shelf = converter.convert(
            b"<shelf><name>Fiction</name>"
            b"<books><id>1</id><bookTitle>Dune</bookTitle></books>"
            b"<books><id>2</id></books></shelf>"
        )

        assert shelf == Shelf("Fiction", [Book("1", "Dune"), Book("2")])

    @pytest.mark.parametrize(
        "payload, expected",
        [
            (
                b"<books><book><id>1</id></book><book><id>2</id></book></books>",
                ["1", "2"],
            ),
            (b"<books><book><id>1</id></book></books>", ["1"]),
            (b"<books/>", []),
        ],
    )
    def test_hydrates_array(
        self, factory: XmlConverterFactory, payload: bytes, expected: List[str]
    ) -> None:
        descriptor = EndpointDescriptor.get(
            "/books", response_type=ResponseType(type=Book, is_array=True)
        )
        converter = factory.response_body_converter(descriptor)

        assert converter is not None
        assert [book.id for book in converter.convert(payload)] == expected

    def test_error_body_is_lenient(self, factory: XmlConverterFactory) -> None:
        descriptor = EndpointDescriptor.get(
            "/books/1", response_type=ResponseType(type=Book)
        )
        converter = factory.error_body_converter(descriptor)

        assert converter is not None
        assert converter.convert(b"<error><code>42</code></error>") == {"code": "42"}
        assert converter.convert(b"Bad Gateway") is None


class TestXmlStringConverter:
    @pytest.mark.parametrize(
        "value, expected",
        [("hello", "hello"), (42, "42"), (True, "true"), (None, "")],
    )
    def test_scalars(self, factory: XmlConverterFactory, value, expected: str) -> None:
        converter = factory.string_converter(EndpointDescriptor.get("/books"))

        assert converter is not None
        assert converter.convert(value) == expected

    def test_mapping_renders_as_xml(self, factory: XmlConverterFactory) -> None:
        converter = factory.string_converter(EndpointDescriptor.get("/books"))

        assert converter is not None
        assert converter.convert({"a": 1}) == "<root><a>1</a></root>"
