import mimetypes
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from httpx import URL, Headers

from .._utils.constants import CONTENT_TYPE_OCTET_STREAM


def _freeze_headers(value: Any) -> Headers:
    return Headers(value) if value is not None else Headers()


@dataclass(frozen=True)
class Request:
    """A materialized HTTP request, ready to be handed to a transport.

    Instances are immutable: every ``with_*`` method returns a new request and
    leaves the original untouched, so interceptors can safely derive modified
    requests from the one they receive.
    """

    method: str
    url: str
    headers: Headers = field(default_factory=Headers)
    query: Mapping[str, Any] = field(default_factory=dict)
    body: Any = None
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", _freeze_headers(self.headers))
        object.__setattr__(self, "query", dict(self.query))

    @property
    def full_url(self) -> str:
        """The URL including the encoded query string."""
        if not self.query:
            return self.url
        return str(URL(self.url).copy_merge_params(encode_query_params(self.query)))

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name, default)

    def with_headers(self, headers: Mapping[str, str]) -> "Request":
        merged = self.headers.copy()
        for name, value in headers.items():
            merged[name] = value
        return replace(self, headers=merged)

    def with_header(self, name: str, value: str) -> "Request":
        return self.with_headers({name: value})

    def without_header(self, name: str) -> "Request":
        headers = self.headers.copy()
        if name in headers:
            del headers[name]
        return replace(self, headers=headers)

    def with_query(self, query: Mapping[str, Any]) -> "Request":
        return replace(self, query={**self.query, **query})

    def with_body(self, body: Any) -> "Request":
        return replace(self, body=body)

    def with_url(self, url: str) -> "Request":
        return replace(self, url=url)


@dataclass(frozen=True)
class Response:
    """A raw HTTP response plus the body produced by the response converter."""

    code: int
    reason_phrase: str = ""
    headers: Headers = field(default_factory=Headers)
    raw_body: Optional[bytes] = None
    body: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze_headers(self.headers))

    @property
    def is_successful(self) -> bool:
        return 200 <= self.code < 300

    @property
    def text(self) -> str:
        return self.raw_body.decode("utf-8") if self.raw_body else ""

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name, default)

    def with_body(self, body: Any) -> "Response":
        return replace(self, body=body)

    def with_header(self, name: str, value: str) -> "Response":
        headers = self.headers.copy()
        headers[name] = value
        return replace(self, headers=headers)

    @classmethod
    def success(cls, body: Any = None, code: int = 200) -> "Response":
        return cls(code=code, reason_phrase="OK", body=body)

    @classmethod
    def error(
        cls, code: int, reason_phrase: str, raw_body: Optional[bytes] = None
    ) -> "Response":
        return cls(code=code, reason_phrase=reason_phrase, raw_body=raw_body)


@dataclass(frozen=True)
class FileUpload:
    """File content sent as one part of a multipart request."""

    content: bytes
    filename: str
    content_type: str = CONTENT_TYPE_OCTET_STREAM

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(
        cls,
        path: Union[str, Path],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> "FileUpload":
        """Read a file from disk.

        Args:
            path: Path of the file to upload.
            filename: Name sent to the server. Defaults to the file's basename.
            content_type: Content type of the part. Guessed from the file
                extension when omitted.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")

        guessed, _ = mimetypes.guess_type(file_path.name)
        return cls(
            content=file_path.read_bytes(),
            filename=filename or file_path.name,
            content_type=content_type or guessed or CONTENT_TYPE_OCTET_STREAM,
        )

    @classmethod
    def from_bytes(
        cls,
        content: Union[bytes, str],
        filename: str,
        content_type: str = CONTENT_TYPE_OCTET_STREAM,
    ) -> "FileUpload":
        if isinstance(content, str):
            content = content.encode("utf-8")
        return cls(content=content, filename=filename, content_type=content_type)


@dataclass(frozen=True)
class Part:
    """One part of a multipart body."""

    name: str
    value: Any
    content_type: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return isinstance(self.value, (FileUpload, bytes))


def encode_query_params(query: Mapping[str, Any]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for key, value in query.items():
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            params[key] = [str(item) for item in value]
        else:
            params[key] = str(value)
    return params
